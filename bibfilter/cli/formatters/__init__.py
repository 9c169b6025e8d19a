"""Output formatters for the CLI.

This module provides formatters for displaying run results on the
console and exporting matched records as BibTeX or CSV.
"""

from .bibtex import (
    format_record_bibtex,
    format_records_bibtex,
)
from .csv import (
    CSV_HEADERS,
    format_results_csv,
)
from .table import (
    block_styles,
    format_highlighted_text,
    format_results_table,
    format_summary_panel,
    format_term_stats_table,
)

__all__ = [
    # BibTeX formatters
    "format_record_bibtex",
    "format_records_bibtex",
    # CSV formatters
    "CSV_HEADERS",
    "format_results_csv",
    # Table formatters
    "block_styles",
    "format_summary_panel",
    "format_results_table",
    "format_highlighted_text",
    "format_term_stats_table",
]
