"""Literature search builder CLI.

Filters BibTeX bibliographies with block queries from the command line.
Built with Click and Rich.
"""

from bibfilter.cli.main import cli

__all__ = ["cli"]
