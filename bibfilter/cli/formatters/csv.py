"""CSV output formatter.

Provides the tabular export of matched records.
"""

import csv
from io import StringIO

from bibfilter.search.results import MatchedRecord, RunResult

CSV_HEADERS = [
    "CiteKey",
    "Title",
    "Authors",
    "Year",
    "Venue",
    "URL/DOI",
    "Matched Blocks",
    "Matched Terms (by block & field)",
]


def format_row(item: MatchedRecord) -> list[str]:
    record = item.record
    return [
        record.cite_key,
        record.clean_title,
        record.authors,
        record.year,
        record.venue,
        record.resolved_url,
        item.matched_blocks_string,
        item.detail_string,
    ]


def format_results_csv(
    result: RunResult | list[MatchedRecord],
    delimiter: str = ",",
    quote_char: str = '"',
) -> str:
    """Format matched records as CSV.

    Args:
        result: Run result (its matched records are written) or records
        delimiter: CSV delimiter
        quote_char: Quote character

    Returns:
        CSV formatted string
    """
    items = result.matched if isinstance(result, RunResult) else result

    output = StringIO()
    writer = csv.writer(
        output,
        delimiter=delimiter,
        quotechar=quote_char,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )

    writer.writerow(CSV_HEADERS)
    for item in items:
        writer.writerow(format_row(item))

    return output.getvalue()
