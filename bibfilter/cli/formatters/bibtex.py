"""BibTeX output formatter."""

from bibfilter.core.models import Record


def format_record_bibtex(record: Record) -> str:
    """Format a single record as BibTeX.

    Fields are written in parsed order, one ``key = {value}`` line each.
    """
    lines = [f"@{record.entry_type}{{{record.cite_key},"]
    fields = [f"  {key} = {{{value}}}" for key, value in record.fields.items()]
    if fields:
        lines.append(",\n".join(fields))
    lines.append("}")
    return "\n".join(lines)


def format_records_bibtex(records: list[Record]) -> str:
    """Format multiple records as BibTeX."""
    return "\n\n".join(format_record_bibtex(record) for record in records)
