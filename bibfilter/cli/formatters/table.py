"""Table formatters for Rich console output.

Provides formatting for run summaries, matched records, highlighted
fields and term statistics.
"""

from rich.box import ROUNDED
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bibfilter.core.models import Span
from bibfilter.search.highlighting import SpanHighlighter
from bibfilter.search.results import MatchedRecord, RunSummary
from bibfilter.search.stats import TermStats

BLOCK_STYLES = [
    "bold black on yellow",
    "bold black on cyan",
    "bold black on green",
    "bold black on magenta",
    "bold white on blue",
    "bold white on red",
]


def block_styles(block_names) -> dict[str, str]:
    """Assign a display style to each block name in order."""
    return {
        name: BLOCK_STYLES[index % len(BLOCK_STYLES)]
        for index, name in enumerate(block_names)
    }


def format_summary_panel(summary: RunSummary) -> Panel:
    """Format run counts as a Rich panel."""
    lines = [
        f"[bold]Total entries:[/bold] {summary.total}",
        f"[bold]Eligible:[/bold] {summary.eligible}",
        f"[green]Matched:[/green] {summary.matched}",
        f"[yellow]Partial:[/yellow] {summary.partial}",
        f"[red]Unmatched:[/red] {summary.unmatched}",
    ]
    return Panel("\n".join(lines), title="Run Summary", box=ROUNDED, expand=False)


def format_results_table(
    items: list[MatchedRecord],
    title: str | None = None,
    show_missing: bool = False,
) -> Table:
    """Format classified records as a Rich table.

    Args:
        items: Matched or partial records
        title: Table title
        show_missing: Add a column with the blocks a partial record lacks

    Returns:
        Rich Table object
    """
    table = Table(
        title=title,
        box=ROUNDED,
        show_header=True,
        header_style="bold cyan",
        title_style="bold",
        row_styles=["none", "dim"],
    )

    table.add_column("Key", style="cyan")
    table.add_column("Title")
    table.add_column("Year", style="yellow", width=6, justify="center")
    table.add_column("Blocks", style="green")
    table.add_column("Terms")
    if show_missing:
        table.add_column("Missing", style="red")

    if not items:
        table.add_row(*["[dim]-[/dim]"] * len(table.columns))
        return table

    for item in items:
        record = item.record
        row = [
            escape(record.cite_key),
            escape(record.clean_title) or "[dim]No title[/dim]",
            escape(record.year) or "[dim]-[/dim]",
            escape(item.matched_blocks_string),
            escape(item.detail_string),
        ]
        if show_missing:
            row.append(escape(", ".join(item.missing_blocks)))
        table.add_row(*row)

    return table


def format_highlighted_text(
    text: str, spans: list[Span], styles: dict[str, str]
) -> Text:
    """Paint spans onto text with one style per block."""
    rendered = Text()
    for chunk, block_name in SpanHighlighter.segments(text, spans):
        if block_name is None:
            rendered.append(chunk)
        else:
            rendered.append(chunk, style=styles.get(block_name, BLOCK_STYLES[0]))
    return rendered


def format_term_stats_table(stats: TermStats, block_name: str) -> Table:
    """Format per-term counts of one block as a Rich table."""
    table = Table(
        title=f"Terms: {block_name}",
        box=ROUNDED,
        header_style="bold cyan",
        title_style="bold",
    )
    table.add_column("Term")
    table.add_column("Docs", justify="right", style="green")
    table.add_column("Title", justify="right")
    table.add_column("Abstract", justify="right")
    table.add_column("Keywords", justify="right")

    breakdown = stats.by_block.get(block_name, {})
    ordered = sorted(breakdown.items(), key=lambda item: (-item[1].documents, item[0]))
    for term, counts in ordered:
        docs = str(counts.documents) if counts.documents else "[dim]no matches[/dim]"
        table.add_row(
            escape(term),
            docs,
            str(counts.title),
            str(counts.abstract),
            str(counts.keywords),
        )
    return table
