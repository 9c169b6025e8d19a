"""Main CLI entry point and application setup."""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
import msgspec
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bibfilter import __version__
from bibfilter.cli.config import load_config
from bibfilter.cli.formatters import (
    block_styles,
    format_highlighted_text,
    format_records_bibtex,
    format_results_csv,
    format_results_table,
    format_summary_panel,
    format_term_stats_table,
)
from bibfilter.core.exceptions import BibfilterError, ParseFailure
from bibfilter.core.models import FIELD_NAMES, QueryConfig, Record, SearchFields
from bibfilter.search import QueryStringParser, SearchEngine, to_query_string
from bibfilter.search.results import RunResult
from bibfilter.storage import EntryParser, load_config_file, save_config

logger = logging.getLogger(__name__)


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class BibfilterGroup(click.Group):
    """Custom group that turns application errors into exit codes."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except BibfilterError as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=BibfilterGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to settings file",
)
@click.version_option(
    version=__version__, prog_name="bibfilter", message="bibfilter version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """Literature search builder.

    Filter a BibTeX bibliography with named term blocks combined by
    AND/OR/NOT and report where the terms matched.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    try:
        settings = load_config(config)
    except ValueError as e:
        if debug:
            raise
        click.echo(f"Error loading config file: {e}", err=True)
        ctx.exit(1)

    ctx.obj = Context(
        console=create_console(no_color=no_color), settings=settings, debug=debug
    )


def resolve_query_config(
    settings: dict[str, Any],
    query_config: Path | None,
    query: str | None,
    case_sensitive: bool | None,
    fields: str | None,
    console: Console,
) -> QueryConfig:
    """Build the query to run from files, settings and options.

    Precedence: ``--query-config`` over the ``query_config`` setting over
    the built-in default; then a pasted ``--query`` replaces the blocks;
    then case and field options override the flags.
    """
    path = query_config or settings.get("query_config")
    config = load_config_file(Path(path)) if path else QueryConfig.default()
    logger.debug("Query configuration: %s", path or "built-in default")

    if query is not None:
        parsed = QueryStringParser().apply_to(config, query)
        if parsed is config:
            console.print(
                "[yellow]Query string could not be parsed; "
                "keeping the current blocks[/yellow]"
            )
        config = parsed

    changes: dict[str, Any] = {}
    if case_sensitive is not None:
        changes["case_insensitive"] = not case_sensitive
    elif "case_insensitive" in settings:
        changes["case_insensitive"] = bool(settings["case_insensitive"])

    names = fields or settings.get("search_fields")
    if isinstance(names, str):
        names = names.split(",")
    if names:
        try:
            changes["search_fields"] = SearchFields.from_names(names)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--fields")

    if changes:
        config = msgspec.structs.replace(config, **changes)
    return config


def read_records(path: str) -> list[Record]:
    """Parse bibliography records from a file or ``-`` for stdin."""
    parser = EntryParser()
    if path == "-":
        return parser.parse(click.get_text_stream("stdin").read())
    return parser.parse_file(Path(path))


def resolve_export_path(settings: dict[str, Any], path: Path) -> Path:
    """Place relative export paths under the ``export_dir`` setting."""
    export_dir = settings.get("export_dir")
    if export_dir and not path.is_absolute():
        path = Path(export_dir).expanduser() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _display_highlights(console: Console, result: RunResult, styles) -> None:
    for item in result.matched:
        console.print(f"\n[bold cyan]{escape(item.cite_key)}[/bold cyan]")
        for field_name in FIELD_NAMES:
            spans = result.highlight(item, field_name)
            if not spans:
                continue
            text = item.record.texts()[field_name]
            line = format_highlighted_text(text, spans, styles)
            console.print(f"  [bold]{field_name.title()}:[/bold] ", end="")
            console.print(line)


def _display_stats(console: Console, result: RunResult, config: QueryConfig) -> None:
    stats = result.term_stats
    top = Table(title="Top Terms", header_style="bold cyan")
    top.add_column("Term")
    top.add_column("Docs", justify="right", style="green")
    for field_name in FIELD_NAMES:
        top.add_column(field_name.title(), justify="right")
    for term, count in stats.top_terms(15):
        top.add_row(
            escape(term),
            str(count),
            *[str(stats.field_counts[name][term]) for name in FIELD_NAMES],
        )
    console.print(top)

    for block in config.blocks:
        if block.name in stats.by_block:
            console.print(format_term_stats_table(stats, block.name))


@cli.command()
@click.argument("bibfile", type=click.Path(exists=True, allow_dash=True))
@click.option(
    "--query-config",
    type=click.Path(exists=True, path_type=Path),
    help="Saved query configuration (JSON)",
)
@click.option("--query", help="Pasted boolean query, replaces the configured blocks")
@click.option(
    "--case-sensitive/--case-insensitive",
    default=None,
    help="Override case sensitivity of the query",
)
@click.option("--fields", help="Comma-separated fields: title,abstract,keywords")
@click.option(
    "--export-csv", type=click.Path(path_type=Path), help="Write matches as CSV"
)
@click.option(
    "--export-bib", type=click.Path(path_type=Path), help="Write matches as BibTeX"
)
@click.option("--stats", "show_stats", is_flag=True, help="Show term statistics")
@click.option("--highlight", is_flag=True, help="Show matched terms in context")
@click.option("--partial/--no-partial", default=True, help="List partial matches")
@click.pass_context
def run(
    ctx: click.Context,
    bibfile: str,
    query_config: Path | None,
    query: str | None,
    case_sensitive: bool | None,
    fields: str | None,
    export_csv: Path | None,
    export_bib: Path | None,
    show_stats: bool,
    highlight: bool,
    partial: bool,
) -> None:
    """Run a block query over a BibTeX file."""
    console = ctx.obj.console

    config = resolve_query_config(
        ctx.obj.settings, query_config, query, case_sensitive, fields, console
    )
    if not config.is_consistent():
        console.print(
            f"[yellow]Warning:[/yellow] {len(config.blocks)} blocks but "
            f"{len(config.operators)} operators"
        )

    try:
        records = read_records(bibfile)
    except ParseFailure as e:
        if ctx.obj.debug:
            raise
        console.print(f"[red]No entries found:[/red] {escape(str(e))}")
        ctx.exit(1)

    result = SearchEngine(config).run_records(records)

    console.print(format_summary_panel(result.summary))

    if result.matched:
        console.print(format_results_table(list(result.matched), title="Matched"))
    else:
        console.print("[yellow]0 matched[/yellow]")

    if partial and result.partial:
        console.print(
            format_results_table(
                list(result.partial), title="Partial", show_missing=True
            )
        )

    if highlight:
        _display_highlights(console, result, block_styles(config.block_names))

    if show_stats:
        _display_stats(console, result, config)

    if export_csv:
        export_csv = resolve_export_path(ctx.obj.settings, export_csv)
        export_csv.write_text(format_results_csv(result), encoding="utf-8")
        console.print(
            f"[green]✓[/green] Wrote {result.summary.matched} rows to {export_csv}"
        )

    if export_bib:
        export_bib = resolve_export_path(ctx.obj.settings, export_bib)
        export_bib.write_text(
            format_records_bibtex(result.matched_records), encoding="utf-8"
        )
        console.print(
            f"[green]✓[/green] Wrote {result.summary.matched} entries to {export_bib}"
        )


def _display_blocks(console: Console, config: QueryConfig) -> None:
    table = Table(title="Blocks", header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Terms")
    table.add_column("Regex", justify="center")
    table.add_column("NOT", justify="center")
    table.add_column("Next", style="magenta")

    for index, block in enumerate(config.blocks):
        operator = (
            config.operators[index].value if index < len(config.operators) else ""
        )
        table.add_row(
            str(index + 1),
            escape(block.name),
            escape(" | ".join(block.terms)),
            "✓" if block.is_regex else "",
            "✓" if block.exclude else "",
            operator,
        )
    console.print(table)


@cli.command("parse-query")
@click.argument("query")
@click.option(
    "--output", "-o", type=click.Path(path_type=Path), help="Save as query config"
)
@click.option(
    "--base",
    type=click.Path(exists=True, path_type=Path),
    help="Config whose flags are kept",
)
@click.pass_context
def parse_query(
    ctx: click.Context, query: str, output: Path | None, base: Path | None
) -> None:
    """Turn a pasted boolean query into blocks.

    Groups separated by AND become blocks, OR separates terms inside a
    group and a leading NOT excludes the group. All groups are joined by
    AND; change operators to OR in the saved file if needed.
    """
    console = ctx.obj.console

    config = load_config_file(base) if base else QueryConfig()
    parsed = QueryStringParser().apply_to(config, query)
    if parsed is config:
        console.print("[yellow]Nothing to parse; no blocks found[/yellow]")
        ctx.exit(1)

    _display_blocks(console, parsed)

    if output:
        save_config(parsed, output)
        console.print(f"[green]✓[/green] Saved query configuration to {output}")


@cli.group()
def config() -> None:
    """Manage saved query configurations."""


@config.command("init")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def config_init(ctx: click.Context, path: Path, force: bool) -> None:
    """Write the default query configuration."""
    console = ctx.obj.console

    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists (use --force)[/yellow]")
        ctx.exit(1)

    save_config(QueryConfig.default(), path)
    console.print(f"[green]✓[/green] Wrote default query configuration to {path}")


@config.command("show")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_show(ctx: click.Context, path: Path) -> None:
    """Show a saved query configuration."""
    console = ctx.obj.console
    query_config = load_config_file(path)

    _display_blocks(console, query_config)
    fields = ", ".join(query_config.search_fields.selected()) or "none"
    case = "insensitive" if query_config.case_insensitive else "sensitive"
    console.print(f"Fields: {fields}; case {case}")
    console.print(f"Query: {escape(to_query_string(query_config))}")


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
