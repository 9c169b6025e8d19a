"""Pytest configuration and fixtures for CLI tests."""

import pytest
from click.testing import CliRunner
from rich.console import Console

from bibfilter.search.engine import run_query
from bibfilter.storage.config_store import save_config


@pytest.fixture
def cli_runner():
    """Click CLI test runner that invokes the bibfilter group."""

    class BibfilterCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from bibfilter.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return BibfilterCliRunner()


@pytest.fixture
def test_console():
    """Rich console for capturing output."""
    return Console(
        force_terminal=True,
        width=160,
        legacy_windows=False,
        _environ={"TERM": "xterm-256color"},
    )


@pytest.fixture
def render(test_console):
    """Render a Rich renderable to plain text."""

    def _render(renderable) -> str:
        with test_console.capture() as capture:
            test_console.print(renderable)
        return capture.get()

    return _render


@pytest.fixture
def bib_file(tmp_path, mixed_bibtex):
    path = tmp_path / "refs.bib"
    path.write_text(mixed_bibtex, encoding="utf-8")
    return path


@pytest.fixture
def query_file(tmp_path, two_block_config):
    path = tmp_path / "query.json"
    save_config(two_block_config, path)
    return path


@pytest.fixture
def mixed_result(mixed_bibtex, two_block_config):
    return run_query(mixed_bibtex, two_block_config)
