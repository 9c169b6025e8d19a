"""Fixtures for matching tests."""

import pytest

from bibfilter.core.models import Block, Operator, QueryConfig


@pytest.fixture
def make_config():
    """Build a config from ``(name, terms)`` pairs joined by operator names."""

    def _make(*blocks, operators=None, **options):
        built = []
        for spec in blocks:
            name, terms, *flags = spec
            built.append(
                Block(
                    name=name,
                    terms=tuple(terms),
                    exclude="not" in flags,
                    is_regex="regex" in flags,
                )
            )
        if operators is None:
            operators = ["AND"] * max(0, len(built) - 1)
        return QueryConfig(
            blocks=tuple(built),
            operators=tuple(Operator(op) for op in operators),
            **options,
        )

    return _make
