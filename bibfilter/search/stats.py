"""Term frequency reporting over matched records.

Counts how many matched records each configured term hit (document
frequency) and how often it hit each field (occurrence frequency). Every
usable term of every positive block is listed, including terms that
never matched.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field

from ..core.models import FIELD_NAMES, FieldHits, QueryConfig


@dataclass
class TermBreakdown:
    """Counts for one term inside one block."""

    documents: int = 0
    title: int = 0
    abstract: int = 0
    keywords: int = 0

    @property
    def field_total(self) -> int:
        return self.title + self.abstract + self.keywords

    def add_field(self, field_name: str) -> None:
        setattr(self, field_name, getattr(self, field_name) + 1)


@dataclass
class TermStats:
    """Aggregated term statistics of one run."""

    overall: dict[str, int] = field(default_factory=dict)
    field_counts: dict[str, Counter] = field(default_factory=dict)
    by_block: dict[str, dict[str, TermBreakdown]] = field(default_factory=dict)
    documents: int = 0

    def top_terms(self, limit: int = 10) -> list[tuple[str, int]]:
        """Get the most frequent terms by document count."""
        ordered = sorted(self.overall.items(), key=lambda item: (-item[1], item[0]))
        return ordered[:limit]

    def unmatched_terms(self, block_name: str) -> list[str]:
        """Configured terms of a block that hit no matched record."""
        breakdown = self.by_block.get(block_name, {})
        return [term for term, counts in breakdown.items() if counts.documents == 0]


class TermStatsAggregator:
    """Aggregates hit maps into per-term counts."""

    def __init__(self, config: QueryConfig | None = None):
        """Initialize aggregator.

        Args:
            config: Query whose positive blocks seed the per-block tables
        """
        self.config = config

    def aggregate(self, hit_maps: list[dict[str, FieldHits]]) -> TermStats:
        """Aggregate the hit maps of the matched records.

        Args:
            hit_maps: One hit map per matched record

        Returns:
            TermStats with document and field counts
        """
        overall: Counter = Counter()
        field_counts: dict[str, Counter] = {name: Counter() for name in FIELD_NAMES}
        by_block: dict[str, dict[str, TermBreakdown]] = defaultdict(dict)

        if self.config is not None:
            for block in self.config.blocks:
                if block.exclude or not block.is_usable:
                    continue
                for term in block.usable_terms:
                    by_block[block.name].setdefault(term, TermBreakdown())

        for hit_map in hit_maps:
            record_terms: set[str] = set()
            for block_name, hits in hit_map.items():
                block_terms: set[str] = set()
                for field_name in FIELD_NAMES:
                    for term in hits.get(field_name):
                        field_counts[field_name][term] += 1
                        breakdown = by_block[block_name].setdefault(
                            term, TermBreakdown()
                        )
                        breakdown.add_field(field_name)
                        block_terms.add(term)
                for term in block_terms:
                    by_block[block_name][term].documents += 1
                record_terms.update(block_terms)
            overall.update(record_terms)

        for block_terms in by_block.values():
            for term in block_terms:
                overall.setdefault(term, 0)

        return TermStats(
            overall=dict(overall),
            field_counts=field_counts,
            by_block=dict(by_block),
            documents=len(hit_maps),
        )
