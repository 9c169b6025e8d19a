"""Run result types."""

from dataclasses import dataclass, field

from ..core.models import FIELD_NAMES, FieldHits, MatchOutcome, Record, Span
from .highlighting import SpanHighlighter
from .stats import TermStats

FIELD_LABELS = {"title": "Title", "abstract": "Abstract", "keywords": "Keywords"}


@dataclass
class RunSummary:
    """Counts of one run."""

    total: int = 0
    eligible: int = 0
    matched: int = 0
    partial: int = 0
    unmatched: int = 0

    def __str__(self) -> str:
        return (
            f"{self.total} total, {self.eligible} eligible, {self.matched} matched, "
            f"{self.partial} partial, {self.unmatched} unmatched"
        )


@dataclass
class MatchedRecord:
    """A classified record with the hits that explain its outcome."""

    record: Record
    outcome: MatchOutcome
    matched_block_names: tuple[str, ...] = ()
    hit_map: dict[str, FieldHits] = field(default_factory=dict)
    present_blocks: tuple[str, ...] = ()
    missing_blocks: tuple[str, ...] = ()

    @property
    def cite_key(self) -> str:
        return self.record.cite_key

    @property
    def matched_blocks_string(self) -> str:
        return "; ".join(self.matched_block_names)

    @property
    def detail_string(self) -> str:
        """Flattened hits, e.g. ``Group 1 [Title: vr | ar; Abstract: vr]``."""
        pieces = []
        for block_name, hits in self.hit_map.items():
            parts = [
                f"{FIELD_LABELS[name]}: {' | '.join(hits.get(name))}"
                for name in FIELD_NAMES
                if hits.get(name)
            ]
            if parts:
                pieces.append(f"{block_name} [{'; '.join(parts)}]")
        return "; ".join(pieces)


@dataclass(frozen=True)
class RunResult:
    """Immutable snapshot of one query run.

    Replaces the previous run wholesale; nothing is merged between runs.
    """

    matched: tuple[MatchedRecord, ...] = ()
    partial: tuple[MatchedRecord, ...] = ()
    unmatched: tuple[MatchedRecord, ...] = ()
    summary: RunSummary = field(default_factory=RunSummary)
    term_stats: TermStats = field(default_factory=TermStats)
    case_insensitive: bool = True
    regex_blocks: frozenset[str] = frozenset()

    @property
    def has_matches(self) -> bool:
        return bool(self.matched)

    @property
    def matched_records(self) -> list[Record]:
        return [item.record for item in self.matched]

    def get(self, cite_key: str) -> MatchedRecord | None:
        """Find a classified record by citation key."""
        for item in (*self.matched, *self.partial, *self.unmatched):
            if item.cite_key == cite_key:
                return item
        return None

    def highlight(self, item: MatchedRecord, field_name: str) -> list[Span]:
        """Spans for one field of a matched or partial record."""
        highlighter = SpanHighlighter(self.case_insensitive, self.regex_blocks)
        text = item.record.texts().get(field_name, "")
        return highlighter.spans(text, field_name, item.hit_map)
