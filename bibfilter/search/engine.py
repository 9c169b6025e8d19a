"""Query run orchestration.

One run parses the bibliography text, compiles the query once, evaluates
every record and returns an immutable RunResult. A failed parse aborts
the run before any record is classified.
"""

import logging
import time
from collections import Counter

from ..core.models import MatchOutcome, QueryConfig, Record
from ..storage.parser import EntryParser
from .evaluator import CompiledQuery, Evaluator
from .results import MatchedRecord, RunResult, RunSummary
from .stats import TermStatsAggregator

logger = logging.getLogger(__name__)


class SearchEngine:
    """Runs a block query over a bibliography.

    Coordinates entry parsing, query compilation, evaluation,
    classification and term statistics.
    """

    def __init__(self, config: QueryConfig, parser: EntryParser | None = None):
        """Initialize search engine.

        Args:
            config: Query configuration to run
            parser: Entry parser to use (default: EntryParser)
        """
        self.config = config
        self.parser = parser or EntryParser()

        if not config.is_consistent():
            logger.warning(
                "Query has %d blocks but %d operators",
                len(config.blocks),
                len(config.operators),
            )
        if not config.has_unique_names():
            counts = Counter(config.block_names)
            logger.warning(
                "Duplicate block names share hit map entries: %s",
                ", ".join(sorted(name for name, n in counts.items() if n > 1)),
            )

    def run(self, text: str) -> RunResult:
        """Parse ``text`` and classify every entry.

        Raises:
            ParseFailure: If the text is non-empty but holds no entries
        """
        records = self.parser.parse(text)
        return self.run_records(records)

    def run_records(self, records: list[Record]) -> RunResult:
        """Classify already parsed records.

        Args:
            records: Parsed bibliography records

        Returns:
            RunResult with matched, partial and unmatched buckets
        """
        start_time = time.time()

        compiled = CompiledQuery.from_config(self.config)
        evaluator = Evaluator(compiled)
        positive_blocks = compiled.positive_block_names
        search_fields = self.config.search_fields

        matched: list[MatchedRecord] = []
        partial: list[MatchedRecord] = []
        unmatched: list[MatchedRecord] = []
        eligible = 0

        for record in records:
            if not record.is_eligible(search_fields):
                continue
            eligible += 1

            result = evaluator.evaluate_record(record, search_fields)

            if result.ok:
                matched.append(
                    MatchedRecord(
                        record=record,
                        outcome=MatchOutcome.MATCHED,
                        matched_block_names=result.matched_block_names,
                        hit_map=result.hit_map,
                    )
                )
            elif result.hit_map:
                partial.append(
                    MatchedRecord(
                        record=record,
                        outcome=MatchOutcome.PARTIAL,
                        matched_block_names=result.matched_block_names,
                        hit_map=result.hit_map,
                        present_blocks=tuple(
                            name for name in positive_blocks if name in result.hit_map
                        ),
                        missing_blocks=tuple(
                            name
                            for name in positive_blocks
                            if name not in result.hit_map
                        ),
                    )
                )
            else:
                unmatched.append(
                    MatchedRecord(record=record, outcome=MatchOutcome.UNMATCHED)
                )

        summary = RunSummary(
            total=len(records),
            eligible=eligible,
            matched=len(matched),
            partial=len(partial),
            unmatched=len(unmatched),
        )
        term_stats = TermStatsAggregator(self.config).aggregate(
            [item.hit_map for item in matched]
        )

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info("Run finished in %d ms: %s", elapsed_ms, summary)

        return RunResult(
            matched=tuple(matched),
            partial=tuple(partial),
            unmatched=tuple(unmatched),
            summary=summary,
            term_stats=term_stats,
            case_insensitive=compiled.case_insensitive,
            regex_blocks=frozenset(compiled.regex_block_names),
        )


def run_query(text: str, config: QueryConfig) -> RunResult:
    """Run ``config`` over bibliography ``text`` with a fresh engine."""
    return SearchEngine(config).run(text)
