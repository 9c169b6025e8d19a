"""Block query matching for bibliography entries.

This module compiles block queries, evaluates them against parsed
records, highlights matched terms and aggregates term statistics.

Main components:
- SearchEngine: Runs a query over bibliography text
- Evaluator: Left-to-right boolean fold over blocks
- QueryStringParser: Pasted AND/OR/NOT expressions to blocks
- SpanHighlighter: Non-overlapping hit spans for display
- TermStatsAggregator: Document and field frequencies per term
"""

from .engine import SearchEngine, run_query
from .evaluator import CompiledBlock, CompiledQuery, Evaluator
from .highlighting import SpanHighlighter
from .patterns import (
    compile_term,
    has_regex_metachar,
    scoped_alternation,
    term_patterns,
)
from .query import ParsedQuery, QueryStringParser, to_query_string
from .results import MatchedRecord, RunResult, RunSummary
from .stats import TermBreakdown, TermStats, TermStatsAggregator

__all__ = [
    # Main classes
    "SearchEngine",
    "run_query",
    # Evaluation
    "Evaluator",
    "CompiledQuery",
    "CompiledBlock",
    # Patterns
    "compile_term",
    "scoped_alternation",
    "term_patterns",
    "has_regex_metachar",
    # Query parsing
    "QueryStringParser",
    "ParsedQuery",
    "to_query_string",
    # Results
    "RunResult",
    "RunSummary",
    "MatchedRecord",
    # Highlighting
    "SpanHighlighter",
    # Statistics
    "TermStatsAggregator",
    "TermStats",
    "TermBreakdown",
]
