"""Core domain models and errors for block-query filtering."""

from bibfilter.core.exceptions import (
    BibfilterError,
    ConfigError,
    ParseFailure,
)
from bibfilter.core.models import (
    FIELD_NAMES,
    Block,
    EvaluationResult,
    FieldHits,
    MatchOutcome,
    Operator,
    QueryConfig,
    Record,
    SearchFields,
    Span,
    new_block_id,
)

__all__ = [
    # Models
    "FIELD_NAMES",
    "Record",
    "Block",
    "Operator",
    "QueryConfig",
    "SearchFields",
    "FieldHits",
    "EvaluationResult",
    "MatchOutcome",
    "Span",
    "new_block_id",
    # Errors
    "BibfilterError",
    "ParseFailure",
    "ConfigError",
]
