"""Query string parsing subsystem."""

from .parser import ParsedQuery, QueryStringParser, to_query_string

__all__ = [
    "QueryStringParser",
    "ParsedQuery",
    "to_query_string",
]
