"""Term pattern compilation.

Turns one query term into a compiled regular expression. Plain words are
matched on word boundaries, a trailing ``*`` turns a word into a stem
match, and regex-flagged terms containing metacharacters are used as
written. A broken user regex never aborts a run: it degrades to a
literal match of the original text.
"""

import logging
import re

logger = logging.getLogger(__name__)

REGEX_METACHARACTERS = frozenset(".^$*+?()[]{}|\\")


def has_regex_metachar(term: str) -> bool:
    """Check whether a term uses any regular expression syntax."""
    return any(char in REGEX_METACHARACTERS for char in term)


def _flags(case_insensitive: bool) -> int:
    return re.IGNORECASE if case_insensitive else 0


def scope_term(term: str, is_regex: bool = False) -> str:
    """Return the regex source for a single term.

    Args:
        term: Query term as entered
        is_regex: Whether the term was flagged as a regular expression

    Returns:
        Pattern source, word-bounded unless it is a verbatim user regex
    """
    if is_regex and has_regex_metachar(term):
        return term
    if term.endswith("*"):
        return r"\b" + re.escape(term[:-1]) + r"[\w-]*"
    return r"\b" + re.escape(term) + r"\b"


def compile_term(
    term: str, is_regex: bool = False, case_insensitive: bool = True
) -> re.Pattern:
    """Compile a query term into a matching pattern.

    Invalid user-supplied regular expressions fall back to a literal
    match of the whole term instead of raising.
    """
    flags = _flags(case_insensitive)
    try:
        return re.compile(scope_term(term, is_regex), flags)
    except re.error as e:
        logger.debug("Invalid regex term %r (%s), matching literally", term, e)
        return re.compile(re.escape(term), flags)


def _longest_first(terms) -> list[str]:
    return sorted({term for term in terms if term.strip()}, key=lambda t: (-len(t), t))


def scoped_alternation(
    terms, is_regex: bool = False, case_insensitive: bool = True
) -> re.Pattern | None:
    """Compile several terms into one alternation for highlighting.

    Terms are ordered longest first so that when one hit term contains
    another, the longer one wins at the same position.

    Returns:
        Compiled pattern, or None when no usable terms were given or the
        joined pattern does not compile
    """
    ordered = _longest_first(terms)
    if not ordered:
        return None

    source = "|".join(f"(?:{scope_term(term, is_regex)})" for term in ordered)
    try:
        return re.compile(source, _flags(case_insensitive))
    except re.error as e:
        logger.debug("Terms cannot be joined into one pattern (%s)", e)
        return None


def term_patterns(
    terms, is_regex: bool = False, case_insensitive: bool = True
) -> list[re.Pattern]:
    """Compile each usable term on its own, longest first."""
    return [
        compile_term(term, is_regex, case_insensitive)
        for term in _longest_first(terms)
    ]
