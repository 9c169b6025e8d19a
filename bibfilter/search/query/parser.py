"""Parser for pasted boolean query strings.

Database search pages usually export queries such as::

    ("virtual reality" OR VR) AND ("remote study" OR online) AND NOT children

This parser turns that into blocks. It supports exactly two levels:
top-level groups separated by ``AND``, each holding ``OR``-separated
terms, optionally prefixed by ``NOT``. Every pair of groups is joined
with AND; a top-level ``OR`` between groups cannot be represented and
has to be set on the operator afterwards.
"""

import re
from dataclasses import dataclass, field

import msgspec

from bibfilter.core.models import Block, Operator, QueryConfig

STRAIGHT_QUOTES = "\"'"
TERM_QUOTES = "\"'“”‘’"


@dataclass
class ParsedQuery:
    """Blocks and operators recovered from a query string."""

    blocks: list[Block] = field(default_factory=list)
    operators: list[Operator] = field(default_factory=list)

    def get_terms(self) -> list[str]:
        """Get all terms from every block."""
        terms = []
        for block in self.blocks:
            terms.extend(block.terms)
        return terms


class QueryStringParser:
    """Parser for two-level AND/OR/NOT query strings."""

    def __init__(self):
        self.whitespace_pattern = re.compile(r"\s+")
        self.not_pattern = re.compile(r"^NOT\s+", re.IGNORECASE)

    def parse(self, query_string: str) -> ParsedQuery | None:
        """Parse a query string into blocks.

        Args:
            query_string: Expression pasted by the user

        Returns:
            ParsedQuery, or None when nothing usable was found
        """
        if not query_string:
            return None

        text = self.whitespace_pattern.sub(" ", query_string).strip()
        if not text:
            return None

        groups = self.split_top_level(text, "AND")
        if not groups:
            return None

        result = ParsedQuery()
        for index, group in enumerate(groups):
            exclude, terms = self._parse_group(group)
            result.blocks.append(
                Block(
                    name=f"Group {index + 1}",
                    terms=tuple(terms),
                    is_regex=False,
                    exclude=exclude,
                )
            )
            if index < len(groups) - 1:
                result.operators.append(Operator.AND)

        if not any(block.terms for block in result.blocks):
            return None
        return result

    def apply_to(self, config: QueryConfig, query_string: str) -> QueryConfig:
        """Replace the blocks of ``config`` with a parsed query string.

        Case sensitivity and field selection are kept. When the string
        does not parse, ``config`` is returned unchanged.
        """
        parsed = self.parse(query_string)
        if parsed is None:
            return config
        return msgspec.structs.replace(
            config, blocks=tuple(parsed.blocks), operators=tuple(parsed.operators)
        )

    def _parse_group(self, group: str) -> tuple[bool, list[str]]:
        """Split one top-level group into its NOT flag and OR terms."""
        text = group.strip()

        exclude = False
        if self.not_pattern.match(text):
            exclude = True
            text = self.not_pattern.sub("", text, count=1).strip()

        if self.is_enclosed(text):
            text = text[1:-1].strip()

        terms = []
        for raw in self.split_top_level(text, "OR"):
            term = self.strip_quotes(raw)
            if term:
                terms.append(term)
        return exclude, terms

    def split_top_level(self, text: str, word: str) -> list[str]:
        """Split on a whole-word operator outside parentheses and quotes.

        The operator only counts when preceded by a space or ``)`` and
        followed by a space, ``(`` or the end of the text.
        """
        parts = []
        buffer = []
        depth = 0
        quote = ""
        width = len(word)
        i = 0

        while i < len(text):
            char = text[i]

            if char == "\\" and i + 1 < len(text):
                buffer.append(text[i : i + 2])
                i += 2
                continue

            if quote:
                buffer.append(char)
                if char == quote:
                    quote = ""
                i += 1
                continue

            if char in STRAIGHT_QUOTES:
                quote = char
            elif char == "(":
                depth += 1
            elif char == ")":
                depth = max(0, depth - 1)
            elif depth == 0 and text[i : i + width].upper() == word:
                before = text[i - 1] if i > 0 else None
                after = text[i + width] if i + width < len(text) else None
                if before in (" ", ")") and after in (" ", "(", None):
                    parts.append("".join(buffer))
                    buffer = []
                    i += width
                    continue

            buffer.append(char)
            i += 1

        parts.append("".join(buffer))
        return [part.strip() for part in parts if part.strip()]

    @staticmethod
    def is_enclosed(text: str) -> bool:
        """Check whether one pair of parentheses wraps the whole text."""
        if not (text.startswith("(") and text.endswith(")")):
            return False

        depth = 0
        quote = ""
        for i, char in enumerate(text):
            if quote:
                if char == quote:
                    quote = ""
                continue
            if char in STRAIGHT_QUOTES:
                quote = char
            elif char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0 and i < len(text) - 1:
                    return False
        return depth == 0

    @staticmethod
    def strip_quotes(term: str) -> str:
        """Remove one layer of straight or curly quotes and trim."""
        term = term.strip()
        if term[:1] and term[0] in TERM_QUOTES:
            term = term[1:]
        if term[-1:] and term[-1] in TERM_QUOTES:
            term = term[:-1]
        return term.strip()


def to_query_string(config: QueryConfig) -> str:
    """Render a configuration in the pasted query syntax.

    Operators are written as configured, so the result shows OR between
    groups even though the parser reads every group separator as AND.
    """
    parts = []
    for index, block in enumerate(config.blocks):
        terms = block.usable_terms
        if not terms:
            continue
        group = " OR ".join(f'"{term}"' if " " in term else term for term in terms)
        if len(terms) > 1:
            group = f"({group})"
        if block.exclude:
            group = f"NOT {group}"
        if parts and index > 0:
            operator = config.operators[index - 1]
            parts.append(operator.value)
        parts.append(group)
    return " ".join(parts)
