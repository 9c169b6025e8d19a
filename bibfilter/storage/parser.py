"""Tolerant BibTeX entry parser.

Extracts ``@type{key, field = value, ...}`` chunks from arbitrary pasted
text. Anything that does not look like an entry header (stray ``@`` in
e-mail addresses, comments, copied web pages) is skipped silently.

Features:
- Explicit depth-tracked scanning for chunk boundaries
- Quote-aware termination at the top brace level
- Recovery from unterminated chunks at the next entry header
- Hard failure only when non-empty input yields no entries at all
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from bibfilter.core.exceptions import ParseFailure
from bibfilter.core.models import Record

logger = logging.getLogger(__name__)


class EntryParser:
    """Parser for BibTeX entries embedded in free-form text."""

    header_pattern = re.compile(r"@(\w+)\s*\{\s*([^,{}]+?)\s*,", re.DOTALL)
    field_pattern = re.compile(
        r"""(\w+)\s*=\s*
        (
            "(?:\\.|[^"\\])*"               # quoted, escaped quotes allowed
          | \{(?:\\.|[^{}]|\{[^{}]*\})*\}   # braced, one level of nesting
          | \d+                             # bare number
        )
        \s*,?""",
        re.DOTALL | re.VERBOSE,
    )

    def __init__(self):
        self.skipped: list[int] = []

    def parse(self, text: str) -> list[Record]:
        """Parse every entry found in ``text``.

        Args:
            text: Raw text that may contain zero or more BibTeX entries

        Returns:
            Records in input order

        Raises:
            ParseFailure: If the text is non-empty but holds no entries
        """
        self.skipped = []
        records: list[Record] = []

        if not text or not text.strip():
            return records

        pos = text.find("@")
        while pos != -1:
            header = self.header_pattern.match(text, pos)
            if not header:
                self.skipped.append(pos)
                logger.debug("Skipping stray '@' at offset %d", pos)
                pos = text.find("@", pos + 1)
                continue

            body_start = header.end()
            end = self.find_chunk_end(text, header.end(2))
            if end is None:
                end = self._recover_end(text, body_start)
                logger.debug(
                    "Unterminated entry '%s' at offset %d", header.group(2), pos
                )
                body = text[body_start:end]
                resume = end
            else:
                body = text[body_start:end]
                resume = end + 1

            records.append(
                Record(
                    entry_type=header.group(1),
                    cite_key=header.group(2).strip(),
                    fields=self.parse_fields(body),
                )
            )
            pos = text.find("@", resume)

        if not records:
            raise ParseFailure(len(text))

        logger.info("Parsed %d entries", len(records))
        return records

    def find_chunk_end(self, text: str, start: int) -> int | None:
        """Find the index of the brace closing the entry opened before ``start``.

        Depth starts at 1 for the header brace. A double quote at depth 1
        opens or closes a quoted value; the chunk only ends when depth
        returns to zero outside such a value.

        Returns:
            Index of the closing brace, or None for an unterminated entry
        """
        depth = 1
        in_quote = False
        i = start
        length = len(text)

        while i < length:
            char = text[i]
            if char == "\\":
                i += 2
                continue
            if char == '"' and depth == 1:
                in_quote = not in_quote
            elif char == "{":
                depth += 1
            elif char == "}":
                if depth == 1 and in_quote:
                    pass
                else:
                    depth -= 1
                    if depth == 0:
                        return i
            i += 1

        return None

    def _recover_end(self, text: str, start: int) -> int:
        """End an unterminated chunk at the next entry header, if any."""
        pos = text.find("@", start)
        while pos != -1:
            if self.header_pattern.match(text, pos):
                return pos
            pos = text.find("@", pos + 1)
        return len(text)

    def parse_fields(self, body: str) -> dict[str, str]:
        """Extract ``key = value`` pairs from an entry body."""
        fields: dict[str, str] = {}

        for match in self.field_pattern.finditer(body):
            key = match.group(1).lower()
            fields[key] = self.strip_delimiters(match.group(2).strip())

        return fields

    @staticmethod
    def strip_delimiters(value: str) -> str:
        """Remove exactly one layer of enclosing braces or quotes."""
        if len(value) >= 2 and (
            (value[0] == "{" and value[-1] == "}")
            or (value[0] == '"' and value[-1] == '"')
        ):
            return value[1:-1]
        return value

    def parse_file(self, path: Path) -> list[Record]:
        """Parse a BibTeX file, falling back to latin-1 for legacy encodings."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug("%s is not UTF-8, retrying as latin-1", path)
            text = Path(path).read_text(encoding="latin-1")
        return self.parse(text)


def parse_entries(text: str) -> list[Record]:
    """Parse entries from text with a fresh parser."""
    return EntryParser().parse(text)
