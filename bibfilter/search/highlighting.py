"""Span highlighting of matched terms.

After a run, each matched or partial record knows which terms of which
block hit which field. The highlighter maps those hits back onto the
original field text: it rebuilds patterns from the confirmed terms
only, collects every occurrence, and resolves overlaps leftmost-longest
so each character belongs to at most one block.
"""

import html
import re

from ..core.models import FieldHits, Span
from .patterns import scoped_alternation, term_patterns


class SpanHighlighter:
    """Resolves block hits into non-overlapping spans."""

    def __init__(
        self,
        case_insensitive: bool = True,
        regex_blocks: set[str] | frozenset[str] | None = None,
    ):
        """Initialize highlighter.

        Args:
            case_insensitive: Case flag of the run that produced the hits
            regex_blocks: Names of blocks whose terms are regular expressions
        """
        self.case_insensitive = case_insensitive
        self.regex_blocks = frozenset(regex_blocks or ())

    def block_patterns(self, block_name: str, terms) -> list[re.Pattern]:
        """Patterns for a block's confirmed terms.

        Literal terms share one longest-first alternation. Regex terms are
        compiled one by one: inline flags, named groups and backreferences
        are only valid inside their own pattern.
        """
        is_regex = block_name in self.regex_blocks
        if not is_regex:
            pattern = scoped_alternation(
                terms, case_insensitive=self.case_insensitive
            )
            if pattern is not None:
                return [pattern]
        return term_patterns(terms, is_regex, self.case_insensitive)

    def find_spans(self, text: str, block_name: str, terms) -> list[Span]:
        """Find every occurrence of a block's confirmed terms in ``text``."""
        spans = []
        for pattern in self.block_patterns(block_name, terms):
            pos = 0
            while pos <= len(text):
                match = pattern.search(text, pos)
                if match is None:
                    break
                if match.end() == match.start():
                    pos = match.end() + 1
                    continue
                spans.append(
                    Span(match.start(), match.end(), block_name, match.group(0))
                )
                pos = match.end()
        return spans

    def spans(
        self, text: str, field: str, hit_map: dict[str, FieldHits]
    ) -> list[Span]:
        """Compute the spans to paint on one field of one record.

        Args:
            text: Original field text
            field: Field name (title, abstract or keywords)
            hit_map: Block name to per-field hits, as produced by a run

        Returns:
            Non-overlapping spans ordered by start offset
        """
        if not text or not hit_map:
            return []

        candidates: list[Span] = []
        for block_name, hits in hit_map.items():
            terms = hits.get(field)
            if terms:
                candidates.extend(self.find_spans(text, block_name, terms))

        return self.resolve_overlaps(candidates)

    @staticmethod
    def resolve_overlaps(spans: list[Span]) -> list[Span]:
        """Keep a leftmost-longest, non-overlapping subset of ``spans``."""
        ordered = sorted(spans, key=lambda s: (s.start, -s.length))
        selected: list[Span] = []
        last_end = 0
        for span in ordered:
            if span.start >= last_end:
                selected.append(span)
                last_end = span.end
        return selected

    @staticmethod
    def segments(text: str, spans: list[Span]) -> list[tuple[str, str | None]]:
        """Split text into runs tagged with the owning block name.

        Unhighlighted runs carry ``None``. Concatenating the run texts
        gives back the original text.
        """
        runs: list[tuple[str, str | None]] = []
        pos = 0
        for span in spans:
            if span.start > pos:
                runs.append((text[pos : span.start], None))
            runs.append((text[span.start : span.end], span.block_name))
            pos = span.end
        if pos < len(text):
            runs.append((text[pos:], None))
        return runs

    def apply_markup(self, text: str, spans: list[Span], tag: str = "mark") -> str:
        """Apply HTML highlighting tags, escaping the surrounding text.

        Args:
            text: Original text
            spans: Spans from :meth:`spans`
            tag: HTML tag name

        Returns:
            Markup with one tag per span, labelled by block name
        """
        parts = []
        for chunk, block_name in self.segments(text, spans):
            if block_name is None:
                parts.append(html.escape(chunk))
            else:
                label = html.escape(block_name, quote=True)
                parts.append(
                    f'<{tag} data-block="{label}">{html.escape(chunk)}</{tag}>'
                )
        return "".join(parts)
