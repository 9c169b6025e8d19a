"""Boolean block evaluation.

A query is a list of blocks joined by AND/OR. Evaluation is a strict
left-to-right fold with no operator precedence::

    A OR B AND C  ==  (A OR B) AND C

NOT is applied per block before folding: an excluded block contributes
``not fired``. Excluded blocks never show up in the hit map.
"""

import re
from dataclasses import dataclass, field

from bibfilter.core.models import (
    FIELD_NAMES,
    Block,
    EvaluationResult,
    FieldHits,
    Operator,
    QueryConfig,
    Record,
    SearchFields,
)

from .patterns import compile_term


@dataclass
class CompiledBlock:
    """A usable block with one compiled pattern per term."""

    block: Block
    terms: list[str]
    patterns: list[re.Pattern]

    @property
    def name(self) -> str:
        return self.block.name

    @property
    def exclude(self) -> bool:
        return self.block.exclude

    def hits(self, texts: dict[str, str]) -> FieldHits:
        """Collect the terms hitting each non-empty field text."""
        per_field = {}
        for field_name in FIELD_NAMES:
            text = texts.get(field_name, "")
            if not text:
                continue
            matched = tuple(
                term
                for term, pattern in zip(self.terms, self.patterns)
                if pattern.search(text)
            )
            if matched:
                per_field[field_name] = matched
        return FieldHits(**per_field)


@dataclass
class CompiledQuery:
    """Evaluation-ready view of a QueryConfig.

    Blocks without usable terms are dropped. Operators keep their list
    positions, so ``operators[i - 1]`` joins compiled blocks ``i - 1``
    and ``i``.
    """

    blocks: list[CompiledBlock] = field(default_factory=list)
    operators: tuple[Operator, ...] = ()
    case_insensitive: bool = True
    search_fields: SearchFields = field(default_factory=SearchFields)

    @classmethod
    def from_config(cls, config: QueryConfig) -> "CompiledQuery":
        compiled = []
        for block in config.blocks:
            terms = list(block.usable_terms)
            if not terms:
                continue
            patterns = [
                compile_term(term, block.is_regex, config.case_insensitive)
                for term in terms
            ]
            compiled.append(CompiledBlock(block=block, terms=terms, patterns=patterns))

        return cls(
            blocks=compiled,
            operators=tuple(config.operators),
            case_insensitive=config.case_insensitive,
            search_fields=config.search_fields,
        )

    @property
    def positive_block_names(self) -> list[str]:
        """Names of usable, non-excluded blocks in query order."""
        return [block.name for block in self.blocks if not block.exclude]

    @property
    def regex_block_names(self) -> set[str]:
        return {block.name for block in self.blocks if block.block.is_regex}


class Evaluator:
    """Decides whether records satisfy a compiled query."""

    def __init__(self, query: CompiledQuery):
        self.query = query

    @classmethod
    def from_config(cls, config: QueryConfig) -> "Evaluator":
        return cls(CompiledQuery.from_config(config))

    def evaluate(
        self,
        title: str = "",
        abstract: str = "",
        keywords: str = "",
        search_fields: SearchFields | None = None,
    ) -> EvaluationResult:
        """Evaluate the query against one record's field texts.

        Args:
            title: Title text
            abstract: Abstract text
            keywords: Keywords text
            search_fields: Field selection (default: the query's own)

        Returns:
            Fold result with matched block names and per-block hits
        """
        selection = (
            search_fields if search_fields is not None else self.query.search_fields
        )
        texts = {
            "title": title if selection.title else "",
            "abstract": abstract if selection.abstract else "",
            "keywords": keywords if selection.keywords else "",
        }

        blocks = self.query.blocks
        if not blocks:
            return EvaluationResult(ok=True)

        matched_names: list[str] = []
        hit_map: dict[str, FieldHits] = {}

        def contribution(block: CompiledBlock) -> bool:
            hits = block.hits(texts)
            fired = not hits.is_empty()
            if fired and not block.exclude:
                hit_map[block.name] = hits
                matched_names.append(block.name)
            return not fired if block.exclude else fired

        value = contribution(blocks[0])
        for index, operator in enumerate(self.query.operators):
            if index + 1 >= len(blocks):
                break
            value = operator.apply(value, contribution(blocks[index + 1]))

        return EvaluationResult(
            ok=value, matched_block_names=tuple(matched_names), hit_map=hit_map
        )

    def evaluate_record(
        self, record: Record, search_fields: SearchFields | None = None
    ) -> EvaluationResult:
        return self.evaluate(
            record.title, record.abstract, record.keywords, search_fields
        )
