"""Core data models for block-query filtering.

This module defines the structures shared by the parser, the matching
engine and the reporting layer:

- Record: Immutable BibTeX entry as extracted from pasted text
- Block: Named group of terms with shared regex/exclude flags
- QueryConfig: Ordered blocks joined by AND/OR operators
- FieldHits / EvaluationResult: Per-record matching output
- Span: Highlighted character range in one field's text

Block names double as join keys: hit maps are keyed by name, so names
must be unique within one configuration.
"""

import enum
import re
import uuid

import msgspec

FIELD_NAMES: tuple[str, ...] = ("title", "abstract", "keywords")

_WHITESPACE = re.compile(r"\s+")


def _collapse(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def new_block_id() -> str:
    """Generate an opaque unique block identifier."""
    return uuid.uuid4().hex


class Record(msgspec.Struct, frozen=True, kw_only=True):
    """Immutable bibliography record.

    Field keys are lower-cased. Values keep their inner structure
    verbatim (nested braces, escaped quotes) with one layer of enclosing
    braces or quotes removed. Only title, abstract and keywords are read
    by the matching engine; everything else passes through for export.
    """

    entry_type: str
    cite_key: str
    fields: dict[str, str] = msgspec.field(default_factory=dict)

    def get(self, *names: str) -> str:
        """Return the first non-empty field among ``names``."""
        for name in names:
            value = self.fields.get(name)
            if value:
                return value
        return ""

    @property
    def title(self) -> str:
        return self.get("title")

    @property
    def abstract(self) -> str:
        return self.get("abstract", "abs", "summary")

    @property
    def keywords(self) -> str:
        return self.get("keywords", "keyword")

    @property
    def clean_title(self) -> str:
        """Title with whitespace collapsed and TeX grouping braces removed."""
        return _collapse(self.title).replace("{", "").replace("}", "").strip()

    @property
    def authors(self) -> str:
        return _collapse(self.get("author"))

    @property
    def year(self) -> str:
        return self.get("year").strip()

    @property
    def venue(self) -> str:
        return _collapse(self.get("booktitle", "journal"))

    @property
    def doi(self) -> str:
        return self.get("doi").strip()

    @property
    def resolved_url(self) -> str:
        """Explicit URL, else a doi.org link, else an empty string."""
        url = self.get("url").strip()
        if url:
            return url
        if self.doi:
            return f"https://doi.org/{self.doi}"
        return ""

    def texts(self) -> dict[str, str]:
        """Raw text of every searchable field."""
        return {
            "title": self.title,
            "abstract": self.abstract,
            "keywords": self.keywords,
        }

    def selected_texts(self, search_fields: "SearchFields") -> dict[str, str]:
        """Searchable texts with deselected fields forced to empty strings."""
        texts = self.texts()
        return {
            name: texts[name] if search_fields.is_selected(name) else ""
            for name in FIELD_NAMES
        }

    def is_eligible(self, search_fields: "SearchFields") -> bool:
        """Check whether at least one selected field has text."""
        return any(self.selected_texts(search_fields).values())


class Operator(enum.Enum):
    """Boolean operator joining two adjacent blocks."""

    AND = "AND"
    OR = "OR"

    def apply(self, left: bool, right: bool) -> bool:
        if self is Operator.AND:
            return left and right
        return left or right


class Block(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Named group of terms, the unit combined by AND/OR.

    A block fires for a record when any of its terms hits any selected
    field. An excluded block contributes the negation of that.
    """

    name: str
    terms: tuple[str, ...] = ()
    is_regex: bool = False
    exclude: bool = False
    id: str = msgspec.field(default_factory=new_block_id)

    @property
    def usable_terms(self) -> tuple[str, ...]:
        """Terms that are non-empty after stripping whitespace."""
        return tuple(term for term in self.terms if term.strip())

    @property
    def is_usable(self) -> bool:
        return bool(self.usable_terms)


class SearchFields(msgspec.Struct, frozen=True, kw_only=True):
    """Which record fields take part in matching."""

    title: bool = True
    abstract: bool = True
    keywords: bool = True

    def is_selected(self, name: str) -> bool:
        return bool(getattr(self, name, False))

    def selected(self) -> tuple[str, ...]:
        return tuple(name for name in FIELD_NAMES if self.is_selected(name))

    @classmethod
    def from_names(cls, names) -> "SearchFields":
        """Build a selection from an iterable of field names."""
        wanted = {name.strip().lower() for name in names if name.strip()}
        unknown = wanted.difference(FIELD_NAMES)
        if unknown:
            raise ValueError(f"Unknown search field(s): {', '.join(sorted(unknown))}")
        return cls(**{name: name in wanted for name in FIELD_NAMES})


class QueryConfig(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Ordered blocks joined by operators.

    ``operators[i]`` joins ``blocks[i]`` and ``blocks[i + 1]``, so a
    consistent config always has ``len(blocks) - 1`` operators. The
    mutation helpers below keep that invariant; configs built by hand are
    not repaired.
    """

    blocks: tuple[Block, ...] = ()
    operators: tuple[Operator, ...] = ()
    case_insensitive: bool = True
    search_fields: SearchFields = msgspec.field(default_factory=SearchFields)

    def is_consistent(self) -> bool:
        return len(self.operators) == max(0, len(self.blocks) - 1)

    @property
    def block_names(self) -> tuple[str, ...]:
        return tuple(block.name for block in self.blocks)

    def has_unique_names(self) -> bool:
        return len(set(self.block_names)) == len(self.blocks)

    def insert_block(self, index: int, block: Block | None = None) -> "QueryConfig":
        """Insert a block at ``index`` together with one AND operator.

        Args:
            index: Position of the new block (clamped to the valid range)
            block: Block to insert; a blank one is created when omitted

        Returns:
            New configuration
        """
        index = max(0, min(index, len(self.blocks)))
        if block is None:
            block = Block(name=f"Block {len(self.blocks) + 1}", terms=("",))

        blocks = list(self.blocks)
        blocks.insert(index, block)
        operators = list(self.operators)
        if self.blocks:
            operators.insert(min(index, len(operators)), Operator.AND)

        return msgspec.structs.replace(
            self, blocks=tuple(blocks), operators=tuple(operators)
        )

    def remove_block(self, index: int) -> "QueryConfig":
        """Remove the block at ``index`` and one adjacent operator."""
        if not 0 <= index < len(self.blocks):
            raise IndexError(f"Block index out of range: {index}")

        blocks = list(self.blocks)
        del blocks[index]
        operators = list(self.operators)
        if operators:
            del operators[0 if index == 0 else index - 1]

        return msgspec.structs.replace(
            self, blocks=tuple(blocks), operators=tuple(operators)
        )

    def update_block(self, index: int, **changes) -> "QueryConfig":
        blocks = list(self.blocks)
        if "terms" in changes:
            changes["terms"] = tuple(changes["terms"])
        blocks[index] = msgspec.structs.replace(blocks[index], **changes)
        return msgspec.structs.replace(self, blocks=tuple(blocks))

    def set_operator(self, index: int, operator: Operator) -> "QueryConfig":
        operators = list(self.operators)
        operators[index] = Operator(operator)
        return msgspec.structs.replace(self, operators=tuple(operators))

    @classmethod
    def default(cls) -> "QueryConfig":
        """Starter configuration for remote immersive-VR user studies."""
        return cls(
            blocks=(
                Block(
                    name="Group 1",
                    terms=("immersive virtual reality", "virtual reality"),
                ),
                Block(
                    name="Group 2",
                    terms=(
                        "remote experiment",
                        "remote participation",
                        "remote study",
                        "remote VR",
                        "online study",
                        r"home\w*",
                        r"participant[-\s]?owned HMD",
                        r"participant[-\s]?provided HMD",
                        r"self[-\s]?administered",
                        "unsupervised",
                        r"participant[-\s]?led",
                        r"self[-\s]?conducted",
                        r"web[-\s]?based",
                        r"crowdsourc\w*",
                        "prolific",
                        "amazon mechanical turk",
                        "MTurk",
                        r"out[-\s]?of[-\s]?lab",
                        "outside the lab",
                        "decentralized",
                    ),
                    is_regex=True,
                ),
                Block(
                    name="Group 3",
                    terms=(
                        "user",
                        "online",
                        "study",
                        "experiment",
                        "behavior",
                        "cognition",
                        "evaluation",
                        "empirical",
                        "perception",
                        "participant",
                        "controlled",
                        "task performance",
                        r"human[-\s]?subject",
                        "data collection",
                    ),
                    is_regex=True,
                ),
            ),
            operators=(Operator.AND, Operator.AND),
        )


class FieldHits(msgspec.Struct, frozen=True, kw_only=True):
    """Terms of one block that hit, split by field."""

    title: tuple[str, ...] | None = None
    abstract: tuple[str, ...] | None = None
    keywords: tuple[str, ...] | None = None

    def get(self, field: str) -> tuple[str, ...]:
        return getattr(self, field, None) or ()

    def fields(self) -> tuple[str, ...]:
        """Names of the fields with at least one hit."""
        return tuple(name for name in FIELD_NAMES if self.get(name))

    def is_empty(self) -> bool:
        return not self.fields()


class MatchOutcome(enum.Enum):
    """Classification of one record after a run."""

    MATCHED = "matched"
    PARTIAL = "partial"
    UNMATCHED = "unmatched"


class EvaluationResult(msgspec.Struct, frozen=True, kw_only=True):
    """Evaluator output for one record.

    ``hit_map`` only holds non-excluded blocks that fired.
    """

    ok: bool
    matched_block_names: tuple[str, ...] = ()
    hit_map: dict[str, FieldHits] = msgspec.field(default_factory=dict)


class Span(msgspec.Struct, frozen=True):
    """Highlighted range ``[start, end)`` of one field's text."""

    start: int
    end: int
    block_name: str
    matched_text: str

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end
