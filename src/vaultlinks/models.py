"""Pydantic models and lightweight record types for wikilink annotation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field

ZoneType = Literal[
    "frontmatter",
    "code_block",
    "inline_code",
    "wikilink",
    "markdown_link",
    "url",
    "hashtag",
    "html_tag",
    "obsidian_comment",
    "math",
]

ImplicitPattern = Literal[
    "proper-nouns",
    "single-caps",
    "quoted-terms",
    "camel-case",
    "acronyms",
]


# ─────────────────────────────────────────────────────────────────────────────
# Entities
# ─────────────────────────────────────────────────────────────────────────────


class BareEntity(BaseModel):
    """An entity known only by its name (legacy string form)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bare"] = "bare"
    name: str

    @property
    def aliases(self) -> list[str]:
        return []


class AliasedEntity(BaseModel):
    """An entity backed by a vault file, with optional alias surface forms."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["aliased"] = "aliased"
    name: str  # Canonical name (file stem)
    path: str = ""  # Relative path within the vault
    aliases: list[str] = Field(default_factory=list)


Entity = Annotated[Union[BareEntity, AliasedEntity], Field(discriminator="kind")]

EntityLike = Union[str, Mapping, BareEntity, AliasedEntity]


def coerce_entity(value: EntityLike) -> BareEntity | AliasedEntity:
    """Normalize a caller-supplied entity into one of the two entity variants.

    Plain strings become ``BareEntity``; mappings with ``name``/``path``/``aliases``
    keys become ``AliasedEntity``.
    """
    if isinstance(value, (BareEntity, AliasedEntity)):
        return value
    if isinstance(value, str):
        return BareEntity(name=value)
    data = dict(value)
    data.setdefault("kind", "aliased")
    if data["kind"] == "bare":
        return BareEntity.model_validate(data)
    return AliasedEntity.model_validate(data)


def coerce_entities(values) -> list[BareEntity | AliasedEntity]:
    return [coerce_entity(v) for v in values]


# ─────────────────────────────────────────────────────────────────────────────
# Matching records
# ─────────────────────────────────────────────────────────────────────────────


class ProtectedZone(NamedTuple):
    """A half-open span ``[start, end)`` that must not be rewritten."""

    start: int
    end: int
    type: ZoneType


class Match(NamedTuple):
    """A located occurrence of a search term."""

    start: int
    end: int
    matched: str


class SearchTerm(NamedTuple):
    """A surface form (name or alias) mapped to its canonical entity name."""

    term: str
    entity_name: str


class Candidate(NamedTuple):
    """A match tagged with the entity and term that produced it."""

    entity_name: str
    term: str
    match: Match


# ─────────────────────────────────────────────────────────────────────────────
# Options
# ─────────────────────────────────────────────────────────────────────────────


class WikilinkOptions(BaseModel):
    """Options for linking known entities."""

    model_config = ConfigDict(extra="forbid")

    first_occurrence_only: bool = True
    case_insensitive: bool = True
    # Entity names treated as already linked (e.g. by an earlier pass)
    already_linked: set[str] = Field(default_factory=set)


class ImplicitEntityConfig(BaseModel):
    """Configuration for pattern-based implicit entity detection."""

    model_config = ConfigDict(extra="forbid")

    implicit_patterns: list[ImplicitPattern] = Field(
        default_factory=lambda: ["proper-nouns", "quoted-terms"]
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["^The ", "^A ", "^An ", "^This ", "^That ", "^These ", "^Those "]
    )
    min_entity_length: int = Field(default=3, ge=0)


class ExtendedWikilinkOptions(WikilinkOptions, ImplicitEntityConfig):
    """Known-entity options plus implicit detection settings."""

    detect_implicit: bool = False
    note_path: str | None = None  # Current note, used to suppress self-links

    def implicit_config(self) -> ImplicitEntityConfig:
        return ImplicitEntityConfig(
            implicit_patterns=self.implicit_patterns,
            exclude_patterns=self.exclude_patterns,
            min_entity_length=self.min_entity_length,
        )

    def wikilink_options(self) -> WikilinkOptions:
        return WikilinkOptions(
            first_occurrence_only=self.first_occurrence_only,
            case_insensitive=self.case_insensitive,
            already_linked=self.already_linked,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────


class WikilinkResult(BaseModel):
    """Result of a linking pass."""

    content: str
    links_added: int = 0
    linked_entities: list[str] = Field(default_factory=list)
    implicit_entities: list[str] | None = None  # Set only when implicit detection ran


class ImplicitEntityMatch(BaseModel):
    """A heuristically detected span with no backing entity."""

    text: str
    start: int
    end: int
    pattern: ImplicitPattern


class LinkSuggestion(BaseModel):
    """A potential link that was not applied."""

    entity: str
    start: int
    end: int
    context: str
