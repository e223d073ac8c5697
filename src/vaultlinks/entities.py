"""Entity term index: the surface forms searched for each entity."""

from __future__ import annotations

from collections.abc import Iterable

from .config import LINK_STOP_WORDS
from .models import EntityLike, SearchTerm, coerce_entity


def is_stop_word(term: str) -> bool:
    """Check if a term should never be linked."""
    return term.lower() in LINK_STOP_WORDS


def entity_terms(entity: EntityLike) -> list[SearchTerm]:
    """Get all search terms for an entity: its name, then each alias."""
    entity = coerce_entity(entity)
    terms = [SearchTerm(entity.name, entity.name)]
    terms.extend(SearchTerm(alias, entity.name) for alias in entity.aliases)
    return terms


def expand_terms(entities: Iterable[EntityLike]) -> list[SearchTerm]:
    """Expand entities into searchable terms, longest term first.

    Stop-word terms are dropped. The sort is stable, so terms of equal
    length keep entity-list order.
    """
    terms = [
        term
        for entity in entities
        for term in entity_terms(entity)
        if term.term and not is_stop_word(term.term)
    ]
    terms.sort(key=lambda t: len(t.term), reverse=True)
    return terms


def canonical_names(terms: Iterable[SearchTerm]) -> dict[str, str]:
    """Map each lowercase entity key to its first-registered spelling."""
    names: dict[str, str] = {}
    for term in terms:
        names.setdefault(term.entity_name.lower(), term.entity_name)
    return names
