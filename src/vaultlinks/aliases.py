"""Resolving wikilinks that target aliases to their canonical entity.

When a user types ``[[model context protocol]]`` and "Model Context
Protocol" is an alias of the entity "MCP", the link becomes
``[[MCP|model context protocol]]``: the canonical target with the user's
original text kept as display text.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import NamedTuple

from .models import AliasedEntity, EntityLike, WikilinkResult, coerce_entity
from .parser.links import format_wikilink, iter_wikilinks

log = logging.getLogger(__name__)


class AliasTarget(NamedTuple):
    """What an alias-map key resolves to."""

    entity_name: str
    alias_text: str
    is_alias: bool


def build_alias_map(
    entities: Iterable[EntityLike], case_insensitive: bool = True
) -> dict[str, AliasTarget]:
    """Build an alias/name to canonical entity lookup.

    Among aliases the first registration wins. An alias takes over a key
    that was registered by an entity name; a name never overwrites an
    existing key. Bare entities have no aliases and contribute nothing.
    """
    alias_map: dict[str, AliasTarget] = {}

    for entity in entities:
        entity = coerce_entity(entity)
        if not isinstance(entity, AliasedEntity):
            continue

        for alias in entity.aliases:
            key = alias.lower() if case_insensitive else alias
            existing = alias_map.get(key)
            if existing is None or not existing.is_alias:
                alias_map[key] = AliasTarget(entity.name, alias, True)

        name_key = entity.name.lower() if case_insensitive else entity.name
        if name_key not in alias_map:
            alias_map[name_key] = AliasTarget(entity.name, entity.name, False)

    return alias_map


def resolve_alias_wikilinks(
    content: str,
    entities: Iterable[EntityLike],
    case_insensitive: bool = True,
) -> WikilinkResult:
    """Rewrite ``[[alias]]`` links to ``[[Canonical|alias]]``.

    Links with display text keep it: ``[[alias|text]]`` becomes
    ``[[Canonical|text]]``. Links already pointing at the canonical name,
    or at nothing known, are left untouched.

    Args:
        content: The markdown content to process.
        entities: Known entities (bare names or aliased entities).
        case_insensitive: Match targets against aliases ignoring case.

    Returns:
        Result whose ``links_added`` counts resolved links.
    """
    entities = list(entities)
    if not entities or not content:
        return WikilinkResult(content=content)

    alias_map = build_alias_map(entities, case_insensitive)
    links = list(iter_wikilinks(content))

    result = content
    resolved = 0
    resolved_entities: list[str] = []

    for link in reversed(links):
        target_key = link.target.lower() if case_insensitive else link.target
        info = alias_map.get(target_key)
        if info is None:
            continue

        name_key = info.entity_name.lower() if case_insensitive else info.entity_name
        if target_key == name_key:
            continue

        display = link.display if link.display is not None else link.target
        replacement = format_wikilink(info.entity_name, display)
        result = result[: link.start] + replacement + result[link.end :]

        resolved += 1
        if info.entity_name not in resolved_entities:
            resolved_entities.append(info.entity_name)

    log.debug("Resolved %d alias wikilinks", resolved)
    return WikilinkResult(content=result, links_added=resolved, linked_entities=resolved_entities)
