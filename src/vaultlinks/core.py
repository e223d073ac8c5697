"""Core wikilink operations.

Entry points:

- :func:`apply_wikilinks` links known entities (names and aliases).
- :func:`suggest_wikilinks` reports where links would go without writing them.
- :func:`process_wikilinks` links known entities, then optionally links
  implicit entities found by pattern heuristics.

All functions are pure: they take content and return new content, leaving
file I/O to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .config import SUGGESTION_CONTEXT_CHARS
from .entities import expand_terms
from .implicit import detect_implicit_entities, filter_overlapping
from .matching import collect_candidates, select_matches, valid_matches
from .models import (
    EntityLike,
    ExtendedWikilinkOptions,
    ImplicitEntityMatch,
    LinkSuggestion,
    WikilinkOptions,
    WikilinkResult,
    coerce_entities,
)
from .parser.links import format_wikilink
from .parser.zones import ZoneList
from .rewriter import Rewriter

log = logging.getLogger(__name__)


def _resolve_options(options, kwargs: dict[str, Any], model):
    """Build validated options from an options object plus keyword overrides.

    Unknown keywords raise ``ValidationError``. Plain ``WikilinkOptions``
    given where extended options are expected are widened with defaults.
    """
    if options is None:
        return model.model_validate(kwargs)
    if not isinstance(options, model):
        options = model.model_validate(options.model_dump())
    if kwargs:
        return type(options).model_validate({**options.model_dump(), **kwargs})
    return options


def apply_wikilinks(
    content: str,
    entities: Iterable[EntityLike],
    options: WikilinkOptions | None = None,
    *,
    session_id: str | None = None,
    **kwargs: Any,
) -> WikilinkResult:
    """Apply wikilinks to entities in content.

    Protected zones (frontmatter, code, existing links, URLs, ...) are never
    touched. In first-occurrence mode each entity is linked once, at its
    earliest position; overlapping candidates resolve to the longest match.

    Args:
        content: The markdown content to process.
        entities: Entity names or entity objects to look for.
        options: Linking options; keyword arguments override its fields.
        session_id: Correlation id included in log records.

    Returns:
        Result with updated content and statistics.
    """
    options = _resolve_options(options, kwargs, WikilinkOptions)
    entities = coerce_entities(entities)

    if not entities or not content:
        return WikilinkResult(content=content)

    terms = expand_terms(entities)
    rewriter = Rewriter(content, ZoneList.detect(content))

    if options.first_occurrence_only:
        candidates = collect_candidates(content, terms, rewriter.zones, options.case_insensitive)
        rewriter.apply(select_matches(candidates, options.already_linked))
    else:
        for term in terms:
            matches = valid_matches(
                rewriter.content, term.term, options.case_insensitive, rewriter.zones
            )
            for match in reversed(matches):
                rewriter.link(term.entity_name, match)

    log.debug(
        "session=%s linked %d occurrence(s) of %d entities",
        session_id,
        rewriter.links_added,
        len(rewriter.linked_entities),
    )
    return WikilinkResult(
        content=rewriter.content,
        links_added=rewriter.links_added,
        linked_entities=rewriter.linked_entities,
    )


def _context(content: str, start: int, end: int) -> str:
    context_start = max(0, start - SUGGESTION_CONTEXT_CHARS)
    context_end = min(len(content), end + SUGGESTION_CONTEXT_CHARS)
    context = content[context_start:context_end]
    return "..." + context if context_start > 0 else context


def suggest_wikilinks(
    content: str,
    entities: Iterable[EntityLike],
    options: WikilinkOptions | None = None,
    **kwargs: Any,
) -> list[LinkSuggestion]:
    """Suggest wikilinks without applying them.

    A match on an alias is reported under the canonical entity name. In
    first-occurrence mode each entity's earliest valid match is returned;
    suggestions are not checked against each other for overlap.

    Returns:
        Suggestions with surrounding context, ordered by position in
        first-occurrence mode and by term otherwise.
    """
    options = _resolve_options(options, kwargs, WikilinkOptions)
    entities = coerce_entities(entities)

    if not entities or not content:
        return []

    terms = expand_terms(entities)
    zones = ZoneList.detect(content)

    if options.first_occurrence_only:
        earliest: dict[str, tuple[str, int, int]] = {}
        for candidate in collect_candidates(content, terms, zones, options.case_insensitive):
            key = candidate.entity_name.lower()
            match = candidate.match
            if key not in earliest or match.start < earliest[key][1]:
                earliest[key] = (candidate.entity_name, match.start, match.end)

        suggestions = [
            LinkSuggestion(entity=name, start=start, end=end, context=_context(content, start, end))
            for name, start, end in earliest.values()
        ]
        suggestions.sort(key=lambda s: s.start)
        return suggestions

    return [
        LinkSuggestion(
            entity=term.entity_name,
            start=match.start,
            end=match.end,
            context=_context(content, match.start, match.end),
        )
        for term in terms
        for match in valid_matches(content, term.term, options.case_insensitive, zones)
    ]


def _note_title(note_path: str | None) -> str | None:
    if not note_path:
        return None
    if note_path.endswith(".md"):
        note_path = note_path[:-3]
    return note_path.split("/")[-1].lower()


def process_wikilinks(
    content: str,
    entities: Iterable[EntityLike],
    options: ExtendedWikilinkOptions | None = None,
    *,
    session_id: str | None = None,
    **kwargs: Any,
) -> WikilinkResult:
    """Link known entities, then optionally link implicit entities.

    Implicit detection runs on the already-linked content, so text linked in
    the first pass is protected. Implicit matches naming a linked entity, a
    known entity, or the current note itself are skipped.

    Args:
        content: The markdown content to process.
        entities: Known entity names or entity objects.
        options: Extended options; keyword arguments override its fields.
        session_id: Correlation id included in log records.

    Returns:
        Combined result; ``implicit_entities`` is set when implicit links
        were added.

    Raises:
        VaultLinksError: If an implicit exclude pattern is invalid.
    """
    options = _resolve_options(options, kwargs, ExtendedWikilinkOptions)
    entities = coerce_entities(entities)

    result = apply_wikilinks(
        content, entities, options.wikilink_options(), session_id=session_id
    )
    if not options.detect_implicit:
        return result

    implicit = detect_implicit_entities(result.content, options.implicit_config())
    if not implicit:
        return result

    known = {name.lower() for name in result.linked_entities}
    known.update(entity.name.lower() for entity in entities)
    note_title = _note_title(options.note_path)

    fresh: list[ImplicitEntityMatch] = []
    for match in implicit:
        normalized = match.text.lower()
        if normalized in known or normalized == note_title:
            continue
        fresh.append(match)

    fresh = filter_overlapping(fresh)
    if not fresh:
        return result

    processed = result.content
    implicit_entities: list[str] = []
    for match in reversed(fresh):
        # Quoted terms span their quotes, so "Term" becomes [[Term]]
        processed = processed[: match.start] + format_wikilink(match.text) + processed[match.end :]
        if match.text not in implicit_entities:
            implicit_entities.append(match.text)

    log.debug("session=%s linked %d implicit entities", session_id, len(fresh))
    return WikilinkResult(
        content=processed,
        links_added=result.links_added + len(fresh),
        linked_entities=result.linked_entities,
        implicit_entities=implicit_entities,
    )
