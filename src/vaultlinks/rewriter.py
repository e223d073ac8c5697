"""Splicing wikilinks into content while keeping protected zones in step."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Candidate, Match
from .parser.links import format_wikilink
from .parser.zones import ZoneList


def build_link(entity_name: str, matched: str) -> str:
    """``[[Name]]`` when the text is the name itself, else ``[[Name|Text]]``.

    Display text keeps the matched casing or alias.
    """
    if matched.lower() == entity_name.lower():
        return format_wikilink(entity_name)
    return format_wikilink(entity_name, matched)


class Rewriter:
    """Applies link insertions to one piece of content.

    Insertions must be applied right-to-left so offsets of earlier
    matches stay valid; ``apply`` sorts accordingly.
    """

    def __init__(self, content: str, zones: ZoneList) -> None:
        self.content = content
        self.zones = zones
        self.links_added = 0
        self.linked_entities: list[str] = []

    def splice(self, match: Match, replacement: str) -> None:
        """Replace ``match`` with ``replacement`` and protect the new span."""
        self.content = self.content[: match.start] + replacement + self.content[match.end :]
        self.zones.replace(match.start, match.end, len(replacement))

    def link(self, entity_name: str, match: Match) -> None:
        self.splice(match, build_link(entity_name, match.matched))
        self.links_added += 1
        if entity_name not in self.linked_entities:
            self.linked_entities.append(entity_name)

    def apply(self, candidates: Iterable[Candidate]) -> None:
        """Link every candidate, processing from the end of the content."""
        for candidate in sorted(candidates, key=lambda c: c.match.start, reverse=True):
            self.link(candidate.entity_name, candidate.match)
