"""Locating entity terms in content and resolving overlapping candidates.

Selection in first-occurrence mode is deterministic: candidates are ordered
by position, then by matched length (longest first), then by term length
(shortest first), and accepted greedily. Each entity gets at most one link
and accepted spans never overlap.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from .entities import canonical_names
from .models import Candidate, Match, SearchTerm
from .parser.zones import ZoneList, ranges_overlap

log = logging.getLogger(__name__)

# A match touching one of these is likely inside link syntax zone detection missed
BRACKET_CHARS = frozenset("()[]{}")


def term_pattern(term: str, case_insensitive: bool) -> re.Pattern[str]:
    """Compile a word-bounded pattern for a literal term."""
    flags = re.IGNORECASE if case_insensitive else 0
    return re.compile(rf"\b{re.escape(term)}\b", flags)


def find_matches(content: str, term: str, case_insensitive: bool = True) -> list[Match]:
    """Find all word-bounded occurrences of ``term`` in ``content``.

    Matches with a bracket character immediately before or after are
    discarded.
    """
    if not term:
        return []

    matches: list[Match] = []
    for m in term_pattern(term, case_insensitive).finditer(content):
        start, end = m.start(), m.end()
        char_before = content[start - 1] if start > 0 else ""
        char_after = content[end] if end < len(content) else ""
        if char_before in BRACKET_CHARS or char_after in BRACKET_CHARS:
            continue
        matches.append(Match(start, end, m.group(0)))
    return matches


def valid_matches(
    content: str, term: str, case_insensitive: bool, zones: ZoneList
) -> list[Match]:
    """Matches of ``term`` that do not touch any protected zone."""
    return [
        match
        for match in find_matches(content, term, case_insensitive)
        if not zones.overlaps(match.start, match.end)
    ]


def collect_candidates(
    content: str,
    terms: list[SearchTerm],
    zones: ZoneList,
    case_insensitive: bool = True,
) -> list[Candidate]:
    """Gather every valid match of every term, grouped by entity.

    Groups appear in the order their entity first produced a match while
    walking ``terms``; within a group, candidates are ordered by position.
    """
    names = canonical_names(terms)
    groups: dict[str, list[Candidate]] = {}

    for term in terms:
        matches = valid_matches(content, term.term, case_insensitive, zones)
        if not matches:
            continue
        key = term.entity_name.lower()
        group = groups.setdefault(key, [])
        group.extend(Candidate(names[key], term.term, match) for match in matches)

    candidates: list[Candidate] = []
    for group in groups.values():
        group.sort(key=lambda c: c.match.start)
        candidates.extend(group)
    return candidates


def candidate_sort_key(candidate: Candidate) -> tuple[int, int, int]:
    return (candidate.match.start, -len(candidate.match.matched), len(candidate.term))


def select_matches(
    candidates: Iterable[Candidate], already_linked: Iterable[str] = ()
) -> list[Candidate]:
    """Pick at most one non-overlapping candidate per entity.

    Args:
        candidates: Candidates from :func:`collect_candidates`.
        already_linked: Entity names to skip entirely (case-insensitive).

    Returns:
        Accepted candidates in ascending position order.
    """
    ordered = sorted(candidates, key=candidate_sort_key)
    selected: list[Candidate] = []
    linked = {name.lower() for name in already_linked}

    for candidate in ordered:
        key = candidate.entity_name.lower()
        if key in linked:
            continue

        start, end = candidate.match.start, candidate.match.end
        if any(ranges_overlap(start, end, s.match.start, s.match.end) for s in selected):
            continue

        selected.append(candidate)
        linked.add(key)

    log.debug("Selected %d of %d candidates", len(selected), len(ordered))
    return selected
