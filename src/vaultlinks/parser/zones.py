"""Protected zone detection for wikilink application.

Protected zones are spans of markdown where links must not be inserted:

- YAML frontmatter
- Fenced code blocks and inline code
- Existing wikilinks and markdown links
- Bare URLs, hashtags and HTML/XML tags
- Obsidian comments (%% ... %%)
- Math expressions ($ ... $ and $$ ... $$)

Detection is regex-based. Malformed or unterminated constructs simply
produce no zone.
"""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterable, Iterator

from ..models import ProtectedZone, ZoneType

# Applied in this order; ties on start position keep this order after sorting.
ZONE_PATTERNS: tuple[tuple[ZoneType, re.Pattern[str]], ...] = (
    ("code_block", re.compile(r"```[\s\S]*?```")),
    ("inline_code", re.compile(r"`[^`]+`")),
    ("wikilink", re.compile(r"\[\[[^\]]+\]\]")),
    ("markdown_link", re.compile(r"\[[^\]]+\]\([^)]+\)")),
    ("url", re.compile(r"https?://[^\s)\]]+(?:\([^)]+\))?[^\s)\]]*")),
    ("hashtag", re.compile(r"#[\w-]+")),
    ("html_tag", re.compile(r"<[^>]+>")),
    ("obsidian_comment", re.compile(r"%%.*?%%", re.DOTALL)),
    ("math", re.compile(r"\$\$[\s\S]*?\$\$|\$[^$]+\$")),
)


def find_frontmatter_end(content: str) -> int:
    """Find where YAML frontmatter ends.

    Returns:
        Offset just past the closing ``---`` line (including its newline),
        or 0 if the content has no terminated frontmatter block.
    """
    if not content.startswith("---"):
        return 0

    lines = content.split("\n")
    if len(lines) < 2:
        return 0

    pos = len(lines[0]) + 1
    for line in lines[1:]:
        pos += len(line) + 1
        if line.strip() == "---":
            return min(pos, len(content))

    return 0


def detect_zones(content: str) -> list[ProtectedZone]:
    """Get all protected zones in content, sorted by start offset."""
    zones: list[ProtectedZone] = []

    frontmatter_end = find_frontmatter_end(content)
    if frontmatter_end > 0:
        zones.append(ProtectedZone(0, frontmatter_end, "frontmatter"))

    code_blocks: list[ProtectedZone] = []
    for zone_type, pattern in ZONE_PATTERNS:
        for match in pattern.finditer(content):
            zone = ProtectedZone(match.start(), match.end(), zone_type)
            if zone_type == "code_block":
                code_blocks.append(zone)
            elif zone_type == "inline_code" and any(
                block.start <= zone.start and zone.end <= block.end for block in code_blocks
            ):
                continue
            zones.append(zone)

    zones.sort(key=lambda z: z.start)
    return zones


def is_in_protected_zone(position: int, zones: Iterable[ProtectedZone]) -> bool:
    """Check if a position falls inside any zone."""
    return any(zone.start <= position < zone.end for zone in zones)


def ranges_overlap(start: int, end: int, other_start: int, other_end: int) -> bool:
    return (
        (other_start <= start < other_end)
        or (other_start < end <= other_end)
        or (start <= other_start and end >= other_end)
    )


def range_overlaps_protected_zone(start: int, end: int, zones: Iterable[ProtectedZone]) -> bool:
    """Check if ``[start, end)`` intersects any zone at all."""
    return any(ranges_overlap(start, end, zone.start, zone.end) for zone in zones)


class ZoneList:
    """Protected zones of one rewrite pass, kept sorted by start offset.

    Rewriting a span changes the length of the content, so every zone
    after the edit point must move with it. ``shift`` and ``protect``
    are the only mutations; both keep the list sorted.
    """

    def __init__(self, zones: Iterable[ProtectedZone] = ()) -> None:
        self._zones: list[ProtectedZone] = sorted(zones, key=lambda z: z.start)

    @classmethod
    def detect(cls, content: str) -> ZoneList:
        return cls(detect_zones(content))

    def __iter__(self) -> Iterator[ProtectedZone]:
        return iter(self._zones)

    def __len__(self) -> int:
        return len(self._zones)

    def __getitem__(self, index: int) -> ProtectedZone:
        return self._zones[index]

    def __repr__(self) -> str:
        return f"ZoneList({self._zones!r})"

    def to_list(self) -> list[ProtectedZone]:
        return list(self._zones)

    def overlaps(self, start: int, end: int) -> bool:
        return range_overlaps_protected_zone(start, end, self._zones)

    def contains(self, position: int) -> bool:
        return is_in_protected_zone(position, self._zones)

    def shift(self, at: int, delta: int) -> None:
        """Move every boundary strictly after ``at`` by ``delta``.

        Zones entirely before the edit point are untouched.
        """
        if delta == 0:
            return
        self._zones = [
            ProtectedZone(
                zone.start if zone.start <= at else zone.start + delta,
                zone.end if zone.end <= at else zone.end + delta,
                zone.type,
            )
            for zone in self._zones
        ]

    def protect(self, start: int, end: int, zone_type: ZoneType = "wikilink") -> None:
        """Add a zone, keeping the list sorted by start."""
        zone = ProtectedZone(start, end, zone_type)
        index = bisect.bisect_right([z.start for z in self._zones], start)
        self._zones.insert(index, zone)

    def replace(self, start: int, end: int, new_length: int, zone_type: ZoneType = "wikilink") -> None:
        """Record that ``[start, end)`` was replaced by ``new_length`` characters."""
        self.shift(start, new_length - (end - start))
        self.protect(start, start + new_length, zone_type)
