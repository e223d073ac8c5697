"""Markdown scanning: protected zones, wikilink syntax and vault entities."""

from .links import (
    WikilinkSpan,
    brackets_balanced,
    extract_links,
    format_wikilink,
    iter_wikilinks,
    strip_wikilinks,
)
from .vault import scan_vault
from .zones import (
    ZoneList,
    detect_zones,
    find_frontmatter_end,
    is_in_protected_zone,
    range_overlaps_protected_zone,
)

__all__ = [
    "ZoneList",
    "detect_zones",
    "find_frontmatter_end",
    "is_in_protected_zone",
    "range_overlaps_protected_zone",
    "WikilinkSpan",
    "brackets_balanced",
    "extract_links",
    "format_wikilink",
    "iter_wikilinks",
    "strip_wikilinks",
    "scan_vault",
]
