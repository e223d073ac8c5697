"""Wikilink syntax: building, scanning, extracting and stripping links."""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import NamedTuple

# Pattern for [[link]] syntax - captures content between double brackets
LINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")

# [[target]] or [[target|display]]; group 2 keeps the leading pipe
WIKILINK_PATTERN = re.compile(r"\[\[([^\]|]+)(\|[^\]]+)?\]\]")


class WikilinkSpan(NamedTuple):
    """An existing wikilink located in content."""

    start: int
    end: int
    target: str
    display: str | None  # Display text without the pipe, if present


def format_wikilink(target: str, display: str | None = None) -> str:
    """Build ``[[target]]`` or ``[[target|display]]``."""
    if display is None:
        return f"[[{target}]]"
    return f"[[{target}|{display}]]"


def iter_wikilinks(content: str) -> Iterator[WikilinkSpan]:
    """Yield every ``[[target]]`` / ``[[target|display]]`` in content order."""
    for match in WIKILINK_PATTERN.finditer(content):
        display = match.group(2)
        yield WikilinkSpan(
            start=match.start(),
            end=match.end(),
            target=match.group(1),
            display=display[1:] if display else None,
        )


def extract_links(content: str) -> list[str]:
    """Extract link targets from markdown content.

    Args:
        content: Markdown content to extract links from.

    Returns:
        List of unique link targets (normalized, without .md extension or
        display text), in first-seen order.
    """
    seen: set[str] = set()
    links: list[str] = []

    for link in LINK_PATTERN.findall(content):
        normalized = _normalize_link(link.split("|", 1)[0])
        if normalized and normalized not in seen:
            seen.add(normalized)
            links.append(normalized)

    return links


def _normalize_link(link: str) -> str:
    """Normalize a link target.

    - Strips whitespace
    - Removes .md extension
    - Normalizes path separators
    """
    link = link.strip()

    if link.endswith(".md"):
        link = link[:-3]

    link = link.replace("\\", "/")

    return link.strip("/")


def strip_wikilinks(content: str) -> str:
    """Replace ``[[X]]`` with ``X`` and ``[[X|Y]]`` with ``Y``."""

    def _display(match: re.Match[str]) -> str:
        display = match.group(2)
        return display[1:] if display else match.group(1)

    return WIKILINK_PATTERN.sub(_display, content)


def brackets_balanced(content: str) -> bool:
    """Check that every ``[[`` is closed by a ``]]`` before the next opens."""
    depth = 0
    i = 0
    while i < len(content) - 1:
        pair = content[i : i + 2]
        if pair == "[[":
            if depth:
                return False
            depth = 1
            i += 2
        elif pair == "]]":
            if not depth:
                return False
            depth = 0
            i += 2
        else:
            i += 1
    return depth == 0
