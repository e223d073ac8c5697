"""Pattern-based detection of entities that have no vault file yet.

Pattern families:

- ``proper-nouns``: two or more consecutive capitalized words
  ("Marcus Johnson", "San Francisco Bay"); a leading sentence starter
  ("Visit", "Also", ...) is dropped.
- ``single-caps``: a capitalized word right after a lowercase word
  ("discussed with Marcus").
- ``quoted-terms``: short double-quoted spans ("Turbopump"); the span
  includes the quotes so they can be replaced.
- ``camel-case``: TypeScript, YouTube, HuggingFace.
- ``acronyms``: three or more capitals (ONNX, AGPL).
"""

from __future__ import annotations

import logging
import re

from .config import IMPLICIT_STOP_WORDS, SENTENCE_STARTER_WORDS
from .errors import ErrorCode, VaultLinksError
from .models import ImplicitEntityConfig, ImplicitEntityMatch
from .parser.zones import ZoneList, ranges_overlap

log = logging.getLogger(__name__)

PROPER_NOUN_RE = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)\b")
SINGLE_CAP_RE = re.compile(r"(?<=[a-z]\s)([A-Z][a-z]{3,})\b")
QUOTED_RE = re.compile(r'"([^"]{3,30})"')
CAMEL_CASE_RE = re.compile(r"\b([A-Z][a-z]+[A-Z][a-zA-Z]*)\b")
ACRONYM_RE = re.compile(r"\b([A-Z]{3,})\b")


def compile_exclude_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    """Compile user exclude patterns (case-insensitive).

    Raises:
        VaultLinksError: If a pattern is not a valid regular expression.
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            raise VaultLinksError(
                ErrorCode.INVALID_PATTERN,
                f"Invalid exclude pattern {pattern!r}: {e}",
                {"pattern": pattern},
            ) from e
    return compiled


def filter_overlapping(matches: list[ImplicitEntityMatch]) -> list[ImplicitEntityMatch]:
    """Keep each match that does not overlap one kept before it."""
    kept: list[ImplicitEntityMatch] = []
    for match in matches:
        if not any(ranges_overlap(match.start, match.end, k.start, k.end) for k in kept):
            kept.append(match)
    return kept


class _Detector:
    """Accumulates matches for one detection run."""

    def __init__(self, content: str, config: ImplicitEntityConfig) -> None:
        self.content = content
        self.config = config
        self.excludes = compile_exclude_patterns(config.exclude_patterns)
        self.zones = ZoneList.detect(content)
        self.seen: set[str] = set()
        self.detected: list[ImplicitEntityMatch] = []

    def excluded(self, text: str) -> bool:
        if len(text) < self.config.min_entity_length:
            return True
        normalized = text.lower()
        if normalized in IMPLICIT_STOP_WORDS:
            return True
        if any(regex.search(text) for regex in self.excludes):
            return True
        return normalized in self.seen

    def add(self, text: str, start: int, end: int, pattern: str) -> None:
        if self.excluded(text) or self.zones.overlaps(start, end):
            return
        self.detected.append(ImplicitEntityMatch(text=text, start=start, end=end, pattern=pattern))
        self.seen.add(text.lower())

    def proper_nouns(self) -> None:
        for match in PROPER_NOUN_RE.finditer(self.content):
            text = match.group(1)
            start, end = match.start(), match.end()

            first_word, sep, rest = text.partition(" ")
            if sep and first_word.lower() in SENTENCE_STARTER_WORDS:
                text = rest
                start += len(first_word) + 1
                if " " not in text:
                    continue

            self.add(text, start, end, "proper-nouns")

    def single_caps(self) -> None:
        for match in SINGLE_CAP_RE.finditer(self.content):
            self.add(match.group(1), match.start(), match.end(), "single-caps")

    def quoted_terms(self) -> None:
        for match in QUOTED_RE.finditer(self.content):
            self.add(match.group(1), match.start(), match.end(), "quoted-terms")

    def camel_case(self) -> None:
        for match in CAMEL_CASE_RE.finditer(self.content):
            self.add(match.group(1), match.start(1), match.end(1), "camel-case")

    def acronyms(self) -> None:
        for match in ACRONYM_RE.finditer(self.content):
            self.add(match.group(1), match.start(1), match.end(1), "acronyms")

    def run(self) -> list[ImplicitEntityMatch]:
        families = {
            "proper-nouns": self.proper_nouns,
            "single-caps": self.single_caps,
            "quoted-terms": self.quoted_terms,
            "camel-case": self.camel_case,
            "acronyms": self.acronyms,
        }
        # Fixed family order so dedup ("first seen wins") is order-independent
        for name, detect in families.items():
            if name in self.config.implicit_patterns:
                detect()

        self.detected.sort(key=lambda m: (m.start, -(m.end - m.start)))
        return filter_overlapping(self.detected)


def detect_implicit_entities(
    content: str, config: ImplicitEntityConfig | None = None
) -> list[ImplicitEntityMatch]:
    """Detect candidate entities in content using pattern heuristics.

    Matches inside protected zones (code, links, frontmatter, ...) are
    ignored, and each text (case-insensitive) is reported once.

    Args:
        content: The markdown content to analyze.
        config: Which pattern families to run and what to exclude.

    Returns:
        Non-overlapping matches ordered by position.

    Raises:
        VaultLinksError: If an exclude pattern is not a valid regex.
    """
    config = config or ImplicitEntityConfig()
    detector = _Detector(content, config)
    if not content:
        return []
    matches = detector.run()
    log.debug("Detected %d implicit entities", len(matches))
    return matches
