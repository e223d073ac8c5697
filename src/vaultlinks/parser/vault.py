"""Vault scanning: build the entity list from a directory of notes.

Each markdown file is an entity named after its file stem. Aliases come
from the ``aliases`` frontmatter field.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

import frontmatter

from ..config import DEFAULT_EXCLUDE_STEM_PATTERNS, MAX_ALIAS_LENGTH, MAX_ALIAS_WORDS
from ..models import AliasedEntity

log = logging.getLogger(__name__)

_EXCLUDE_STEM_RES = tuple(re.compile(p) for p in DEFAULT_EXCLUDE_STEM_PATTERNS)


def is_valid_alias(alias: object) -> bool:
    """Aliases follow the same limits as entity names: short, few words."""
    if not isinstance(alias, str):
        return False
    alias = alias.strip()
    if not alias or len(alias) > MAX_ALIAS_LENGTH:
        return False
    return len(alias.split()) <= MAX_ALIAS_WORDS


def is_excluded_stem(stem: str) -> bool:
    """Periodic notes (dates, weeks, quarters) and system files are not entities."""
    return any(pattern.search(stem) for pattern in _EXCLUDE_STEM_RES)


def read_aliases(md_file: Path) -> list[str]:
    """Read valid aliases from a note's frontmatter.

    Accepts a YAML list or a single string value. Unparseable frontmatter
    yields no aliases.
    """
    try:
        post = frontmatter.load(md_file)
    except Exception as e:
        log.debug("Skipping aliases for %s: %s", md_file, e)
        return []

    raw = post.metadata.get("aliases") or post.metadata.get("alias") or []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []

    return [str(alias).strip() for alias in raw if is_valid_alias(alias)]


def scan_vault(vault_root: Path, exclude_folders: Iterable[str] = ()) -> list[AliasedEntity]:
    """Scan a vault for linkable entities.

    Args:
        vault_root: Root directory of the vault.
        exclude_folders: Top-level or nested folder names to skip.

    Returns:
        Entities sorted by relative path. When two files share a stem
        (case-insensitive), the first in path order wins.
    """
    if not vault_root.exists() or not vault_root.is_dir():
        return []

    excluded = {folder.strip("/").lower() for folder in exclude_folders}
    entities: list[AliasedEntity] = []
    seen: set[str] = set()

    for md_file in sorted(vault_root.rglob("*.md")):
        rel_path = md_file.relative_to(vault_root)
        parts = rel_path.parts

        if any(part.startswith(".") for part in parts):
            continue
        if any(part.lower() in excluded for part in parts[:-1]):
            continue

        name = md_file.stem
        if is_excluded_stem(name):
            continue

        key = name.lower()
        if key in seen:
            log.debug("Duplicate entity name %r at %s; keeping first", name, rel_path)
            continue
        seen.add(key)

        entities.append(
            AliasedEntity(name=name, path=rel_path.as_posix(), aliases=read_aliases(md_file))
        )

    log.debug("Scanned %d entities from %s", len(entities), vault_root)
    return entities
