"""Configuration management for vaultlinks.

This module contains all configurable constants for the annotation engine.
Word lists and magic numbers are documented here rather than scattered
throughout the codebase.
"""

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import ExtendedWikilinkOptions


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


# Name of the per-project config file discovered by walking up from cwd
CONFIG_FILENAME = ".vaultlinks"


def get_vault_root() -> Path:
    """Get the vault root directory.

    Discovery order:
    1. VAULTLINKS_VAULT_ROOT environment variable (explicit override)
    2. Walk up from cwd looking for .vaultlinks with vault_path field
    3. Error with helpful message

    Raises:
        ConfigurationError: If no vault can be found.
    """
    root = os.environ.get("VAULTLINKS_VAULT_ROOT")
    if root:
        return Path(root)

    project_config = _discover_project_config()
    if project_config:
        _config_path, vault_path, _data = project_config
        return vault_path

    raise ConfigurationError(
        "No vault found. Options:\n"
        "  1. Pass --vault PATH\n"
        "  2. Create a .vaultlinks file with 'vault_path: <dir>'\n"
        "  3. Set VAULTLINKS_VAULT_ROOT to an existing vault directory"
    )


def _discover_project_config(
    start_dir: Path | None = None, max_depth: int = 10
) -> tuple[Path, Path, dict[str, Any]] | None:
    """Walk up from start_dir looking for .vaultlinks with vault_path.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        Tuple of (config_path, vault_path, raw_data) if found, None otherwise.
    """
    import yaml

    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth):
        config_file = current / CONFIG_FILENAME
        if config_file.exists():
            try:
                content = config_file.read_text(encoding="utf-8")
                data = yaml.safe_load(content) or {}
                if isinstance(data, dict) and "vault_path" in data:
                    vault_path = (current / data["vault_path"]).resolve()
                    if vault_path.exists() and vault_path.is_dir():
                        return (config_file, vault_path, data)
            except (OSError, yaml.YAMLError):
                pass

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


def load_exclude_folders(start_dir: Path | None = None) -> list[str]:
    """Folders to skip when scanning, from the discovered config file."""
    project_config = _discover_project_config(start_dir)
    if not project_config:
        return []
    config_path, _vault_path, data = project_config
    folders = data.get("exclude_folders") or []
    if not isinstance(folders, list):
        raise ConfigurationError(f"{config_path}: 'exclude_folders' must be a list")
    return [str(folder) for folder in folders]


def load_options(
    overrides: dict[str, Any] | None = None, start_dir: Path | None = None
) -> ExtendedWikilinkOptions:
    """Build linking options from the discovered config file plus overrides.

    The ``wikilinks:`` mapping of a discovered ``.vaultlinks`` file supplies
    defaults; ``overrides`` (typically CLI flags) win over file values.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    values: dict[str, Any] = {}
    project_config = _discover_project_config(start_dir)
    if project_config:
        config_path, _vault_path, data = project_config
        file_values = data.get("wikilinks") or {}
        if not isinstance(file_values, dict):
            raise ConfigurationError(f"{config_path}: 'wikilinks' must be a mapping")
        values.update(file_values)

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ExtendedWikilinkOptions.model_validate(values)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        raise ConfigurationError("Invalid wikilink options:\n" + "\n".join(errors)) from e


# =============================================================================
# Known-Entity Stop Words
# =============================================================================

# Terms never linked even when an entity (or alias) with that exact name exists.
# Prevents spurious links like [[Monday]] from periodic-note vaults.
LINK_STOP_WORDS = frozenset({
    # Day names
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    # Month names
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
    # Temporal words
    "today", "tomorrow", "yesterday", "week", "month", "year",
    # Periodic review compounds
    "month end", "month start", "year end", "year start",
    "quarter end", "quarter start", "quarterly review",
    "weekly review", "monthly review", "annual review",
    # Conjunctions and fillers
    "the", "and", "for", "with", "from", "this", "that",
    # Holiday words
    "christmas", "holiday", "break",
})


# =============================================================================
# Implicit Entity Detection
# =============================================================================

# Words that look like entities when capitalized but are not
IMPLICIT_STOP_WORDS = frozenset({
    # Days and months
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
    # Common sentence starters
    "this", "that", "these", "those", "there", "here", "when", "where", "what",
    "which", "while", "since", "after", "before", "during", "until", "because",
    "however", "therefore", "although", "though", "unless", "whether",
    # Proper-looking document words
    "note", "notes", "example", "chapter", "section", "part", "item", "figure",
    "table", "list", "step", "task", "todo", "idea", "thought", "question",
    "answer", "summary", "overview", "introduction", "conclusion",
    # Technical literals
    "true", "false", "null", "undefined", "none", "class", "function", "method",
    # Short words that show up in ALL-CAPS
    "the", "and", "but", "for", "not", "you", "all", "can", "had", "her",
    "was", "one", "our", "out", "are", "has", "his", "how", "its", "may",
    "new", "now", "old", "see", "way", "who", "did", "got", "let", "say",
    # Abbreviations
    "etc", "aka", "btw", "fyi", "imo", "tldr", "asap", "rsvp",
    "url", "html", "css", "http", "https", "json", "xml", "sql", "ssh", "tcp", "udp", "dns",
})

# Leading words stripped from proper-noun phrases ("Visit San Francisco Bay")
SENTENCE_STARTER_WORDS = frozenset({
    "visit", "also", "see", "please", "note", "check", "read", "look", "find",
    "get", "set", "add", "use", "try", "make", "take", "give", "keep", "let",
    "call", "run", "ask", "tell", "show", "help", "need", "want", "like",
    "think", "know", "feel", "seem", "hear", "watch", "wait", "work",
    "start", "stop", "open", "close", "move", "turn", "bring", "send", "leave",
    "meet", "join", "follow", "include", "consider", "remember", "forget",
})


# =============================================================================
# Suggestions
# =============================================================================

# Characters of surrounding text shown on each side of a suggestion
SUGGESTION_CONTEXT_CHARS = 20


# =============================================================================
# Vault Scanning
# =============================================================================

# Aliases longer than this are usually article titles, not entity names
MAX_ALIAS_LENGTH = 25

# Concepts are typically 1-3 words; longer aliases are skipped
MAX_ALIAS_WORDS = 3

# File stems matching any of these are periodic notes or system files
DEFAULT_EXCLUDE_STEM_PATTERNS = (
    r"^\d{4}-\d{2}-\d{2}$",  # ISO dates: 2025-01-01
    r"^\d{1,2}/\d{1,2}/\d{4}$",  # UK dates: 1/10/2024
    r"^\d{4}-W\d{2}$",  # Week dates: 2025-W17
    r"^\d{4}-\d{2}$",  # Month format: 2025-01
    r"^\d{4}-Q\d$",  # Quarter dates: 2025-Q4
    r"^\d+$",  # Pure numbers
    r"^@",  # Handles
    r"^<",  # XML/HTML tags
    r"^\{\{",  # Template placeholders
    r"\\$",  # Paths ending in backslash
    r"(?i)\.(?:md|js|py|json|jpg|png|pdf|csv)$",  # File extensions
    r"(?i)^[a-z0-9_-]+\.[a-z]+$",  # File names with extensions
)
