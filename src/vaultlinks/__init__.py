"""vaultlinks: add [[wikilinks]] to markdown notes for known vault entities."""

from .aliases import build_alias_map, resolve_alias_wikilinks
from .core import apply_wikilinks, process_wikilinks, suggest_wikilinks
from .entities import expand_terms
from .errors import ErrorCode, VaultLinksError
from .implicit import detect_implicit_entities
from .matching import find_matches, select_matches
from .models import (
    AliasedEntity,
    BareEntity,
    ExtendedWikilinkOptions,
    ImplicitEntityConfig,
    ImplicitEntityMatch,
    LinkSuggestion,
    ProtectedZone,
    WikilinkOptions,
    WikilinkResult,
)
from .parser.zones import detect_zones

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "apply_wikilinks",
    "suggest_wikilinks",
    "process_wikilinks",
    "resolve_alias_wikilinks",
    "build_alias_map",
    "detect_implicit_entities",
    "detect_zones",
    "expand_terms",
    "find_matches",
    "select_matches",
    "AliasedEntity",
    "BareEntity",
    "ExtendedWikilinkOptions",
    "ImplicitEntityConfig",
    "ImplicitEntityMatch",
    "LinkSuggestion",
    "ProtectedZone",
    "WikilinkOptions",
    "WikilinkResult",
    "ErrorCode",
    "VaultLinksError",
]
