#!/usr/bin/env python3
"""
vl: CLI for vaultlinks

Usage:
    vl link note.md                 # Link known entities (prints result)
    vl link note.md --write         # Link in place
    vl suggest note.md              # Show where links would go
    vl resolve-aliases note.md      # Point [[alias]] links at canonical names
    vl implicit note.md             # Detect entities with no vault file
    vl entities                     # List entities found in the vault
"""

from __future__ import annotations

import difflib
import json
import logging
import sys
import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as VAULTLINKS_VERSION

log = logging.getLogger(__name__)


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _handle_error(ctx: click.Context, error: Exception, exit_code: int = 1) -> NoReturn:
    """Handle an error with optional JSON output.

    If --json-errors is enabled, outputs structured JSON error.
    Otherwise, outputs human-readable error message.
    """
    from .config import ConfigurationError
    from .errors import ErrorCode, VaultLinksError, format_error_json

    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, VaultLinksError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
    else:
        message = str(error)
        if json_errors:
            code = ErrorCode.INVALID_CONFIG if isinstance(error, ConfigurationError) else ErrorCode.FILE_READ_ERROR
            click.echo(format_error_json(code, message), err=True)
        else:
            click.echo(f"Error: {message}", err=True)

    sys.exit(exit_code)


def get_error_code_for_exception(exc: Exception) -> str:
    """Map Click exceptions to error codes."""
    if isinstance(exc, click.BadParameter):
        return "INVALID_ARGUMENT"
    elif isinstance(exc, click.MissingParameter):
        return "MISSING_ARGUMENT"
    elif isinstance(exc, click.NoSuchOption):
        return "UNKNOWN_OPTION"
    elif isinstance(exc, UsageError):
        return "USAGE_ERROR"
    elif isinstance(exc, ClickException):
        return "CLI_ERROR"
    return "UNKNOWN_ERROR"


# ─────────────────────────────────────────────────────────────────────────────
# JSON Error Handling
# ─────────────────────────────────────────────────────────────────────────────


class JsonErrorGroup(click.Group):
    """Custom Click group that formats errors as JSON when --json-errors is set.

    Also provides typo suggestions for unknown commands.
    """

    def resolve_command(self, ctx, args):
        """Override to suggest similar commands for typos."""
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(
                    cmd_name, self.list_commands(ctx), n=1, cutoff=0.6
                )
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        """Override main to catch errors during argument parsing.

        When --json-errors appears anywhere, it is moved to the front so Click
        parses it as a global flag, and Click errors are emitted as JSON.
        """
        from .errors import format_error_json

        argv = list(args) if args is not None else list(sys.argv[1:])
        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        argv = [a for a in argv if a != "--json-errors"]
        argv.insert(0, "--json-errors")

        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except ClickException as e:
            code = get_error_code_for_exception(e)
            click.echo(format_error_json(code, e.format_message()), err=True)
            raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _read_note(ctx: click.Context, path: Path) -> str:
    from .errors import ErrorCode, VaultLinksError

    if not path.exists() or not path.is_file():
        _handle_error(
            ctx,
            VaultLinksError(ErrorCode.FILE_NOT_FOUND, f"File not found: {path}", {"path": str(path)}),
        )
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _handle_error(
            ctx,
            VaultLinksError(ErrorCode.FILE_READ_ERROR, f"Cannot read {path}: {e}", {"path": str(path)}),
        )


def _write_note(ctx: click.Context, path: Path, content: str) -> None:
    from .errors import ErrorCode, VaultLinksError

    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        _handle_error(
            ctx,
            VaultLinksError(ErrorCode.FILE_WRITE_ERROR, f"Cannot write {path}: {e}", {"path": str(path)}),
        )


def _vault_root(ctx: click.Context) -> Path:
    from .config import ConfigurationError, get_vault_root
    from .errors import ErrorCode, VaultLinksError

    if ctx.obj.get("vault"):
        root = Path(ctx.obj["vault"])
    else:
        try:
            root = get_vault_root()
        except ConfigurationError as e:
            _handle_error(ctx, VaultLinksError(ErrorCode.VAULT_NOT_FOUND, str(e)))

    if not root.is_dir():
        _handle_error(
            ctx,
            VaultLinksError(ErrorCode.VAULT_NOT_FOUND, f"Vault directory not found: {root}"),
        )
    return root


def _load_entities(ctx: click.Context):
    from .config import ConfigurationError, load_exclude_folders
    from .parser.vault import scan_vault

    root = _vault_root(ctx)
    try:
        exclude_folders = load_exclude_folders()
    except ConfigurationError as e:
        _handle_error(ctx, e)
    entities = scan_vault(root, exclude_folders)
    log.debug("session=%s loaded %d entities from %s", ctx.obj["session_id"], len(entities), root)
    return root, entities


def _load_options(ctx: click.Context, **overrides):
    from .config import ConfigurationError, load_options

    try:
        return load_options(overrides)
    except ConfigurationError as e:
        _handle_error(ctx, e)


def _note_path(file: Path, vault_root: Path) -> str:
    try:
        return file.resolve().relative_to(vault_root.resolve()).as_posix()
    except ValueError:
        return file.name


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=VAULTLINKS_VERSION, prog_name="vl")
@click.option(
    "--vault",
    type=click.Path(file_okay=False),
    envvar="VAULTLINKS_VAULT_ROOT",
    help="Vault root directory (default: discovered from .vaultlinks)",
)
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="VAULTLINKS_QUIET",
    help="Suppress warnings, show only errors and essential output",
)
@click.option(
    "--session-id",
    envvar="VAULTLINKS_SESSION_ID",
    help="Correlation id attached to log records",
)
@click.pass_context
def cli(ctx: click.Context, vault: str | None, json_errors: bool, quiet: bool, session_id: str | None):
    """vl: add [[wikilinks]] to markdown notes.

    \b
    Quick start:
      vl entities                   # What can be linked
      vl suggest note.md            # Preview links
      vl link note.md --write       # Apply links in place
      vl resolve-aliases note.md    # [[alias]] -> [[Entity|alias]]

    \b
    Implicit entities (no vault file yet):
      vl implicit note.md --pattern proper-nouns --pattern acronyms
      vl link note.md --implicit
    """
    from ._logging import configure_logging, set_quiet_mode

    configure_logging()
    if quiet:
        set_quiet_mode(True)

    ctx.ensure_object(dict)
    ctx.obj["vault"] = vault
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet
    ctx.obj["session_id"] = session_id or uuid.uuid4().hex[:12]


# ─────────────────────────────────────────────────────────────────────────────
# Link Command
# ─────────────────────────────────────────────────────────────────────────────

IMPLICIT_PATTERN_CHOICES = click.Choice(
    ["proper-nouns", "single-caps", "quoted-terms", "camel-case", "acronyms"]
)


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--all", "all_occurrences", is_flag=True, help="Link every occurrence, not just the first")
@click.option("--case-sensitive", is_flag=True, help="Match entity names exactly")
@click.option("--implicit", is_flag=True, help="Also link implicit entities")
@click.option(
    "--pattern",
    "patterns",
    multiple=True,
    type=IMPLICIT_PATTERN_CHOICES,
    help="Implicit pattern family (repeatable)",
)
@click.option("--exclude", "excludes", multiple=True, help="Regex excluding implicit matches (repeatable)")
@click.option("--min-length", type=click.IntRange(min=0), help="Minimum implicit entity length")
@click.option("--write", is_flag=True, help="Write the result back to FILE")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def link(
    ctx: click.Context,
    file: Path,
    all_occurrences: bool,
    case_sensitive: bool,
    implicit: bool,
    patterns: tuple[str, ...],
    excludes: tuple[str, ...],
    min_length: int | None,
    write: bool,
    as_json: bool,
):
    """Link known vault entities in FILE.

    \b
    Examples:
      vl link notes/meeting.md
      vl link notes/meeting.md --all --write
      vl link notes/meeting.md --implicit --pattern acronyms --json
    """
    from .core import process_wikilinks
    from .errors import VaultLinksError
    from .parser.links import extract_links

    content = _read_note(ctx, file)
    root, entities = _load_entities(ctx)
    overrides: dict[str, Any] = {
        "first_occurrence_only": False if all_occurrences else None,
        "case_insensitive": False if case_sensitive else None,
        "detect_implicit": True if implicit else None,
        "implicit_patterns": list(patterns) or None,
        "exclude_patterns": list(excludes) or None,
        "min_entity_length": min_length,
        "note_path": _note_path(file, root),
    }
    options = _load_options(ctx, **overrides)

    try:
        result = process_wikilinks(content, entities, options, session_id=ctx.obj["session_id"])
    except VaultLinksError as e:
        _handle_error(ctx, e)

    if write and result.content != content:
        _write_note(ctx, file, result.content)

    if as_json:
        payload = result.model_dump()
        payload["path"] = str(file)
        payload["links"] = extract_links(result.content)
        payload["written"] = bool(write and result.content != content)
        payload["session_id"] = ctx.obj["session_id"]
        if write:
            payload.pop("content")
        output(payload, as_json=True)
    elif write:
        click.echo(f"{file}: {result.links_added} link(s) added")
    else:
        click.echo(result.content, nl=False)


# ─────────────────────────────────────────────────────────────────────────────
# Suggest Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--all", "all_occurrences", is_flag=True, help="Report every occurrence")
@click.option("--case-sensitive", is_flag=True, help="Match entity names exactly")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def suggest(ctx: click.Context, file: Path, all_occurrences: bool, case_sensitive: bool, as_json: bool):
    """Show where links to known entities would be added in FILE.

    \b
    Examples:
      vl suggest notes/meeting.md
      vl suggest notes/meeting.md --all --json
    """
    from .core import suggest_wikilinks

    content = _read_note(ctx, file)
    _root, entities = _load_entities(ctx)
    options = _load_options(
        ctx,
        first_occurrence_only=False if all_occurrences else None,
        case_insensitive=False if case_sensitive else None,
    )
    suggestions = suggest_wikilinks(content, entities, options.wikilink_options())

    if as_json:
        output([s.model_dump() for s in suggestions], as_json=True)
        return

    if not suggestions:
        click.echo("No link suggestions.")
        return
    for s in suggestions:
        context = s.context.replace("\n", " ")
        click.echo(f"{s.start:>6}  [[{s.entity}]]  {context}")


# ─────────────────────────────────────────────────────────────────────────────
# Resolve Aliases Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command("resolve-aliases")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--case-sensitive", is_flag=True, help="Match aliases exactly")
@click.option("--write", is_flag=True, help="Write the result back to FILE")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def resolve_aliases(ctx: click.Context, file: Path, case_sensitive: bool, write: bool, as_json: bool):
    """Rewrite [[alias]] links in FILE to point at canonical entities.

    \b
    Examples:
      vl resolve-aliases notes/meeting.md
      vl resolve-aliases notes/meeting.md --write
    """
    from .aliases import resolve_alias_wikilinks

    content = _read_note(ctx, file)
    _root, entities = _load_entities(ctx)
    result = resolve_alias_wikilinks(content, entities, case_insensitive=not case_sensitive)
    log.debug("session=%s resolved %d alias links in %s", ctx.obj["session_id"], result.links_added, file)

    if write and result.content != content:
        _write_note(ctx, file, result.content)

    if as_json:
        payload = result.model_dump(exclude={"implicit_entities"})
        payload["path"] = str(file)
        payload["written"] = bool(write and result.content != content)
        if write:
            payload.pop("content")
        output(payload, as_json=True)
    elif write:
        click.echo(f"{file}: {result.links_added} link(s) resolved")
    else:
        click.echo(result.content, nl=False)


# ─────────────────────────────────────────────────────────────────────────────
# Implicit Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--pattern",
    "patterns",
    multiple=True,
    type=IMPLICIT_PATTERN_CHOICES,
    help="Pattern family to run (repeatable; default: proper-nouns, quoted-terms)",
)
@click.option("--exclude", "excludes", multiple=True, help="Regex excluding matches (repeatable)")
@click.option("--min-length", type=click.IntRange(min=0), help="Minimum entity length")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def implicit(
    ctx: click.Context,
    file: Path,
    patterns: tuple[str, ...],
    excludes: tuple[str, ...],
    min_length: int | None,
    as_json: bool,
):
    """Detect entities in FILE that have no vault note yet.

    \b
    Examples:
      vl implicit notes/meeting.md
      vl implicit notes/meeting.md --pattern acronyms --pattern camel-case
    """
    from .errors import VaultLinksError
    from .implicit import detect_implicit_entities

    content = _read_note(ctx, file)
    options = _load_options(
        ctx,
        implicit_patterns=list(patterns) or None,
        exclude_patterns=list(excludes) or None,
        min_entity_length=min_length,
    )
    try:
        matches = detect_implicit_entities(content, options.implicit_config())
    except VaultLinksError as e:
        _handle_error(ctx, e)

    if as_json:
        output([m.model_dump() for m in matches], as_json=True)
        return

    if not matches:
        click.echo("No implicit entities found.")
        return
    for m in matches:
        click.echo(f"{m.start:>6}  {m.text}  ({m.pattern})")


# ─────────────────────────────────────────────────────────────────────────────
# Zones Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def zones(ctx: click.Context, file: Path, as_json: bool):
    """List protected zones in FILE (spans that are never rewritten)."""
    from .parser.zones import detect_zones

    content = _read_note(ctx, file)
    detected = detect_zones(content)

    if as_json:
        output([zone._asdict() for zone in detected], as_json=True)
        return

    for zone in detected:
        preview = content[zone.start : zone.end].replace("\n", "\\n")
        if len(preview) > 40:
            preview = preview[:37] + "..."
        click.echo(f"{zone.start:>6}-{zone.end:<6} {zone.type:<16} {preview}")


# ─────────────────────────────────────────────────────────────────────────────
# Entities Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def entities(ctx: click.Context, as_json: bool):
    """List linkable entities found in the vault."""
    _root, found = _load_entities(ctx)

    if as_json:
        output([e.model_dump(exclude={"kind"}) for e in found], as_json=True)
        return

    if not found:
        click.echo("No entities found.")
        return
    for entity in found:
        aliases = f"  (aliases: {', '.join(entity.aliases)})" if entity.aliases else ""
        click.echo(f"{entity.name}{aliases}")


def main():
    cli()


if __name__ == "__main__":
    main()
