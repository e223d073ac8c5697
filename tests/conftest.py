"""Shared test fixtures for vaultlinks test suite.

Design:
- vault: isolated vault directory with a handful of notes and aliases
- runner: CliRunner with proper isolation
- cwd is moved to a temp directory so no real .vaultlinks file is discovered
- the vaultlinks logger is restored after each test, since the CLI configures it
"""

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test from an empty directory with no vault env vars."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    for var in ("VAULTLINKS_VAULT_ROOT", "VAULTLINKS_LOG_LEVEL", "VAULTLINKS_QUIET", "VAULTLINKS_SESSION_ID"):
        monkeypatch.delenv(var, raising=False)
    return workdir


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Put the ``vaultlinks`` logger back the way each test found it."""
    logger = logging.getLogger("vaultlinks")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


def write_note(root: Path, rel_path: str, body: str = "", aliases: list[str] | None = None) -> Path:
    """Create a note, with an aliases frontmatter block when aliases are given."""
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    if aliases is not None:
        alias_lines = "\n".join(f"  - {alias}" for alias in aliases)
        text = f"---\naliases:\n{alias_lines}\n---\n{body}"
    else:
        text = body
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """A small vault.

    Entities: React, TypeScript, MCP (alias Model Context Protocol),
    Product Requirements Document (alias PRD). Periodic and hidden notes
    are present but are not entities.
    """
    root = tmp_path / "vault"
    root.mkdir()
    write_note(root, "tech/React.md", "A UI library.\n")
    write_note(root, "tech/TypeScript.md", "Typed JavaScript.\n")
    write_note(root, "tech/MCP.md", "Protocol.\n", aliases=["Model Context Protocol"])
    write_note(root, "docs/Product Requirements Document.md", "", aliases=["PRD"])
    write_note(root, "daily/2025-01-15.md", "Worked on React.\n")
    write_note(root, ".obsidian/Hidden.md", "")
    return root
