"""Filesystem operations for vault discovery and reads.

INVARIANT: Files are truth. Everything the store knows is derived from
the files under the vault root; a rescan must always be able to rebuild
it from scratch.

Pure parsing utilities live in :mod:`linknav.domain.content`
(dependency direction: infrastructure -> domain). This module handles
actual file I/O, path normalization and file discovery.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from linknav.domain.content import parse_frontmatter

# Directories to skip when discovering vault files.
_SKIP_DIRS = frozenset({".obsidian", ".git", ".trash", ".linknav"})


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_text_file(path: Path) -> str:
    """Read a UTF-8 text file."""
    return path.read_text(encoding="utf-8")


async def read_text_file_async(path: Path) -> str:
    """Read a UTF-8 text file in a worker thread."""
    return await asyncio.to_thread(read_text_file, path)


def read_markdown_file(path: Path) -> tuple[dict[str, Any], str]:
    """Read a markdown file, returning ``(frontmatter, body)``."""
    return parse_frontmatter(read_text_file(path))


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def to_vault_path(vault_root: Path, path: Path) -> str:
    """Return *path* relative to *vault_root* in POSIX form."""
    return path.relative_to(vault_root).as_posix()


def from_vault_path(vault_root: Path, vault_path: str) -> Path:
    """Resolve a vault-relative path to an absolute filesystem path.

    Raises:
        ValueError: If the path escapes the vault root.
    """
    result = vault_root / vault_path
    if not result.resolve().is_relative_to(vault_root.resolve()):
        msg = f"Path escapes vault root: {vault_path}"
        raise ValueError(msg)
    return result


def find_vault_files(vault_root: Path) -> list[Path]:
    """Discover every file in the vault.

    Skips ``.obsidian/``, ``.git/``, ``.trash/`` and ``.linknav/``.
    Returns paths sorted so that discovery order is deterministic.
    """
    if not vault_root.exists():
        return []

    results: list[Path] = []
    for path in vault_root.rglob("*"):
        if not path.is_file():
            continue
        relative = path.relative_to(vault_root)
        if any(part in _SKIP_DIRS for part in relative.parts):
            continue
        results.append(path)

    return sorted(results)
