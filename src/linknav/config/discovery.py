"""Locating linknav.toml and the vault it belongs to.

Both lookups walk up the directory tree from a starting folder, the way
git finds ``.git/``.  ``LINKNAV_CONFIG`` overrides the config lookup.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import click

from linknav.config.models import LinkNavConfig

CONFIG_FILENAME = "linknav.toml"
CONFIG_ENV_VAR = "LINKNAV_CONFIG"

# Directories that mark a vault root even without a linknav.toml.
VAULT_MARKERS = (".obsidian",)


def _ancestors(start: Path | None) -> Iterator[Path]:
    current = (start or Path.cwd()).resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Return the linknav.toml in effect for *start* (default: cwd), if any.

    ``LINKNAV_CONFIG`` wins when set; pointing it at a missing file
    disables discovery instead of falling back to the walk-up.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path)
        return explicit if explicit.is_file() else None

    for folder in _ancestors(start):
        candidate = folder / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def find_vault_root(start: Path | None = None) -> Path | None:
    """Nearest folder at or above *start* holding linknav.toml or a vault marker."""
    for folder in _ancestors(start):
        if (folder / CONFIG_FILENAME).is_file():
            return folder
        if any((folder / marker).is_dir() for marker in VAULT_MARKERS):
            return folder
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*; malformed TOML becomes a ``click.ClickException``."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> LinkNavConfig:
    """Validated config from *path*, or from the file discovered above *cwd*.

    Without any file the code defaults apply.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return LinkNavConfig()
    return LinkNavConfig.model_validate(read_toml(path))
