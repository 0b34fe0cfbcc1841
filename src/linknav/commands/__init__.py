"""Subcommand modules for linknav.

Provides register_commands() which uses deferred imports to keep
``linknav --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from linknav.commands.cache import cache

    cli.add_command(cache)

    # --- Standalone commands ---
    from linknav.commands.links import links
    from linknav.commands.tree import tree

    cli.add_command(links)
    cli.add_command(tree)
