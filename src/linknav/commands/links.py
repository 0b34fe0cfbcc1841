"""Command: show the links of one document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from linknav.commands._base import NavCommand, refresh_option, target_argument

if TYPE_CHECKING:
    from linknav.commands._context import AppContext


@click.command(
    cls=NavCommand,
    examples="""\
  linknav links "Note A"
  linknav links Projects/Alpha.md --refresh
  linknav --json links MOC.canvas""",
)
@target_argument()
@refresh_option()
@click.pass_obj
def links(app: AppContext, target: str, refresh: bool) -> None:
    """Show inlinks, outlinks, canvas links, attachments and tags of TARGET.

    TARGET is a vault path or a link name as written inside [[...]].
    """
    app.emit(app.run(lambda nav: nav.links(target, force_refresh=refresh)))
