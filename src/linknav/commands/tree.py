"""Command: render the link hierarchy around one document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from linknav.commands._base import NavCommand, refresh_option, target_argument

if TYPE_CHECKING:
    from linknav.commands._context import AppContext
    from linknav.services.navigator import NavigatorService
    from linknav.services.result import ServiceResult


@click.command(
    cls=NavCommand,
    examples="""\
  linknav tree "Note A"
  linknav tree "Note A" --depth 3
  linknav tree Projects/Alpha.md --inlink-outlinks --no-canvas
  linknav -q tree "Note A" --depth 2""",
)
@target_argument()
@click.option(
    "--depth",
    type=click.IntRange(min=1),
    default=None,
    help="Levels to walk (default: [traversal] max_depth).",
)
@refresh_option()
@click.option("--no-canvas", is_flag=True, help="Hide the canvas links list.")
@click.option(
    "--inlink-outlinks",
    is_flag=True,
    help="Show the outlinks of every inlink.",
)
@click.pass_obj
def tree(
    app: AppContext,
    target: str,
    depth: int | None,
    refresh: bool,
    no_canvas: bool,
    inlink_outlinks: bool,
) -> None:
    """Show inlinks farthest-first, then TARGET with its outlink tree."""

    async def _hierarchy(nav: NavigatorService) -> ServiceResult:
        return await nav.hierarchy(
            target,
            depth=depth,
            force_refresh=refresh,
            show_canvas_links=False if no_canvas else None,
            show_inlink_outlinks=True if inlink_outlinks else None,
        )

    app.emit(app.run(_hierarchy))
