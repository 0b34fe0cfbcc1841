"""Command group: inspect and rebuild the link cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from linknav.commands._base import NavGroup

if TYPE_CHECKING:
    from linknav.commands._context import AppContext
    from linknav.services.navigator import NavigatorService
    from linknav.services.result import ServiceResult

_CACHE_EXAMPLES = """\
  linknav cache status
  linknav cache rebuild
  linknav --json cache rebuild"""


@click.group(cls=NavGroup, examples=_CACHE_EXAMPLES)
@click.pass_obj
def cache(app: AppContext) -> None:
    """Inspect and rebuild the link cache."""


@cache.command(
    examples="""\
  linknav cache status
  linknav -v cache status"""
)
@click.pass_obj
def status(app: AppContext) -> None:
    """Show cache size, timeout and entry ages."""

    async def _status(nav: NavigatorService) -> ServiceResult:
        return nav.cache_status()

    app.emit(app.run(_status))


@cache.command(
    examples="""\
  linknav cache rebuild
  linknav --json cache rebuild"""
)
@click.pass_obj
def rebuild(app: AppContext) -> None:
    """Drop the cache and re-extract every document in the vault."""
    app.emit(app.run(lambda nav: nav.rebuild_cache()))
