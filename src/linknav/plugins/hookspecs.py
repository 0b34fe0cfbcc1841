"""Pluggy hook specifications for linknav cache events and notices.

Hooks are dispatched synchronously on the event loop thread. A slow
hook implementation delays the cache operation that fired it.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("linknav")
hookimpl = pluggy.HookimplMarker("linknav")


class LinkNavHookSpec:
    """Hook specifications for the linknav plugin system."""

    @hookspec
    def post_cache_cleanup(self, removed: int) -> None:
        """Called after a background sweep removed stale entries."""

    @hookspec
    def post_cache_rebuild(self, total: int, failed: int) -> None:
        """Called after a full cache rebuild finished."""

    @hookspec
    def notify(self, message: str) -> None:
        """Show a short user-facing notice."""
