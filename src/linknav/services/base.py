"""BaseService — shared foundation for linknav services.

Every service receives a :class:`DocumentStore` at construction time and,
optionally, the :class:`PluginManager` that receives its events.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from linknav.infrastructure.store import DocumentStore
    from linknav.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class NavigatorService(BaseService):
            async def links(self, target: str) -> ServiceResult:
                doc = self._store.get_document(target)
                ...
    """

    def __init__(self, store: DocumentStore, plugins: PluginManager | None = None) -> None:
        self._store = store
        self._plugins = plugins

    @property
    def store(self) -> DocumentStore:
        return self._store

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a plugin event. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        if not self._plugins.dispatch(hook_name, **payload):
            logger.debug("Event dispatch failed for %s", hook_name)
            warnings.append(f"Event dispatch failed for {hook_name}")
