"""Plugin discovery, registration and fault-tolerant hook dispatch.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
under the ``linknav.plugins`` group. The built-in NoticePlugin is always
registered.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

import pluggy

from linknav.plugins.builtins.notice import NoticePlugin
from linknav.plugins.hookspecs import LinkNavHookSpec

PROJECT_NAME = "linknav"
ENTRYPOINT_GROUP = "linknav.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(LinkNavHookSpec)
        self.notices: NoticePlugin | None = None
        if builtins:
            self.notices = NoticePlugin()
            self.register_plugin(self.notices, name="notice")

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and return the names of all registered plugins."""
        self._pm.load_setuptools_entrypoints(ENTRYPOINT_GROUP)
        self._normalize_plugin_instances()
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching events."""
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def dispatch(self, hook_name: str, **payload: Any) -> bool:
        """Call *hook_name* on every plugin. Returns False if a plugin raised.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        caller = getattr(self._pm.hook, hook_name, None)
        if caller is None:
            logger.warning("Unknown hook: %s", hook_name)
            return False
        try:
            caller(**payload)
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            return False
        return True

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook
        dispatch against class objects leaves ``self`` unbound and fails
        at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)
