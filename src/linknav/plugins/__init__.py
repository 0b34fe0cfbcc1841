"""Extension layer — notices and cache events via pluggy.

Discovery: entry_points (pip-installed) under the ``linknav.plugins`` group.
INVARIANT: Plugin failures are warnings, never errors.
"""

from linknav.plugins.hookspecs import hookimpl
from linknav.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
