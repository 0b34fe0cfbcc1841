"""Tests for the built-in NoticePlugin."""

from linknav.plugins.builtins.notice import NoticePlugin
from linknav.plugins.manager import PluginManager


class TestNoticePlugin:
    def test_keeps_messages_in_order(self) -> None:
        plugin = NoticePlugin()
        plugin.notify("Cleaned up 3 cache entries.")
        plugin.notify("Cache has been rebuilt.")
        assert list(plugin.messages) == ["Cleaned up 3 cache entries.", "Cache has been rebuilt."]

    def test_history_is_bounded(self) -> None:
        plugin = NoticePlugin(history=2)
        for i in range(5):
            plugin.notify(f"notice {i}")
        assert list(plugin.messages) == ["notice 3", "notice 4"]

    def test_receives_dispatched_notices(self) -> None:
        pm = PluginManager()
        pm.dispatch("notify", message="Cleaned up 1 cache entries.")
        assert pm.notices is not None
        assert list(pm.notices.messages) == ["Cleaned up 1 cache entries."]

    def test_lifecycle_hooks_do_not_record_notices(self) -> None:
        pm = PluginManager()
        assert pm.dispatch("post_cache_cleanup", removed=2)
        assert pm.dispatch("post_cache_rebuild", total=4, failed=1)
        assert pm.notices is not None
        assert list(pm.notices.messages) == []
