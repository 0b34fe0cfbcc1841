"""Tests for BaseService event dispatch."""

from __future__ import annotations

from linknav.plugins.hookspecs import hookimpl
from linknav.plugins.manager import PluginManager
from linknav.services.base import BaseService
from tests.conftest import NameStore


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[str] = []

    @hookimpl
    def notify(self, message: str) -> None:
        self.messages.append(message)


class _Broken:
    @hookimpl
    def notify(self, message: str) -> None:
        raise RuntimeError("plugin bug")


class TestBaseService:
    def test_store_stored(self) -> None:
        store = NameStore(["a.md"])
        assert BaseService(store).store is store

    def test_dispatch_without_plugins_is_noop(self) -> None:
        warnings: list[str] = []
        BaseService(NameStore([]))._dispatch_event("notify", {"message": "hi"}, warnings)
        assert warnings == []

    def test_dispatch_reaches_plugins(self) -> None:
        pm = PluginManager(builtins=False)
        recorder = _Recorder()
        pm.register_plugin(recorder)
        warnings: list[str] = []
        BaseService(NameStore([]), pm)._dispatch_event("notify", {"message": "hi"}, warnings)
        assert recorder.messages == ["hi"]
        assert warnings == []

    def test_plugin_failure_becomes_warning(self) -> None:
        pm = PluginManager(builtins=False)
        pm.register_plugin(_Broken())
        warnings: list[str] = []
        BaseService(NameStore([]), pm)._dispatch_event("notify", {"message": "hi"}, warnings)
        assert warnings == ["Event dispatch failed for notify"]
