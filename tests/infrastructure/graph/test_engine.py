"""Tests for GraphEngine — lazy build, edge counts, invalidation."""

from __future__ import annotations

from collections.abc import Iterable

from linknav.infrastructure.graph.engine import GraphEngine


class _Source:
    def __init__(self) -> None:
        self.nodes = ["a.md", "b.md", "c.md"]
        self.edges = [("a.md", "b.md"), ("a.md", "b.md"), ("b.md", "a.md")]
        self.loads = 0

    def __call__(self) -> tuple[Iterable[str], Iterable[tuple[str, str]]]:
        self.loads += 1
        return self.nodes, self.edges


class TestGraphEngine:
    def test_lazy_build_once(self) -> None:
        source = _Source()
        engine = GraphEngine(source)
        assert source.loads == 0
        _ = engine.graph
        _ = engine.graph
        assert source.loads == 1

    def test_isolated_nodes_and_counts(self) -> None:
        engine = GraphEngine(_Source())
        links = engine.resolved_links()
        assert links["a.md"]["b.md"]["count"] == 2
        assert links["b.md"]["a.md"]["count"] == 1
        assert dict(links["c.md"]) == {}

    def test_invalidate_rebuilds(self) -> None:
        source = _Source()
        engine = GraphEngine(source)
        _ = engine.graph
        source.edges = [("c.md", "a.md")]
        engine.invalidate()
        assert set(engine.resolved_links()["c.md"]) == {"a.md"}
        assert source.loads == 2
