"""GraphEngine — lazy-built NetworkX graph of resolved vault links.

Rebuilt on demand after :meth:`GraphEngine.invalidate`, never
incrementally. The adjacency view doubles as the resolved-link index
the extractor scans for inlinks.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeAlias

import networkx as nx

_Graph: TypeAlias = nx.DiGraph
EdgeSource: TypeAlias = Callable[[], tuple[Iterable[str], Iterable[tuple[str, str]]]]


class GraphEngine:
    """Lazy-loading directed link graph.

    Args:
        load: Callable returning ``(node_paths, edges)``. Each edge is a
            ``(source_path, target_path)`` pair, one per resolved link
            occurrence; repeated pairs raise the edge ``count``.
    """

    def __init__(self, load: EdgeSource) -> None:
        self._load = load
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building it on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def invalidate(self) -> None:
        """Clear the cached graph, forcing rebuild on next access."""
        self._graph = None

    def resolved_links(self) -> Mapping[str, Mapping[str, Any]]:
        """``source -> {target -> {"count": n}}`` adjacency view."""
        return self.graph.adj

    def _build(self) -> _Graph:
        """Build the DiGraph.

        Adds all nodes first so that documents without links still
        appear, then folds repeated edges into a count.
        """
        node_paths, edge_pairs = self._load()
        g: _Graph = nx.DiGraph()
        g.add_nodes_from(node_paths)
        for source, target in edge_pairs:
            if g.has_edge(source, target):
                g[source][target]["count"] += 1
            else:
                g.add_edge(source, target, count=1)
        return g
