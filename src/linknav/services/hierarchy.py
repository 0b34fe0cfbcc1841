"""HierarchyBuilder — bounded breadth-first walks over the LinkCache.

Two walks, each with its own visited set:

* inward: inlinks, then their inlinks, sorted farthest-first so the
  rendered list reads from distant context down to the start document;
* outward: outlinks as a tree, one node per document.

A node whose LinkSet cannot be fetched is treated as a leaf. Only the
start document's own lookup (in :meth:`HierarchyBuilder.build`) is
allowed to fail the whole build.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from linknav.domain.errors import LinkNavError
from linknav.domain.types import Document, LinkSet
from linknav.services.telemetry import trace_span

if TYPE_CHECKING:
    from linknav.infrastructure.store import DocumentStore
    from linknav.services.cache import LinkCache

log = structlog.get_logger(__name__)

# Context path for resolving inlink names: the vault root.
VAULT_ROOT_CONTEXT = ""


@dataclass(frozen=True)
class InlinkNode:
    """A document that links (transitively) to the start document."""

    document: Document
    depth: int
    outlinks: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.document.basename,
            "path": self.document.path,
            "depth": self.depth,
            "outlinks": list(self.outlinks),
        }


@dataclass(frozen=True)
class InlinkHierarchy:
    nodes: tuple[InlinkNode, ...]
    max_depth: int


@dataclass
class OutlinkNode:
    """One document in the outlink tree. Children are filled in by the walk."""

    document: Document
    depth: int
    attachments: tuple[str, ...] = ()
    children: list[OutlinkNode] = field(default_factory=list)

    def iter_nodes(self) -> list[OutlinkNode]:
        """Every node of the subtree in breadth-first order, self included."""
        nodes: list[OutlinkNode] = []
        queue = deque([self])
        while queue:
            node = queue.popleft()
            nodes.append(node)
            queue.extend(node.children)
        return nodes

    def to_dict(self) -> dict[str, Any]:
        # Iterative so deep chains cannot hit the recursion limit.
        root: dict[str, Any] = {}
        stack: list[tuple[OutlinkNode, dict[str, Any]]] = [(self, root)]
        while stack:
            node, out = stack.pop()
            out.update(
                name=node.document.basename,
                path=node.document.path,
                depth=node.depth,
                attachments=list(node.attachments),
                children=[],
            )
            for child in node.children:
                child_out: dict[str, Any] = {}
                out["children"].append(child_out)
                stack.append((child, child_out))
        return root


@dataclass(frozen=True)
class Hierarchy:
    """Everything needed to render the link hierarchy of one document."""

    root: Document
    link_set: LinkSet
    inlinks: InlinkHierarchy
    outlinks: OutlinkNode
    outlink_depth: int
    max_depth: int

    @property
    def canvas_links(self) -> tuple[str, ...]:
        return self.link_set.canvas_links

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": {"name": self.root.basename, "path": self.root.path},
            "max_depth": self.max_depth,
            "inlink_depth": self.inlinks.max_depth,
            "outlink_depth": self.outlink_depth,
            "inlinks": [node.to_dict() for node in self.inlinks.nodes],
            "outlinks": [child.to_dict() for child in self.outlinks.children],
            "attachments": list(self.outlinks.attachments),
            "canvas_links": list(self.canvas_links),
            "tags": list(self.link_set.tags),
        }


def farthest_first(nodes: Iterable[InlinkNode]) -> list[InlinkNode]:
    """Order inlink nodes deepest first; equal depths keep their input order."""
    return sorted(nodes, key=lambda node: node.depth, reverse=True)


def outlink_depth_for(max_depth: int, inlink_depth: int) -> int:
    """Depth left for the outward walk; never less than one level."""
    return max(1, max_depth - inlink_depth)


class HierarchyBuilder:
    """Build inlink lists and outlink trees for a document.

    Args:
        cache: Source of LinkSets for every visited document.
        store: Resolves display names back to documents at walk time.
    """

    def __init__(self, cache: LinkCache, store: DocumentStore) -> None:
        self._cache = cache
        self._store = store

    async def _fetch(self, doc: Document) -> LinkSet | None:
        try:
            return await self._cache.get(doc)
        except LinkNavError as exc:
            log.debug("traversal.branch_truncated", path=doc.path, error=str(exc))
            return None

    async def build_inlink_hierarchy(self, start: Document, max_depth: int) -> InlinkHierarchy:
        """Walk inlinks breadth-first up to *max_depth* levels.

        A source reached again before it is expanded is recorded again at
        the later, deeper level; it keeps its position in discovery order.
        Inlink names are resolved from the vault root, not from the note
        being expanded, so one name always maps to the same document
        within a walk.

        Returns the discovered nodes ordered by depth, deepest first,
        with ties kept in discovery order, and the deepest level reached.
        """
        queue: deque[tuple[Document, int]] = deque([(start, 0)])
        visited: set[str] = set()
        discovered: dict[str, InlinkNode] = {}
        deepest = 0

        while queue:
            doc, depth = queue.popleft()
            if depth >= max_depth or doc.path in visited:
                continue
            visited.add(doc.path)

            link_set = await self._fetch(doc)
            if link_set is None:
                continue

            for name in link_set.inlinks:
                source = self._store.resolve(name, VAULT_ROOT_CONTEXT)
                if source is None or source.path in visited:
                    continue
                # The source is still shown when its own lookup fails, it just
                # has no outlinks and is not walked further.
                source_links = await self._fetch(source)
                outlinks = source_links.outlinks if source_links is not None else ()
                discovered[source.path] = InlinkNode(source, depth + 1, outlinks)
                if source_links is not None:
                    queue.append((source, depth + 1))
                deepest = max(deepest, depth + 1)

        return InlinkHierarchy(nodes=tuple(farthest_first(discovered.values())), max_depth=deepest)

    async def build_outlink_hierarchy(self, start: Document, max_depth: int) -> OutlinkNode:
        """Walk outlinks breadth-first into a tree at most *max_depth* levels deep.

        Canvas boards are never expanded. Each document is placed once,
        at the shallowest depth it was reached from.
        """
        root = OutlinkNode(document=start, depth=0)
        queue: deque[OutlinkNode] = deque([root])
        expanded: set[str] = set()
        placed: set[str] = {start.path}

        while queue:
            node = queue.popleft()
            doc = node.document
            if node.depth >= max_depth or doc.is_canvas or doc.path in expanded:
                continue
            expanded.add(doc.path)

            link_set = await self._fetch(doc)
            if link_set is None:
                continue
            node.attachments = link_set.attachments

            for name in link_set.outlinks:
                target = self._store.resolve(name, doc.path)
                if target is None or target.path in placed:
                    continue
                placed.add(target.path)
                child = OutlinkNode(document=target, depth=node.depth + 1)
                node.children.append(child)
                queue.append(child)

        return root

    async def build(self, start: Document, max_depth: int, *, force_refresh: bool = False) -> Hierarchy:
        """Build the combined hierarchy for *start*.

        Raises:
            LinkNavError: The start document's own LinkSet could not be fetched.
        """
        link_set = await self._cache.get(start, force_refresh=force_refresh)

        with trace_span("inlinks") as span:
            inlinks = await self.build_inlink_hierarchy(start, max_depth)
            if span:
                span.annotate("nodes", len(inlinks.nodes))

        outlink_depth = outlink_depth_for(max_depth, inlinks.max_depth)
        with trace_span("outlinks") as span:
            outlinks = await self.build_outlink_hierarchy(start, outlink_depth)
            if span:
                span.annotate("nodes", len(outlinks.iter_nodes()) - 1)

        return Hierarchy(
            root=start,
            link_set=link_set,
            inlinks=inlinks,
            outlinks=outlinks,
            outlink_depth=outlink_depth,
            max_depth=max_depth,
        )
