"""NavigatorService — link lookups, hierarchies and cache control for one vault.

Owns the extractor, the cache and the hierarchy builder, and turns
their results and failures into :class:`ServiceResult` values. Only a
failure of the requested document itself produces ``ok=False``.

Lifecycle::

    async with NavigatorService.for_vault(root, config) as nav:
        result = await nav.hierarchy("Projects/Alpha")

``start()`` launches the periodic cache sweep; ``close()`` stops it and
drops every cached entry.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

from linknav.config.discovery import load_config
from linknav.config.models import LinkNavConfig
from linknav.domain.errors import ExtractionTimeout, LinkNavError
from linknav.domain.types import Document
from linknav.services.base import BaseService
from linknav.services.cache import Clock, LinkCache, wall_clock_ms
from linknav.services.extractor import LinkExtractor
from linknav.services.hierarchy import HierarchyBuilder
from linknav.services.result import (
    EXTRACTION_FAILED,
    INVALID_ARGUMENT,
    NOT_FOUND,
    TIMEOUT,
    ServiceResult,
)
from linknav.services.telemetry import traced

if TYPE_CHECKING:
    from linknav.infrastructure.store import DocumentStore
    from linknav.plugins.manager import PluginManager


class NavigatorService(BaseService):
    """Front door to the link graph of one vault."""

    def __init__(
        self,
        store: DocumentStore,
        config: LinkNavConfig | None = None,
        *,
        plugins: PluginManager | None = None,
        clock: Clock = wall_clock_ms,
    ) -> None:
        super().__init__(store, plugins)
        self._config = config or LinkNavConfig()
        self.extractor = LinkExtractor(store, search_canvas_links=self._config.canvas.search_links)
        self.cache = LinkCache(self.extractor, self._config.cache, plugins=plugins, clock=clock)
        self.builder = HierarchyBuilder(self.cache, store)
        self._max_depth = self._config.traversal.max_depth

    @classmethod
    def for_vault(
        cls,
        root: Path,
        config: LinkNavConfig | None = None,
        *,
        plugins: PluginManager | None = None,
    ) -> NavigatorService:
        """Create a navigator backed by a :class:`VaultStore` at *root*.

        Without an explicit *config*, the nearest ``linknav.toml`` at or
        above *root* is loaded.
        """
        from linknav.infrastructure.vault import VaultStore

        if config is None:
            config = load_config(cwd=root)
        return cls(VaultStore(root), config, plugins=plugins)

    @property
    def config(self) -> LinkNavConfig:
        return self._config

    @property
    def max_depth(self) -> int:
        return self._max_depth

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background cache sweep. Needs a running event loop."""
        self.cache.start_cleanup()

    async def close(self) -> None:
        await self.cache.close()

    async def __aenter__(self) -> NavigatorService:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    def resolve_target(self, target: str) -> Document | None:
        """Resolve *target* as a vault path first, then as a link name."""
        doc = self._store.get_document(target)
        if doc is not None:
            return doc
        return self._store.resolve(target, "")

    @staticmethod
    def _not_found(op: str, target: str) -> ServiceResult:
        return ServiceResult.failure(op, NOT_FOUND, f"No document found for '{target}'", target=target)

    @staticmethod
    def _lookup_failure(op: str, doc: Document, exc: LinkNavError) -> ServiceResult:
        code = TIMEOUT if isinstance(exc, ExtractionTimeout) else EXTRACTION_FAILED
        return ServiceResult.failure(op, code, str(exc), path=doc.path)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @traced
    async def links(self, target: str, *, force_refresh: bool = False) -> ServiceResult:
        """LinkSet of one document.

        ``counts.outlinks`` includes canvas links, matching what the
        header summary shows.
        """
        op = "links"
        doc = self.resolve_target(target)
        if doc is None:
            return self._not_found(op, target)
        try:
            link_set = await self.cache.get(doc, force_refresh=force_refresh)
        except LinkNavError as exc:
            return self._lookup_failure(op, doc, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "name": doc.basename,
                "path": doc.path,
                "kind": str(doc.kind),
                **link_set.to_dict(),
                "counts": {
                    "inlinks": len(link_set.inlinks),
                    "outlinks": len(link_set.outlinks) + len(link_set.canvas_links),
                },
            },
        )

    @traced
    async def hierarchy(
        self,
        target: str,
        *,
        depth: int | None = None,
        force_refresh: bool = False,
        show_canvas_links: bool | None = None,
        show_inlink_outlinks: bool | None = None,
    ) -> ServiceResult:
        """Combined inlink list, outlink tree and canvas links for *target*.

        Args:
            depth: Overrides the current max depth for this call only.
            show_canvas_links: Overrides ``[canvas] show_links``.
            show_inlink_outlinks: Overrides ``[traversal] show_inlink_outlinks``.
        """
        op = "hierarchy"
        max_depth = self._max_depth if depth is None else depth
        if max_depth < 1:
            return ServiceResult.failure(op, INVALID_ARGUMENT, "Depth must be at least 1", depth=max_depth)

        doc = self.resolve_target(target)
        if doc is None:
            return self._not_found(op, target)
        try:
            tree = await self.builder.build(doc, max_depth, force_refresh=force_refresh)
        except LinkNavError as exc:
            return self._lookup_failure(op, doc, exc)

        if show_canvas_links is None:
            show_canvas_links = self._config.canvas.show_links
        if show_inlink_outlinks is None:
            show_inlink_outlinks = self._config.traversal.show_inlink_outlinks

        data = tree.to_dict()
        if not show_canvas_links:
            data["canvas_links"] = []
        data["display"] = {
            "canvas_links": show_canvas_links,
            "inlink_outlinks": show_inlink_outlinks,
        }
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    def set_max_depth(self, depth: int) -> ServiceResult:
        """Change the depth used by later :meth:`hierarchy` calls."""
        op = "set_max_depth"
        if depth < 1:
            return ServiceResult.failure(op, INVALID_ARGUMENT, "Depth must be at least 1", depth=depth)
        previous, self._max_depth = self._max_depth, depth
        return ServiceResult(ok=True, op=op, data={"max_depth": depth, "previous": previous})

    @traced
    def invalidate(self, target: str) -> ServiceResult:
        """Force the next lookup of *target* to re-extract."""
        op = "invalidate"
        doc = self.resolve_target(target)
        if doc is None:
            return self._not_found(op, target)
        self.cache.invalidate(doc)
        return ServiceResult(ok=True, op=op, data={"path": doc.path})

    @traced
    def cache_status(self) -> ServiceResult:
        return ServiceResult(ok=True, op="cache_status", data=self.cache.status().to_dict())

    @traced
    async def rebuild_cache(self) -> ServiceResult:
        """Drop the whole cache and re-extract every document in the vault."""
        report = await self.cache.rebuild_all(self._store.list_documents())
        warnings: list[str] = []
        if report.failed:
            warnings.append(f"{report.failed} of {report.total} documents failed to extract")

        payload: dict[str, Any] = {"total": report.total, "failed": report.failed}
        self._dispatch_event("post_cache_rebuild", payload, warnings)
        self._dispatch_event("notify", {"message": "Cache has been rebuilt."}, warnings)

        return ServiceResult(
            ok=True,
            op="rebuild_cache",
            data={**payload, "cached": len(self.cache)},
            warnings=warnings,
        )
