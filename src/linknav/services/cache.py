"""LinkCache — memoized LinkSets with TTL, eviction and request coalescing.

State (entries, in-flight extractions, dirty keys) lives on the
instance and is only mutated from the event loop thread, so no locks
are needed: every mutation runs between two awaits.

Lifecycle of one key::

    miss ──> in-flight task ──success──> entry {link_set, timestamp}
                  │                          │
                  └─failure/timeout──> (nothing cached, next get retries)

    invalidate / force_refresh ──> entry dropped + key marked dirty
    dirty key ──> always re-extracted, even if an entry reappears

Eviction picks the entry with the smallest timestamp, i.e. the one
inserted or refreshed longest ago. Reads do not refresh timestamps, so
this is not LRU.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeAlias

import structlog

from linknav.config.models import CacheConfig
from linknav.domain.errors import ExtractionTimeout
from linknav.domain.types import Document, LinkSet

if TYPE_CHECKING:
    from linknav.plugins.manager import PluginManager
    from linknav.services.extractor import LinkExtractor

log = structlog.get_logger(__name__)

Clock: TypeAlias = Callable[[], float]


def wall_clock_ms() -> float:
    """Milliseconds since the epoch."""
    return time.time() * 1000


@dataclass(frozen=True)
class CacheEntry:
    link_set: LinkSet
    timestamp: float  # ms, from the cache clock


@dataclass(frozen=True)
class CacheStatus:
    """Snapshot of cache occupancy and counters."""

    size: int
    max_size: int
    timeout_ms: int
    oldest: float | None
    newest: float | None
    dirty: int
    in_flight: int
    hits: int
    misses: int
    coalesced: int
    evictions: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "max_size": self.max_size,
            "timeout_minutes": round(self.timeout_ms / 60000, 2),
            "oldest": _iso(self.oldest),
            "newest": _iso(self.newest),
            "dirty": self.dirty,
            "in_flight": self.in_flight,
            "hits": self.hits,
            "misses": self.misses,
            "coalesced": self.coalesced,
            "evictions": self.evictions,
        }


@dataclass(frozen=True)
class RebuildReport:
    total: int
    failed: int

    @property
    def cached(self) -> int:
        return self.total - self.failed


def _iso(timestamp_ms: float | None) -> str | None:
    if timestamp_ms is None:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).isoformat(timespec="seconds")


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # A shared extraction may fail after every waiter went away.
    if not task.cancelled():
        task.exception()


class LinkCache:
    """Per-document LinkSet cache in front of a :class:`LinkExtractor`.

    Args:
        extractor: Source of LinkSets on a miss.
        config: TTL, size bound, extraction ceiling and cleanup settings.
        plugins: Receives cleanup events and notices. Optional.
        clock: Millisecond clock used for timestamps and TTL checks.
    """

    def __init__(
        self,
        extractor: LinkExtractor,
        config: CacheConfig | None = None,
        *,
        plugins: PluginManager | None = None,
        clock: Clock = wall_clock_ms,
    ) -> None:
        self._extractor = extractor
        self._config = config or CacheConfig()
        self._plugins = plugins
        self._clock = clock

        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Task[LinkSet]] = {}
        self._dirty: set[str] = set()
        self._generation = 0

        self._cleanup_task: asyncio.Task[None] | None = None
        self._last_notice = float("-inf")

        self.hits = 0
        self.misses = 0
        self.coalesced = 0
        self.evictions = 0

    @property
    def config(self) -> CacheConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, doc: object) -> bool:
        return isinstance(doc, Document) and doc.path in self._entries

    def peek(self, doc: Document) -> CacheEntry | None:
        """Return the raw entry for *doc* without freshness checks."""
        return self._entries.get(doc.path)

    def is_dirty(self, doc: Document) -> bool:
        return doc.path in self._dirty

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def get(self, doc: Document, *, force_refresh: bool = False) -> LinkSet:
        """Return the LinkSet for *doc*, extracting it when needed.

        Raises:
            ExtractionTimeout: The extraction exceeded the ceiling.
            ExtractionError: The extractor could not read the store.
        """
        key = doc.path
        if force_refresh:
            self.invalidate(doc)

        entry = self._entries.get(key)
        if entry is not None and key not in self._dirty and self._is_fresh(entry):
            self.hits += 1
            return entry.link_set

        task = self._in_flight.get(key)
        if task is None:
            self.misses += 1
            log.debug("cache.miss", path=key, stale=entry is not None)
            task = asyncio.create_task(self._load(doc, self._generation), name=f"extract:{key}")
            task.add_done_callback(_consume_exception)
            self._in_flight[key] = task
        else:
            self.coalesced += 1
            log.debug("cache.coalesced", path=key)

        # One cancelled caller must not cancel the extraction the others share.
        return await asyncio.shield(task)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < self._config.timeout

    async def _load(self, doc: Document, generation: int) -> LinkSet:
        key = doc.path
        ceiling = self._config.extraction_timeout
        try:
            link_set = await asyncio.wait_for(self._extractor.extract(doc), timeout=ceiling)
        except TimeoutError as exc:
            log.warning("cache.timeout", path=key, timeout=ceiling)
            raise ExtractionTimeout(key, ceiling) from exc
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

        # A rebuild started while this ran; its generation owns the cache now.
        if generation == self._generation:
            self._put(key, link_set)
        return link_set

    def _put(self, key: str, link_set: LinkSet) -> None:
        # Re-inserting moves the key to the end so ties evict older inserts first.
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(link_set=link_set, timestamp=self._clock())
        self._dirty.discard(key)

        if len(self._entries) > self._config.max_size:
            oldest = min(self._entries.items(), key=lambda item: item[1].timestamp)[0]
            del self._entries[oldest]
            self.evictions += 1
            log.debug("cache.evict", path=oldest, size=len(self._entries))

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, doc: Document) -> None:
        """Drop the entry for *doc* and force the next lookup to re-extract."""
        self._entries.pop(doc.path, None)
        self._dirty.add(doc.path)

    def clear(self) -> None:
        """Forget every entry, in-flight marker and dirty key.

        Extractions already running finish for their waiters but no
        longer write into the cache.
        """
        self._entries.clear()
        self._in_flight.clear()
        self._dirty.clear()
        self._generation += 1

    async def rebuild_all(self, documents: Iterable[Document]) -> RebuildReport:
        """Clear everything, then re-extract every document in *documents*."""
        self.clear()
        docs = list(documents)
        results = await asyncio.gather(*(self.get(doc) for doc in docs), return_exceptions=True)
        failed = sum(1 for r in results if isinstance(r, Exception))
        report = RebuildReport(total=len(docs), failed=failed)
        log.info("cache.rebuild", total=report.total, failed=report.failed)
        return report

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Delete entries older than the cache timeout. Returns the count removed."""
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.timestamp > self._config.timeout
        ]
        for key in expired:
            del self._entries[key]

        removed = len(expired)
        if removed:
            log.debug("cache.sweep", removed=removed, size=len(self._entries))
            self._dispatch("post_cache_cleanup", removed=removed)
            self._maybe_notify_cleanup(removed, now)
        return removed

    def _maybe_notify_cleanup(self, removed: int, now: float) -> None:
        if not self._config.show_cleanup_notice:
            return
        if now - self._last_notice <= self._config.notice_cooldown:
            return
        self._last_notice = now
        self._dispatch("notify", message=f"Cleaned up {removed} cache entries.")

    def start_cleanup(self) -> None:
        """(Re)start the periodic sweep on the running event loop.

        Any previous sweep task is cancelled first, so at most one runs.
        """
        self.stop_cleanup()
        self._cleanup_task = asyncio.get_running_loop().create_task(
            self._cleanup_loop(), name="linknav-cache-cleanup"
        )

    def stop_cleanup(self) -> None:
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            self._cleanup_task = None

    @property
    def cleanup_running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    async def _cleanup_loop(self) -> None:
        interval = self._config.cleanup_interval * 60
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    def reconfigure(self, config: CacheConfig) -> None:
        """Apply new settings; restarts the sweep if the interval changed."""
        interval_changed = config.cleanup_interval != self._config.cleanup_interval
        self._config = config
        if interval_changed and self._cleanup_task is not None:
            self.start_cleanup()

    async def close(self) -> None:
        """Stop the sweep and drop all state."""
        task = self._cleanup_task
        self.stop_cleanup()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.clear()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def status(self) -> CacheStatus:
        timestamps = [entry.timestamp for entry in self._entries.values()]
        return CacheStatus(
            size=len(self._entries),
            max_size=self._config.max_size,
            timeout_ms=self._config.timeout,
            oldest=min(timestamps) if timestamps else None,
            newest=max(timestamps) if timestamps else None,
            dirty=len(self._dirty),
            in_flight=len(self._in_flight),
            hits=self.hits,
            misses=self.misses,
            coalesced=self.coalesced,
            evictions=self.evictions,
        )

    def _dispatch(self, hook_name: str, **payload: Any) -> None:
        if self._plugins is not None:
            self._plugins.dispatch(hook_name, **payload)
