"""NoticePlugin — route user notices into the structured log.

Keeps the last notices in memory so a front end can show them after
the fact (the CLI echoes them to stderr after the result).
"""

from __future__ import annotations

from collections import deque

import structlog

from linknav.plugins.hookspecs import hookimpl

log = structlog.get_logger("linknav.notice")


class NoticePlugin:
    """Log every notice and keep a bounded history."""

    def __init__(self, history: int = 20) -> None:
        self.messages: deque[str] = deque(maxlen=history)

    @hookimpl
    def notify(self, message: str) -> None:
        self.messages.append(message)
        log.info("notice", message=message)

    @hookimpl
    def post_cache_cleanup(self, removed: int) -> None:
        log.debug("cache.cleanup", removed=removed)

    @hookimpl
    def post_cache_rebuild(self, total: int, failed: int) -> None:
        log.debug("cache.rebuild", total=total, failed=failed)
