"""Telemetry primitives: Span, @traced and trace_span.

Disabled by default, in which case every hook costs one ContextVar
lookup.  ``--verbose`` turns it on: each ``@traced`` service call then
builds a span tree (``NavigatorService.hierarchy`` -> ``inlinks``,
``outlinks``) and the outermost call stores it under
``ServiceResult.meta["telemetry"]``.

Context variables follow the awaiting coroutine, so spans opened inside
an awaited call nest under the caller's span, and concurrent calls
gathered on one loop keep separate trees.
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog

from linknav.services.result import ServiceResult

log = structlog.get_logger("linknav.telemetry")

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """A timed region with child spans and free-form annotations."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def child(self, name: str) -> Span:
        span = Span(name=name, parent=self)
        self.children.append(span)
        return span

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = self.annotations
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a child of the current span.

    Yields None when telemetry is off or no span is active, so callers
    guard annotations with ``if span is not None``.
    """
    parent = _current_span.get() if _verbose_enabled.get() else None
    if parent is None:
        yield None
        return
    with _activate(parent.child(name)) as span:
        yield span


def _log_span(span: Span, *, ok: bool) -> None:
    log.debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        children=len(span.children),
    )


def _open_call_span(name: str) -> Span:
    parent = _current_span.get()
    return parent.child(name) if parent is not None else Span(name=name)


def _close_call_span(span: Span, result: Any) -> Any:
    _log_span(span, ok=True)
    if span.parent is None and isinstance(result, ServiceResult):
        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        return result.model_copy(update={"meta": meta})
    return result


F = TypeVar("F", bound=Callable[..., Any])


def traced(func: F) -> F:
    """Record a span around *func*, sync or ``async def``.

    The outermost traced call returning a ServiceResult gets the tree
    copied into its ``meta``; nested traced calls only add a child span.
    """
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            if not _verbose_enabled.get():
                return await func(*args, **kwargs)
            span = _open_call_span(func.__qualname__)
            try:
                with _activate(span):
                    result = await func(*args, **kwargs)
            except Exception:
                _log_span(span, ok=False)
                raise
            return _close_call_span(span, result)

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if not _verbose_enabled.get():
            return func(*args, **kwargs)
        span = _open_call_span(func.__qualname__)
        try:
            with _activate(span):
                result = func(*args, **kwargs)
        except Exception:
            _log_span(span, ok=False)
            raise
        return _close_call_span(span, result)

    return wrapper  # type: ignore[return-value]


def enable_telemetry() -> None:
    """Turn span recording on for the current context (``--verbose``)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    _verbose_enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, or None when telemetry is off."""
    if not _verbose_enabled.get():
        return None
    return _current_span.get()
