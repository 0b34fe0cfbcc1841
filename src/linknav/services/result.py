"""ServiceResult and ServiceError — the contract between services and front ends.

INVARIANT: Every NavigatorService operation returns ServiceResult.
Failures of the start document surface here as ``ok=False``; failures
deeper in a traversal never do.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Error codes used by the navigator.
NOT_FOUND = "NOT_FOUND"
TIMEOUT = "TIMEOUT"
EXTRACTION_FAILED = "EXTRACTION_FAILED"
INVALID_ARGUMENT = "INVALID_ARGUMENT"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for navigator operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"hierarchy"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans, cache counters).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
