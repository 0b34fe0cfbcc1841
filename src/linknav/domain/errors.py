"""Exception taxonomy for link extraction and caching.

A link that fails to resolve is not an error: it is dropped where it
is found and never raised.
"""

from __future__ import annotations


class LinkNavError(Exception):
    """Base class for all linknav failures."""


class ExtractionError(LinkNavError):
    """Reading a document (or the corpus around it) from the store failed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to extract links for '{path}': {reason}")
        self.path = path
        self.reason = reason


class ExtractionTimeout(LinkNavError, TimeoutError):
    """Extraction did not finish within the configured ceiling."""

    def __init__(self, path: str, timeout: float) -> None:
        super().__init__(f"Loading timeout after {timeout:g}s for '{path}'")
        self.path = path
        self.timeout = timeout
