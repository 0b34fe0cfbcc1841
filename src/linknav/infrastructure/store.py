"""DocumentStore — the boundary between the link core and the host vault.

The core only ever reads through this protocol. Name resolution policy,
metadata parsing and the resolved-link index belong to the store; the
extractor treats every call as fallible and every result as optional.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from linknav.domain.links import WikiLink
from linknav.domain.types import Document


@dataclass(frozen=True)
class ParsedLinks:
    """Pre-parsed link metadata for one document.

    Attributes:
        links: Plain ``[[links]]`` in the content, in document order.
        embeds: ``![[embeds]]`` in the content, in document order.
        frontmatter: Parsed frontmatter mapping, or None if absent.
        tags: Inline ``#tags`` (without ``#``).
    """

    links: tuple[WikiLink, ...] = ()
    embeds: tuple[WikiLink, ...] = ()
    frontmatter: dict[str, Any] | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)


class DocumentStore(Protocol):
    """Read-only view of a vault consumed by the link core."""

    def resolve(self, name: str, context_path: str) -> Document | None:
        """Resolve a link target to a document, first match wins. None if dangling."""
        ...

    def resolved_links(self) -> Mapping[str, Mapping[str, Any]]:
        """Map each source path to the target paths its links resolve to."""
        ...

    def get_parsed_links(self, doc: Document) -> ParsedLinks | None:
        """Parsed metadata for *doc*, or None if the store has none."""
        ...

    async def read_raw(self, doc: Document) -> str:
        """Raw text content of *doc*. Raises OSError when unreadable."""
        ...

    def list_canvas_boards(self) -> list[Document]:
        """Every canvas board in the vault."""
        ...

    def get_document(self, path: str) -> Document | None:
        """Look up a document by exact vault path."""
        ...

    def list_documents(self) -> list[Document]:
        """Every note and canvas board in the vault."""
        ...
