"""Document kinds and the per-document LinkSet value.

A LinkSet holds display names, never live document handles. Anything
that activates a name (opening a note, expanding a tree branch) must
re-resolve it against the store at use time.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePosixPath
from typing import Any


class DocumentKind(StrEnum):
    """Kinds of file a vault can hold."""

    NOTE = "note"
    CANVAS = "canvas"
    ATTACHMENT = "attachment"


NOTE_EXTENSION = "md"
CANVAS_EXTENSION = "canvas"


def kind_for_extension(extension: str) -> DocumentKind:
    """Classify a file extension (without the dot)."""
    ext = extension.lower()
    if ext == NOTE_EXTENSION:
        return DocumentKind.NOTE
    if ext == CANVAS_EXTENSION:
        return DocumentKind.CANVAS
    return DocumentKind.ATTACHMENT


@dataclass(frozen=True)
class Document:
    """A file in the vault, identified by its vault-relative POSIX path."""

    path: str
    kind: DocumentKind

    @classmethod
    def from_path(cls, path: str) -> Document:
        return cls(path=path, kind=kind_for_extension(PurePosixPath(path).suffix.lstrip(".")))

    @property
    def name(self) -> str:
        """File name with extension (``Note A.md``)."""
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        """File name without extension (``Note A``)."""
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".")

    @property
    def folder(self) -> str:
        parent = PurePosixPath(self.path).parent.as_posix()
        return "" if parent == "." else parent

    @property
    def is_canvas(self) -> bool:
        return self.kind is DocumentKind.CANVAS


@dataclass(frozen=True)
class LinkSet:
    """Links of one document, as insertion-ordered sets of display names.

    Attributes:
        inlinks: Basenames of documents linking here.
        outlinks: Basenames of notes this document links to.
        canvas_links: Basenames of canvas boards linked from or referencing it.
        attachments: File names (with extension) of embedded binaries.
        tags: Tag names without the leading ``#``.
    """

    inlinks: tuple[str, ...] = ()
    outlinks: tuple[str, ...] = ()
    canvas_links: tuple[str, ...] = ()
    attachments: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.inlinks or self.outlinks or self.canvas_links or self.attachments or self.tags
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "inlinks": list(self.inlinks),
            "outlinks": list(self.outlinks),
            "canvas_links": list(self.canvas_links),
            "attachments": list(self.attachments),
            "tags": list(self.tags),
        }


@dataclass
class LinkSetBuilder:
    """Mutable accumulator that keeps first-seen order and drops duplicates."""

    inlinks: dict[str, None] = field(default_factory=dict)
    outlinks: dict[str, None] = field(default_factory=dict)
    canvas_links: dict[str, None] = field(default_factory=dict)
    attachments: dict[str, None] = field(default_factory=dict)
    tags: dict[str, None] = field(default_factory=dict)

    @staticmethod
    def _add(bucket: dict[str, None], names: Iterable[str]) -> None:
        for name in names:
            if name:
                bucket.setdefault(name, None)

    def add_inlink(self, name: str) -> None:
        self._add(self.inlinks, (name,))

    def add_outlink(self, name: str) -> None:
        self._add(self.outlinks, (name,))

    def add_canvas_link(self, name: str) -> None:
        self._add(self.canvas_links, (name,))

    def add_attachment(self, name: str) -> None:
        self._add(self.attachments, (name,))

    def add_tags(self, names: Iterable[str]) -> None:
        self._add(self.tags, names)

    def build(self) -> LinkSet:
        return LinkSet(
            inlinks=tuple(self.inlinks),
            outlinks=tuple(self.outlinks),
            canvas_links=tuple(self.canvas_links),
            attachments=tuple(self.attachments),
            tags=tuple(self.tags),
        )
