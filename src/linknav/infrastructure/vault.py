"""VaultStore — file-backed DocumentStore over a vault directory.

The store scans the vault lazily on first access and keeps a
point-in-time index: documents by path, documents by name for link
resolution, and the parsed links of every note and canvas board. The
resolved-link graph is derived from that index by
:class:`~linknav.infrastructure.graph.engine.GraphEngine`.

Nothing here watches the filesystem. Call :meth:`VaultStore.refresh`
to pick up edits.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from linknav.domain.content import parse_canvas
from linknav.domain.links import (
    WikiLink,
    clean_link_target,
    extract_frontmatter_links,
    extract_wikilinks,
)
from linknav.domain.tags import extract_inline_tags
from linknav.domain.types import Document, DocumentKind
from linknav.infrastructure.filesystem import (
    find_vault_files,
    from_vault_path,
    read_markdown_file,
    read_text_file,
    read_text_file_async,
    to_vault_path,
)
from linknav.infrastructure.graph.engine import GraphEngine
from linknav.infrastructure.store import ParsedLinks

logger = logging.getLogger(__name__)


@dataclass
class _VaultIndex:
    """Point-in-time snapshot of the vault."""

    documents: dict[str, Document] = field(default_factory=dict)
    by_stem: dict[str, list[Document]] = field(default_factory=dict)
    by_name: dict[str, list[Document]] = field(default_factory=dict)
    parsed: dict[str, ParsedLinks] = field(default_factory=dict)


class VaultStore:
    """DocumentStore over a directory of markdown notes and canvas boards."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._index: _VaultIndex | None = None
        self._graph = GraphEngine(self._graph_data)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def graph(self) -> GraphEngine:
        return self._graph

    def refresh(self) -> None:
        """Drop the snapshot; the next access rescans the vault."""
        self._index = None
        self._graph.invalidate()

    # ------------------------------------------------------------------
    # DocumentStore protocol
    # ------------------------------------------------------------------

    def resolve(self, name: str, context_path: str) -> Document | None:
        """Resolve a link target, first match wins.

        Order: exact vault path (``.md`` implied when no extension is
        given), then path relative to the context folder, then name
        match. Among name matches notes beat canvas boards, documents in
        the context folder win, then the shortest path, then the
        alphabetically first.
        """
        index = self._ensure_index()
        target = clean_link_target(name).lstrip("/")
        if not target:
            return None

        context_folder = PurePosixPath(context_path).parent.as_posix()
        context_folder = "" if context_folder in (".", "/") else context_folder

        for candidate in self._path_candidates(target, context_folder):
            doc = index.documents.get(candidate)
            if doc is not None:
                return doc

        matches = self._name_matches(index, target)
        if not matches:
            return None
        return min(matches, key=lambda d: _rank(d, context_folder))

    def resolved_links(self) -> Mapping[str, Mapping[str, Any]]:
        return self._graph.resolved_links()

    def get_parsed_links(self, doc: Document) -> ParsedLinks | None:
        return self._ensure_index().parsed.get(doc.path)

    async def read_raw(self, doc: Document) -> str:
        return await read_text_file_async(from_vault_path(self._root, doc.path))

    def list_canvas_boards(self) -> list[Document]:
        return [d for d in self._ensure_index().documents.values() if d.is_canvas]

    def get_document(self, path: str) -> Document | None:
        return self._ensure_index().documents.get(path)

    def list_documents(self) -> list[Document]:
        return [
            d
            for d in self._ensure_index().documents.values()
            if d.kind is not DocumentKind.ATTACHMENT
        ]

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _ensure_index(self) -> _VaultIndex:
        if self._index is None:
            self._index = self._scan()
        return self._index

    def _scan(self) -> _VaultIndex:
        index = _VaultIndex()
        for path in find_vault_files(self._root):
            doc = Document.from_path(to_vault_path(self._root, path))
            index.documents[doc.path] = doc
            index.by_name.setdefault(doc.name.lower(), []).append(doc)
            if doc.kind is not DocumentKind.ATTACHMENT:
                index.by_stem.setdefault(doc.basename.lower(), []).append(doc)
                parsed = self._parse(doc, path)
                if parsed is not None:
                    index.parsed[doc.path] = parsed
        logger.debug(
            "Scanned vault %s: %d files, %d parsed",
            self._root,
            len(index.documents),
            len(index.parsed),
        )
        return index

    @staticmethod
    def _parse(doc: Document, path: Path) -> ParsedLinks | None:
        try:
            if doc.is_canvas:
                board = parse_canvas(read_text_file(path))
                # File nodes show the target inline, like an embed.
                file_embeds: list[WikiLink] = [WikiLink(raw=f, embed=True) for f in board.files]
                body_links = [link for text in board.texts for link in extract_wikilinks(text)]
                tags = [tag for text in board.texts for tag in extract_inline_tags(text)]
                frontmatter: dict[str, Any] | None = None
            else:
                fm, body = read_markdown_file(path)
                file_embeds = []
                body_links = extract_wikilinks(body)
                tags = extract_inline_tags(body)
                frontmatter = fm or None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", doc.path, exc)
            return None

        links = [link for link in body_links if not link.embed]
        embeds = [*file_embeds, *(link for link in body_links if link.embed)]
        return ParsedLinks(
            links=tuple(links),
            embeds=tuple(embeds),
            frontmatter=frontmatter,
            tags=tuple(tags),
        )

    def _graph_data(self) -> tuple[Iterable[str], Iterable[tuple[str, str]]]:
        """Nodes and resolved edges for the link graph."""
        index = self._ensure_index()
        nodes = [d.path for d in index.documents.values() if d.kind is not DocumentKind.ATTACHMENT]
        edges: list[tuple[str, str]] = []
        for source, parsed in index.parsed.items():
            targets = [link.raw for link in (*parsed.links, *parsed.embeds)]
            if parsed.frontmatter:
                targets.extend(extract_frontmatter_links(parsed.frontmatter))
            for name in targets:
                doc = self.resolve(name, source)
                if doc is not None and doc.kind is not DocumentKind.ATTACHMENT:
                    edges.append((source, doc.path))
        return nodes, edges

    # ------------------------------------------------------------------
    # Resolution helpers
    # ------------------------------------------------------------------

    def _path_candidates(self, target: str, context_folder: str) -> list[str]:
        has_extension = bool(PurePosixPath(target).suffix)
        bases = [target]
        if context_folder and "/" in target:
            bases.append(f"{context_folder}/{target}")
        candidates: list[str] = []
        for base in bases:
            candidates.append(base)
            if not has_extension:
                candidates.append(f"{base}.md")
        return candidates

    @staticmethod
    def _name_matches(index: _VaultIndex, target: str) -> list[Document]:
        pure = PurePosixPath(target)
        folder_hint = pure.parent.as_posix() if "/" in target else ""
        key = pure.name.lower()
        # [[Board.canvas]] or [[image.png]] resolve by full file name;
        # [[Note]] resolves by stem. A dotted stem ("v1.2 notes") falls
        # back to the stem lookup.
        if pure.suffix:
            lookups = (index.by_name, index.by_stem)
        else:
            lookups = (index.by_stem, index.by_name)
        matches: list[Document] = []
        for lookup in lookups:
            matches = list(lookup.get(key, []))
            if matches:
                break
        if folder_hint:
            matches = [d for d in matches if d.folder.lower().endswith(folder_hint.lower())]
        return matches


def _rank(doc: Document, context_folder: str) -> tuple[int, int, int, str]:
    return (
        0 if doc.kind is DocumentKind.NOTE else 1,
        0 if doc.folder == context_folder else 1,
        len(doc.path),
        doc.path,
    )
