"""LinkExtractor — compute the LinkSet of one document.

A pure computation over a point-in-time read of the store: it never
writes anything, and a failed store read aborts the whole extraction
with :class:`~linknav.domain.errors.ExtractionError`.

Cost profile: the inlink scan walks the whole resolved-link index and
the canvas search reads every canvas board, so one extraction is linear
in corpus size. Callers are expected to go through the LinkCache.
"""

from __future__ import annotations

import logging

from linknav.domain.errors import ExtractionError
from linknav.domain.links import (
    canvas_reference_pattern,
    extract_attachment_refs,
    extract_frontmatter_links,
)
from linknav.domain.tags import frontmatter_tags, normalize_tag
from linknav.domain.types import Document, DocumentKind, LinkSet, LinkSetBuilder
from linknav.infrastructure.store import DocumentStore, ParsedLinks

logger = logging.getLogger(__name__)


class LinkExtractor:
    """Derive inlinks, outlinks, canvas links, attachments and tags.

    Args:
        store: The document store to read from.
        search_canvas_links: Scan every canvas board for references to
            the document. Linear in the number of boards.
    """

    def __init__(self, store: DocumentStore, *, search_canvas_links: bool = True) -> None:
        self._store = store
        self.search_canvas_links = search_canvas_links

    async def extract(self, doc: Document) -> LinkSet:
        """Extract the LinkSet for *doc*.

        Raises:
            ExtractionError: If the store fails to read *doc* or a canvas board.
        """
        builder = LinkSetBuilder()
        try:
            self._collect_inlinks(doc, builder)
            parsed = self._store.get_parsed_links(doc)
            if parsed is not None:
                self._collect_outlinks(doc, parsed, builder)
                builder.add_tags(normalize_tag(t) for t in parsed.tags)
                builder.add_tags(frontmatter_tags(parsed.frontmatter))
            if doc.kind is not DocumentKind.ATTACHMENT:
                raw = await self._store.read_raw(doc)
                for name in extract_attachment_refs(raw):
                    builder.add_attachment(name)
            if self.search_canvas_links:
                await self._collect_canvas_references(doc, builder)
        except ExtractionError:
            raise
        except (OSError, ValueError) as exc:
            raise ExtractionError(doc.path, str(exc)) from exc

        link_set = builder.build()
        logger.debug(
            "Extracted %s: %d in, %d out, %d canvas, %d attachments, %d tags",
            doc.path,
            len(link_set.inlinks),
            len(link_set.outlinks),
            len(link_set.canvas_links),
            len(link_set.attachments),
            len(link_set.tags),
        )
        return link_set

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _collect_inlinks(self, doc: Document, builder: LinkSetBuilder) -> None:
        for source_path, targets in self._store.resolved_links().items():
            if not targets.get(doc.path):
                continue
            source = self._store.get_document(source_path)
            if source is not None:
                builder.add_inlink(source.basename)

    def _collect_outlinks(
        self,
        doc: Document,
        parsed: ParsedLinks,
        builder: LinkSetBuilder,
    ) -> None:
        for link in parsed.links:
            self._add_target(doc, link.raw, builder, embed=False)
        for link in parsed.embeds:
            self._add_target(doc, link.raw, builder, embed=True)
        if parsed.frontmatter:
            for name in extract_frontmatter_links(parsed.frontmatter):
                self._add_target(doc, name, builder, embed=False)

    def _add_target(
        self,
        doc: Document,
        name: str,
        builder: LinkSetBuilder,
        *,
        embed: bool,
    ) -> None:
        target = self._store.resolve(name, doc.path)
        if target is None:
            return  # dangling
        if target.kind is DocumentKind.CANVAS:
            builder.add_canvas_link(target.basename)
        elif embed and target.kind is DocumentKind.ATTACHMENT:
            builder.add_attachment(target.name)
        else:
            # Plain links to any other file count as outlinks, attachments included.
            builder.add_outlink(target.basename)

    async def _collect_canvas_references(self, doc: Document, builder: LinkSetBuilder) -> None:
        pattern = canvas_reference_pattern(doc.basename)
        for board in self._store.list_canvas_boards():
            content = await self._store.read_raw(board)
            if pattern.search(content):
                builder.add_canvas_link(board.basename)
