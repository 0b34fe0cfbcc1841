"""Shared pytest fixtures and test helpers for linknav tests."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Generator, Iterable
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from linknav.domain.types import Document, LinkSet
from linknav.infrastructure.vault import VaultStore
from linknav.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _isolate_cli_state() -> Generator[None]:
    """Undo what AppContext does to process-wide logging and telemetry."""
    root = logging.getLogger()
    package = logging.getLogger("linknav")
    handlers, level, package_level = root.handlers[:], root.level, package.level
    disable_telemetry()
    yield
    disable_telemetry()
    structlog.contextvars.clear_contextvars()
    root.handlers = handlers
    root.setLevel(level)
    package.setLevel(package_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    """Temporary vault with notes, a canvas board and an attachment.

    Layout::

        Note A.md         links B, Nowhere (dangling), MOC.canvas, report.pdf;
                          embeds diagram.png; frontmatter links Note C
        Note B.md         links back to Note A
        Note C.md         leaf
        MOC.canvas        text node [[Note A]], file node Note C.md
        assets/diagram.png
        .obsidian/ignored.md
    """
    write_file(
        tmp_path,
        "Note A.md",
        "---\n"
        "tags: [beta, '#gamma']\n"
        'related: "[[Note C#Intro|see C]]"\n'
        "---\n"
        "Links to [[Note B]] and [[Nowhere]].\n"
        "![[diagram.png]]\n"
        "See [[report.pdf]] and [[MOC.canvas]]. #alpha\n",
    )
    write_file(tmp_path, "Note B.md", "Back to [[Note A]].\n")
    write_file(tmp_path, "Note C.md", "Leaf note.\n")
    write_canvas(tmp_path, "MOC.canvas", texts=["[[Note A]]"], files=["Note C.md"])
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "diagram.png").write_bytes(b"\x89PNG\r\n")
    write_file(tmp_path, ".obsidian/ignored.md", "[[Note A]]\n")
    return tmp_path


@pytest.fixture
def store(vault_root: Path) -> VaultStore:
    return VaultStore(vault_root)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_file(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_canvas(
    root: Path,
    relative: str,
    *,
    texts: Iterable[str] = (),
    files: Iterable[str] = (),
) -> Path:
    nodes: list[dict[str, object]] = []
    for i, text in enumerate(texts):
        nodes.append({"id": f"t{i}", "type": "text", "text": text, "x": 0, "y": 0})
    for i, file in enumerate(files):
        nodes.append({"id": f"f{i}", "type": "file", "file": file, "x": 0, "y": 0})
    return write_file(root, relative, json.dumps({"nodes": nodes, "edges": []}))


def doc(name: str) -> Document:
    """A note document named *name* (``doc("A")`` is ``A.md``)."""
    return Document.from_path(name if "." in name else f"{name}.md")


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeExtractor:
    """Stands in for LinkExtractor: canned LinkSets plus a call log.

    Attributes:
        calls: Paths in the order extractions started.
        failures: Exceptions to raise per path.
        delay: Seconds every extraction sleeps before returning.
        gate: When set, extractions wait on it before returning.
    """

    def __init__(self, link_sets: dict[str, LinkSet] | None = None) -> None:
        self.link_sets = link_sets or {}
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.delay = 0.0
        self.gate: asyncio.Event | None = None

    async def extract(self, document: Document) -> LinkSet:
        self.calls.append(document.path)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if document.path in self.failures:
            raise self.failures[document.path]
        return self.link_sets.get(document.path, LinkSet())


class NameStore:
    """Minimal DocumentStore for traversal tests: resolves by basename."""

    def __init__(self, paths: Iterable[str]) -> None:
        self.docs = {p: Document.from_path(p) for p in paths}

    def resolve(self, name: str, context_path: str) -> Document | None:
        for document in self.docs.values():
            if name in (document.basename, document.path):
                return document
        return None

    def get_document(self, path: str) -> Document | None:
        return self.docs.get(path)

    def list_documents(self) -> list[Document]:
        return list(self.docs.values())


def link_graph(
    edges: dict[str, list[str]],
    *,
    attachments: dict[str, list[str]] | None = None,
) -> tuple[NameStore, FakeExtractor]:
    """Build a store and extractor from ``{source: [targets]}`` note names.

    Inlinks are derived from the edges in edge order. Names ending in
    ``.canvas`` become canvas boards.
    """
    names: dict[str, None] = {}
    inlinks: dict[str, list[str]] = {}
    for source, targets in edges.items():
        names.setdefault(source, None)
        for target in targets:
            names.setdefault(target, None)
            inlinks.setdefault(target, []).append(source)

    paths = {name: doc(name).path for name in names}
    link_sets = {
        paths[name]: LinkSet(
            inlinks=tuple(doc(s).basename for s in inlinks.get(name, [])),
            outlinks=tuple(doc(t).basename for t in edges.get(name, [])),
            attachments=tuple((attachments or {}).get(name, [])),
        )
        for name in names
    }
    return NameStore(paths.values()), FakeExtractor(link_sets)
