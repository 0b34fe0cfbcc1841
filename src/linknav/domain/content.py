"""Content parsing — markdown frontmatter and canvas board JSON.

Pure parsing utilities. File I/O lives in
:mod:`linknav.infrastructure.filesystem`; these functions only see text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

_FRONTMATTER_DELIMITER = "---"


def _new_yaml() -> YAML:
    """Create a fresh safe YAML loader.

    A new instance per call keeps parser state from leaking across
    documents (ruamel.yaml's YAML object is stateful).
    """
    return YAML(typ="safe", pure=True)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter and body from markdown content.

    Expects the file to start with ``---`` on the first line. The second
    ``---`` closes the YAML block. Everything after is the body.

    Handles both ``\\n`` and ``\\r\\n`` line endings.

    Returns:
        A ``(frontmatter_dict, body_text)`` tuple. If no valid
        frontmatter delimiters are found, or the YAML block does not
        parse to a mapping, returns ``({}, content)``.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != _FRONTMATTER_DELIMITER:
        return {}, content

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONTMATTER_DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return {}, content

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])

    if body.startswith("\n"):
        body = body[1:]

    try:
        fm = _new_yaml().load(yaml_block)
    except YAMLError:
        return {}, content
    if not isinstance(fm, dict):
        return {}, body
    return fm, body


@dataclass(frozen=True)
class CanvasContent:
    """References found on a canvas board.

    Attributes:
        files: Vault paths of ``file`` nodes, in node order.
        texts: Markdown text of ``text`` nodes, in node order.
    """

    files: list[str] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)


def parse_canvas(content: str) -> CanvasContent:
    """Parse a ``.canvas`` JSON document.

    Malformed JSON or an unexpected shape yields an empty board rather
    than an error: a broken board simply contributes no links.
    """
    try:
        data = json.loads(content) if content.strip() else {}
    except json.JSONDecodeError:
        return CanvasContent()
    if not isinstance(data, dict):
        return CanvasContent()

    files: list[str] = []
    texts: list[str] = []
    for node in data.get("nodes") or []:
        if not isinstance(node, dict):
            continue
        node_type = node.get("type")
        if node_type == "file" and isinstance(node.get("file"), str):
            files.append(node["file"])
        elif node_type == "text" and isinstance(node.get("text"), str):
            texts.append(node["text"])
    return CanvasContent(files=files, texts=texts)
