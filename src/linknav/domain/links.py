"""Link syntax — wikilinks, embeds, frontmatter links, attachment references.

Pure functions, no store access. The extractor resolves whatever these
return; nothing here decides whether a target exists.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

# [[Target]], [[Target#Header]], [[Target|Alias]], ![[Embed]]
_WIKILINK_PATTERN = re.compile(r"(!?)\[\[([^\[\]]+)\]\]")

# Bracket links inside serialized frontmatter.
_FRONTMATTER_LINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")

ATTACHMENT_EXTENSIONS: dict[str, frozenset[str]] = {
    "image": frozenset({"png", "jpg", "jpeg", "gif", "bmp", "svg", "webp", "avif", "tiff"}),
    "audio": frozenset({"mp3", "wav", "m4a", "ogg", "flac", "3gp"}),
    "video": frozenset({"mp4", "webm", "ogv", "mov", "mkv"}),
    "document": frozenset({"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "epub"}),
    "archive": frozenset({"zip", "rar", "7z", "tar", "gz"}),
    "code": frozenset({"py", "js", "ts", "java", "c", "cpp", "rs", "go", "sh", "sql"}),
}

ALL_ATTACHMENT_EXTENSIONS: frozenset[str] = frozenset().union(*ATTACHMENT_EXTENSIONS.values())

_ATTACHMENT_PATTERN = re.compile(
    r"\[\[([^\[\]|#]+?\.(?:"
    + "|".join(sorted(ALL_ATTACHMENT_EXTENSIONS, key=lambda e: (-len(e), e)))
    + r"))(?:[#|][^\[\]]*)?\]\]",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class WikiLink:
    """A wikilink or embed extracted from text."""

    raw: str  # target portion, header and alias removed
    display: str | None = None  # alias after | if present
    header: str | None = None  # fragment after # if present
    embed: bool = False  # written as ![[...]]


def clean_link_target(inner: str) -> str:
    """Strip the ``|alias`` and ``#header`` suffixes from a link body.

    Examples:
        >>> clean_link_target("Note A#Intro|see intro")
        'Note A'
        >>> clean_link_target("folder/Note B")
        'folder/Note B'
    """
    target = inner.split("|", 1)[0]
    target = target.split("#", 1)[0]
    return target.strip()


def parse_wikilink(inner: str, *, embed: bool = False) -> WikiLink:
    """Build a :class:`WikiLink` from the text between ``[[`` and ``]]``."""
    target_part, _, alias = inner.partition("|")
    target, _, header = target_part.partition("#")
    return WikiLink(
        raw=target.strip(),
        display=alias.strip() or None,
        header=header.strip() or None,
        embed=embed,
    )


def extract_wikilinks(body: str) -> list[WikiLink]:
    """Extract all ``[[wikilinks]]`` and ``![[embeds]]`` from markdown text.

    Links whose target is empty after stripping (``[[#Header]]``, a link
    to a heading of the same note) are skipped.
    """
    results: list[WikiLink] = []
    for match in _WIKILINK_PATTERN.finditer(body):
        link = parse_wikilink(match.group(2), embed=bool(match.group(1)))
        if link.raw:
            results.append(link)
    return results


def extract_frontmatter_links(frontmatter: Mapping[str, Any]) -> list[str]:
    """Find bracket links anywhere in a frontmatter mapping.

    The mapping is serialized to JSON and scanned as text, so links
    nested in lists or sub-mappings are found too. Returns cleaned
    targets in document order.
    """
    if not frontmatter:
        return []
    serialized = json.dumps(frontmatter, default=str, ensure_ascii=False)
    targets: list[str] = []
    for match in _FRONTMATTER_LINK_PATTERN.finditer(serialized):
        # Unquoted YAML ``[[Note]]`` loads as a nested list: [["Note"]]
        target = clean_link_target(match.group(1)).strip('"').strip()
        if target:
            targets.append(target)
    return targets


def extract_attachment_refs(content: str) -> list[str]:
    """Return file names of bracket references with a known attachment extension.

    Only the final path component is kept: ``[[assets/img/a.png|200]]``
    yields ``a.png``.
    """
    return [
        PurePosixPath(match.group(1).strip()).name
        for match in _ATTACHMENT_PATTERN.finditer(content)
    ]


def canvas_reference_pattern(display_name: str) -> re.Pattern[str]:
    """Regex matching ``[[display_name]]`` with optional header and alias.

    The name is escaped so it matches literally.
    """
    escaped = re.escape(display_name)
    return re.compile(rf"\[\[{escaped}(#[^\[\]|]*)?(\|.*?)?\]\]")

