"""Tag domain logic — inline tag parsing and frontmatter normalization."""

from __future__ import annotations

import re
from typing import Any

# #tag, #nested/tag, #tag-with_dashes. Purely numeric tags (#123) are not tags.
_INLINE_TAG_PATTERN = re.compile(r"(?<![\w#/&\[])#([\w\-/]*[^\W\d][\w\-/]*)")


def normalize_tag(tag: str) -> str:
    """Strip whitespace and a leading ``#``.

    Examples:
        >>> normalize_tag("#project/alpha")
        'project/alpha'
        >>> normalize_tag("  idea ")
        'idea'
    """
    return tag.strip().lstrip("#").strip()


def extract_inline_tags(body: str) -> list[str]:
    """Extract ``#tags`` from markdown text in order of appearance."""
    return [match.group(1) for match in _INLINE_TAG_PATTERN.finditer(body)]


def frontmatter_tags(frontmatter: dict[str, Any] | None) -> list[str]:
    """Read the ``tags`` field of a frontmatter mapping.

    Accepts a single string or a list of strings. Anything else
    (missing key, numbers, nested mappings) yields no tags.
    """
    if not frontmatter:
        return []
    raw = frontmatter.get("tags")
    if isinstance(raw, str):
        values: list[Any] = [raw]
    elif isinstance(raw, list):
        values = raw
    else:
        return []
    tags: list[str] = []
    for value in values:
        if isinstance(value, str):
            tag = normalize_tag(value)
            if tag:
                tags.append(tag)
    return tags
