"""Tests for link syntax — wikilinks, embeds, frontmatter links, attachments."""

from __future__ import annotations

from linknav.domain.links import (
    WikiLink,
    canvas_reference_pattern,
    clean_link_target,
    extract_attachment_refs,
    extract_frontmatter_links,
    extract_wikilinks,
)

# ---------------------------------------------------------------------------
# extract_wikilinks
# ---------------------------------------------------------------------------


class TestExtractWikilinks:
    def test_single_link(self) -> None:
        links = extract_wikilinks("This relates to [[Transformer Architectures]].")
        assert links == [WikiLink(raw="Transformer Architectures")]

    def test_multiple_links_in_order(self) -> None:
        links = extract_wikilinks("See [[Note A]] and also [[Note B]] for context.")
        assert [link.raw for link in links] == ["Note A", "Note B"]

    def test_alias_and_header(self) -> None:
        links = extract_wikilinks("Refer to [[Note A#Intro|the intro]].")
        assert links[0].raw == "Note A"
        assert links[0].header == "Intro"
        assert links[0].display == "the intro"

    def test_embed_flag(self) -> None:
        links = extract_wikilinks("![[diagram.png]] and [[Note]]")
        assert links[0].embed is True
        assert links[1].embed is False

    def test_same_note_header_link_skipped(self) -> None:
        assert extract_wikilinks("Jump to [[#Summary]].") == []

    def test_no_links(self) -> None:
        assert extract_wikilinks("Plain text, no links.") == []


class TestCleanLinkTarget:
    def test_strips_alias_and_header(self) -> None:
        assert clean_link_target("Note A#Intro|see intro") == "Note A"

    def test_keeps_folders(self) -> None:
        assert clean_link_target("folder/Note B") == "folder/Note B"

    def test_strips_whitespace(self) -> None:
        assert clean_link_target("  Note C | alias") == "Note C"


# ---------------------------------------------------------------------------
# Frontmatter links
# ---------------------------------------------------------------------------


class TestExtractFrontmatterLinks:
    def test_quoted_string_value(self) -> None:
        fm = {"related": "[[Note C#Intro|see C]]"}
        assert extract_frontmatter_links(fm) == ["Note C"]

    def test_nested_list_values(self) -> None:
        fm = {"up": ["[[Parent]]", "[[Other Parent]]"], "meta": {"source": "[[Source]]"}}
        assert extract_frontmatter_links(fm) == ["Parent", "Other Parent", "Source"]

    def test_unquoted_yaml_link_loads_as_nested_list(self) -> None:
        # ``up: [[Parent]]`` in YAML is a list containing a list.
        assert extract_frontmatter_links({"up": [["Parent"]]}) == ["Parent"]

    def test_non_string_values_ignored(self) -> None:
        assert extract_frontmatter_links({"count": 3, "draft": True}) == []

    def test_empty(self) -> None:
        assert extract_frontmatter_links({}) == []


# ---------------------------------------------------------------------------
# Attachment references
# ---------------------------------------------------------------------------


class TestExtractAttachmentRefs:
    def test_known_extensions(self) -> None:
        content = "![[photo.JPG]] [[paper.pdf]] [[song.mp3]] [[script.py]] [[bundle.zip]]"
        assert extract_attachment_refs(content) == [
            "photo.JPG",
            "paper.pdf",
            "song.mp3",
            "script.py",
            "bundle.zip",
        ]

    def test_keeps_only_file_name(self) -> None:
        assert extract_attachment_refs("![[assets/img/a.png|200]]") == ["a.png"]

    def test_notes_and_unknown_extensions_ignored(self) -> None:
        assert extract_attachment_refs("[[Note]] [[data.xyz]] [[Board.canvas]]") == []


# ---------------------------------------------------------------------------
# Canvas references
# ---------------------------------------------------------------------------


class TestCanvasReferencePattern:
    def test_plain_alias_and_header(self) -> None:
        pattern = canvas_reference_pattern("Note A")
        assert pattern.search("[[Note A]]")
        assert pattern.search("[[Note A|alias]]")
        assert pattern.search("[[Note A#Section]]")
        assert pattern.search("[[Note A#Section|alias]]")

    def test_other_names_do_not_match(self) -> None:
        assert not canvas_reference_pattern("Note A").search("[[Note AB]]")
        assert not canvas_reference_pattern("Note A").search("[[My Note A]]")

    def test_regex_characters_are_literal(self) -> None:
        assert canvas_reference_pattern("C++ (draft)").search("[[C++ (draft)]]")
        assert not canvas_reference_pattern("C++ (draft)").search("[[CCC (draft)]]")

    def test_inside_canvas_json(self) -> None:
        raw = '{"nodes":[{"type":"text","text":"see [[Note A]]"}]}'
        assert canvas_reference_pattern("Note A").search(raw)
