"""Tests for the flattened-text visitor and offset conversion.

Offsets computed here are the coordinate space for every highlight, so the
rules are pinned down precisely.
"""

from __future__ import annotations

import pytest

from briefmark.dom.text import flatten_text, iter_text_nodes, text_map, text_offset_of
from briefmark.dom.tree import TextNode, node_at_path, parse_html


class TestFlattenText:
    """Tests for flatten_text()."""

    def test_concatenates_in_document_order(self) -> None:
        """Text from nested elements is joined without separators."""
        root = parse_html("<h1>Title</h1><p>Hello <b>bold</b> world</p>")
        assert flatten_text(root) == "TitleHello bold world"

    def test_br_contributes_nothing(self) -> None:
        """Line breaks add no characters."""
        assert flatten_text(parse_html("<p>one<br>two</p>")) == "onetwo"

    def test_whitespace_not_collapsed(self) -> None:
        """Runs of spaces are preserved verbatim."""
        assert flatten_text(parse_html("<p>a   b</p>")) == "a   b"

    def test_script_and_style_skipped(self) -> None:
        """Non-content element text is not part of the flattened text."""
        root = parse_html("<p>a</p><style>p{}</style><script>x()</script><p>b</p>")
        assert flatten_text(root) == "ab"

    def test_iter_text_nodes_order(self) -> None:
        """Text nodes are yielded in document order."""
        root = parse_html("<p>a<i>b</i>c</p>")
        assert [n.text for n in iter_text_nodes(root)] == ["a", "b", "c"]


class TestTextMap:
    """Tests for text_map()."""

    def test_spans_are_contiguous(self) -> None:
        """Each node's span starts where the previous one ended."""
        root = parse_html("<p>ab<i>cde</i>f</p>")
        spans = text_map(root)
        assert [(s.start, s.end) for s in spans] == [(0, 2), (2, 5), (5, 6)]
        assert [s.node.text for s in spans] == ["ab", "cde", "f"]


class TestTextOffsetOf:
    """Tests for text_offset_of() boundary conversion."""

    def test_text_node_boundary(self) -> None:
        """A text boundary adds the character offset to the text before it."""
        root = parse_html("<p>ab</p><p>cd</p>")
        node = node_at_path(root, [1, 0])
        assert node is not None
        assert text_offset_of(root, node, 1) == 3

    def test_element_boundary_before_child(self) -> None:
        """An element boundary counts text before the indexed child."""
        root = parse_html("<p>ab</p><p>cd</p>")
        assert text_offset_of(root, root, 1) == 2

    def test_element_boundary_at_end(self) -> None:
        """An offset past the last child is the end of the element's text."""
        root = parse_html("<p>ab</p><p>cd</p>")
        second = node_at_path(root, [1])
        assert second is not None
        assert text_offset_of(root, second, 1) == 4

    def test_offset_clamped_to_text_length(self) -> None:
        """Character offsets beyond the text clamp to its end."""
        root = parse_html("<p>ab</p>")
        node = node_at_path(root, [0, 0])
        assert node is not None
        assert text_offset_of(root, node, 10) == 2

    def test_node_outside_root_raises(self) -> None:
        """A boundary in another tree cannot be converted."""
        root = parse_html("<p>ab</p>")
        with pytest.raises(ValueError):
            text_offset_of(root, TextNode("elsewhere"), 0)

    def test_negative_offset_raises(self) -> None:
        """Negative boundary offsets are rejected."""
        root = parse_html("<p>ab</p>")
        with pytest.raises(ValueError):
            text_offset_of(root, root, -1)

    def test_consistent_with_flatten(self) -> None:
        """Offsets from any text boundary slice the flattened text correctly."""
        root = parse_html("<p>Hello <b>bold</b> and <i>italic</i> text</p>")
        flat = flatten_text(root)
        for span in text_map(root):
            for i in range(len(span.node.text) + 1):
                offset = text_offset_of(root, span.node, i)
                assert flat[offset:span.end] == span.node.text[i:]
