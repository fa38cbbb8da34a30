"""Tests for the typed HTML tree: parsing, mutation and serialisation."""

from __future__ import annotations

import pytest

from briefmark.dom.text import flatten_text
from briefmark.dom.tree import (
    FRAGMENT,
    ElementNode,
    TextNode,
    common_ancestor,
    contains,
    element,
    node_at_path,
    parse_html,
    replace_with,
    to_html,
    unwrap,
)


class TestParseHtml:
    """Tests for parse_html()."""

    def test_fragment_root(self) -> None:
        """Parsing returns a fragment root holding the body's children."""
        root = parse_html("<p>Hello</p><p>World</p>")
        assert root.tag == FRAGMENT
        assert [c.tag for c in root.children if isinstance(c, ElementNode)] == [
            "p",
            "p",
        ]

    def test_nesting_past_recursion_limit(self) -> None:
        """Parsing and serialising do not depend on the recursion limit."""
        html = "<div>" * 1500 + "Hello world" + "</div>" * 1500
        root = parse_html(html)
        assert flatten_text(root) == "Hello world"
        assert "Hello world" in to_html(root)

    def test_empty_input(self) -> None:
        """Empty input yields an empty fragment."""
        assert parse_html("").children == []

    def test_full_document_uses_body(self) -> None:
        """Head content and doctype are dropped from full documents."""
        html = (
            "<!DOCTYPE html><html><head><title>T</title></head>"
            "<body><p>Body text</p></body></html>"
        )
        assert to_html(parse_html(html)) == "<p>Body text</p>"

    def test_comments_dropped(self) -> None:
        """Comments never become nodes."""
        root = parse_html("<p>a<!-- note -->b</p>")
        assert flatten_text(root) == "ab"
        assert "note" not in to_html(root)

    def test_entities_decoded(self) -> None:
        """Entities are decoded into text and re-escaped on output."""
        root = parse_html("<p>Fish &amp; chips &lt;3</p>")
        assert flatten_text(root) == "Fish & chips <3"
        assert to_html(root) == "<p>Fish &amp; chips &lt;3</p>"

    def test_boolean_attribute_is_empty_string(self) -> None:
        """Valueless attributes map to an empty string."""
        root = parse_html('<details open=""><summary>s</summary></details>')
        details = root.children[0]
        assert isinstance(details, ElementNode)
        assert details.attrs == {"open": ""}

    def test_parents_are_linked(self) -> None:
        """Every parsed node points back at its parent."""
        root = parse_html("<p>Hi <b>there</b></p>")
        p = root.children[0]
        assert isinstance(p, ElementNode)
        assert p.parent is root
        assert all(child.parent is p for child in p.children)


class TestToHtml:
    """Tests for to_html() serialisation."""

    @pytest.mark.parametrize(
        "html",
        [
            "<p>Hello <b>world</b></p>",
            '<p><a href="https://example.com/?a=1&amp;b=2">link</a></p>',
            "<p>line<br>break</p>",
            '<figure><img src="a.png" alt="x"></figure>',
            "<ul><li>one</li><li>two</li></ul>",
        ],
    )
    def test_round_trip(self, html: str) -> None:
        """Serialising a parsed fragment reproduces simple markup exactly."""
        assert to_html(parse_html(html)) == html

    def test_pre_leading_newline_survives_reparse(self) -> None:
        """A leading newline kept in <pre> text survives another parse."""
        root = parse_html("<pre>\n\nindented</pre>")
        again = parse_html(to_html(root))
        assert flatten_text(again) == flatten_text(root) == "\nindented"

    def test_attribute_values_escaped(self) -> None:
        """Quotes in attribute values are escaped."""
        el = element("span", {"title": 'say "hi"'})
        assert to_html(el) == '<span title="say &quot;hi&quot;"></span>'


class TestMutation:
    """Tests for tree mutation helpers."""

    def test_append_moves_node(self) -> None:
        """Appending an attached node detaches it from its old parent."""
        text = TextNode("x")
        first = element("p", children=[text])
        second = element("p")
        second.append(text)
        assert first.children == []
        assert second.children == [text]
        assert text.parent is second

    def test_replace_with_multiple(self) -> None:
        """replace_with() puts all replacements where the node was."""
        root = parse_html("<p>a<b>b</b>c</p>")
        p = root.children[0]
        assert isinstance(p, ElementNode)
        replace_with(p.children[1], TextNode("1"), TextNode("2"))
        assert to_html(root) == "<p>a12c</p>"

    def test_replace_root_raises(self) -> None:
        """A root node has nowhere to be replaced."""
        with pytest.raises(ValueError):
            replace_with(element("p"), TextNode("x"))

    def test_unwrap_keeps_children(self) -> None:
        """unwrap() splices an element's children into its parent."""
        root = parse_html("<p>a<mark>b<i>c</i></mark>d</p>")
        mark = root.find_all("mark")[0]
        unwrap(mark)
        assert to_html(root) == "<p>ab<i>c</i>d</p>"

    def test_iter_elements_is_snapshot(self) -> None:
        """Elements can be detached while iterating."""
        root = parse_html("<div><span>a</span><span>b</span></div>")
        for el in root.iter_elements():
            if el.tag == "span":
                replace_with(el, TextNode("-"))
        assert to_html(root) == "<div>--</div>"

    def test_add_class_no_duplicates(self) -> None:
        """add_class() keeps existing classes and skips repeats."""
        el = element("p", {"class": "a"})
        el.add_class("b", "a")
        assert el.attrs["class"] == "a b"


class TestNavigation:
    """Tests for path and ancestry helpers."""

    def test_node_at_path(self) -> None:
        """Child-index paths resolve from the root."""
        root = parse_html("<p>ab</p><p>cd<b>ef</b></p>")
        node = node_at_path(root, [1, 1, 0])
        assert isinstance(node, TextNode)
        assert node.text == "ef"

    def test_node_at_path_out_of_tree(self) -> None:
        """Paths leaving the tree resolve to None."""
        root = parse_html("<p>ab</p>")
        assert node_at_path(root, [3]) is None
        assert node_at_path(root, [0, 0, 0]) is None

    def test_common_ancestor_and_contains(self) -> None:
        """The common ancestor of two texts is their shared element."""
        root = parse_html("<div><p>a</p><p>b</p></div>")
        a = node_at_path(root, [0, 0, 0])
        b = node_at_path(root, [0, 1, 0])
        assert a is not None and b is not None
        div = root.children[0]
        assert common_ancestor(a, b) is div
        assert contains(root, a)
        assert contains(a, a)
        assert not contains(a, b)
