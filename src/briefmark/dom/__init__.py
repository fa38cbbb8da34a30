"""Typed HTML tree and the shared flattened-text visitor."""

from briefmark.dom.text import (
    TextSpan,
    flatten_text,
    iter_text_nodes,
    text_map,
    text_offset_of,
)
from briefmark.dom.tree import (
    FRAGMENT,
    ElementNode,
    Node,
    TextNode,
    common_ancestor,
    contains,
    element,
    node_at_path,
    parse_html,
    to_html,
)

__all__ = [
    "FRAGMENT",
    "ElementNode",
    "Node",
    "TextNode",
    "TextSpan",
    "common_ancestor",
    "contains",
    "element",
    "flatten_text",
    "iter_text_nodes",
    "node_at_path",
    "parse_html",
    "text_map",
    "text_offset_of",
    "to_html",
]
