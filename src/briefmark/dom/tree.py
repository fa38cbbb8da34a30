"""Typed HTML tree: parsing, mutation helpers and serialisation.

The tree is a tagged union of ``ElementNode`` and ``TextNode``. It is the
only document model the pipeline manipulates; selectolax is used purely as
the HTML5 parser that feeds it.
"""

# Pattern: Functional Core (pure functions over a small mutable tree)

from __future__ import annotations

import html as html_module
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from selectolax.lexbor import LexborHTMLParser

# Tag of the synthetic root returned by parse_html(); serialises as its children.
FRAGMENT = "#fragment"

VOID_ELEMENTS = frozenset(
    (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    )
)

# Elements whose text is not document content (never flattened, never escaped)
RAW_TEXT_ELEMENTS = frozenset(("script", "style", "noscript", "template"))

# The HTML parser drops one newline directly after these start tags
_LEADING_NEWLINE_ELEMENTS = frozenset(("pre", "textarea", "listing"))


@dataclass(eq=False)
class TextNode:
    """A run of character data."""

    text: str
    parent: ElementNode | None = field(default=None, repr=False)


@dataclass(eq=False)
class ElementNode:
    """An element with ordered children.

    Attributes:
        tag: Lower-case tag name, or ``FRAGMENT`` for a parse root.
        attrs: Attribute map in source order; boolean attributes map to "".
        children: Child nodes in document order.
        parent: Containing element, None for a root.
    """

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    parent: ElementNode | None = field(default=None, repr=False)

    def append(self, node: Node) -> Node:
        detach(node)
        node.parent = self
        self.children.append(node)
        return node

    def insert(self, index: int, node: Node) -> Node:
        detach(node)
        node.parent = self
        self.children.insert(index, node)
        return node

    def index_of(self, node: Node) -> int:
        for i, child in enumerate(self.children):
            if child is node:
                return i
        msg = f"{type(node).__name__} is not a child of <{self.tag}>"
        raise ValueError(msg)

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()

    def add_class(self, *names: str) -> None:
        """Append class names, skipping ones already present."""
        current = self.classes
        for name in names:
            if name not in current:
                current.append(name)
        self.attrs["class"] = " ".join(current)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def iter_elements(self) -> Iterator[ElementNode]:
        """Yield descendant elements in document order (self excluded).

        Iterates over a snapshot, so callers may mutate the tree as they go.
        """
        found: list[ElementNode] = []
        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if isinstance(node, ElementNode):
                found.append(node)
                stack.extend(reversed(node.children))
        return iter(found)

    def find_all(self, *tags: str) -> list[ElementNode]:
        wanted = frozenset(tags)
        return [el for el in self.iter_elements() if el.tag in wanted]


type Node = ElementNode | TextNode


def element(
    tag: str,
    attrs: dict[str, str] | None = None,
    children: list[Node] | None = None,
) -> ElementNode:
    """Build an element and adopt *children*."""
    el = ElementNode(tag, dict(attrs or {}))
    for child in children or []:
        el.append(child)
    return el


def detach(node: Node) -> Node:
    """Remove *node* from its parent (no-op for roots)."""
    parent = node.parent
    if parent is not None:
        del parent.children[parent.index_of(node)]
        node.parent = None
    return node


def replace_with(node: Node, *replacements: Node) -> None:
    """Put *replacements* where *node* was, then detach *node*."""
    parent = node.parent
    if parent is None:
        msg = "Cannot replace a root node"
        raise ValueError(msg)
    index = parent.index_of(node)
    detach(node)
    for offset, replacement in enumerate(replacements):
        parent.insert(index + offset, replacement)


def unwrap(el: ElementNode) -> None:
    """Replace an element by its children."""
    replace_with(el, *list(el.children))


def ancestors(node: Node) -> Iterator[ElementNode]:
    parent = node.parent
    while parent is not None:
        yield parent
        parent = parent.parent


def has_ancestor(node: Node, tags: frozenset[str]) -> bool:
    return any(a.tag in tags for a in ancestors(node))


def contains(container: Node, node: Node) -> bool:
    """Inclusive containment, matching DOM ``Node.contains``."""
    if container is node:
        return True
    return any(a is container for a in ancestors(node))


def common_ancestor(a: Node, b: Node) -> Node | None:
    """Deepest node containing both *a* and *b* (inclusive)."""
    chain_a = [a, *ancestors(a)]
    chain_b = {id(n) for n in (b, *ancestors(b))}
    for node in chain_a:
        if id(node) in chain_b:
            return node
    return None


def node_at_path(root: ElementNode, path: list[int] | tuple[int, ...]) -> Node | None:
    """Follow child indexes from *root*; None when the path leaves the tree."""
    node: Node = root
    for index in path:
        if not isinstance(node, ElementNode) or not 0 <= index < len(node.children):
            return None
        node = node.children[index]
    return node


# ---------------------------------------------------------------------------
# Parsing (selectolax -> typed tree)
# ---------------------------------------------------------------------------


def parse_html(html: str) -> ElementNode:
    """Parse an HTML document or fragment into a ``FRAGMENT`` root.

    Full documents contribute the children of ``<body>``; the head,
    comments and doctype are dropped.
    """
    root = ElementNode(FRAGMENT)
    if not html:
        return root

    tree = LexborHTMLParser(html)
    body = tree.body
    if body is None:
        return root

    _copy_children(body, root)
    return root


def _copy_children(source: Any, target: ElementNode) -> None:
    """Copy the selectolax subtree under *source* into *target*.

    Walks with an explicit stack so nesting depth is not bounded by the
    interpreter's recursion limit.
    """
    pending: list[tuple[Any, ElementNode]] = [(source, target)]
    while pending:
        parent, into = pending.pop()
        child = parent.child
        while child is not None:
            tag = child.tag
            # Text node - selectolax uses "-text" as the tag
            if tag == "-text":
                text = child.text_content
                if text:
                    into.append(TextNode(text))
            elif tag and tag[0] not in "-_!":
                attrs = {
                    name: value or "" for name, value in child.attributes.items()
                }
                el = ElementNode(tag.lower(), attrs)
                into.append(el)
                pending.append((child, el))
            child = child.next


# ---------------------------------------------------------------------------
# Serialisation (typed tree -> HTML)
# ---------------------------------------------------------------------------


def to_html(node: Node) -> str:
    """Serialise a node. ``FRAGMENT`` roots serialise as their children."""
    parts: list[str] = []
    _serialise(node, parts, raw=False)
    return "".join(parts)


def inner_html(el: ElementNode) -> str:
    parts: list[str] = []
    for child in el.children:
        _serialise(child, parts, raw=el.tag in RAW_TEXT_ELEMENTS)
    return "".join(parts)


def _format_attrs(attrs: dict[str, str]) -> str:
    return "".join(
        f' {name}="{html_module.escape(value, quote=True)}"'
        for name, value in attrs.items()
    )


def _serialise(node: Node, parts: list[str], *, raw: bool) -> None:
    # Items are (node, raw) pairs still to open, or closing tags to emit
    stack: list[tuple[Node, bool] | str] = [(node, raw)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        current, is_raw = item
        if isinstance(current, TextNode):
            text = current.text
            parts.append(text if is_raw else html_module.escape(text, quote=False))
            continue

        if current.tag == FRAGMENT:
            stack.extend((child, False) for child in reversed(current.children))
            continue

        parts.append(f"<{current.tag}{_format_attrs(current.attrs)}>")
        if current.tag in VOID_ELEMENTS:
            continue

        first = current.children[0] if current.children else None
        if (
            current.tag in _LEADING_NEWLINE_ELEMENTS
            and isinstance(first, TextNode)
            and first.text.startswith("\n")
        ):
            parts.append("\n")

        stack.append(f"</{current.tag}>")
        child_raw = current.tag in RAW_TEXT_ELEMENTS
        stack.extend((child, child_raw) for child in reversed(current.children))
