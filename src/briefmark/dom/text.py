"""The flattened-text coordinate space.

Every character offset in the system (selection capture, stored highlights,
marker insertion) is an index into the string produced here. The
normaliser, the selection extractor and the renderer all walk text through
``iter_text_nodes``; nothing else may define what a text offset means.

Traversal rules:
- Text nodes contribute their decoded text verbatim (no whitespace collapse).
- Element boundaries and ``<br>`` contribute nothing.
- script / style / noscript / template content is skipped.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from briefmark.dom.tree import RAW_TEXT_ELEMENTS, Node, TextNode


@dataclass(frozen=True)
class TextSpan:
    """Where one text node's characters fall in the flattened text."""

    node: TextNode
    start: int
    end: int


def iter_text_nodes(root: Node) -> Iterator[TextNode]:
    """Yield text nodes under *root* in document order."""
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, TextNode):
            yield node
        elif node.tag not in RAW_TEXT_ELEMENTS:
            stack.extend(reversed(node.children))


def flatten_text(root: Node) -> str:
    """Concatenate the text under *root* using the shared traversal rules."""
    return "".join(node.text for node in iter_text_nodes(root))


def text_map(root: Node) -> list[TextSpan]:
    """Map each text node under *root* to its flattened-text range."""
    spans: list[TextSpan] = []
    position = 0
    for node in iter_text_nodes(root):
        end = position + len(node.text)
        spans.append(TextSpan(node, position, end))
        position = end
    return spans


def _length_before(root: Node, target: Node) -> int | None:
    """Flattened length preceding *target*, or None if it is not reachable."""
    total = 0
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        if node is target:
            return total
        if isinstance(node, TextNode):
            total += len(node.text)
        elif node.tag not in RAW_TEXT_ELEMENTS:
            stack.extend(reversed(node.children))
    return None


def text_offset_of(root: Node, container: Node, offset: int) -> int:
    """Convert a DOM boundary point to a flattened-text offset within *root*.

    Follows DOM Range semantics: *offset* counts characters when *container*
    is a text node and child positions when it is an element.

    Raises:
        ValueError: If the boundary point is not inside *root*'s text.
    """
    if offset < 0:
        msg = f"Negative boundary offset {offset}"
        raise ValueError(msg)

    if isinstance(container, TextNode):
        before = _length_before(root, container)
        if before is None:
            msg = "Boundary text node is outside the root"
            raise ValueError(msg)
        return before + min(offset, len(container.text))

    if offset < len(container.children):
        before = _length_before(root, container.children[offset])
    else:
        start = _length_before(root, container)
        before = None if start is None else start + len(flatten_text(container))
    if before is None:
        msg = f"Boundary <{container.tag}>[{offset}] is outside the root"
        raise ValueError(msg)
    return before

