"""Line-break and heading structure for story content.

Newsletters arrive as anything from bare text to fully tagged HTML. Plain or
barely tagged input is rebuilt as paragraphs; tagged input keeps its
structure but has literal newlines turned into ``<br>``. Markdown-style
heading lines then become real heading elements.
"""

from __future__ import annotations

import re

from briefmark.dom.text import iter_text_nodes
from briefmark.dom.tree import (
    FRAGMENT,
    ElementNode,
    Node,
    TextNode,
    detach,
    element,
    has_ancestor,
    replace_with,
)

LINE_BREAK_CLASS = "story-line-break"

# Whitespace inside these is content, not formatting
VERBATIM_TAGS = frozenset(("pre", "code"))

# Fewer than this many tags and the input is treated as plain text
MIN_TAGS_FOR_HTML = 4

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_STARTS_WITH_BLOCK = re.compile(
    r"<(p|h[1-6]|div|ul|ol|pre|blockquote|figure|table)\b", re.IGNORECASE
)

# Top-level elements that already form their own paragraph-level block
_BLOCK_TAGS = frozenset(
    (
        *(f"h{level}" for level in range(1, 7)),
        "p",
        "div",
        "ul",
        "ol",
        "pre",
        "blockquote",
        "figure",
        "table",
    )
)
_HEADING_LINE = re.compile(r"\s*(#{1,6})\s+(\S.*?)\s*")

# Containers in which a heading line may stand on its own
_HEADING_HOSTS = frozenset(
    (
        FRAGMENT,
        "p",
        "div",
        "section",
        "article",
        "main",
        "blockquote",
        "li",
        "td",
        "th",
        "dd",
    )
)

# Siblings that end a visual line
_LINE_EDGE_TAGS = frozenset(
    (
        "br",
        "hr",
        "p",
        "div",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "ul",
        "ol",
        "li",
        "blockquote",
        "pre",
        "table",
        "figure",
        "section",
        "article",
    )
)


def is_minimally_tagged(html: str) -> bool:
    """True when *html* has too few tags to carry its own structure."""
    return html.count("<") < MIN_TAGS_FOR_HTML


def text_to_paragraphs(text: str) -> str:
    """Rebuild plain or minimally tagged text as paragraph HTML.

    Blank-line runs separate paragraphs; single newlines become ``<br>``.
    A paragraph that already opens with a block element is not wrapped again.
    """
    br = f'<br class="{LINE_BREAK_CLASS}">'
    parts = []
    for para in _PARAGRAPH_BREAK.split(text.strip()):
        para = para.strip("\n")
        if para.strip():
            para = para.replace("\n", br)
            if not _STARTS_WITH_BLOCK.match(para):
                para = f"<p>{para}</p>"
            parts.append(para)
    return "".join(parts)


def _trimmed_run(run: list[Node]) -> list[Node]:
    """Drop newlines at the edges of a paragraph run."""
    if run and isinstance(run[0], TextNode):
        run[0].text = run[0].text.lstrip("\n")
    if run and isinstance(run[-1], TextNode):
        run[-1].text = run[-1].text.rstrip("\n")
    return [n for n in run if not (isinstance(n, TextNode) and not n.text)]


def wrap_paragraphs(root: ElementNode) -> None:
    """Group a lightly tagged tree's top-level content into paragraphs.

    Runs of text and inline elements become ``<p>`` elements, split at
    blank lines in top-level text. Block elements are kept as they are, so
    text under ``pre``/``code`` is never split. Follow with
    ``split_text_lines`` for the remaining single newlines.
    """
    blocks: list[Node] = []
    run: list[Node] = []

    def close_run() -> None:
        trimmed = _trimmed_run(run)
        if not _is_blank(trimmed):
            blocks.append(element("p", children=trimmed))
        run.clear()

    for child in list(root.children):
        if isinstance(child, ElementNode) and child.tag in _BLOCK_TAGS:
            close_run()
            blocks.append(child)
        elif isinstance(child, TextNode):
            for index, piece in enumerate(_PARAGRAPH_BREAK.split(child.text)):
                if index:
                    close_run()
                if piece:
                    run.append(TextNode(piece))
        else:
            run.append(child)
    close_run()

    for child in list(root.children):
        detach(child)
    for block in blocks:
        root.append(block)


def split_text_lines(root: ElementNode) -> None:
    """Turn newlines inside text nodes into ``<br>`` elements.

    Text under ``pre``/``code`` and whitespace-only formatting between tags
    are left alone. Existing ``<br>`` elements get the line-break class.
    """
    for br in root.find_all("br"):
        br.add_class(LINE_BREAK_CLASS)

    for node in list(iter_text_nodes(root)):
        if "\n" not in node.text or not node.text.strip():
            continue
        if has_ancestor(node, VERBATIM_TAGS):
            continue

        lines = node.text.split("\n")
        replacement: list[Node] = []
        for index, line in enumerate(lines):
            if line.strip():
                replacement.append(TextNode(line))
            if index < len(lines) - 1:
                replacement.append(element("br", {"class": LINE_BREAK_CLASS}))
        replace_with(node, *replacement)


def _is_line_edge(node: Node | None) -> bool:
    return node is None or (
        isinstance(node, ElementNode) and node.tag in _LINE_EDGE_TAGS
    )


def _siblings(node: Node) -> tuple[Node | None, Node | None]:
    parent = node.parent
    if parent is None:
        return None, None
    index = parent.index_of(node)
    before = parent.children[index - 1] if index > 0 else None
    after = parent.children[index + 1] if index + 1 < len(parent.children) else None
    return before, after


def _is_blank(nodes: list[Node]) -> bool:
    return all(
        (isinstance(n, TextNode) and not n.text.strip())
        or (isinstance(n, ElementNode) and n.tag == "br")
        for n in nodes
    )


def split_paragraph(paragraph: ElementNode, child: Node, replacement: Node) -> None:
    """Lift *replacement* out of *paragraph* in place of *child*.

    Content before and after *child* stays in two paragraphs (copies of the
    original's attributes); a ``<br>`` touching the split point is dropped,
    and a side left with nothing but whitespace disappears.
    """
    index = paragraph.index_of(child)
    before = paragraph.children[:index]
    after = paragraph.children[index + 1 :]
    if before and isinstance(before[-1], ElementNode) and before[-1].tag == "br":
        before.pop()
    if after and isinstance(after[0], ElementNode) and after[0].tag == "br":
        after.pop(0)

    pieces: list[Node] = []
    if not _is_blank(before):
        pieces.append(element("p", paragraph.attrs, before))
    pieces.append(replacement)
    if not _is_blank(after):
        attrs = {k: v for k, v in paragraph.attrs.items() if k != "id"}
        pieces.append(element("p", attrs, after))
    replace_with(paragraph, *pieces)


def convert_markdown_headings(root: ElementNode) -> int:
    """Replace ``#``..``######`` heading lines with ``h1``..``h6`` elements.

    Returns the number of headings created.
    """
    created = 0
    for node in list(iter_text_nodes(root)):
        match = _HEADING_LINE.fullmatch(node.text)
        parent = node.parent
        if match is None or parent is None or parent.tag not in _HEADING_HOSTS:
            continue
        if has_ancestor(node, VERBATIM_TAGS):
            continue
        before, after = _siblings(node)
        if not (_is_line_edge(before) and _is_line_edge(after)):
            continue

        level = len(match.group(1))
        heading = element(f"h{level}", children=[TextNode(match.group(2))])
        if parent.tag == "p":
            split_paragraph(parent, node, heading)
        else:
            for sibling in (before, after):
                if isinstance(sibling, ElementNode) and sibling.tag == "br":
                    detach(sibling)
            replace_with(node, heading)
        created += 1
    return created
