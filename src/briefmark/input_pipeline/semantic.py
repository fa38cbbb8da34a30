"""Reader-facing classes and link behaviour for normalised stories."""

from __future__ import annotations

from briefmark.dom.text import flatten_text
from briefmark.dom.tree import ElementNode, detach

HEADER_CLASS = "story-header"

# Tag -> class applied to every element with that tag
SEMANTIC_CLASSES: dict[str, str] = {
    "p": "story-paragraph",
    "ul": "story-list",
    "ol": "story-list",
    "li": "story-list-item",
    "blockquote": "story-blockquote",
    "pre": "story-code-block",
    "code": "story-code-inline",
    "strong": "story-bold",
    "b": "story-bold",
    "em": "story-italic",
    "i": "story-italic",
    "a": "story-link",
}

_HEADINGS = frozenset(f"h{level}" for level in range(1, 7))


def _is_external(href: str) -> bool:
    return href.startswith(("http://", "https://"))


def apply_semantic_classes(root: ElementNode) -> None:
    """Tag headings, text blocks, emphasis and links with story classes."""
    for el in root.iter_elements():
        if el.tag in _HEADINGS:
            el.add_class(f"story-{el.tag}", HEADER_CLASS)
        elif el.tag in SEMANTIC_CLASSES:
            el.add_class(SEMANTIC_CLASSES[el.tag])

        if el.tag == "a" and _is_external(el.attrs.get("href", "")):
            if "target" not in el.attrs:
                el.attrs["target"] = "_blank"
                el.attrs["rel"] = "noopener noreferrer"


def remove_empty_paragraphs(root: ElementNode) -> int:
    """Drop ``<p>`` elements with no text and no child elements."""
    removed = 0
    for p in root.find_all("p"):
        has_elements = any(isinstance(c, ElementNode) for c in p.children)
        if not has_elements and not flatten_text(p).strip():
            detach(p)
            removed += 1
    return removed
