"""Highlight marker markup shared by the renderer, navigator and page.

A rendered highlight is one or more ``<mark>`` elements carrying the
highlight's id; a range that crosses element boundaries produces one marker
per text segment, all with the same id.
"""

from __future__ import annotations

from briefmark.dom.tree import ElementNode

MARKER_TAG = "mark"
MARKER_ID_ATTR = "data-highlight-id"
MARKER_CLASS = "story-highlight"
FOCUS_CLASS = "highlight-focus"


def color_class(color: str) -> str:
    return f"{MARKER_CLASS}-{color}"


def marker_attrs(highlight_id: str, color: str) -> dict[str, str]:
    return {
        "class": f"{MARKER_CLASS} {color_class(color)}",
        MARKER_ID_ATTR: highlight_id,
    }


def marker_selector(highlight_id: str) -> str:
    """CSS selector for a highlight's markers, safe for any id string."""
    escaped = highlight_id.replace("\\", "\\\\").replace('"', '\\"')
    return f'{MARKER_TAG}[{MARKER_ID_ATTR}="{escaped}"]'


def is_marker(el: ElementNode, highlight_id: str | None = None) -> bool:
    if el.tag != MARKER_TAG or MARKER_ID_ATTR not in el.attrs:
        return False
    return highlight_id is None or el.attrs[MARKER_ID_ATTR] == highlight_id


def find_markers(root: ElementNode, highlight_id: str) -> list[ElementNode]:
    """All markers for *highlight_id*, in document order."""
    return [el for el in root.iter_elements() if is_marker(el, highlight_id)]


def find_marker(root: ElementNode, highlight_id: str) -> ElementNode | None:
    """The first marker for *highlight_id*, or None."""
    for el in root.iter_elements():
        if is_marker(el, highlight_id):
            return el
    return None
