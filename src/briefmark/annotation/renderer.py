"""Server-side highlight insertion into normalised story HTML.

Stored highlights are re-projected onto the content at render time. Each
highlight is checked against the flattened text before it is marked; one
that no longer lines up is reported as stale instead of being placed at
the wrong position.
"""

# Pattern: Functional Core (pure HTML + highlights -> annotated HTML)

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from briefmark.annotation.markers import MARKER_TAG, find_markers, marker_attrs
from briefmark.dom.text import flatten_text, text_map
from briefmark.dom.tree import (
    TextNode,
    element,
    parse_html,
    replace_with,
    to_html,
    unwrap,
)
from briefmark.errors import StaleAnnotationError
from briefmark.models.annotation import DEFAULT_HIGHLIGHT_COLOR, HighlightColor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from briefmark.dom.tree import ElementNode, Node
    from briefmark.errors import StaleReason

logger = logging.getLogger(__name__)

# Whitespace directly inside these is layout, and a <mark> there is invalid
_STRUCTURAL_CONTAINERS = frozenset(
    ("ul", "ol", "dl", "table", "thead", "tbody", "tfoot", "tr", "colgroup")
)


class RenderableHighlight(Protocol):
    """What the renderer reads from a highlight record."""

    @property
    def id(self) -> Any: ...

    @property
    def highlighted_text(self) -> str: ...

    @property
    def start_offset(self) -> int: ...

    @property
    def end_offset(self) -> int: ...

    @property
    def color(self) -> str: ...


@dataclass(frozen=True)
class HighlightSpec:
    """A highlight given directly rather than loaded from the store."""

    id: str
    highlighted_text: str
    start_offset: int
    end_offset: int
    color: str = DEFAULT_HIGHLIGHT_COLOR.value


@dataclass
class AnnotationResult:
    """Rendered HTML plus the highlights that could not be placed.

    Attributes:
        html: Annotated HTML (the input string itself if nothing was marked).
        stale: Highlight id -> reason it was skipped.
    """

    html: str
    stale: dict[str, StaleAnnotationError] = field(default_factory=dict)


def _color_for(highlight: RenderableHighlight) -> str:
    try:
        return HighlightColor(highlight.color).value
    except ValueError:
        logger.warning(
            "Highlight %s has unknown color %r; using %s",
            highlight.id,
            highlight.color,
            DEFAULT_HIGHLIGHT_COLOR,
        )
        return DEFAULT_HIGHLIGHT_COLOR.value


def _check(
    highlight: RenderableHighlight, flat: str, claimed: list[tuple[int, int]]
) -> tuple[StaleReason, str] | None:
    """Why *highlight* cannot be placed, or None if it can."""
    start, end = highlight.start_offset, highlight.end_offset
    if start < 0 or end <= start or not highlight.highlighted_text:
        return "malformed", f"range [{start}, {end})"
    if end > len(flat):
        return "out_of_range", f"end {end} > text length {len(flat)}"
    if flat[start:end] != highlight.highlighted_text:
        return "mismatch", f"found {flat[start:end]!r}"
    for other_start, other_end in claimed:
        if start < other_end and other_start < end:
            return "overlap", f"overlaps [{other_start}, {other_end})"
    return None


def _wrap_range(root: ElementNode, start: int, end: int, attrs: dict[str, str]) -> int:
    """Wrap every text segment in [start, end) in a marker. Returns segments."""
    wrapped = 0
    for span in text_map(root):
        if span.end <= start or span.start >= end:
            continue
        node = span.node
        local_start = max(start, span.start) - span.start
        local_end = min(end, span.end) - span.start
        segment = node.text[local_start:local_end]
        parent = node.parent
        if (
            not segment.strip()
            and parent is not None
            and parent.tag in _STRUCTURAL_CONTAINERS
        ):
            continue

        pieces: list[Node] = []
        if local_start > 0:
            pieces.append(TextNode(node.text[:local_start]))
        pieces.append(element(MARKER_TAG, attrs, [TextNode(segment)]))
        if local_end < len(node.text):
            pieces.append(TextNode(node.text[local_end:]))
        replace_with(node, *pieces)
        wrapped += 1
    return wrapped


def apply_highlights(
    html: str, highlights: Sequence[RenderableHighlight]
) -> AnnotationResult:
    """Mark stored highlights in normalised HTML.

    Highlights are applied from the end of the text backwards. Markers
    never change the flattened text, so every highlight is validated against
    the same string; ranges overlapping an already placed highlight are
    reported as stale.

    Args:
        html: Normalised story HTML.
        highlights: Stored highlight records for this story.

    Returns:
        The annotated HTML and the stale highlights keyed by id.
    """
    result = AnnotationResult(html)
    if not highlights:
        return result

    root = parse_html(html)
    flat = flatten_text(root)
    claimed: list[tuple[int, int]] = []

    ordered = sorted(
        highlights, key=lambda h: (h.start_offset, h.end_offset), reverse=True
    )
    for highlight in ordered:
        highlight_id = str(highlight.id)
        problem = _check(highlight, flat, claimed)
        if problem is not None:
            reason, detail = problem
            error = StaleAnnotationError(highlight_id, reason, detail)
            logger.warning("%s", error)
            result.stale[highlight_id] = error
            continue

        attrs = marker_attrs(highlight_id, _color_for(highlight))
        _wrap_range(root, highlight.start_offset, highlight.end_offset, attrs)
        claimed.append((highlight.start_offset, highlight.end_offset))

    if claimed:
        result.html = to_html(root)
    logger.debug(
        "Rendered %d highlight(s), %d stale", len(claimed), len(result.stale)
    )
    return result


def remove_highlight_markup(html: str, highlight_id: str) -> str:
    """Unwrap every marker for *highlight_id*, keeping its text.

    Returns *html* unchanged when the highlight is not rendered in it.
    """
    root = parse_html(html)
    markers = find_markers(root, highlight_id)
    if not markers:
        return html
    for marker in markers:
        unwrap(marker)
    return to_html(root)
