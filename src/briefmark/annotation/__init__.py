"""Selection capture, highlight rendering and highlight navigation."""

from briefmark.annotation.navigator import HighlightNavigator, Viewport
from briefmark.annotation.renderer import (
    AnnotationResult,
    HighlightSpec,
    RenderableHighlight,
    apply_highlights,
    remove_highlight_markup,
)
from briefmark.annotation.selection import (
    SelectionDebouncer,
    SelectionSnapshot,
    extract_text_selection,
)

__all__ = [
    "AnnotationResult",
    "HighlightSpec",
    "HighlightNavigator",
    "RenderableHighlight",
    "SelectionDebouncer",
    "SelectionSnapshot",
    "Viewport",
    "apply_highlights",
    "extract_text_selection",
    "remove_highlight_markup",
]
