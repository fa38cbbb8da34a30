"""Plain data models shared across the annotation pipeline."""

from briefmark.models.annotation import (
    DEFAULT_HIGHLIGHT_COLOR,
    HIGHLIGHT_SWATCHES,
    BoundingRect,
    HighlightColor,
    TextSelection,
)

__all__ = [
    "DEFAULT_HIGHLIGHT_COLOR",
    "HIGHLIGHT_SWATCHES",
    "BoundingRect",
    "HighlightColor",
    "TextSelection",
]
