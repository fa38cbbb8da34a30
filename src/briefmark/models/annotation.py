"""Value types exchanged between the selection extractor and its callers.

These are plain frozen dataclasses: a TextSelection is a snapshot of one
selection event and is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class HighlightColor(StrEnum):
    """The closed set of highlight colours offered to the reader."""

    YELLOW = "yellow"
    BLUE = "blue"
    GREEN = "green"
    PINK = "pink"
    PURPLE = "purple"


DEFAULT_HIGHLIGHT_COLOR = HighlightColor.YELLOW

# Swatches for the colour picker (Tailwind 200/300 shades)
HIGHLIGHT_SWATCHES: dict[HighlightColor, str] = {
    HighlightColor.YELLOW: "#fef08a",
    HighlightColor.BLUE: "#bfdbfe",
    HighlightColor.GREEN: "#bbf7d0",
    HighlightColor.PINK: "#fbcfe8",
    HighlightColor.PURPLE: "#e9d5ff",
}


@dataclass(frozen=True)
class BoundingRect:
    """Viewport rectangle of a selection, used only to position UI."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextSelection:
    """A validated selection expressed in flattened-text offsets.

    Attributes:
        text: The trimmed selected text.
        start_offset: Index of the first selected character.
        end_offset: Index one past the last selected character.
        context_before: Up to N characters preceding the selection.
        context_after: Up to N characters following the selection.
        bounding_rect: Where the selection sits on screen, if known.
    """

    text: str
    start_offset: int
    end_offset: int
    context_before: str
    context_after: str
    bounding_rect: BoundingRect | None = None

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset
