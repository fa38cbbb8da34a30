"""Highlight persistence contract, stores and per-story cache."""

from briefmark.highlights.cache import StoryHighlights
from briefmark.highlights.sql_store import SqlHighlightStore
from briefmark.highlights.store import (
    HighlightStore,
    InMemoryHighlightStore,
    validate_new_highlight,
)

__all__ = [
    "HighlightStore",
    "InMemoryHighlightStore",
    "SqlHighlightStore",
    "StoryHighlights",
    "validate_new_highlight",
]
