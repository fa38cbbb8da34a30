"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import pytest

from briefmark.db.models import Highlight, Story
from briefmark.highlights import InMemoryHighlightStore

if TYPE_CHECKING:
    from collections.abc import Callable

# Standard UUIDs for test references
SAMPLE_USER_ID = UUID("12345678-1234-5678-1234-567812345678")
SAMPLE_STORY_ID = UUID("87654321-4321-8765-4321-876543218765")

type HighlightFactory = Callable[..., Highlight]


@pytest.fixture
def make_highlight() -> HighlightFactory:
    """Factory for unsaved Highlight records covering *text* at *start*."""

    def _make(text: str, start: int, *, color: str = "yellow") -> Highlight:
        return Highlight(
            story_id=SAMPLE_STORY_ID,
            user_id=SAMPLE_USER_ID,
            highlighted_text=text,
            start_offset=start,
            end_offset=start + len(text),
            color=color,
        )

    return _make


@pytest.fixture
def story() -> Story:
    return Story(
        id=SAMPLE_STORY_ID,
        user_id=SAMPLE_USER_ID,
        title="Weekly digest",
        content="Hello world, this is a test.",
    )


@pytest.fixture
def store() -> InMemoryHighlightStore:
    return InMemoryHighlightStore(SAMPLE_USER_ID)


class RecordingViewport:
    """Viewport that records navigator calls and holds scheduled callbacks."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.scheduled: list[tuple[float, Callable[[], None]]] = []

    def scroll_into_view(self, selector: str) -> None:
        self.calls.append(("scroll", selector))

    def add_class(self, selector: str, class_name: str) -> None:
        self.calls.append(("add", selector, class_name))

    def remove_class(self, selector: str, class_name: str) -> None:
        self.calls.append(("remove", selector, class_name))

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.scheduled.append((delay_seconds, callback))


@pytest.fixture
def viewport() -> RecordingViewport:
    return RecordingViewport()
