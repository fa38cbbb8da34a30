"""Tests for page helpers that run without a browser or database."""

from __future__ import annotations

from uuid import uuid4

import pytest

from briefmark.highlights import InMemoryHighlightStore
from briefmark.pages import context
from briefmark.pages.highlights_feed import MAX_PREVIEW_LENGTH, preview


@pytest.fixture
def no_database(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(context, "is_db_configured", lambda: False)


class TestMemoryFallback:
    async def test_saved_story_loads(self, no_database: None) -> None:
        reader_id = uuid4()
        story = await context.save_story(reader_id, "Digest", "Hello world")
        assert await context.load_story(story.id) is story
        assert story.user_id == reader_id

    async def test_unknown_story(self, no_database: None) -> None:
        assert await context.load_story(uuid4()) is None

    def test_store_reused_per_reader(self, no_database: None) -> None:
        reader_id = uuid4()
        store = context.highlight_store_for(reader_id)
        assert isinstance(store, InMemoryHighlightStore)
        assert context.highlight_store_for(reader_id) is store
        assert context.highlight_store_for(uuid4()) is not store


class TestPreview:
    def test_short_text_unchanged(self) -> None:
        assert preview("A short highlight") == "A short highlight"

    def test_long_text_truncated(self) -> None:
        text = "word " * 100
        result = preview(text)
        assert result.endswith("...")
        assert len(result) <= MAX_PREVIEW_LENGTH + 3
