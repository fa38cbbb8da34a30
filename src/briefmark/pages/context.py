"""Per-reader resources shared by the pages."""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from nicegui import app

from briefmark.config import get_settings
from briefmark.db.models import Story
from briefmark.db.stories import create_story, get_story_by_id
from briefmark.highlights import InMemoryHighlightStore, SqlHighlightStore
from briefmark.highlights.store import HighlightStore

logger = logging.getLogger(__name__)

# Fallback stores when no database is configured
_memory_stories: dict[UUID, Story] = {}
_memory_stores: dict[UUID, InMemoryHighlightStore] = {}


def is_db_configured() -> bool:
    return bool(get_settings().database.url)


def current_reader_id() -> UUID:
    """The reader's id, kept in NiceGUI user storage across visits."""
    reader_id = app.storage.user.get("reader_id")
    if reader_id is None:
        reader_id = str(uuid4())
        app.storage.user["reader_id"] = reader_id
        logger.info("New reader %s", reader_id)
    return UUID(reader_id)


def highlight_store_for(reader_id: UUID) -> HighlightStore:
    if is_db_configured():
        return SqlHighlightStore(reader_id)
    store = _memory_stores.get(reader_id)
    if store is None:
        store = _memory_stores[reader_id] = InMemoryHighlightStore(reader_id)
    return store


async def load_story(story_id: UUID) -> Story | None:
    if is_db_configured():
        return await get_story_by_id(story_id)
    return _memory_stories.get(story_id)


async def save_story(
    reader_id: UUID, title: str, content: str, html_content: str | None = None
) -> Story:
    """Save a pasted story to the database, or to memory without one."""
    if is_db_configured():
        return await create_story(reader_id, title, content, html_content)
    story = Story(
        user_id=reader_id, title=title, content=content, html_content=html_content
    )
    _memory_stories[story.id] = story
    return story
