"""Database module for Briefmark.

Provides async SQLModel operations with PostgreSQL.
"""

from __future__ import annotations

from briefmark.db.engine import (
    close_db,
    create_schema,
    get_engine,
    get_session,
    init_db,
)
from briefmark.db.highlights import (
    create_highlight,
    delete_highlight,
    get_highlight_by_id,
    get_highlights_for_story,
    get_highlights_for_user,
    update_highlight_color,
)
from briefmark.db.models import Highlight, Story
from briefmark.db.stories import create_story, get_story_by_id

__all__ = [
    "Highlight",
    "Story",
    "close_db",
    "create_highlight",
    "create_schema",
    "create_story",
    "delete_highlight",
    "get_engine",
    "get_highlight_by_id",
    "get_highlights_for_story",
    "get_highlights_for_user",
    "get_session",
    "init_db",
    "update_highlight_color",
]
