"""CRUD operations for Highlight.

Every query is scoped to the owning user; a highlight belonging to someone
else behaves exactly like a missing one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlmodel import col, select

from briefmark.db.engine import get_session
from briefmark.db.models import Highlight, _utcnow

if TYPE_CHECKING:
    from uuid import UUID


async def get_highlights_for_story(user_id: UUID, story_id: UUID) -> list[Highlight]:
    """Get a user's highlights for a story, ordered by start offset."""
    async with get_session() as session:
        result = await session.exec(
            select(Highlight)
            .where(Highlight.user_id == user_id, Highlight.story_id == story_id)
            .order_by(col(Highlight.start_offset), col(Highlight.end_offset))
        )
        return list(result.all())


async def get_highlights_for_user(user_id: UUID) -> list[Highlight]:
    """Get all of a user's highlights, newest first."""
    async with get_session() as session:
        result = await session.exec(
            select(Highlight)
            .where(Highlight.user_id == user_id)
            .order_by(col(Highlight.created_at).desc())
        )
        return list(result.all())


async def get_highlight_by_id(user_id: UUID, highlight_id: UUID) -> Highlight | None:
    """Get a single highlight by ID, or None if missing or not the user's."""
    async with get_session() as session:
        highlight = await session.get(Highlight, highlight_id)
        if highlight is None or highlight.user_id != user_id:
            return None
        return highlight


async def create_highlight(
    user_id: UUID,
    story_id: UUID,
    text: str,
    start_offset: int,
    end_offset: int,
    color: str,
    context_before: str | None = None,
    context_after: str | None = None,
) -> Highlight:
    """Create a new highlight.

    Returns:
        The created Highlight with generated ID and timestamps.
    """
    async with get_session() as session:
        highlight = Highlight(
            story_id=story_id,
            user_id=user_id,
            highlighted_text=text,
            start_offset=start_offset,
            end_offset=end_offset,
            context_before=context_before,
            context_after=context_after,
            color=color,
        )
        session.add(highlight)
        await session.flush()
        await session.refresh(highlight)
        return highlight


async def update_highlight_color(
    user_id: UUID, highlight_id: UUID, color: str
) -> Highlight | None:
    """Change a highlight's colour.

    Returns:
        The updated Highlight, or None if not found.
    """
    async with get_session() as session:
        highlight = await session.get(Highlight, highlight_id)
        if highlight is None or highlight.user_id != user_id:
            return None
        highlight.color = color
        highlight.updated_at = _utcnow()
        session.add(highlight)
        await session.flush()
        await session.refresh(highlight)
        return highlight


async def delete_highlight(user_id: UUID, highlight_id: UUID) -> bool:
    """Delete a highlight.

    Returns:
        True if deleted, False if not found.
    """
    async with get_session() as session:
        highlight = await session.get(Highlight, highlight_id)
        if highlight is None or highlight.user_id != user_id:
            return False
        await session.delete(highlight)
        return True
