"""Story lookups and creation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from briefmark.db.engine import get_session
from briefmark.db.models import Story

if TYPE_CHECKING:
    from uuid import UUID


async def get_story_by_id(story_id: UUID) -> Story | None:
    async with get_session() as session:
        return await session.get(Story, story_id)


async def create_story(
    user_id: UUID,
    title: str,
    content: str,
    html_content: str | None = None,
    content_type: str = "newsletter",
) -> Story:
    """Save a story for a user.

    Returns:
        The created Story with generated ID.
    """
    async with get_session() as session:
        story = Story(
            user_id=user_id,
            title=title,
            content=content,
            html_content=html_content,
            content_type=content_type,
        )
        session.add(story)
        await session.flush()
        await session.refresh(story)
        return story
