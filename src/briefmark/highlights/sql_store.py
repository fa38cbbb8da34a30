"""Highlight store backed by the PostgreSQL database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from briefmark.db import highlights as db_highlights
from briefmark.errors import NotFoundError, PersistenceError
from briefmark.highlights.store import (
    as_highlight_id,
    validate_color,
    validate_new_highlight,
)
from briefmark.models.annotation import DEFAULT_HIGHLIGHT_COLOR

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID

    from briefmark.db.models import Highlight
    from briefmark.models.annotation import HighlightColor

logger = logging.getLogger(__name__)


@contextmanager
def _persistence_errors(action: str) -> Iterator[None]:
    """Re-raise database and connection failures as PersistenceError."""
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Highlight store failed to %s: %s", action, exc)
        msg = f"Could not {action}"
        raise PersistenceError(msg) from exc


class SqlHighlightStore:
    """``HighlightStore`` over ``briefmark.db.highlights`` for one user."""

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id

    async def create(
        self,
        story_id: UUID,
        text: str,
        start_offset: int,
        end_offset: int,
        context_before: str | None = None,
        context_after: str | None = None,
        color: HighlightColor | str = DEFAULT_HIGHLIGHT_COLOR,
    ) -> Highlight:
        parsed = validate_new_highlight(text, start_offset, end_offset, color)
        with _persistence_errors("create highlight"):
            return await db_highlights.create_highlight(
                user_id=self.user_id,
                story_id=story_id,
                text=text,
                start_offset=start_offset,
                end_offset=end_offset,
                color=parsed.value,
                context_before=context_before,
                context_after=context_after,
            )

    async def list(self, story_id: UUID) -> list[Highlight]:
        with _persistence_errors("load highlights"):
            return await db_highlights.get_highlights_for_story(self.user_id, story_id)

    async def delete(self, highlight_id: UUID | str) -> None:
        key = as_highlight_id(highlight_id)
        with _persistence_errors("delete highlight"):
            deleted = await db_highlights.delete_highlight(self.user_id, key)
        if not deleted:
            msg = f"Highlight {highlight_id} not found"
            raise NotFoundError(msg)

    async def update_color(
        self, highlight_id: UUID | str, color: HighlightColor | str
    ) -> Highlight:
        parsed = validate_color(color)
        key = as_highlight_id(highlight_id)
        with _persistence_errors("update highlight color"):
            highlight = await db_highlights.update_highlight_color(
                self.user_id, key, parsed.value
            )
        if highlight is None:
            msg = f"Highlight {highlight_id} not found"
            raise NotFoundError(msg)
        return highlight

    async def list_all(self) -> list[Highlight]:
        with _persistence_errors("load highlights"):
            return await db_highlights.get_highlights_for_user(self.user_id)
