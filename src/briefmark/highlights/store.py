"""The highlight store contract and an in-memory implementation.

A store is bound to one user; every operation only ever sees that user's
highlights. Stores validate requests, never retry, and report backing
failures as ``PersistenceError``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from briefmark.db.models import Highlight, _utcnow
from briefmark.errors import NotFoundError, PersistenceError, ValidationError
from briefmark.models.annotation import DEFAULT_HIGHLIGHT_COLOR, HighlightColor

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class HighlightStore(Protocol):
    """Async CRUD over one user's highlights."""

    async def create(
        self,
        story_id: UUID,
        text: str,
        start_offset: int,
        end_offset: int,
        context_before: str | None = None,
        context_after: str | None = None,
        color: HighlightColor | str = DEFAULT_HIGHLIGHT_COLOR,
    ) -> Highlight: ...

    async def list(self, story_id: UUID) -> list[Highlight]:
        """Highlights for *story_id*, ordered by start offset."""
        ...

    async def delete(self, highlight_id: UUID | str) -> None: ...

    async def update_color(
        self, highlight_id: UUID | str, color: HighlightColor | str
    ) -> Highlight: ...

    async def list_all(self) -> list[Highlight]:
        """Every highlight for the user, newest first."""
        ...


def validate_color(color: HighlightColor | str) -> HighlightColor:
    try:
        return HighlightColor(color)
    except ValueError:
        msg = f"Unknown highlight color {color!r}"
        raise ValidationError(msg) from None


def validate_new_highlight(
    text: str, start_offset: int, end_offset: int, color: HighlightColor | str
) -> HighlightColor:
    """Check a create request, returning the parsed colour.

    Raises:
        ValidationError: If the text is empty, the offsets are negative or
            inverted, the text does not fill the range, or the colour is
            unknown.
    """
    if not text:
        msg = "Highlight text is empty"
        raise ValidationError(msg)
    if start_offset < 0 or end_offset < 0:
        msg = f"Negative offset in [{start_offset}, {end_offset})"
        raise ValidationError(msg)
    if end_offset <= start_offset:
        msg = f"End offset {end_offset} is not after start offset {start_offset}"
        raise ValidationError(msg)
    if len(text) != end_offset - start_offset:
        msg = (
            f"Text length {len(text)} does not match range length "
            f"{end_offset - start_offset}"
        )
        raise ValidationError(msg)
    return validate_color(color)


def as_highlight_id(highlight_id: UUID | str) -> UUID:
    """Parse a highlight id; an unparseable id cannot exist."""
    if isinstance(highlight_id, UUID):
        return highlight_id
    try:
        return UUID(highlight_id)
    except ValueError:
        msg = f"Highlight {highlight_id!r} not found"
        raise NotFoundError(msg) from None


def sort_by_position(highlights: Iterable[Highlight]) -> list[Highlight]:
    return sorted(highlights, key=lambda h: (h.start_offset, h.end_offset))


class InMemoryHighlightStore:
    """Process-local store with the same semantics as the SQL store.

    Enforces the one-highlight-per-range rule the database's unique
    constraint provides.
    """

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id
        self._records: dict[UUID, Highlight] = {}

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
        for existing in self._records.values():
            if (
                existing.story_id == story_id
                and existing.start_offset == start_offset
                and existing.end_offset == end_offset
            ):
                msg = f"Range [{start_offset}, {end_offset}) is already highlighted"
                raise PersistenceError(msg)

        highlight = Highlight(
            story_id=story_id,
            user_id=self.user_id,
            highlighted_text=text,
            start_offset=start_offset,
            end_offset=end_offset,
            context_before=context_before,
            context_after=context_after,
            color=parsed.value,
        )
        self._records[highlight.id] = highlight
        logger.debug("Created highlight %s on story %s", highlight.id, story_id)
        return highlight

    async def list(self, story_id: UUID) -> list[Highlight]:
        return sort_by_position(
            h for h in self._records.values() if h.story_id == story_id
        )

    def _get(self, highlight_id: UUID | str) -> Highlight:
        key = as_highlight_id(highlight_id)
        highlight = self._records.get(key)
        if highlight is None:
            msg = f"Highlight {highlight_id} not found"
            raise NotFoundError(msg)
        return highlight

    async def delete(self, highlight_id: UUID | str) -> None:
        highlight = self._get(highlight_id)
        del self._records[highlight.id]

    async def update_color(
        self, highlight_id: UUID | str, color: HighlightColor | str
    ) -> Highlight:
        parsed = validate_color(color)
        highlight = self._get(highlight_id)
        highlight.color = parsed.value
        highlight.updated_at = _utcnow()
        return highlight

    async def list_all(self) -> list[Highlight]:
        return sorted(self._records.values(), key=lambda h: h.created_at, reverse=True)
