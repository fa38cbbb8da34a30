"""SQLModel database models for Briefmark.

Stories are owned by the reading app's ingestion side; they are defined here
so highlights can reference them with cascading deletes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlmodel import Field, SQLModel

from briefmark.models.annotation import DEFAULT_HIGHLIGHT_COLOR, HighlightColor

_COLOR_VALUES = ", ".join(f"'{c.value}'" for c in HighlightColor)


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def _timestamptz_column() -> Any:
    """Create a TIMESTAMP WITH TIME ZONE column for PostgreSQL."""
    return Column(DateTime(timezone=True), nullable=False)


def _cascade_fk_column(target: str) -> Any:
    """Create a UUID foreign key column with CASCADE DELETE."""
    return Column(Uuid(), ForeignKey(target, ondelete="CASCADE"), nullable=False)


class Story(SQLModel, table=True):
    """A newsletter issue or video transcript saved by a reader.

    Attributes:
        id: Primary key UUID, auto-generated.
        user_id: Owner of the story.
        title: Display title.
        content: Plain-text body (always present).
        html_content: Original HTML body, when the source provided one.
        content_type: "newsletter" or "video".
        created_at: Timestamp when the story was saved.
    """

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True)
    title: str = Field(max_length=500)
    content: str = Field(default="", sa_column=Column(sa.Text(), nullable=False))
    html_content: str | None = Field(
        default=None, sa_column=Column(sa.Text(), nullable=True)
    )
    content_type: str = Field(default="newsletter", max_length=20)
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=_timestamptz_column()
    )

    __table_args__ = (
        CheckConstraint(
            "content_type IN ('newsletter', 'video')", name="ck_story_content_type"
        ),
    )

    @property
    def raw_content(self) -> str:
        """The body to normalise: original HTML when there is any."""
        return self.html_content or self.content


class Highlight(SQLModel, table=True):
    """A reader's highlighted range in a story's normalised content.

    Offsets index the flattened text of the normalised story; the text and
    range are immutable once stored. Colour is the only editable field.
    """

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    story_id: UUID = Field(sa_column=_cascade_fk_column("story.id"))
    user_id: UUID = Field(index=True)
    highlighted_text: str = Field(sa_column=Column(sa.Text(), nullable=False))
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    context_before: str | None = Field(
        default=None, sa_column=Column(sa.Text(), nullable=True)
    )
    context_after: str | None = Field(
        default=None, sa_column=Column(sa.Text(), nullable=True)
    )
    color: str = Field(
        default=DEFAULT_HIGHLIGHT_COLOR.value,
        sa_column=Column(
            String(20), nullable=False, server_default=DEFAULT_HIGHLIGHT_COLOR.value
        ),
    )
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=_timestamptz_column()
    )
    updated_at: datetime = Field(
        default_factory=_utcnow, sa_column=_timestamptz_column()
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "story_id",
            "start_offset",
            "end_offset",
            name="uq_highlight_user_story_range",
        ),
        CheckConstraint("end_offset > start_offset", name="ck_highlight_range"),
        CheckConstraint("start_offset >= 0", name="ck_highlight_start"),
        CheckConstraint(f"color IN ({_COLOR_VALUES})", name="ck_highlight_color"),
    )
