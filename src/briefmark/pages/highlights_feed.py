"""The reader's highlights across all stories, newest first.

Route: /highlights
"""

from __future__ import annotations

import logging

from nicegui import ui

from briefmark.errors import PersistenceError
from briefmark.models.annotation import HIGHLIGHT_SWATCHES, HighlightColor
from briefmark.pages.context import current_reader_id, highlight_store_for

logger = logging.getLogger(__name__)

MAX_PREVIEW_LENGTH = 280


def preview(text: str) -> str:
    if len(text) > MAX_PREVIEW_LENGTH:
        return text[:MAX_PREVIEW_LENGTH].rstrip() + "..."
    return text


@ui.page("/highlights")
async def highlights_page() -> None:
    ui.label("Your highlights").classes("text-2xl font-bold mb-4")
    store = highlight_store_for(current_reader_id())
    try:
        highlights = await store.list_all()
    except PersistenceError:
        logger.exception("Failed to load highlight feed")
        ui.notify("Highlights could not be loaded", type="negative")
        return

    if not highlights:
        ui.label("No highlights yet.").classes("text-grey")
        return

    for highlight in highlights:
        try:
            swatch = HIGHLIGHT_SWATCHES[HighlightColor(highlight.color)]
        except ValueError:
            swatch = HIGHLIGHT_SWATCHES[HighlightColor.YELLOW]
        with ui.card().classes("w-full max-w-3xl").style(
            f"border-left: 6px solid {swatch}"
        ):
            ui.label(preview(highlight.highlighted_text))
            ui.link(
                "Open in story",
                f"/stories/{highlight.story_id}?highlight={highlight.id}",
            ).classes("text-caption")
