"""Home page: paste a story to read and highlight."""

from __future__ import annotations

from nicegui import ui

from briefmark.input_pipeline import detect_content_type
from briefmark.pages.context import current_reader_id, save_story


@ui.page("/")
async def index_page() -> None:
    """Paste newsletter HTML or plain text and open it for reading."""
    ui.label("Briefmark").classes("text-2xl font-bold mb-4")
    ui.link("Your highlights", "/highlights").classes("mb-4")

    with ui.card().classes("p-4 w-full max-w-3xl"):
        title = ui.input("Title").classes("w-full").props('data-testid="title"')
        body = (
            ui.textarea("Story content (HTML or plain text)")
            .classes("w-full")
            .props('rows=12 data-testid="content"')
        )

        async def open_story() -> None:
            raw = body.value or ""
            if not raw.strip():
                ui.notify("Paste some content first", type="warning")
                return
            is_html = detect_content_type(raw) == "html"
            story = await save_story(
                current_reader_id(),
                title.value or "Untitled story",
                content=raw,
                html_content=raw if is_html else None,
            )
            ui.navigate.to(f"/stories/{story.id}")

        ui.button("Read", on_click=open_story).props('data-testid="read-btn"')
