"""Story reading page with highlighting.

The story is rendered server-side with its highlights marked. The browser
reports selections as child-index paths relative to the story container;
they are resolved against the same rendered tree, so offsets never depend
on how the browser flattens text.

Route: /stories/{story_id}
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any
from uuid import UUID

from nicegui import ui

from briefmark.annotation.markers import FOCUS_CLASS, MARKER_CLASS, color_class
from briefmark.annotation.navigator import HighlightNavigator
from briefmark.annotation.selection import SelectionSnapshot
from briefmark.errors import PersistenceError
from briefmark.models.annotation import HIGHLIGHT_SWATCHES, BoundingRect, HighlightColor
from briefmark.pages.context import current_reader_id, highlight_store_for, load_story
from briefmark.pages.viewport import NiceGUIViewport
from briefmark.reader import ReadingSession

if TYPE_CHECKING:
    from nicegui.events import GenericEventArguments

    from briefmark.dom.tree import ElementNode

logger = logging.getLogger(__name__)

SELECTION_EVENT = "story_selection"
MARKER_CLICK_EVENT = "highlight_clicked"

# Reports selections inside the container as paths of childNodes indexes.
_SELECTION_BRIDGE_JS = """
const container = getHtmlElement(%(container_id)s);

function pathTo(node) {
    const path = [];
    while (node && node !== container) {
        const parent = node.parentNode;
        if (!parent) return null;
        path.unshift(Array.prototype.indexOf.call(parent.childNodes, node));
        node = parent;
    }
    return node === container ? path : null;
}

document.addEventListener('selectionchange', function() {
    const selection = window.getSelection();
    if (!selection || selection.rangeCount === 0 || selection.isCollapsed) {
        emitEvent('%(selection_event)s', null);
        return;
    }
    const range = selection.getRangeAt(0);
    if (!container.contains(range.commonAncestorContainer)) return;
    const startPath = pathTo(range.startContainer);
    const endPath = pathTo(range.endContainer);
    if (startPath === null || endPath === null) return;
    const rect = range.getBoundingClientRect();
    emitEvent('%(selection_event)s', {
        startPath: startPath,
        startOffset: range.startOffset,
        endPath: endPath,
        endOffset: range.endOffset,
        rect: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
    });
});

container.addEventListener('click', function(e) {
    const mark = e.target.closest('mark[data-highlight-id]');
    if (mark && window.getSelection().isCollapsed) {
        emitEvent('%(click_event)s', {id: mark.dataset.highlightId});
    }
});

container.setAttribute('data-handlers-ready', 'true');
"""


def highlight_css() -> str:
    rules = [
        f".{color_class(color)} {{ background-color: {swatch}; }}"
        for color, swatch in HIGHLIGHT_SWATCHES.items()
    ]
    rules.append(
        f".{MARKER_CLASS} {{ cursor: pointer; border-radius: 2px;"
        " transition: box-shadow 0.3s; }"
    )
    rules.append(f".{FOCUS_CLASS} {{ box-shadow: 0 0 0 3px #f59e0b; }}")
    rules.append(".story-image { max-width: 100%; height: auto; }")
    return "\n".join(rules)


def _is_path(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(i, int) and not isinstance(i, bool) for i in value
    )


def parse_selection_event(
    args: Any, root: ElementNode
) -> SelectionSnapshot | None:
    """Build a snapshot from the bridge's event payload.

    Returns None for an empty selection or a malformed payload.
    """
    if not isinstance(args, dict):
        return None
    start_path, end_path = args.get("startPath"), args.get("endPath")
    start_offset, end_offset = args.get("startOffset"), args.get("endOffset")
    if not (_is_path(start_path) and _is_path(end_path)):
        return None
    if not (isinstance(start_offset, int) and isinstance(end_offset, int)):
        return None

    rect = None
    raw_rect = args.get("rect")
    if isinstance(raw_rect, dict):
        try:
            rect = BoundingRect(
                float(raw_rect["x"]),
                float(raw_rect["y"]),
                float(raw_rect["width"]),
                float(raw_rect["height"]),
            )
        except (KeyError, TypeError, ValueError):
            rect = None

    return SelectionSnapshot.from_paths(
        root, start_path, start_offset, end_path, end_offset, rect
    )


@ui.page("/stories/{story_id}")
async def reading_page(story_id: str, highlight: str | None = None) -> None:
    """Read a story, highlight passages and jump to a highlight."""
    try:
        story = await load_story(UUID(story_id))
    except ValueError:
        story = None
    if story is None:
        ui.label("Story not found").classes("text-h6")
        return

    reader_id = current_reader_id()
    ui.add_css(highlight_css())
    ui.label(story.title).classes("text-h5")

    with ui.row().classes("items-center gap-2") as toolbar:
        ui.label("Highlight:").classes("text-caption")
        swatches = {
            color: ui.button().props(f'round dense data-testid="color-{color}"')
            for color in HighlightColor
        }
    toolbar.set_visibility(False)
    stale_label = ui.label().classes("text-caption text-orange")
    content = ui.html("", sanitize=False).classes("story-body w-full")

    rendered: dict[str, str | None] = {"html": None}

    def redraw() -> None:
        result = session.annotated()
        # Re-setting unchanged content would drop the reader's live selection
        if result.html != rendered["html"]:
            content.set_content(result.html)
            rendered["html"] = result.html
        toolbar.set_visibility(session.selection is not None)
        stale_label.set_text(
            f"{len(result.stale)} highlight(s) no longer match this story"
            if result.stale
            else ""
        )

    session = ReadingSession(
        story,
        highlight_store_for(reader_id),
        navigator=HighlightNavigator(NiceGUIViewport()),
        on_change=redraw,
    )
    try:
        await session.open()
    except PersistenceError:
        logger.exception("Failed to load highlights for story %s", story.id)
        ui.notify("Highlights could not be loaded", type="negative")
        return

    async def create(color: HighlightColor) -> None:
        created = await session.create_highlight(color)
        if created is None:
            ui.notify("Could not save highlight", type="warning")
            return
        await ui.run_javascript("window.getSelection()?.removeAllRanges()")

    for color, button in swatches.items():
        button.style(f"background-color: {HIGHLIGHT_SWATCHES[color]} !important")
        button.on_click(partial(create, color))

    async def edit_highlight(highlight_id: str) -> None:
        with ui.dialog() as dialog, ui.card():
            ui.label("Highlight colour")
            with ui.row():
                for color in HighlightColor:
                    ui.button(
                        on_click=partial(dialog.submit, color.value)
                    ).props("round dense").style(
                        f"background-color: {HIGHLIGHT_SWATCHES[color]} !important"
                    )
            ui.button("Delete", on_click=partial(dialog.submit, "delete")).props(
                'flat color=negative data-testid="delete-highlight-btn"'
            )
        choice = await dialog
        if choice == "delete":
            if not await session.delete_highlight(highlight_id):
                ui.notify("Highlight could not be deleted", type="warning")
        elif choice:
            if await session.change_color(highlight_id, choice) is None:
                ui.notify("Highlight colour could not be changed", type="warning")

    def handle_selection(e: GenericEventArguments) -> None:
        snapshot = parse_selection_event(e.args, session.content_root())
        session.on_selection_change(snapshot)

    async def handle_marker_click(e: GenericEventArguments) -> None:
        highlight_id = e.args.get("id") if isinstance(e.args, dict) else None
        if isinstance(highlight_id, str) and highlight_id in session.highlights:
            await edit_highlight(highlight_id)

    ui.on(SELECTION_EVENT, handle_selection)
    ui.on(MARKER_CLICK_EVENT, handle_marker_click)

    # Wait for WebSocket connection before running JavaScript
    await ui.context.client.connected()
    await ui.run_javascript(
        _SELECTION_BRIDGE_JS
        % {
            "container_id": content.id,
            "selection_event": SELECTION_EVENT,
            "click_event": MARKER_CLICK_EVENT,
        }
    )

    if highlight and not await session.navigate(highlight):
        ui.notify("That highlight is no longer in this story", type="warning")
