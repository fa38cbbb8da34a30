"""Controller for one open story in the reading view.

Owns the story's normalised HTML, its confirmed highlights and the reader's
current selection, and wires them to the normaliser, renderer, extractor,
store and navigator. UI code only forwards events and redraws.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from briefmark.annotation.renderer import AnnotationResult, apply_highlights
from briefmark.annotation.selection import SelectionDebouncer, extract_text_selection
from briefmark.dom.tree import ElementNode, ancestors, parse_html
from briefmark.errors import AnnotationError, NotFoundError
from briefmark.highlights.cache import StoryHighlights
from briefmark.input_pipeline import normalise_content
from briefmark.models.annotation import DEFAULT_HIGHLIGHT_COLOR

if TYPE_CHECKING:
    from collections.abc import Callable

    from briefmark.annotation.navigator import HighlightNavigator
    from briefmark.annotation.selection import SelectionSnapshot
    from briefmark.db.models import Highlight, Story
    from briefmark.highlights.store import HighlightStore
    from briefmark.models.annotation import HighlightColor, TextSelection

logger = logging.getLogger(__name__)


class ReadingSession:
    """State and actions for a reader viewing one story.

    Args:
        story: The story being read.
        store: Highlight store bound to the reader.
        navigator: Used by ``navigate``; optional for headless use.
        on_change: Called after the selection or highlights change.
        debounce_ms: Selection debounce override.
    """

    def __init__(
        self,
        story: Story,
        store: HighlightStore,
        *,
        navigator: HighlightNavigator | None = None,
        on_change: Callable[[], None] | None = None,
        debounce_ms: int | None = None,
    ) -> None:
        self.story = story
        self.store = store
        self.navigator = navigator
        self.highlights = StoryHighlights()
        self.selection: TextSelection | None = None
        self._on_change = on_change
        self._normalised: str | None = None
        self._rendered: AnnotationResult | None = None
        self._root: ElementNode | None = None
        self._debouncer = SelectionDebouncer(self._capture, debounce_ms)

    @property
    def normalised_html(self) -> str:
        if self._normalised is None:
            msg = "ReadingSession.open() has not been awaited"
            raise RuntimeError(msg)
        return self._normalised

    async def open(self) -> str:
        """Normalise the story and load its highlights.

        Raises:
            PersistenceError: If the highlights cannot be loaded.
        """
        self._normalised = normalise_content(self.story.raw_content)
        self.highlights.replace_all(await self.store.list(self.story.id))
        self._changed()
        logger.info(
            "Opened story %s with %d highlight(s)", self.story.id, len(self.highlights)
        )
        return self._normalised

    def annotated(self) -> AnnotationResult:
        """The story HTML with current highlights marked."""
        if self._rendered is None:
            self._rendered = apply_highlights(
                self.normalised_html, self.highlights.ordered()
            )
        return self._rendered

    def content_root(self) -> ElementNode:
        """Tree of the currently rendered HTML, for resolving browser nodes.

        Parsed once per render and shared; callers must not mutate it.
        """
        if self._root is None:
            self._root = parse_html(self.annotated().html)
        return self._root

    # -- selection -----------------------------------------------------------

    def on_selection_change(self, snapshot: SelectionSnapshot | None) -> None:
        """Record a selection event; it is processed once events settle."""
        self._debouncer.trigger(snapshot)

    def _capture(self, snapshot: SelectionSnapshot | None) -> None:
        if snapshot is None:
            self.selection = None
        else:
            # The container is the root of the tree the snapshot was resolved in
            root = [snapshot.start_node, *ancestors(snapshot.start_node)][-1]
            assert isinstance(root, ElementNode)  # text nodes always have a parent
            self.selection = extract_text_selection(snapshot, root)
        if self._on_change is not None:
            self._on_change()

    def dismiss_selection(self) -> None:
        self._debouncer.cancel()
        self.selection = None
        if self._on_change is not None:
            self._on_change()

    # -- highlight actions ---------------------------------------------------

    async def create_highlight(
        self, color: HighlightColor | str = DEFAULT_HIGHLIGHT_COLOR
    ) -> Highlight | None:
        """Persist the current selection as a highlight.

        The highlight is shown only once the store has confirmed it. On
        failure the error is logged, nothing changes and None is returned.
        """
        selection = self.selection
        if selection is None:
            return None
        try:
            highlight = await self.store.create(
                self.story.id,
                selection.text,
                selection.start_offset,
                selection.end_offset,
                context_before=selection.context_before,
                context_after=selection.context_after,
                color=color,
            )
        except AnnotationError:
            logger.warning(
                "Could not create highlight on story %s", self.story.id, exc_info=True
            )
            return None

        self.highlights.upsert(highlight)
        self.selection = None
        self._changed()
        return highlight

    async def delete_highlight(self, highlight_id: str) -> bool:
        """Delete a highlight. Returns False if the store refused."""
        try:
            await self.store.delete(highlight_id)
        except NotFoundError:
            logger.info("Highlight %s already gone", highlight_id)
            self.highlights.remove(highlight_id)
            self._changed()
            return False
        except AnnotationError:
            logger.warning("Could not delete highlight %s", highlight_id, exc_info=True)
            return False

        self.highlights.remove(highlight_id)
        self._changed()
        return True

    async def change_color(
        self, highlight_id: str, color: HighlightColor | str
    ) -> Highlight | None:
        """Recolour a highlight. Returns None if the store refused."""
        try:
            highlight = await self.store.update_color(highlight_id, color)
        except AnnotationError:
            logger.warning(
                "Could not recolour highlight %s", highlight_id, exc_info=True
            )
            return None

        self.highlights.upsert(highlight)
        self._changed()
        return highlight

    async def navigate(self, highlight_id: str) -> bool:
        """Scroll to a highlight, retrying once if it is not rendered yet."""
        if self.navigator is None:
            msg = "ReadingSession has no navigator"
            raise RuntimeError(msg)
        return await self.navigator.navigate_with_retry(highlight_id, self.content_root)

    def _changed(self) -> None:
        self._rendered = None
        self._root = None
        if self._on_change is not None:
            self._on_change()
