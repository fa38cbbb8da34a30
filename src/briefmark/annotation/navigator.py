"""Jump to a rendered highlight and flash it.

The navigator decides *whether* a highlight can be shown by looking for its
marker in the rendered tree; the viewport carries out the browser side
effects. A missing marker never touches the viewport.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from briefmark.annotation.markers import FOCUS_CLASS, find_marker, marker_selector
from briefmark.config import get_settings
from briefmark.errors import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from briefmark.dom.tree import ElementNode

logger = logging.getLogger(__name__)


class Viewport(Protocol):
    """Browser-side operations the navigator needs."""

    def scroll_into_view(self, selector: str) -> None:
        """Smooth-scroll the first match of *selector* to the centre."""
        ...

    def add_class(self, selector: str, class_name: str) -> None: ...

    def remove_class(self, selector: str, class_name: str) -> None: ...

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        """Run *callback* once after *delay_seconds*."""
        ...


class HighlightNavigator:
    """Scroll to a highlight's marker and briefly mark it focused."""

    def __init__(
        self,
        viewport: Viewport,
        *,
        focus_duration: float | None = None,
        retry_delay_ms: int | None = None,
    ) -> None:
        config = get_settings().annotation
        self._viewport = viewport
        self._focus_duration = (
            config.focus_duration_seconds if focus_duration is None else focus_duration
        )
        self._retry_delay = (
            config.navigation_retry_ms if retry_delay_ms is None else retry_delay_ms
        ) / 1000

    def navigate(self, highlight_id: str, root: ElementNode) -> None:
        """Scroll to and focus *highlight_id*'s first marker in *root*.

        Raises:
            NotFoundError: If *root* contains no marker for the highlight.
        """
        if find_marker(root, highlight_id) is None:
            msg = f"No rendered marker for highlight {highlight_id}"
            raise NotFoundError(msg)

        selector = marker_selector(highlight_id)
        self._viewport.scroll_into_view(selector)
        self._viewport.add_class(selector, FOCUS_CLASS)
        self._viewport.call_later(
            self._focus_duration,
            lambda: self._viewport.remove_class(selector, FOCUS_CLASS),
        )

    async def navigate_with_retry(
        self, highlight_id: str, get_root: Callable[[], ElementNode]
    ) -> bool:
        """Navigate, retrying once after a short delay if the marker is missing.

        *get_root* is called on each attempt so a render that lands during
        the delay is seen. Returns False if the second attempt also misses.
        """
        try:
            self.navigate(highlight_id, get_root())
        except NotFoundError:
            logger.debug("Highlight %s not rendered yet; retrying", highlight_id)
        else:
            return True

        await asyncio.sleep(self._retry_delay)
        try:
            self.navigate(highlight_id, get_root())
        except NotFoundError:
            logger.info("Highlight %s not found after retry", highlight_id)
            return False
        return True
