"""Turn a live text selection into flattened-text offsets.

The browser selection is captured once per event as a ``SelectionSnapshot``
(DOM Range boundary points) and resolved against the same tree the content
was rendered from. Offsets come from ``briefmark.dom.text``, so slicing the
container's flattened text with them always yields the selected text.
"""

# Pattern: Functional Core (pure selection -> offsets conversion)

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from briefmark.config import get_settings
from briefmark.dom.text import flatten_text, text_offset_of
from briefmark.dom.tree import (
    ElementNode,
    Node,
    common_ancestor,
    contains,
    node_at_path,
)
from briefmark.models.annotation import BoundingRect, TextSelection

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionSnapshot:
    """Immutable copy of one selection's boundary points.

    Offsets follow DOM Range semantics: characters for text nodes, child
    positions for elements.
    """

    start_node: Node
    start_offset: int
    end_node: Node
    end_offset: int
    bounding_rect: BoundingRect | None = None

    @property
    def is_collapsed(self) -> bool:
        return self.start_node is self.end_node and self.start_offset == self.end_offset

    @classmethod
    def from_paths(
        cls,
        container: ElementNode,
        start_path: Sequence[int],
        start_offset: int,
        end_path: Sequence[int],
        end_offset: int,
        bounding_rect: BoundingRect | None = None,
    ) -> SelectionSnapshot | None:
        """Resolve child-index paths (relative to *container*) into nodes.

        Returns None when either path does not exist in the tree, which
        happens when the browser's DOM has drifted from the rendered HTML.
        """
        start_node = node_at_path(container, list(start_path))
        end_node = node_at_path(container, list(end_path))
        if start_node is None or end_node is None:
            logger.debug(
                "Selection paths do not resolve: %s -> %s", start_path, end_path
            )
            return None
        return cls(start_node, start_offset, end_node, end_offset, bounding_rect)


def extract_text_selection(
    snapshot: SelectionSnapshot | None,
    container: ElementNode,
    *,
    min_chars: int | None = None,
    context_chars: int | None = None,
) -> TextSelection | None:
    """Convert *snapshot* into a ``TextSelection`` within *container*.

    Returns None when there is no selection, it is collapsed, it lies
    outside the container, or its trimmed text is shorter than *min_chars*.
    """
    config = get_settings().annotation
    min_chars = config.min_selection_chars if min_chars is None else min_chars
    context_chars = config.context_chars if context_chars is None else context_chars

    if snapshot is None or snapshot.is_collapsed:
        return None

    ancestor = common_ancestor(snapshot.start_node, snapshot.end_node)
    if ancestor is None or not contains(container, ancestor):
        logger.debug("Selection is outside the story container")
        return None

    try:
        start = text_offset_of(container, snapshot.start_node, snapshot.start_offset)
        end = text_offset_of(container, snapshot.end_node, snapshot.end_offset)
    except ValueError:
        logger.debug("Selection boundary could not be resolved", exc_info=True)
        return None
    if end < start:
        start, end = end, start

    flat = flatten_text(container)
    raw = flat[start:end]
    text = raw.strip()
    if len(text) < min_chars:
        logger.debug("Selection too short (%d chars)", len(text))
        return None

    start_offset = start + len(raw) - len(raw.lstrip())
    end_offset = start_offset + len(text)
    return TextSelection(
        text=text,
        start_offset=start_offset,
        end_offset=end_offset,
        context_before=flat[max(0, start_offset - context_chars) : start_offset],
        context_after=flat[end_offset : end_offset + context_chars],
        bounding_rect=snapshot.bounding_rect,
    )


class SelectionDebouncer:
    """Run a callback once selection events stop arriving.

    Each ``trigger`` replaces the pending call, so only the latest event's
    arguments are delivered. Must be used from within a running event loop.
    """

    def __init__(
        self, callback: Callable[..., None], delay_ms: int | None = None
    ) -> None:
        if delay_ms is None:
            delay_ms = get_settings().annotation.selection_debounce_ms
        self._callback = callback
        self._delay = delay_ms / 1000
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: object) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[object, ...]) -> None:
        self._handle = None
        self._callback(*args)
