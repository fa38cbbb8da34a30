"""Per-story highlight list held by an open reading session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from briefmark.highlights.store import sort_by_position

if TYPE_CHECKING:
    from collections.abc import Iterable

    from briefmark.db.models import Highlight


class StoryHighlights:
    """Confirmed highlights for one story, keyed by id.

    Insertion order does not matter: two creates completing in either order
    leave the same contents, and ``ordered()`` always sorts by position.
    """

    def __init__(self, highlights: Iterable[Highlight] = ()) -> None:
        self._by_id: dict[str, Highlight] = {}
        for highlight in highlights:
            self.upsert(highlight)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, highlight_id: object) -> bool:
        return str(highlight_id) in self._by_id

    def get(self, highlight_id: str) -> Highlight | None:
        return self._by_id.get(str(highlight_id))

    def upsert(self, highlight: Highlight) -> None:
        self._by_id[str(highlight.id)] = highlight

    def remove(self, highlight_id: str) -> Highlight | None:
        return self._by_id.pop(str(highlight_id), None)

    def replace_all(self, highlights: Iterable[Highlight]) -> None:
        self._by_id = {str(h.id): h for h in highlights}

    def ordered(self) -> list[Highlight]:
        return sort_by_position(self._by_id.values())
