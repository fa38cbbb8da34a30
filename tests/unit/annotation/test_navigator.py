"""Tests for HighlightNavigator against a recording viewport."""

from __future__ import annotations

from typing import Any

import pytest

from briefmark.annotation.markers import FOCUS_CLASS, marker_selector
from briefmark.annotation.navigator import HighlightNavigator
from briefmark.annotation.renderer import HighlightSpec, apply_highlights
from briefmark.dom.tree import ElementNode, parse_html
from briefmark.errors import NotFoundError


def _rendered(*ids: str) -> ElementNode:
    html = "<p>Hello world, again</p>"
    specs = [HighlightSpec("h1", "Hello", 0, 5), HighlightSpec("h2", "again", 13, 18)]
    return parse_html(apply_highlights(html, [s for s in specs if s.id in ids]).html)


class TestNavigate:
    """Tests for HighlightNavigator.navigate()."""

    def test_scrolls_and_focuses(self, viewport: Any) -> None:
        navigator = HighlightNavigator(viewport, focus_duration=1.5)
        navigator.navigate("h2", _rendered("h1", "h2"))

        selector = marker_selector("h2")
        assert viewport.calls == [
            ("scroll", selector),
            ("add", selector, FOCUS_CLASS),
        ]
        assert [delay for delay, _ in viewport.scheduled] == [1.5]

    def test_focus_removed_after_delay(self, viewport: Any) -> None:
        navigator = HighlightNavigator(viewport)
        navigator.navigate("h1", _rendered("h1"))

        _, callback = viewport.scheduled[0]
        callback()
        assert viewport.calls[-1] == ("remove", marker_selector("h1"), FOCUS_CLASS)

    def test_missing_marker_touches_nothing(
        self, viewport: Any
    ) -> None:
        navigator = HighlightNavigator(viewport)
        with pytest.raises(NotFoundError):
            navigator.navigate("h2", _rendered("h1"))
        assert viewport.calls == []
        assert viewport.scheduled == []


class TestNavigateWithRetry:
    """Tests for HighlightNavigator.navigate_with_retry()."""

    async def test_found_first_time(self, viewport: Any) -> None:
        navigator = HighlightNavigator(viewport, retry_delay_ms=0)
        assert await navigator.navigate_with_retry("h1", lambda: _rendered("h1"))
        assert viewport.calls[0] == ("scroll", marker_selector("h1"))

    async def test_found_on_retry(self, viewport: Any) -> None:
        """A render that lands during the delay is picked up."""
        roots = iter([_rendered(), _rendered("h1")])
        navigator = HighlightNavigator(viewport, retry_delay_ms=0)
        assert await navigator.navigate_with_retry("h1", lambda: next(roots))
        assert len(viewport.calls) == 2

    async def test_gives_up_after_retry(self, viewport: Any) -> None:
        attempts: list[int] = []

        def get_root() -> ElementNode:
            attempts.append(1)
            return _rendered()

        navigator = HighlightNavigator(viewport, retry_delay_ms=0)
        assert not await navigator.navigate_with_retry("h1", get_root)
        assert len(attempts) == 2
        assert viewport.calls == []


class TestMarkerSelector:
    def test_quotes_escaped(self) -> None:
        assert marker_selector('a"b') == 'mark[data-highlight-id="a\\"b"]'
