"""Tests for server-side highlight rendering."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from briefmark.annotation.renderer import (
    HighlightSpec,
    apply_highlights,
    remove_highlight_markup,
)
from briefmark.dom.text import flatten_text
from briefmark.dom.tree import parse_html

if TYPE_CHECKING:
    from collections.abc import Callable

    from briefmark.db.models import Highlight


def _mark(highlight_id: str, text: str, color: str = "yellow") -> str:
    return (
        f'<mark class="story-highlight story-highlight-{color}"'
        f' data-highlight-id="{highlight_id}">{text}</mark>'
    )


class TestApplyHighlights:
    """Tests for apply_highlights()."""

    def test_single_highlight(self) -> None:
        result = apply_highlights(
            "<p>Hello world</p>", [HighlightSpec("h1", "world", 6, 11)]
        )
        assert result.html == f"<p>Hello {_mark('h1', 'world')}</p>"
        assert result.stale == {}

    def test_no_highlights_returns_input(self) -> None:
        html = "<p>Hello world</p>"
        result = apply_highlights(html, [])
        assert result.html is html

    def test_disjoint_highlights(self) -> None:
        """Several highlights are placed independently with their colours."""
        result = apply_highlights(
            "<p>Hello world</p>",
            [
                HighlightSpec("a", "Hello", 0, 5, "blue"),
                HighlightSpec("b", "world", 6, 11, "green"),
            ],
        )
        assert result.html == (
            f"<p>{_mark('a', 'Hello', 'blue')} {_mark('b', 'world', 'green')}</p>"
        )

    def test_range_across_elements(self) -> None:
        """A range crossing element boundaries gets one marker per segment."""
        result = apply_highlights(
            "<p>Hello <b>big</b> world</p>",
            [HighlightSpec("x", "o big wo", 4, 12)],
        )
        assert result.html == (
            f"<p>Hell{_mark('x', 'o ')}<b>{_mark('x', 'big')}</b>"
            f"{_mark('x', ' wo')}rld</p>"
        )

    def test_list_layout_whitespace_not_marked(self) -> None:
        """Whitespace directly inside a list is not wrapped."""
        html = "<ul>\n<li>One</li>\n<li>Two</li>\n</ul>"
        result = apply_highlights(html, [HighlightSpec("l", "One\nTwo", 1, 8)])
        assert result.html.count("<mark") == 2
        assert result.html.startswith(f"<ul>\n<li>{_mark('l', 'One')}</li>\n<li>")

    def test_markers_do_not_change_flattened_text(self) -> None:
        html = "<p>Hello <i>big</i> world</p>"
        result = apply_highlights(
            html,
            [
                HighlightSpec("a", "Hel", 0, 3),
                HighlightSpec("b", "big w", 6, 11),
            ],
        )
        assert flatten_text(parse_html(result.html)) == "Hello big world"

    def test_overlapping_highlight_reported_stale(self) -> None:
        result = apply_highlights(
            "<p>Hello world</p>",
            [
                HighlightSpec("a", "Hello", 0, 5),
                HighlightSpec("b", "lo wo", 3, 8),
            ],
        )
        assert set(result.stale) == {"a"}
        assert result.stale["a"].reason == "overlap"
        assert 'data-highlight-id="b"' in result.html

    def test_contained_highlight_wins_over_container(self) -> None:
        """Of two nested ranges only the later-starting one is marked."""
        result = apply_highlights(
            "<p>Hello world</p>",
            [
                HighlightSpec("outer", "Hello world", 0, 11),
                HighlightSpec("inner", "world", 6, 11),
            ],
        )
        assert result.html.count("<mark") == 1
        assert result.html == f"<p>Hello {_mark('inner', 'world')}</p>"
        assert set(result.stale) == {"outer"}
        assert result.stale["outer"].reason == "overlap"

    def test_deeply_nested_content(self) -> None:
        html = "<div>" * 1500 + "Hello world" + "</div>" * 1500
        result = apply_highlights(html, [HighlightSpec("h", "world", 6, 11)])
        assert result.stale == {}
        assert 'data-highlight-id="h"' in result.html
        assert flatten_text(parse_html(result.html)) == "Hello world"

    @pytest.mark.parametrize(
        ("highlight", "reason"),
        [
            (HighlightSpec("s", "World", 6, 11), "mismatch"),
            (HighlightSpec("s", "world!", 6, 12), "out_of_range"),
            (HighlightSpec("s", "world", 11, 6), "malformed"),
            (HighlightSpec("s", "", 6, 11), "malformed"),
            (HighlightSpec("s", "Hello", -1, 4), "malformed"),
        ],
    )
    def test_stale_reasons(self, highlight: HighlightSpec, reason: str) -> None:
        """A highlight that no longer lines up is skipped and reported."""
        html = "<p>Hello world</p>"
        result = apply_highlights(html, [highlight])
        assert result.html is html
        assert result.stale["s"].reason == reason
        assert result.stale["s"].highlight_id == "s"

    def test_stale_highlight_does_not_block_others(self) -> None:
        result = apply_highlights(
            "<p>Hello world</p>",
            [
                HighlightSpec("bad", "nope", 0, 4),
                HighlightSpec("good", "world", 6, 11),
            ],
        )
        assert list(result.stale) == ["bad"]
        assert _mark("good", "world") in result.html

    def test_unknown_color_falls_back_to_yellow(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            result = apply_highlights(
                "<p>Hello world</p>", [HighlightSpec("c", "world", 6, 11, "orange")]
            )
        assert _mark("c", "world", "yellow") in result.html
        assert "unknown color" in caplog.text

    def test_uuid_ids_rendered_as_strings(
        self, make_highlight: Callable[..., Highlight]
    ) -> None:
        """Store records work directly, keyed by the string form of their id."""
        highlight = make_highlight("world", 21)
        html = "<p>Hello there, and the world.</p>"
        result = apply_highlights(html, [highlight])
        assert f'data-highlight-id="{highlight.id}"' in result.html


class TestRemoveHighlightMarkup:
    """Tests for remove_highlight_markup()."""

    def test_unwraps_all_segments(self) -> None:
        html = "<p>Hello <b>big</b> world</p>"
        rendered = apply_highlights(html, [HighlightSpec("x", "o big wo", 4, 12)])
        assert remove_highlight_markup(rendered.html, "x") == html

    def test_other_highlights_kept(self) -> None:
        rendered = apply_highlights(
            "<p>Hello world</p>",
            [HighlightSpec("a", "Hello", 0, 5), HighlightSpec("b", "world", 6, 11)],
        )
        stripped = remove_highlight_markup(rendered.html, "a")
        assert stripped == f"<p>Hello {_mark('b', 'world')}</p>"

    def test_unknown_id_returns_input(self) -> None:
        html = "<p>Hello world</p>"
        assert remove_highlight_markup(html, "missing") is html
