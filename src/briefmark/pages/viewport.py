"""Browser viewport operations for the highlight navigator."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from nicegui import ui

if TYPE_CHECKING:
    from collections.abc import Callable

    from nicegui import Client


class NiceGUIViewport:
    """Runs navigator side effects in one connected client's browser."""

    def __init__(self, client: Client | None = None) -> None:
        self._client = client or ui.context.client

    def _run(self, selector: str, action: str) -> None:
        self._client.run_javascript(
            f"const el = document.querySelector({json.dumps(selector)});"
            f" if (el) {{ {action} }}"
        )

    def scroll_into_view(self, selector: str) -> None:
        self._run(selector, "el.scrollIntoView({behavior: 'smooth', block: 'center'});")

    def add_class(self, selector: str, class_name: str) -> None:
        self._run(selector, f"el.classList.add({json.dumps(class_name)});")

    def remove_class(self, selector: str, class_name: str) -> None:
        self._run(selector, f"el.classList.remove({json.dumps(class_name)});")

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        with self._client.layout:
            ui.timer(delay_seconds, callback, once=True)
