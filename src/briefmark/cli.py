"""Command-line tools for inspecting the annotation pipeline.

- ``briefmark-normalise FILE`` prints the normalised HTML for a story body.
- ``briefmark-annotate FILE HIGHLIGHTS.json`` renders highlights onto the
  normalised body and reports the ones that no longer fit.
- ``briefmark-flatten FILE`` prints the flattened text highlight offsets
  index into.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from briefmark.annotation.renderer import HighlightSpec, apply_highlights
from briefmark.dom.text import flatten_text
from briefmark.dom.tree import parse_html
from briefmark.input_pipeline import CONTENT_TYPES, normalise_content

if TYPE_CHECKING:
    from collections.abc import Sequence

console = Console()


def _read(path: Path, con: Console) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        con.print(f"[red]Error:[/] cannot read {path}: {exc.strerror}")
        sys.exit(1)


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument("file", type=Path, help="Story body (HTML or plain text)")
    parser.add_argument(
        "--type",
        dest="content_type",
        choices=CONTENT_TYPES,
        default=None,
        help="Content type (detected when omitted)",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print plain output without highlighting or panels",
    )
    return parser


def _print_html(html: str, *, raw: bool, con: Console) -> None:
    if raw:
        con.print(html, markup=False, highlight=False, soft_wrap=True)
    else:
        con.print(Syntax(html, "html", word_wrap=True))


def load_highlight_specs(data: Any) -> list[HighlightSpec]:
    """Build highlight specs from a decoded JSON list of highlight objects.

    Raises:
        ValueError: If *data* is not a list of objects with the required
            fields.
    """
    if not isinstance(data, list):
        msg = "Highlights file must contain a JSON list"
        raise ValueError(msg)
    specs = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            msg = f"Highlight #{index} is not an object"
            raise ValueError(msg)
        try:
            specs.append(
                HighlightSpec(
                    id=str(item["id"]),
                    highlighted_text=str(item["highlighted_text"]),
                    start_offset=int(item["start_offset"]),
                    end_offset=int(item["end_offset"]),
                    color=str(item.get("color", "yellow")),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Highlight #{index} is invalid: {exc}"
            raise ValueError(msg) from exc
    return specs


def normalise(argv: Sequence[str] | None = None, *, con: Console | None = None) -> None:
    """Print the normalised HTML for a story body."""
    con = con or console
    args = _parser(
        "briefmark-normalise", "Normalise a story body to display HTML"
    ).parse_args(argv)
    html = normalise_content(_read(args.file, con), args.content_type)
    _print_html(html, raw=args.raw, con=con)


def flatten(argv: Sequence[str] | None = None, *, con: Console | None = None) -> None:
    """Print the flattened text of a normalised story body."""
    con = con or console
    args = _parser(
        "briefmark-flatten", "Show the text that highlight offsets index into"
    ).parse_args(argv)
    html = normalise_content(_read(args.file, con), args.content_type)
    text = flatten_text(parse_html(html))
    if args.raw:
        con.print(text, markup=False, highlight=False, soft_wrap=True)
        return
    con.print(Panel(text, title=f"Flattened text ({len(text)} chars)"))


def annotate(argv: Sequence[str] | None = None, *, con: Console | None = None) -> None:
    """Render highlights from a JSON file onto a normalised story body."""
    con = con or console
    parser = _parser("briefmark-annotate", "Render highlights onto a story body")
    parser.add_argument(
        "highlights", type=Path, help="JSON list of highlight objects"
    )
    args = parser.parse_args(argv)

    try:
        specs = load_highlight_specs(json.loads(_read(args.highlights, con)))
    except ValueError as exc:
        con.print(f"[red]Error:[/] {exc}")
        sys.exit(1)

    html = normalise_content(_read(args.file, con), args.content_type)
    result = apply_highlights(html, specs)
    _print_html(result.html, raw=args.raw, con=con)

    if not result.stale:
        con.print(f"[green]All {len(specs)} highlight(s) applied.[/]")
        return

    table = Table(title="Stale highlights")
    table.add_column("ID", style="cyan")
    table.add_column("Reason", style="yellow")
    table.add_column("Detail")
    for highlight_id, error in result.stale.items():
        table.add_row(highlight_id, error.reason, error.detail)
    con.print(table)
