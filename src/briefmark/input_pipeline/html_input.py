"""Story content normalisation: raw newsletter body -> display-ready HTML.

Every story is displayed, selected and annotated in its normalised form, so
this output defines the text that highlight offsets index into. The steps
run in a fixed order:

1. main-content extraction (full documents only)
2. removal of non-content regions
3. element and attribute allow-listing
4. line-break normalisation (plain text becomes paragraphs)
5. markdown heading lines become headings
6. image links become figures
7. images get alt text, lazy loading and a figure wrapper
8. semantic classes, empty-paragraph removal, external link targets

Normalisation never raises: on any failure the raw content is returned.
"""

# Pattern: Functional Core (pure functions for content detection and transformation)

from __future__ import annotations

import html as html_module
import logging
import re
from typing import Literal

from briefmark.config import NormaliserConfig, get_settings
from briefmark.dom.tree import ElementNode, parse_html, to_html
from briefmark.input_pipeline.cleaning import (
    clean_elements,
    remove_disallowed,
    select_main_content,
)
from briefmark.input_pipeline.media import enhance_images, promote_image_links
from briefmark.input_pipeline.semantic import (
    apply_semantic_classes,
    remove_empty_paragraphs,
)
from briefmark.input_pipeline.structure import (
    convert_markdown_headings,
    is_minimally_tagged,
    split_text_lines,
    text_to_paragraphs,
    wrap_paragraphs,
)

logger = logging.getLogger(__name__)

CONTENT_TYPES = ("html", "text")
ContentType = Literal["html", "text"]

_TAG = re.compile(r"</?[a-z][a-z0-9]*\b[^>]*>", re.IGNORECASE)


def is_full_html_document(content: str) -> bool:
    """True for a complete document rather than a body fragment."""
    lower = content.lstrip().lower()
    return lower.startswith("<html") or "<!doctype" in lower


def detect_content_type(content: str) -> ContentType:
    """Detect whether *content* is markup or plain text.

    Full documents and anything containing at least one tag are HTML.
    """
    if is_full_html_document(content) or _TAG.search(content):
        return "html"
    return "text"


def _size_kb(text: str) -> float:
    return len(text) / 1024


def _build_tree(
    raw: str, content_type: ContentType, config: NormaliserConfig
) -> ElementNode:
    """Steps 1-4: parse, extract, clean and establish paragraph structure."""
    if content_type == "text":
        paragraphs = text_to_paragraphs(html_module.escape(raw, quote=False))
        return parse_html(paragraphs)

    root = parse_html(raw)
    if is_full_html_document(raw):
        root = select_main_content(root)

    removed = remove_disallowed(root)
    clean_elements(root, significant_text_chars=config.significant_text_chars)
    logger.debug("[PIPELINE] Removed %d non-content element(s)", removed)

    if is_minimally_tagged(to_html(root)):
        logger.debug("[PIPELINE] Minimally tagged input; rebuilding paragraphs")
        wrap_paragraphs(root)

    split_text_lines(root)
    return root


def _normalise(
    raw: str, content_type: ContentType, config: NormaliserConfig
) -> str:
    root = _build_tree(raw, content_type, config)

    headings = convert_markdown_headings(root)
    images = promote_image_links(root, alt_fallback=config.image_alt_fallback)
    enhance_images(root, alt_fallback=config.image_alt_fallback)
    apply_semantic_classes(root)
    empty = remove_empty_paragraphs(root)

    logger.debug(
        "[PIPELINE] headings=%d image_links=%d empty_paragraphs=%d",
        headings,
        images,
        empty,
    )
    return to_html(root)


def normalise_content(
    raw: str,
    content_type: ContentType | None = None,
    *,
    config: NormaliserConfig | None = None,
) -> str:
    """Normalise raw story content into display-ready HTML.

    Args:
        raw: The story body, from plain text up to a full HTML document.
        content_type: ``"html"`` or ``"text"``; detected when omitted.
        config: Rule tuning; defaults to the application settings.

    Returns:
        Normalised HTML, or *raw* unchanged if normalisation fails or would
        produce nothing from non-empty input.
    """
    if not raw or not raw.strip():
        return raw

    config = config or get_settings().normaliser
    content_type = content_type or detect_content_type(raw)
    logger.info(
        "[PIPELINE] Input: type=%s, size=%d chars (%.1f KB)",
        content_type,
        len(raw),
        _size_kb(raw),
    )

    try:
        result = _normalise(raw, content_type, config)
    except Exception:
        logger.warning(
            "[PIPELINE] Normalisation failed; using raw content", exc_info=True
        )
        return raw

    if not result.strip():
        logger.warning("[PIPELINE] Normalisation produced no content; using raw")
        return raw

    logger.info(
        "[PIPELINE] Final output: size=%d chars (%.1f KB), ratio=%.1fx from input",
        len(result),
        _size_kb(result),
        len(result) / max(len(raw), 1),
    )
    return result
