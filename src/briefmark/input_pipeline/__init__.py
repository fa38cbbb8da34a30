"""Content normaliser: raw story bodies to display-ready HTML."""

from briefmark.input_pipeline.html_input import (
    CONTENT_TYPES,
    ContentType,
    detect_content_type,
    is_full_html_document,
    normalise_content,
)

__all__ = [
    "CONTENT_TYPES",
    "ContentType",
    "detect_content_type",
    "is_full_html_document",
    "normalise_content",
]
