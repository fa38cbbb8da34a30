"""Error taxonomy for the annotation pipeline.

Every failure the pipeline reports to a caller is an ``AnnotationError``.
Normaliser parse failures are deliberately absent: the normaliser degrades
to returning its input instead of raising.
"""

from __future__ import annotations

from typing import Literal

StaleReason = Literal["mismatch", "out_of_range", "overlap", "malformed"]


class AnnotationError(Exception):
    """Base class for annotation pipeline errors."""


class ValidationError(AnnotationError, ValueError):
    """A selection or highlight request is malformed."""


class StaleAnnotationError(AnnotationError):
    """A stored highlight no longer lines up with the content it annotates.

    Reported per highlight by the renderer; never raised out of rendering.
    """

    def __init__(
        self, highlight_id: str, reason: StaleReason, detail: str = ""
    ) -> None:
        self.highlight_id = highlight_id
        self.reason = reason
        self.detail = detail
        msg = f"Highlight {highlight_id} is stale ({reason})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class NotFoundError(AnnotationError, LookupError):
    """A highlight record or rendered marker does not exist."""


class PersistenceError(AnnotationError):
    """Opaque failure from the backing highlight store."""
