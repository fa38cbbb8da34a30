"""Reading session controller."""

from briefmark.reader.session import ReadingSession

__all__ = ["ReadingSession"]
