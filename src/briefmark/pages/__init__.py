"""NiceGUI pages for Briefmark.

Import this module to register all page routes with NiceGUI.
"""

from briefmark.pages import highlights_feed, index, reading

__all__ = ["highlights_feed", "index", "reading"]

# Touch modules to prevent linter from removing "unused" imports.
# These imports register @ui.page decorators as a side effect.
_PAGES = (highlights_feed, index, reading)
