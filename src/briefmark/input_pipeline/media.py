"""Image handling for story content.

Newsletters often link to images instead of embedding them, and embed
images without alt text or sizing hints. Image links are promoted to
figures and every image ends up lazy-loaded inside a figure.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from briefmark.dom.text import flatten_text
from briefmark.dom.tree import ElementNode, TextNode, element, replace_with
from briefmark.input_pipeline.structure import split_paragraph

logger = logging.getLogger(__name__)

IMAGE_CLASS = "story-image"
FIGURE_CLASS = "story-image-wrapper"
CAPTION_CLASS = "story-image-caption"

_IMAGE_EXTENSION = re.compile(
    r"\.(jpg|jpeg|png|gif|webp|svg|bmp|ico)(\?.*)?$", re.IGNORECASE
)
_IMAGE_WORDS = ("image", "photo", "picture", "img")

# Parents that already give an image its own block
_FIGURE_PARENTS = frozenset(("figure", "picture"))


def _last_path_segment(href: str) -> str:
    path = urlsplit(href).path if "://" in href else href
    return path.rstrip("/").rsplit("/", 1)[-1].lower()


def is_image_link(href: str, link_text: str) -> bool:
    """Whether an anchor points at an image.

    Either the target has an image file extension, or the target is an
    http(s) URL and the link text reads like an image reference.
    """
    if _IMAGE_EXTENSION.search(href):
        return True
    text = link_text.lower()
    suggests_image = any(word in text for word in _IMAGE_WORDS) or (
        bool(text) and text == _last_path_segment(href)
    )
    return suggests_image and href.startswith("http")


def _place_block(node: ElementNode, figure: ElementNode) -> None:
    """Put *figure* where *node* is, lifting it out of a direct ``<p>`` parent."""
    parent = node.parent
    if parent is not None and parent.tag == "p":
        split_paragraph(parent, node, figure)
    else:
        replace_with(node, figure)


def promote_image_links(root: ElementNode, *, alt_fallback: str = "Image") -> int:
    """Replace image links with ``<figure><img><figcaption>`` blocks.

    The caption is only added when the link text differs from the URL.
    Returns the number of links promoted.
    """
    promoted = 0
    for link in root.find_all("a"):
        href = link.attrs.get("href")
        if not href:
            continue
        link_text = flatten_text(link)
        if not is_image_link(href, link_text):
            continue

        img = element(
            "img",
            {"src": href, "alt": link_text or alt_fallback, "class": IMAGE_CLASS},
        )
        figure = element("figure", {"class": FIGURE_CLASS}, [img])
        if link_text and link_text != href:
            figure.append(
                element("figcaption", {"class": CAPTION_CLASS}, [TextNode(link_text)])
            )
        _place_block(link, figure)
        promoted += 1

    if promoted:
        logger.debug("Promoted %d image link(s) to figures", promoted)
    return promoted


def enhance_images(root: ElementNode, *, alt_fallback: str = "Image") -> None:
    """Add class, alt text and lazy loading; wrap bare images in figures."""
    for img in root.find_all("img"):
        img.add_class(IMAGE_CLASS)
        if not img.attrs.get("alt"):
            img.attrs["alt"] = alt_fallback
        img.attrs["loading"] = "lazy"

        parent = img.parent
        if parent is not None and parent.tag not in _FIGURE_PARENTS:
            figure = element("figure", {"class": FIGURE_CLASS})
            _place_block(img, figure)
            figure.append(img)
