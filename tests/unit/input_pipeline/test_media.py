"""Tests for image-link promotion and image enhancement."""

from __future__ import annotations

import pytest

from briefmark.dom.tree import parse_html, to_html
from briefmark.input_pipeline.media import (
    enhance_images,
    is_image_link,
    promote_image_links,
)


class TestIsImageLink:
    """Tests for is_image_link()."""

    @pytest.mark.parametrize(
        ("href", "text"),
        [
            ("https://x.com/a.png", ""),
            ("https://x.com/a.JPEG?w=640", "anything"),
            ("/local/pic.webp", "pic"),
            ("https://x.com/gallery/123", "See the photo"),
            ("https://x.com/cat", "cat"),
        ],
    )
    def test_detected(self, href: str, text: str) -> None:
        assert is_image_link(href, text)

    @pytest.mark.parametrize(
        ("href", "text"),
        [
            ("https://x.com/article", "Read more"),
            ("/gallery/123", "See the photo"),
            ("https://x.com/a.png.html", "page"),
        ],
    )
    def test_not_detected(self, href: str, text: str) -> None:
        assert not is_image_link(href, text)


class TestPromoteImageLinks:
    """Tests for promote_image_links()."""

    def test_link_in_paragraph_becomes_figure(self) -> None:
        """An image link alone in a paragraph replaces the paragraph."""
        root = parse_html('<p><a href="https://x.com/cat.jpg">A cat</a></p>')
        assert promote_image_links(root) == 1
        assert to_html(root) == (
            '<figure class="story-image-wrapper">'
            '<img src="https://x.com/cat.jpg" alt="A cat" class="story-image">'
            '<figcaption class="story-image-caption">A cat</figcaption>'
            "</figure>"
        )

    def test_no_caption_when_text_is_url(self) -> None:
        """Link text identical to the URL is not repeated as a caption."""
        url = "https://x.com/c.png"
        root = parse_html(f'<div><a href="{url}">{url}</a></div>')
        promote_image_links(root)
        assert "figcaption" not in to_html(root)
        assert root.find_all("img")[0].attrs["alt"] == url

    def test_empty_link_text_uses_fallback_alt(self) -> None:
        """An image link without text gets the fallback alt text."""
        root = parse_html('<div><a href="https://x.com/c.png"></a></div>')
        promote_image_links(root, alt_fallback="Picture")
        assert root.find_all("img")[0].attrs["alt"] == "Picture"

    def test_surrounding_text_kept_in_paragraphs(self) -> None:
        """Text around the link stays in paragraphs either side."""
        root = parse_html(
            '<p>Before <a href="https://x.com/c.png">chart</a> after</p>'
        )
        promote_image_links(root)
        html = to_html(root)
        assert html.startswith("<p>Before </p><figure")
        assert html.endswith("</figure><p> after</p>")

    def test_ordinary_links_untouched(self) -> None:
        html = '<p><a href="https://x.com/post">Read more</a></p>'
        root = parse_html(html)
        assert promote_image_links(root) == 0
        assert to_html(root) == html


class TestEnhanceImages:
    """Tests for enhance_images()."""

    def test_bare_image_wrapped(self) -> None:
        """Images get class, alt, lazy loading and a figure wrapper."""
        root = parse_html('<p><img src="a.png"></p>')
        enhance_images(root)
        assert to_html(root) == (
            '<figure class="story-image-wrapper">'
            '<img src="a.png" class="story-image" alt="Image" loading="lazy">'
            "</figure>"
        )

    def test_image_in_figure_not_rewrapped(self) -> None:
        """Images already in a figure keep their parent."""
        root = parse_html('<figure><img src="a.png" alt="x"></figure>')
        enhance_images(root)
        assert to_html(root) == (
            '<figure><img src="a.png" alt="x" class="story-image" loading="lazy">'
            "</figure>"
        )

    def test_image_in_picture_not_wrapped(self) -> None:
        root = parse_html('<picture><img src="a.png" alt="x"></picture>')
        enhance_images(root)
        assert root.find_all("figure") == []
