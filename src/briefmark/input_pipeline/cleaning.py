"""Main-content extraction and clutter removal for story HTML.

Covers the first three normalisation stages: pick the article body out of a
full newsletter/web document, drop non-content regions (navigation, ads,
forms, comments) with their contents, and reduce the surviving markup to an
allow-list of elements and attributes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from briefmark.dom.text import flatten_text
from briefmark.dom.tree import FRAGMENT, ElementNode, detach, element, replace_with

logger = logging.getLogger(__name__)

# Main-content candidates, highest priority first. Within the first selector
# that matches anything with text, the candidate with the most text wins.
CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    "main",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".content-body",
    ".story-content",
    "#content",
    ".content",
)

# Removed entirely, contents included
REMOVE_SELECTORS = (
    "script",
    "style",
    "noscript",
    "iframe",
    "embed",
    "object",
    "form",
    "input",
    "button",
    "select",
    "textarea",
    "fieldset",
    "legend",
    "nav",
    "aside",
    "footer",
    'header[role="banner"]',
    '[role="navigation"]',
    '[role="complementary"]',
    '[role="banner"]',
    ".advertisement",
    ".ad",
    ".ads",
    ".sidebar",
    ".navigation",
    ".nav-menu",
    ".comments",
    ".comment-section",
    ".social-share",
    ".share-buttons",
    ".newsletter-signup",
    ".popup",
    ".modal",
    ".overlay",
)

PRESERVE_ELEMENTS = frozenset(
    (
        # Content structure
        "article",
        "section",
        "div",
        "main",
        # Headers
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # Text formatting
        "p",
        "span",
        "strong",
        "b",
        "em",
        "i",
        "u",
        "mark",
        "del",
        "ins",
        # Lists
        "ul",
        "ol",
        "li",
        "dl",
        "dt",
        "dd",
        # Links and media
        "a",
        "img",
        "picture",
        "source",
        "figure",
        "figcaption",
        # Tables
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
        "caption",
        # Quotes and code
        "blockquote",
        "q",
        "cite",
        "code",
        "pre",
        "kbd",
        "samp",
        "var",
        # Line breaks and separators
        "br",
        "hr",
        # Semantic elements
        "time",
        "abbr",
        "acronym",
        "address",
        "small",
        "sub",
        "sup",
    )
)

PRESERVE_ATTRIBUTES = frozenset(
    (
        "href",
        "src",
        "alt",
        "title",
        "class",
        "id",
        "loading",
        "width",
        "height",
        "role",
        "lang",
        "dir",
    )
)
PRESERVE_ATTRIBUTE_PREFIXES = ("data-", "aria-")

_SELECTOR_PATTERN = re.compile(
    r"^(?P<tag>[a-z][a-z0-9]*)?"
    r"(?:#(?P<id>[\w-]+))?"
    r"(?:\.(?P<cls>[\w-]+))?"
    r'(?:\[(?P<attr>[\w-]+)="(?P<value>[^"]*)"\])?$'
)


@dataclass(frozen=True)
class SimpleSelector:
    """A compound selector of at most one tag, id, class and attribute test.

    That is all the content/removal rules need, so the tree stays free of a
    CSS engine dependency.
    """

    tag: str | None = None
    id: str | None = None
    cls: str | None = None
    attr: str | None = None
    value: str | None = None

    @classmethod
    def parse(cls, selector: str) -> SimpleSelector:
        match = _SELECTOR_PATTERN.match(selector)
        if match is None or not any(match.groupdict().values()):
            msg = f"Unsupported selector: {selector!r}"
            raise ValueError(msg)
        return cls(**match.groupdict())

    def matches(self, el: ElementNode) -> bool:
        if self.tag is not None and el.tag != self.tag:
            return False
        if self.id is not None and el.attrs.get("id") != self.id:
            return False
        if self.cls is not None and not el.has_class(self.cls):
            return False
        return self.attr is None or el.attrs.get(self.attr) == self.value


_CONTENT_RULES = tuple(SimpleSelector.parse(s) for s in CONTENT_SELECTORS)
_REMOVE_RULES = tuple(SimpleSelector.parse(s) for s in REMOVE_SELECTORS)


def select_main_content(root: ElementNode) -> ElementNode:
    """Return a new fragment holding the most likely article body.

    Falls back to the whole parsed body when no candidate has text.
    """
    chosen: ElementNode | None = None
    chosen_length = 0
    for rule in _CONTENT_RULES:
        for candidate in root.iter_elements():
            if not rule.matches(candidate):
                continue
            text = flatten_text(candidate)
            if text.strip() and (chosen is None or len(text) > chosen_length):
                chosen, chosen_length = candidate, len(text)
        if chosen is not None:
            logger.debug("Main content selected via %s <%s>", rule, chosen.tag)
            break

    if chosen is None:
        logger.debug("No main-content candidate; using document body")
        return root

    return element(FRAGMENT, children=list(chosen.children))


def remove_disallowed(root: ElementNode) -> int:
    """Drop elements matching the removal rules. Returns how many were removed."""
    removed = 0
    for el in root.iter_elements():
        if _is_detached_from(root, el):
            continue  # inside an already removed subtree
        if any(rule.matches(el) for rule in _REMOVE_RULES):
            detach(el)
            removed += 1
    return removed


def _is_detached_from(root: ElementNode, el: ElementNode) -> bool:
    node = el.parent
    while node is not None:
        if node is root:
            return False
        node = node.parent
    return True


def _keep_attribute(name: str) -> bool:
    return name in PRESERVE_ATTRIBUTES or name.startswith(PRESERVE_ATTRIBUTE_PREFIXES)


def clean_elements(root: ElementNode, *, significant_text_chars: int = 10) -> None:
    """Reduce markup to preserved elements and allow-listed attributes.

    Unknown elements with more than *significant_text_chars* characters of
    text are demoted to ``<div class="story-content">``; the rest are removed
    with their contents.
    """
    for el in root.iter_elements():
        if _is_detached_from(root, el):
            continue

        if el.tag not in PRESERVE_ELEMENTS:
            text = flatten_text(el)
            if text.strip() and len(text) > significant_text_chars:
                replacement = element("div", {"class": "story-content"})
                for child in list(el.children):
                    replacement.append(child)
                replace_with(el, replacement)
                el = replacement
            else:
                detach(el)
                continue

        el.attrs = {k: v for k, v in el.attrs.items() if _keep_attribute(k)}
