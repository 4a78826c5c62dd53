"""Noise stripping for rendered festival pages.

Rendered pages are mostly markup the lineup does not live in: scripts,
styles, media, forms, navigation chrome.  Stripping them shrinks the prompt
sent to the AI and leaves a DOM whose selectors mean the same thing when the
extraction plan is executed against it later.

``class`` and ``id`` attributes are kept on purpose: they are what the
extraction plan's CSS selectors hook onto.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Comment

NOISE_TAGS = (
    "script", "style", "noscript", "iframe", "svg", "img", "audio", "video",
    "canvas", "map", "source", "dialog", "menu", "menuitem", "track", "object",
    "embed", "form", "input", "button", "select", "textarea", "label",
    "option", "optgroup", "aside", "footer", "header", "nav", "head",
)

NOISE_ATTRIBUTES = frozenset({"style", "src", "alt", "title", "role", "tabindex"})
NOISE_ATTRIBUTE_PREFIXES = ("aria-", "on", "data-")

# Structural roots survive even when empty so the document stays parseable.
_KEEP_WHEN_EMPTY = frozenset({"html", "body"})

_WHITESPACE_RE = re.compile(r"\s+")
_BETWEEN_TAGS_RE = re.compile(r">\s+<")


def is_noise_attribute(name: str) -> bool:
    name = name.lower()
    return name in NOISE_ATTRIBUTES or name.startswith(NOISE_ATTRIBUTE_PREFIXES)


def strip_noise(html: str) -> str:
    """Return *html* with noise elements, attributes, comments and empty nodes removed.

    Whitespace runs are collapsed to a single space and whitespace between
    tags is dropped.
    """
    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(NOISE_TAGS):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        tag.attrs = {k: v for k, v in tag.attrs.items() if not is_noise_attribute(k)}

    # Deepest first, so a parent emptied by removing its children goes too.
    for tag in reversed(soup.find_all(True)):
        if tag.decomposed or tag.name in _KEEP_WHEN_EMPTY:
            continue
        if not tag.get_text(strip=True):
            tag.decompose()

    text = _WHITESPACE_RE.sub(" ", str(soup))
    return _BETWEEN_TAGS_RE.sub("><", text).strip()


def visible_text_length(html: str) -> int:
    """Length of the whitespace-normalized text content of *html*."""
    text = BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
    return len(_WHITESPACE_RE.sub(" ", text))
