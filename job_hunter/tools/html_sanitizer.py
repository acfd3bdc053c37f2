"""Noise pruning and allowlist sanitization for job-page HTML."""

from __future__ import annotations

import copy
import logging
import re

from bs4 import BeautifulSoup, Tag
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
)

logger = logging.getLogger(__name__)

PRUNE_SELECTORS = [
    "script", "style", "nav", "header", "footer", "aside",
    ".ad", ".ads", ".advertisement", ".sidebar", ".navigation",
    ".menu", ".breadcrumb", ".pagination", ".social-share",
    ".comments", ".related", ".recommended", ".newsletter",
    "form", "input", "select", "textarea", "button", "label",
]

ALLOWED_TAGS = frozenset({
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "div", "section", "article", "header", "footer", "aside", "main",
    "ul", "ol", "li", "dl", "dt", "dd",
    "strong", "b", "em", "i", "u", "s", "mark", "small", "sub", "sup",
    "br", "hr", "code", "pre", "blockquote",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
})

ALLOWED_ATTRS = frozenset({"href", "colspan", "rowspan", "class", "title"})

# Removed together with everything inside them
FORBID_TAGS = frozenset({
    "script", "style", "link", "meta", "noscript", "iframe", "object", "embed",
    "applet", "form", "input", "select", "textarea", "button", "label", "video",
    "audio", "source", "track", "canvas", "svg", "dialog", "marquee", "map",
    "area", "template", "head", "title", "img",
})

_UNSAFE_URL = re.compile(r"^\s*(javascript|vbscript|data):", re.IGNORECASE)

_NOISE_NODES = (Comment, Doctype, Declaration, CData, ProcessingInstruction)


def _parse(page: str | Tag) -> Tag:
    if isinstance(page, Tag):
        return page
    return BeautifulSoup(page or "", "html.parser")


def _body_of(page: str | Tag) -> Tag:
    root = _parse(page)
    body = root if root.name == "body" else root.find("body")
    return body if isinstance(body, Tag) else root


def get_pruned_body_html(page: str | Tag) -> str:
    """Return the inner HTML of the page body with structural noise removed.

    Works on a deep copy; the caller's tree is left exactly as it was.
    """
    clone = copy.copy(_body_of(page))

    removed = 0
    for element in clone.select(", ".join(PRUNE_SELECTORS)):
        if element.decomposed:
            continue
        element.decompose()
        removed += 1

    logger.debug("Pruned %d noise elements", removed)
    return clone.decode_contents()


def sanitize_html_allowlist(html: str) -> str:
    """Restrict markup to the allowed tags and attributes.

    Disallowed tags are unwrapped so their text survives, except for the
    forbidden ones which are dropped with their content. Anchors become their
    text and images are removed. Never raises on malformed input.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    for node in list(soup.descendants):
        if node.decomposed or getattr(node, "parent", None) is None:
            continue
        try:
            _sanitize_node(node)
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug("Dropping unclassifiable node %r: %s", getattr(node, "name", node), e)
            node.extract()

    # Anchors keep their text only; no inline links survive
    for anchor in soup.find_all("a"):
        anchor.replace_with(NavigableString(anchor.get_text()))
    for img in soup.find_all("img"):
        img.decompose()

    return soup.decode()


def sanitize_page(page: str | Tag) -> str:
    """Prune then sanitize a page, returning HTML safe for Markdown conversion."""
    return sanitize_html_allowlist(get_pruned_body_html(page))


# =============================================================================
# Internal helpers
# =============================================================================


def _sanitize_node(node) -> None:
    if isinstance(node, _NOISE_NODES):
        node.extract()
        return

    if isinstance(node, NavigableString):
        return

    if not isinstance(node, Tag):
        node.extract()
        return

    name = (node.name or "").lower()

    if name in FORBID_TAGS:
        node.decompose()
        return

    if name == "a":
        # Replaced with its text after the walk
        node.attrs = {}
        return

    if name not in ALLOWED_TAGS:
        node.unwrap()
        return

    node.attrs = {
        key: value
        for key, value in node.attrs.items()
        if _is_allowed_attr(key, value)
    }


def _is_allowed_attr(key: str, value) -> bool:
    key = key.lower()
    if key not in ALLOWED_ATTRS:
        return False
    if key == "href":
        return isinstance(value, str) and not _UNSAFE_URL.match(value)
    return True
