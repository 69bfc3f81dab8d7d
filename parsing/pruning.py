"""Structural clean-up of the working tree.

Tag stripping, comment/whitespace clean-up, head clean-up, single-article
promotion and reading-class normalization.  The size-driven heuristics live
in ``parsing.heuristics``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from bs4 import Comment, Declaration, Doctype, ProcessingInstruction

from parsing.tree import attr_str, has_heading, is_reserved, remove, snapshot

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

SCRIPT_TAGS = ["script", "noscript"]

# Order matters only for logging; each kind is stripped independently.
STRIP_TAGS = [
    "style",
    "link",
    "meta",
    "script",
    "noscript",
    "iframe",
    "select",
    "dd",
    "input",
    "textarea",
    "header",
    "footer",
    "nav",
    "form",
    "button",
    "picture",
    "figure",
    "svg",
]

# Embedded frames kept although iframes are stripped otherwise.
ALLOWED_EMBED_RE = re.compile(r"youtube")

READING_TAGS = [
    "ul",
    "ol",
    "li",
    "div",
    "span",
    "p",
    "font",
    "body",
    "h1",
    "h2",
    "h3",
    "pre",
    "table",
    "article",
    "section",
]

_WS_RUN_RE = re.compile(r"\s{2,}")
_NON_TEXT_STRINGS = (Declaration, Doctype, ProcessingInstruction)


def is_allowed_embed(el: Tag) -> bool:
    return el.name == "iframe" and ALLOWED_EMBED_RE.search(attr_str(el, "src")) is not None


def remove_tag(soup: BeautifulSoup | Tag, tag_name: str) -> int:
    """Remove every *tag_name* element, bottom-to-top.

    Kept regardless of kind: headings and anything holding one, elements
    with a reading-view identifier, and allow-listed embeds.

    Returns:
        Number of elements removed.
    """
    removed = 0
    for el in reversed(snapshot(soup, tag_name)):
        if is_allowed_embed(el) or has_heading(el) or is_reserved(el):
            continue
        remove(el)
        removed += 1
    return removed


def strip_tags(soup: BeautifulSoup | Tag, tag_names: list[str] | None = None) -> int:
    """Apply ``remove_tag`` for each disallowed kind, in order."""
    if tag_names is None:
        tag_names = STRIP_TAGS
    return sum(remove_tag(soup, name) for name in tag_names)


def remove_whitespace_comments(root: BeautifulSoup | Tag) -> None:
    """Drop comments and collapse whitespace runs in text nodes.

    Nothing inside ``<pre>`` is touched, so preformatted text keeps its
    line breaks and indentation.
    """
    for string in list(root.find_all(string=True)):
        if string.find_parent("pre") is not None:
            continue
        if isinstance(string, Comment):
            string.extract()
        elif isinstance(string, _NON_TEXT_STRINGS):
            continue
        elif _WS_RUN_RE.search(string):
            string.replace_with(type(string)(_WS_RUN_RE.sub(" ", string)))


def clean_head(soup: BeautifulSoup) -> int:
    """Remove every ``<head>`` child element except ``<title>``."""
    removed = 0
    for head in soup.find_all("head"):
        for child in list(head.find_all(True, recursive=False)):
            if child.name != "title":
                remove(child)
                removed += 1
    return removed


def promote_single_article(soup: BeautifulSoup) -> bool:
    """Replace the body with the page's only ``<article>``, if it has one.

    Returns:
        True when the body was replaced.
    """
    body = soup.body
    if body is None:
        return False
    articles = soup.find_all("article")
    if len(articles) != 1:
        return False
    article = articles[0].extract()
    body.clear()
    body.append(article)
    return True


def normalize_reading_classes(soup: BeautifulSoup | Tag) -> None:
    """Reset presentation attributes on readable tags to the reading classes.

    Drops ``class``, ``style`` and ``width`` and sets class ``tranquility``
    (``tranquility_pre`` for ``<pre>`` so monospaced fonts survive).
    """
    for tag_name in READING_TAGS:
        for el in soup.find_all(tag_name):
            for attr in ("class", "style", "width"):
                if attr in el.attrs:
                    del el[attr]
            el["class"] = "tranquility_pre" if el.name == "pre" else "tranquility"
