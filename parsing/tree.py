"""Tree helpers shared by every pipeline stage.

The working tree is a ``BeautifulSoup`` document built with the ``lxml``
backend.  Elements are ``Tag`` objects, leaves are ``NavigableString``
(including ``Comment``).  All size metrics used by the heuristics live here
so that every stage measures content the same way.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

_WS_RE = re.compile(r"\s")

HEADING_TAG = "h1"

# Names at or above the body; never removed by upward walks.
BODY_LIKE_TAGS = {"body", "html", "[document]"}

# Identifiers starting with this prefix belong to the reading view itself.
RESERVED_ID_PREFIX = "tranquility"


def compute_size(el: Tag | None) -> int:
    """Return the visible text length of *el* with all whitespace removed.

    Elements with no inner markup at all have size 0.
    """
    if el is None or not el.contents:
        return 0
    return len(_WS_RE.sub("", el.get_text()))


def inner_html_length(el: Tag) -> int:
    """Return the length of the serialized children of *el* (``innerHTML``)."""
    return len(el.decode_contents())


def has_heading(el: Tag) -> bool:
    """True if *el* is, or contains, a top-level heading."""
    return el.name == HEADING_TAG or el.find(HEADING_TAG) is not None


def contains_heading(el: Tag) -> bool:
    """True if *el* contains a top-level heading below itself."""
    return el.find(HEADING_TAG) is not None


def is_reserved(el: Tag) -> bool:
    """True for elements carrying a reading-view identifier."""
    ident = el.get("id")
    return isinstance(ident, str) and ident.startswith(RESERVED_ID_PREFIX)


def snapshot(root: BeautifulSoup | Tag, name: str | bool) -> list[Tag]:
    """Capture every element of kind *name* under *root* in document order.

    The returned list is a plain copy; removing elements while iterating it
    never skips or revisits anything.
    """
    return list(root.find_all(name))


def remove(el: Tag) -> None:
    """Detach *el* and its whole subtree from the tree."""
    el.extract()


def document_root(soup: BeautifulSoup) -> BeautifulSoup | Tag:
    """Return the ``<html>`` element, or the soup itself for fragments."""
    return soup.html if soup.html is not None else soup


def strip_fragment(url: str) -> str:
    """Drop everything from the first ``#`` on."""
    return url.split("#", 1)[0]


def attr_str(el: Tag, name: str, default: str = "") -> str:
    """Return attribute *name* as a flat string.

    BS4 returns list values for multi-valued attributes like ``class``;
    these are joined with a space.
    """
    value = el.get(name)
    if value is None:
        return default
    if isinstance(value, list):
        return " ".join(str(item) for item in value)
    return str(value)
