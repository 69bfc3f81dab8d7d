"""Removal of elements the page hides on purpose.

Scripts are stripped from the reading view, so anything a page keeps hidden
for progressive disclosure would otherwise show up permanently.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from parsing.styles import StyleResolver
from parsing.tree import remove, snapshot

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

# Document metadata is kept even though browsers never render it; the
# document element and body anchor every later stage.
PROTECTED_TAGS = {"head", "title", "html", "body"}

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


def delete_hidden_elements(
    soup: BeautifulSoup, resolver: StyleResolver | None = None
) -> int:
    """Remove every element whose resolved style makes it invisible.

    Checks resolved ``visibility: hidden``, ``display: none`` and zero
    ``height``/``width``.  All decisions are taken on a snapshot before
    anything is removed, then elements are detached bottom-to-top.

    Returns:
        Number of elements detached.
    """
    if resolver is None:
        resolver = StyleResolver(soup)
    hidden = [
        el
        for el in snapshot(soup, True)
        if el.name not in PROTECTED_TAGS and resolver.is_hidden(el)
    ]
    for el in reversed(hidden):
        remove(el)
    return len(hidden)


def parse_int_prefix(value: object) -> int | None:
    """Parse a leading integer the way ``parseInt`` does ("0px" -> 0)."""
    if value is None:
        return None
    match = _INT_PREFIX_RE.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def is_zero_size_image(attrs: dict) -> bool:
    """True if the ``height`` or ``width`` attribute is explicitly zero."""
    return parse_int_prefix(attrs.get("height")) == 0 or parse_int_prefix(
        attrs.get("width")
    ) == 0


def delete_zero_size_images(soup: BeautifulSoup) -> int:
    """Remove ``<img>`` elements sized to zero through their attributes.

    Returns:
        Number of images removed.
    """
    removed = 0
    for img in reversed(snapshot(soup, "img")):
        if is_zero_size_image(img.attrs):
            remove(img)
            removed += 1
    return removed
