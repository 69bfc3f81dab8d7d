"""Link normalization and the "more links" / navigation side-collections.

Links are harvested before the content heuristics run, so the more-links
collection can later be reduced to what the reading view dropped.
"""

from __future__ import annotations

import copy
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable
from urllib.parse import urljoin

from parsing.tree import BODY_LIKE_TAGS, attr_str, compute_size, remove, snapshot, strip_fragment

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

logger = logging.getLogger("reader")

MORE_LINK_MIN_LENGTH = 20

# Compared after removing whitespace and upper-casing the link text.
NAV_WORDS = frozenset(
    {
        "NEXT",
        "PREV",
        "PREVIOUS",
        "OLDER",
        "NEWER",
        "FIRST",
        "LAST",
        "NEXTPAGE",
        "PREVIOUSPAGE",
        ">",
        "<",
        ">>",
        "<<",
        "»",
        "«",
    }
)

_INT_RE = re.compile(r"^[0-9]+$")
_WS_RE = re.compile(r"\s")
_WS_RUN_RE = re.compile(r"\s{2,}")
# Comment-style links whose text is a pasted URL.
_PASTED_URL_RE = re.compile(r"^https?:", re.IGNORECASE)


def is_script_url(href: str) -> bool:
    return href.strip().lower().startswith("javascript")


@dataclass
class LinkRecord:
    """A text-only copy of an anchor with its resolved target."""

    anchor: Tag
    href: str
    text: str

    @property
    def nav_text(self) -> str:
        """Link text with every whitespace character removed."""
        return _WS_RE.sub("", self.text)

    @property
    def size(self) -> int:
        return len(self.nav_text)

    @property
    def is_numeric(self) -> bool:
        return bool(_INT_RE.match(self.nav_text))


@dataclass
class SupportingLinks:
    """The two side-collections harvested from a page."""

    more_links: list[LinkRecord] = field(default_factory=list)
    nav_links: list[LinkRecord] = field(default_factory=list)


def absolutize_links(soup: BeautifulSoup | Tag, base_url: str) -> int:
    """Resolve every anchor ``href`` against *base_url* in place.

    A link that cannot be resolved keeps its original target.

    Returns:
        Number of links that could not be resolved.
    """
    failures = 0
    for anchor in soup.find_all("a", href=True):
        href = attr_str(anchor, "href")
        try:
            anchor["href"] = urljoin(base_url, href.strip())
        except ValueError as exc:
            logger.debug("cannot resolve link %r: %s", href, exc)
            failures += 1
    return failures


def remove_with_empty_ancestors(node: Tag) -> Tag:
    """Remove *node* along with ancestors that hold no other text.

    Walks upward while the parent's size equals the node's size, then
    detaches the topmost such ancestor.  The walk never removes ``<body>``
    or anything above it.

    Returns:
        The element actually detached.
    """
    size = compute_size(node)
    target = node
    parent = target.parent
    while (
        parent is not None
        and parent.name not in BODY_LIKE_TAGS
        and compute_size(parent) == size
    ):
        target = parent
        parent = target.parent
    remove(target)
    return target


def remove_onclick_links(soup: BeautifulSoup | Tag) -> int:
    """Remove anchors with a click handler (usually social sharing widgets)."""
    removed = 0
    for anchor in reversed(snapshot(soup, "a")):
        if anchor.has_attr("onclick"):
            remove_with_empty_ancestors(anchor)
            removed += 1
    return removed


def _text_only_clone(anchor: Tag) -> LinkRecord:
    text = _WS_RUN_RE.sub(" ", anchor.get_text())
    clone = copy.copy(anchor)
    clone.string = text
    return LinkRecord(anchor=clone, href=attr_str(clone, "href"), text=text)


def is_navigable(record: LinkRecord, page_url: str) -> bool:
    """True if *record* can serve as a pagination link."""
    href = record.href
    if record.anchor.has_attr("onclick") or not href:
        return False
    if href == "#" or href == strip_fragment(page_url) + "#":
        return False
    return not is_script_url(href)


def harvest_supporting_links(
    soup: BeautifulSoup | Tag,
    page_url: str,
    nav_words: Iterable[str] | None = None,
) -> SupportingLinks:
    """Collect the more-links and navigation-links side-collections.

    More links are anchors whose collapsed text has at least
    ``MORE_LINK_MIN_LENGTH`` characters.  Navigation links are anchors whose
    text is a navigation word or a plain integer; the navigation collection
    is cleaned with ``cleanup_nav_links`` before it is returned.
    """
    words = NAV_WORDS if nav_words is None else frozenset(w.upper() for w in nav_words)
    links = SupportingLinks()
    for anchor in soup.find_all("a"):
        record = _text_only_clone(anchor)
        if len(record.text) >= MORE_LINK_MIN_LENGTH:
            links.more_links.append(record)
        nav_text = record.nav_text
        if (
            nav_text
            and (nav_text.upper() in words or record.is_numeric)
            and is_navigable(record, page_url)
        ):
            links.nav_links.append(_text_only_clone(anchor))
    links.nav_links = cleanup_nav_links(links.nav_links, page_url)
    return links


def _exceeds(digits: str, limit: int) -> bool:
    """True if the decimal string *digits* is greater than *limit*.

    Compares lengths first so arbitrarily long digit runs never reach
    ``int()``.
    """
    digits = digits.lstrip("0") or "0"
    bound = str(limit)
    if len(digits) != len(bound):
        return len(digits) > len(bound)
    return int(digits) > limit


def cleanup_nav_links(nav_links: list[LinkRecord], page_url: str) -> list[LinkRecord]:
    """Drop stray numbers, duplicates and self-links from navigation links.

    A numeric link above the count of numeric links plus one is an unrelated
    number (a price, a year) rather than a page number.  Duplicates by text
    keep their first occurrence.
    """
    int_nav_links = sum(1 for record in nav_links if record.is_numeric)
    page = strip_fragment(page_url)
    seen: set[str] = set()
    kept: list[LinkRecord] = []
    for record in nav_links:
        key = record.nav_text
        if record.is_numeric and _exceeds(key, int_nav_links + 1):
            pass
        elif key in seen:
            pass
        elif strip_fragment(record.href) == page:
            pass
        else:
            kept.append(record)
        seen.add(key)
    return kept


def collect_hrefs(root: BeautifulSoup | Tag) -> set[str]:
    """Return the targets of every anchor under *root*."""
    return {attr_str(anchor, "href") for anchor in root.find_all("a")}


def filter_more_links(
    more_links: list[LinkRecord], body_hrefs: set[str], page_url: str
) -> list[LinkRecord]:
    """Reduce more links to useful targets the reading view does not show.

    Drops links already present in the body, script links, links back to
    the page, comment-style links whose text is a pasted URL, and repeated
    targets beyond their first occurrence.
    """
    page = strip_fragment(page_url)
    counts = Counter(record.href for record in more_links)
    kept: list[LinkRecord] = []
    for record in reversed(more_links):
        href = record.href
        if href in body_hrefs:
            continue
        if is_script_url(href):
            continue
        if strip_fragment(href) == page:
            continue
        if _PASTED_URL_RE.match(record.text.lstrip()):
            continue
        if counts[href] > 1:
            counts[href] -= 1
            continue
        kept.append(record)
    kept.reverse()
    return kept
