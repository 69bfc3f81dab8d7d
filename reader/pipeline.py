"""The reading-view pipeline.

Orchestrates every tree transformation, in a fixed order, into a single
``tranquilize()`` call.  Each run works on its own soup and carries the page
URL explicitly; nothing is shared between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from bs4 import BeautifulSoup, Tag

from parsing.filtering import delete_hidden_elements, delete_zero_size_images
from parsing.heuristics import collapse_parents, prune_ads, prune_content
from parsing.images import ImageCollection, ImageRecord, harvest_images, reinsert_images
from parsing.indexing import index_elements
from parsing.links import (
    LinkRecord,
    absolutize_links,
    harvest_supporting_links,
    remove_onclick_links,
)
from parsing.pruning import (
    SCRIPT_TAGS,
    clean_head,
    normalize_reading_classes,
    promote_single_article,
    remove_whitespace_comments,
    strip_tags,
)
from parsing.styles import StyleResolver
from parsing.tree import compute_size
from reader.layout import build_reading_view

logger = logging.getLogger("reader")

_EMPTY_PAGE = "<html><head></head><body></body></html>"


class EmptyDocumentError(ValueError):
    """The page has no body content to extract from."""


class EmptySelectionError(ValueError):
    """The user selection holds nothing to extract from."""


@dataclass
class PipelineResult:
    """Everything one run produces."""

    soup: BeautifulSoup
    url: str
    title: str = ""
    images: ImageCollection = field(default_factory=ImageCollection)
    restored_images: list[ImageRecord] = field(default_factory=list)
    more_links: list[LinkRecord] = field(default_factory=list)
    nav_links: list[LinkRecord] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def html(self) -> str:
        return str(self.soup)


def parse_html(html: str) -> BeautifulSoup:
    """Parse *html* with the lxml backend."""
    return BeautifulSoup(html, "lxml")


def is_empty(root: BeautifulSoup | Tag | None) -> bool:
    """True when *root* holds neither text nor elements."""
    if root is None:
        return True
    return not root.get_text(strip=True) and root.find(True) is None


def tranquilize(
    html: str, url: str, *, nav_words: Iterable[str] | None = None
) -> PipelineResult:
    """Parse *html* and turn it into a reading view.

    Raises:
        EmptyDocumentError: If the page has no body content.
    """
    return tranquilize_soup(parse_html(html), url, nav_words=nav_words)


def tranquilize_selection(
    selection_html: str,
    url: str,
    *,
    page_html: str | None = None,
    nav_words: Iterable[str] | None = None,
) -> PipelineResult:
    """Run the pipeline on a user-selected fragment.

    The fragment replaces the body of *page_html* (or of an empty page), so
    the page's head and title are kept.

    Raises:
        EmptySelectionError: If the fragment holds no text and no elements.
    """
    fragment = parse_html(selection_html or "")
    fragment_root = fragment.body if fragment.body is not None else fragment
    if is_empty(fragment_root):
        raise EmptySelectionError("selection is empty")

    soup = parse_html(page_html or _EMPTY_PAGE)
    body = soup.body
    if body is None:
        body = soup.new_tag("body")
        (soup.html or soup).append(body)
    body.clear()
    for child in list(fragment_root.contents):
        body.append(child.extract())
    return tranquilize_soup(soup, url, nav_words=nav_words)


def tranquilize_soup(
    soup: BeautifulSoup, url: str, *, nav_words: Iterable[str] | None = None
) -> PipelineResult:
    """Transform *soup* in place into the reading view.

    Stage order:
    1. Strip scripts
    2. Remove hidden elements and zero-sized images
    3. Index the body and harvest images
    4. Resolve links, drop click-handler links, harvest side links
    5. Promote a single article, clean whitespace and comments
    6. Strip disallowed tags and the head
    7. Prune ads, prune content (three passes), collapse wrappers
    8. Normalize reading classes and re-insert lost images
    9. Assemble the reading view

    Raises:
        EmptyDocumentError: If *soup* has no body content.
    """
    if is_empty(soup.body):
        raise EmptyDocumentError(f"no body content in {url}")

    stats: dict[str, int] = {}
    stats["scripts"] = strip_tags(soup, SCRIPT_TAGS)
    stats["hidden"] = delete_hidden_elements(soup, StyleResolver(soup))
    stats["zero_size_images"] = delete_zero_size_images(soup)

    index_elements(soup.body)
    images = harvest_images(soup.body, url)
    stats["harvested_images"] = len(images)

    stats["unresolved_links"] = absolutize_links(soup, url)
    stats["onclick_links"] = remove_onclick_links(soup)
    links = harvest_supporting_links(soup, url, nav_words)

    stats["single_article"] = int(promote_single_article(soup))
    remove_whitespace_comments(soup)
    stats["stripped"] = strip_tags(soup)
    stats["head"] = clean_head(soup)
    logger.debug("after strip", extra={"stage": "strip", "removed": stats["stripped"]})

    stats["ads"] = prune_ads(soup, url, images)
    stats["content"] = prune_content(soup)
    stats["collapsed"] = collapse_parents(soup)
    logger.debug(
        "after pruning",
        extra={"stage": "prune", "removed": stats["ads"] + stats["content"]},
    )

    normalize_reading_classes(soup)
    restored = reinsert_images(soup, images, url)
    stats["restored_images"] = len(restored)

    more_links = build_reading_view(soup, url, links)

    title = soup.title.get_text(strip=True) if soup.title is not None else ""
    logger.info(
        "tranquilized",
        extra={
            "url": url,
            "removed": stats["ads"] + stats["content"] + stats["stripped"],
            "images": len(restored),
            "more_links": len(more_links),
            "nav_links": len(links.nav_links),
            "size": compute_size(soup.body),
        },
    )
    return PipelineResult(
        soup=soup,
        url=url,
        title=title,
        images=images,
        restored_images=restored,
        more_links=more_links,
        nav_links=links.nav_links,
        stats=stats,
    )
