"""Size-driven pruning heuristics.

All three stages measure content with ``compute_size`` (visible text length
without whitespace) and work bottom-to-top on snapshots:

- ``prune_ads`` removes link-dominated containers that are not a major part
  of the page;
- ``prune_content`` removes containers that are too small, or too
  markup-heavy for the little text they hold;
- ``collapse_parents`` removes wrappers whose only real content is a child
  of the same kind.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from parsing.images import ImageCollection, purge_images
from parsing.tree import (
    attr_str,
    compute_size,
    contains_heading,
    document_root,
    inner_html_length,
    remove,
    snapshot,
    strip_fragment,
)

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

logger = logging.getLogger("reader")

ADS_TAGS = ["ul", "div", "article", "section"]
ADS_LINK_DENSITY = 0.7
MAJORITY_CONTENT_PCTG = 0.8

CONTENT_RATIO_THRESHOLD = 0.5
# (tags, min_size) per pass; threshold_pctg is 0.0 for every pass.
CONTENT_PASSES: list[tuple[list[str], int]] = [
    (["li", "div", "ol", "ul", "form", "table", "article", "section", "span", "p"], 0),
    (["form", "div", "article", "section"], 5),
    (["li", "div", "ol", "ul", "form", "table", "article", "section", "span", "p"], 0),
]
CONTENT_THRESHOLD_PCTG = 0.0

COLLAPSE_TAGS = ["div", "span"]
COLLAPSE_THRESHOLD = 0.99999
COLLAPSE_ITERATIONS = 5


def _ratio(part: int, whole: int) -> float:
    return part / whole if whole else 0.0


def anchor_size(container: Tag, page_url: str) -> int:
    """Visible text length of links in *container* that leave the page.

    Links pointing back at the page itself (``#section`` anchors) are a
    table of contents, not navigation clutter, and do not count.  Neither do
    named anchors without a target.
    """
    page = strip_fragment(page_url)
    total = 0
    for anchor in container.find_all("a", href=True):
        target = strip_fragment(attr_str(anchor, "href").strip())
        if not target or target == page:
            continue
        total += compute_size(anchor)
    return total


def prune_ads_tag(
    soup: BeautifulSoup,
    page_url: str,
    tag_name: str,
    threshold_pctg: float,
    total_size: int,
    images: ImageCollection,
) -> int:
    """Remove link-dominated *tag_name* containers.

    A container holding a heading is kept.  An empty container is removed
    outright.  A container below ``MAJORITY_CONTENT_PCTG`` of the page whose
    outbound link text reaches *threshold_pctg* of its own text is removed,
    and its images are forgotten so they are never re-inserted.

    Returns:
        Number of containers removed.
    """
    removed = 0
    for el in reversed(snapshot(soup, tag_name)):
        if contains_heading(el):
            continue
        size = compute_size(el)
        if size == 0:
            remove(el)
            removed += 1
            continue
        if _ratio(size, total_size) >= MAJORITY_CONTENT_PCTG:
            continue
        if anchor_size(el, page_url) / size >= threshold_pctg:
            purge_images(el, images, page_url)
            remove(el)
            removed += 1
    return removed


def prune_ads(soup: BeautifulSoup, page_url: str, images: ImageCollection) -> int:
    """Run ``prune_ads_tag`` for every ads candidate kind.

    The document size is measured once, before the first kind is pruned.
    """
    total_size = compute_size(document_root(soup))
    removed = 0
    for tag_name in ADS_TAGS:
        count = prune_ads_tag(
            soup, page_url, tag_name, ADS_LINK_DENSITY, total_size, images
        )
        logger.debug("ads pass", extra={"stage": f"ads:{tag_name}", "removed": count})
        removed += count
    return removed


def content_ratio(el: Tag, size: int | None = None) -> float:
    """Text size relative to the full inner markup of *el*."""
    if size is None:
        size = compute_size(el)
    return size / (inner_html_length(el) + 1)


def prune_tag(
    soup: BeautifulSoup,
    tag_name: str,
    threshold_pctg: float,
    min_size: int,
    total_size: int,
) -> int:
    """Remove *tag_name* elements that are too small or too markup-heavy.

    An element goes when its content ratio is below
    ``CONTENT_RATIO_THRESHOLD`` while its share of the page is below
    *threshold_pctg*, or when its size is at most *min_size*.  Elements
    holding a heading are kept.

    Returns:
        Number of elements removed.
    """
    removed = 0
    for el in reversed(snapshot(soup, tag_name)):
        if contains_heading(el):
            continue
        size = compute_size(el)
        pctg = _ratio(size, total_size)
        markup_heavy = content_ratio(el, size) < CONTENT_RATIO_THRESHOLD
        if (markup_heavy and pctg < threshold_pctg) or size <= min_size:
            remove(el)
            removed += 1
    return removed


def prune_content(soup: BeautifulSoup) -> int:
    """Run the three content passes.

    The document size is re-measured before each pass.
    """
    removed = 0
    for pass_no, (tag_names, min_size) in enumerate(CONTENT_PASSES, start=1):
        total_size = compute_size(document_root(soup))
        count = sum(
            prune_tag(soup, tag_name, CONTENT_THRESHOLD_PCTG, min_size, total_size)
            for tag_name in tag_names
        )
        logger.debug(
            "content pass", extra={"stage": f"content:{pass_no}", "removed": count}
        )
        removed += count
    return removed


def replace_parent(soup: BeautifulSoup | Tag, tag_name: str, threshold_pctg: float) -> int:
    """Collapse same-kind wrappers around a dominant child.

    Elements are processed smallest subtree first.  When an element holds
    more than *threshold_pctg* of its same-kind parent's text, the element
    takes the parent's place under the grandparent; a parent with no
    grandparent instead loses all the element's siblings.

    Returns:
        Number of collapses performed.
    """
    elements = sorted(snapshot(soup, tag_name), key=inner_html_length)
    collapsed = 0
    for el in elements:
        parent = el.parent
        if parent is None or parent.name != el.name:
            continue
        parent_size = compute_size(parent)
        if parent_size == 0 or compute_size(el) / parent_size <= threshold_pctg:
            continue
        grandparent = parent.parent
        if grandparent is not None:
            parent.replace_with(el.extract())
        else:
            for sibling in list(parent.contents):
                if sibling is not el:
                    sibling.extract()
        collapsed += 1
    return collapsed


def collapse_parents(soup: BeautifulSoup | Tag) -> int:
    """Repeat ``replace_parent`` over the collapse kinds.

    Each iteration removes at most one wrapper level around an element, so
    a chain of wrappers needs several iterations to collapse fully.
    """
    collapsed = 0
    for _ in range(COLLAPSE_ITERATIONS):
        for tag_name in COLLAPSE_TAGS:
            collapsed += replace_parent(soup, tag_name, COLLAPSE_THRESHOLD)
    return collapsed
