"""Image harvesting and re-insertion.

Destructive pruning often deletes the container of a meaningful image
(a ``figure``, a wrapper ``div`` with a short caption, ...).  Every image is
recorded before pruning together with its pre-order index, and images that
did not survive in place are put back next to the surviving element that
was closest to them in the original document order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator
from urllib.parse import urljoin

from parsing.indexing import INDEX_ATTR, element_index
from parsing.tree import attr_str

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

logger = logging.getLogger("reader")


@dataclass
class ImageRecord:
    """A harvested image: source key, alt text and original pre-order index."""

    source: str
    alt: str
    index: int


class ImageCollection:
    """Harvested images keyed by source.

    Adding a record whose source is already present replaces it, so the
    last harvested image with a given source wins.
    """

    def __init__(self) -> None:
        self._records: dict[str, ImageRecord] = {}

    def add(self, record: ImageRecord) -> None:
        self._records[record.source] = record

    def discard(self, source: str) -> bool:
        """Drop the record for *source*; returns whether one was present."""
        return self._records.pop(source, None) is not None

    def get(self, source: str) -> ImageRecord | None:
        return self._records.get(source)

    def __contains__(self, source: object) -> bool:
        return source in self._records

    def __iter__(self) -> Iterator[ImageRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)

    def sources(self) -> list[str]:
        return list(self._records)


def image_source(img: Tag, base_url: str = "") -> str:
    """Return the absolute source of *img*, or ``""`` when it has none."""
    src = attr_str(img, "src").strip()
    if not src:
        return ""
    if not base_url:
        return src
    try:
        return urljoin(base_url, src)
    except ValueError:
        return src


def harvest_images(
    root: Tag, base_url: str = "", collection: ImageCollection | None = None
) -> ImageCollection:
    """Record every ``<img>`` under *root* into an ``ImageCollection``.

    Must run after indexing: the record keeps the image's ``data-dfsindex``.
    Images without a source cannot be restored and are skipped.
    """
    if collection is None:
        collection = ImageCollection()
    for img in root.find_all("img"):
        source = image_source(img, base_url)
        index = element_index(img)
        if not source or index is None:
            continue
        collection.add(ImageRecord(source=source, alt=attr_str(img, "alt"), index=index))
    return collection


def purge_images(container: Tag, collection: ImageCollection, base_url: str = "") -> int:
    """Forget every harvested image contained in *container*."""
    purged = 0
    for img in container.find_all("img"):
        if collection.discard(image_source(img, base_url)):
            purged += 1
    return purged


def _find_anchors(body: Tag, index: int) -> tuple[Tag | None, Tag | None]:
    """Return the surviving elements nearest to *index* on each side.

    ``next_el`` has the smallest index greater than *index*; ``prev_el`` has
    the largest index smaller than it.
    """
    next_el: Tag | None = None
    prev_el: Tag | None = None
    next_idx = prev_idx = None
    for el in body.find_all(True):
        idx = element_index(el)
        if idx is None:
            continue
        if idx > index and (next_idx is None or idx < next_idx):
            next_el, next_idx = el, idx
        elif idx < index and (prev_idx is None or idx > prev_idx):
            prev_el, prev_idx = el, idx
    return next_el, prev_el


def reinsert_images(
    soup: BeautifulSoup, collection: ImageCollection, base_url: str = ""
) -> list[ImageRecord]:
    """Put back harvested images that are no longer present in the body.

    Each missing image is inserted just before the surviving element with
    the next original index, or else just after the one with the previous
    original index.  Images with neither are dropped.

    Returns:
        The records that were re-inserted.
    """
    body = soup.body
    if body is None:
        return []

    present = {image_source(img, base_url) for img in body.find_all("img")}
    restored: list[ImageRecord] = []
    for record in collection:
        if record.source in present:
            continue
        next_el, prev_el = _find_anchors(body, record.index)
        img = soup.new_tag("img", attrs={"src": record.source, "alt": record.alt})
        img[INDEX_ATTR] = str(record.index)
        if next_el is not None:
            next_el.insert_before(img)
        elif prev_el is not None:
            prev_el.insert_after(img)
        else:
            logger.debug("no anchor for image %s, dropping it", record.source)
            continue
        present.add(record.source)
        restored.append(record)
    return restored
