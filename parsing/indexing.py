"""Pre-order indexing of the working tree."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bs4 import Tag

if TYPE_CHECKING:
    from bs4 import PageElement

INDEX_ATTR = "data-dfsindex"


def index_elements(root: Tag) -> dict[int, PageElement]:
    """Number every node under *root* in depth-first pre-order, from 1.

    Text and comment leaves consume an index too; only elements are
    stamped with the ``data-dfsindex`` attribute.  Running it again after
    the tree changed renumbers everything from 1, so indices held from an
    earlier run must be treated as stale.

    Returns:
        A mapping of index to node.
    """
    index_map: dict[int, PageElement] = {}
    index = 1
    for node in _preorder(root):
        index_map[index] = node
        if isinstance(node, Tag):
            node[INDEX_ATTR] = str(index)
        index += 1
    return index_map


def _preorder(root: Tag):  # noqa: ANN202
    yield root
    yield from root.descendants


def element_index(el: Tag) -> int | None:
    """Return the stamped pre-order index of *el*, or ``None``."""
    raw = el.get(INDEX_ATTR)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None
