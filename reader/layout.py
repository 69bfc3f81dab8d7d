"""Final assembly of the reading view.

Wraps the pruned body in the fixed container structure that the UI and
persistence layers locate by identifier::

    body
      div#tranquility_container
        div#tranquility_menu           (action buttons)
        div#tranquility_innercontainer
          div#tranquility_original_url_div   "Source : <url>"
          p
          ... article content ...
          div#tranquility_masker
          p
          div#tranquility_nav_links_bot      (only with nav links)
      div#tranquility_links            (hidden, more links)
      div#tranquility_offline_links    (hidden, empty)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parsing.links import LinkRecord, SupportingLinks, collect_hrefs, filter_more_links

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

CONTAINER_ID = "tranquility_container"
INNER_CONTAINER_ID = "tranquility_innercontainer"
MENU_ID = "tranquility_menu"
MASKER_ID = "tranquility_masker"
MORE_LINKS_ID = "tranquility_links"
NAV_LINKS_ID = "tranquility_nav_links_bot"
OFFLINE_LINKS_ID = "tranquility_offline_links"
SOURCE_ID = "tranquility_original_url_div"

MORE_LINKS_BTN_ID = "tranquility_more_links_btn"
READ_LATER_BTN_ID = "tranquility_read_later_btn"
OFFLINE_LINKS_BTN_ID = "tranquility_offline_links_btn"
VIEW_NOTES_BTN_ID = "tranquility_viewnotes_btn"

BUTTON_LABELS = {
    MORE_LINKS_BTN_ID: "More Links",
    READ_LATER_BTN_ID: "Read Later",
    OFFLINE_LINKS_BTN_ID: "Offline Links",
    VIEW_NOTES_BTN_ID: "View Notes",
}

BROWSING_LINK_CLASS = "tranquil_browsing_mode_link"
NAV_LINK_SPACER = "  "
_HIDDEN_STYLE = "visibility: hidden;"


def create_node(soup: BeautifulSoup, tag_name: str, **attrs: str) -> Tag:
    """Create a detached *tag_name* element carrying *attrs*."""
    return soup.new_tag(tag_name, attrs=attrs)


def _region(soup: BeautifulSoup, ident: str, **attrs: str) -> Tag:
    return create_node(soup, "div", **{"class": ident, "id": ident, **attrs})


def _button(soup: BeautifulSoup, ident: str, **attrs: str) -> Tag:
    btn = _region(soup, ident, **attrs)
    btn.string = BUTTON_LABELS[ident]
    return btn


def render_nav_links(soup: BeautifulSoup, nav_links: list[LinkRecord]) -> Tag:
    """Render navigation links into the bottom navigation region."""
    div = create_node(soup, "div", **{"class": "tranquility_nav_links", "id": NAV_LINKS_ID})
    for record in nav_links:
        div.append(record.anchor)
        div.append(NAV_LINK_SPACER)
    return div


def render_more_links(soup: BeautifulSoup, more_links: list[LinkRecord]) -> Tag:
    """Render more links, one per ``p.tranquility_links``, into a hidden region."""
    div = _region(soup, MORE_LINKS_ID, style=_HIDDEN_STYLE)
    for record in more_links:
        p = create_node(soup, "p", **{"class": "tranquility_links"})
        p.append(record.anchor)
        div.append(p)
    return div


def normalize_anchor_attributes(root: BeautifulSoup | Tag) -> None:
    """Make every anchor open in place and mark it as a reading-view link."""
    for anchor in root.find_all("a"):
        for attr in ("target", "class", "onmousedown"):
            if attr in anchor.attrs:
                del anchor[attr]
        anchor["class"] = BROWSING_LINK_CLASS


def add_base(soup: BeautifulSoup, page_url: str) -> None:
    """Point relative URLs of the reading view at the original page."""
    head = soup.head
    if head is None:
        return
    base = head.find("base")
    if base is None:
        base = create_node(soup, "base")
        head.append(base)
    base["href"] = page_url


def build_reading_view(
    soup: BeautifulSoup, page_url: str, links: SupportingLinks
) -> list[LinkRecord]:
    """Wrap the pruned body in the reading-view structure.

    Returns:
        The more links that survived filtering against the body.
    """
    body = soup.body

    menu = _region(soup, MENU_ID, align="center")
    container = _region(soup, CONTAINER_ID, align="center")
    inner = _region(soup, INNER_CONTAINER_ID)
    container.append(menu)
    container.append(inner)
    body.append(container)
    body.append(_region(soup, MASKER_ID))

    for child in list(body.contents):
        if child is container:
            continue
        inner.append(child.extract())

    if sum(record.size for record in links.nav_links) > 0:
        inner.insert(0, create_node(soup, "p"))
        inner.append(create_node(soup, "p"))
        inner.append(render_nav_links(soup, links.nav_links))

    menu.append(_button(soup, MORE_LINKS_BTN_ID))
    more_links = filter_more_links(links.more_links, collect_hrefs(soup), page_url)
    body.append(render_more_links(soup, more_links))

    menu.append(_button(soup, READ_LATER_BTN_ID))
    menu.append(_button(soup, OFFLINE_LINKS_BTN_ID, **{"data-active-link": page_url}))
    body.append(_region(soup, OFFLINE_LINKS_ID, style=_HIDDEN_STYLE))
    menu.append(_button(soup, VIEW_NOTES_BTN_ID))

    normalize_anchor_attributes(soup)

    source = create_node(
        soup, "div", **{"class": "tranquility_annotation_selection", "id": SOURCE_ID}
    )
    source.string = f"Source : {page_url}"
    inner.insert(0, source)

    add_base(soup, page_url)
    return more_links

