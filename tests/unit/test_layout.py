"""
Reading-view assembly tests.
"""

from parsing.links import LinkRecord, SupportingLinks
from reader.layout import (
    BROWSING_LINK_CLASS,
    CONTAINER_ID,
    INNER_CONTAINER_ID,
    MASKER_ID,
    MENU_ID,
    MORE_LINKS_ID,
    NAV_LINKS_ID,
    OFFLINE_LINKS_BTN_ID,
    OFFLINE_LINKS_ID,
    SOURCE_ID,
    add_base,
    build_reading_view,
    normalize_anchor_attributes,
)

PAGE = "http://example.com/story"


def _page(soup_of):
    return soup_of(
        "<html><head><title>T</title></head><body>"
        "<p>Story text <a href='http://x.com/in' target='_blank' class='c'>inline</a></p>"
        "</body></html>"
    )


def _record(soup_of, href, text):
    soup = soup_of(f"<a href='{href}'>{text}</a>")
    return LinkRecord(anchor=soup.a.extract(), href=href, text=text)


class TestBuildReadingView:
    def test_container_structure(self, soup_of):
        soup = _page(soup_of)
        build_reading_view(soup, PAGE, SupportingLinks())

        container = soup.find(id=CONTAINER_ID)
        assert container.parent is soup.body
        assert soup.find(id=MENU_ID).parent is container
        inner = soup.find(id=INNER_CONTAINER_ID)
        assert inner.parent is container
        assert soup.find(id=MASKER_ID).parent is inner
        assert soup.find(id=MORE_LINKS_ID).parent is soup.body
        assert soup.find(id=OFFLINE_LINKS_ID).parent is soup.body
        assert inner.p.get_text().startswith("Story text")

    def test_source_marker_comes_first(self, soup_of):
        soup = _page(soup_of)
        build_reading_view(soup, PAGE, SupportingLinks())
        inner = soup.find(id=INNER_CONTAINER_ID)
        first = inner.find(True)
        assert first["id"] == SOURCE_ID
        assert first.string == f"Source : {PAGE}"

    def test_no_nav_region_without_nav_links(self, soup_of):
        soup = _page(soup_of)
        build_reading_view(soup, PAGE, SupportingLinks())
        assert soup.find(id=NAV_LINKS_ID) is None

    def test_nav_region_at_the_bottom(self, soup_of):
        soup = _page(soup_of)
        links = SupportingLinks(
            nav_links=[
                _record(soup_of, "http://example.com/story?p=2", "2"),
                _record(soup_of, "http://example.com/story?p=2", "Next"),
            ]
        )
        build_reading_view(soup, PAGE, links)
        inner = soup.find(id=INNER_CONTAINER_ID)
        nav = soup.find(id=NAV_LINKS_ID)
        assert nav.parent is inner
        assert inner.find_all(True, recursive=False)[-1] is nav
        assert [a.string for a in nav.find_all("a")] == ["2", "Next"]

    def test_more_links_hidden_and_filtered(self, soup_of):
        soup = _page(soup_of)
        links = SupportingLinks(
            more_links=[
                _record(soup_of, "http://x.com/in", "Link already in the story"),
                _record(soup_of, "http://x.com/other", "A related story elsewhere"),
            ]
        )
        kept = build_reading_view(soup, PAGE, links)
        assert [r.href for r in kept] == ["http://x.com/other"]
        region = soup.find(id=MORE_LINKS_ID)
        assert "hidden" in region["style"]
        assert [p.a["href"] for p in region.find_all("p", class_="tranquility_links")] == [
            "http://x.com/other"
        ]

    def test_menu_buttons(self, soup_of):
        soup = _page(soup_of)
        build_reading_view(soup, PAGE, SupportingLinks())
        menu = soup.find(id=MENU_ID)
        assert [b.string for b in menu.find_all("div")] == [
            "More Links",
            "Read Later",
            "Offline Links",
            "View Notes",
        ]
        assert soup.find(id=OFFLINE_LINKS_BTN_ID)["data-active-link"] == PAGE

    def test_anchors_and_base(self, soup_of):
        soup = _page(soup_of)
        build_reading_view(soup, PAGE, SupportingLinks())
        anchor = soup.find("a", href="http://x.com/in")
        assert anchor["class"] == BROWSING_LINK_CLASS
        assert "target" not in anchor.attrs
        assert soup.head.base["href"] == PAGE


class TestNormalizeAnchorAttributes:
    def test_strips_handlers(self, soup_of):
        soup = soup_of("<a href='x' onmousedown='track()' target='_top' class='a b'>x</a>")
        normalize_anchor_attributes(soup)
        assert soup.a.attrs == {"href": "x", "class": BROWSING_LINK_CLASS}


class TestAddBase:
    def test_replaces_existing_base(self, soup_of):
        soup = soup_of("<html><head><base href='/old/'></head><body></body></html>")
        add_base(soup, PAGE)
        assert len(soup.find_all("base")) == 1
        assert soup.base["href"] == PAGE
