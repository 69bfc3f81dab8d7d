"""
Link normalization, onclick removal and supporting-link harvest tests.
"""

from parsing.links import (
    LinkRecord,
    absolutize_links,
    cleanup_nav_links,
    collect_hrefs,
    filter_more_links,
    harvest_supporting_links,
    remove_onclick_links,
    remove_with_empty_ancestors,
)
from reader.pipeline import tranquilize

PAGE = "http://example.com/story"


def _record(soup_of, href, text):
    soup = soup_of(f"<a href='{href}'>{text}</a>")
    return LinkRecord(anchor=soup.a, href=href, text=text)


class TestAbsolutizeLinks:
    def test_resolves_relative_targets(self, soup_of):
        soup = soup_of(
            "<body><a href='/about'>a</a><a href='next.html'>b</a>"
            "<a href='https://other.org/x'>c</a><a>no target</a></body>"
        )
        assert absolutize_links(soup, PAGE) == 0
        hrefs = [a.get("href") for a in soup.find_all("a")]
        assert hrefs == [
            "http://example.com/about",
            "http://example.com/next.html",
            "https://other.org/x",
            None,
        ]

    def test_unresolvable_link_is_left_alone(self, soup_of):
        soup = soup_of("<body><a href='http://[invalid'>broken</a><a href='ok'>ok</a></body>")
        assert absolutize_links(soup, PAGE) == 1
        anchors = soup.find_all("a")
        assert anchors[0]["href"] == "http://[invalid"
        assert anchors[1]["href"] == "http://example.com/ok"


class TestOnclickLinks:
    def test_removes_empty_wrappers(self, soup_of):
        soup = soup_of(
            "<body><div id='share'><span><a href='#' onclick='share()'>Share</a></span></div>"
            "<p>Story text</p></body>"
        )
        assert remove_onclick_links(soup) == 1
        assert soup.find(id="share") is None
        assert soup.p.string == "Story text"

    def test_stops_at_ancestor_with_other_text(self, soup_of):
        soup = soup_of(
            "<body><div id='box'>Follow us <a onclick='x()'>Tweet</a></div></body>"
        )
        remove_onclick_links(soup)
        assert soup.find("a") is None
        assert soup.find(id="box").get_text() == "Follow us "

    def test_never_removes_body(self, soup_of):
        soup = soup_of("<body><a onclick='x()'>Only</a></body>")
        removed = remove_with_empty_ancestors(soup.a)
        assert removed.name == "a"
        assert soup.body is not None


class TestHarvestSupportingLinks:
    def test_more_links_need_twenty_characters(self, soup_of):
        soup = soup_of(
            "<body><a href='http://x.com/1'>A short link</a>"
            "<a href='http://x.com/2'>Twenty characters ok</a>"
            "<a href='http://x.com/3'>A   much    longer   link   text</a></body>"
        )
        links = harvest_supporting_links(soup, PAGE)
        assert [r.href for r in links.more_links] == ["http://x.com/2", "http://x.com/3"]
        assert links.more_links[1].text == "A much longer link text"

    def test_records_are_text_only_copies(self, soup_of):
        soup = soup_of(
            "<body><a href='http://x.com/1' class='c'><b>Bold</b> words make twenty</a></body>"
        )
        record = harvest_supporting_links(soup, PAGE).more_links[0]
        assert record.anchor.b is None
        assert record.anchor.string == "Bold words make twenty"
        assert record.anchor is not soup.a
        assert soup.a.b is not None

    def test_pagination_links(self, soup_of):
        soup = soup_of(
            "<body>"
            "<a href='http://example.com/story?p=1'>1</a>"
            "<a href='http://example.com/story?p=2'>2</a>"
            "<a href='http://example.com/story?p=3'>3</a>"
            "<a href='http://example.com/story?p=2'>Next</a>"
            "<a href='http://example.com/price'>100</a>"
            "</body>"
        )
        links = harvest_supporting_links(soup, PAGE)
        assert [r.nav_text for r in links.nav_links] == ["1", "2", "3", "Next"]

    def test_unusable_pagination_links_are_skipped(self, soup_of):
        soup = soup_of(
            "<body><a href='#'>Next</a><a href='javascript:go(2)'>2</a>"
            "<a href='http://example.com/story?p=2' onclick='go()'>Prev</a>"
            "<a>1</a><a href='http://example.com/story#'>Last</a>"
            "<a href='http://example.com/story?p=3'>&raquo;</a></body>"
        )
        links = harvest_supporting_links(soup, PAGE)
        assert [r.nav_text for r in links.nav_links] == ["»"]

    def test_custom_navigation_words(self, soup_of):
        soup = soup_of(
            "<body><a href='http://example.com/2'>Weiter</a>"
            "<a href='http://example.com/3'>Next</a></body>"
        )
        links = harvest_supporting_links(soup, PAGE, nav_words=["weiter"])
        assert [r.nav_text for r in links.nav_links] == ["Weiter"]


class TestCleanupNavLinks:
    def test_first_duplicate_wins(self, soup_of):
        records = [
            _record(soup_of, "http://example.com/a", "Next"),
            _record(soup_of, "http://example.com/b", "Next"),
        ]
        kept = cleanup_nav_links(records, PAGE)
        assert [r.href for r in kept] == ["http://example.com/a"]

    def test_self_links_dropped(self, soup_of):
        records = [
            _record(soup_of, "http://example.com/story#top", "1"),
            _record(soup_of, "http://example.com/story?p=2", "2"),
        ]
        assert [r.nav_text for r in cleanup_nav_links(records, PAGE)] == ["2"]

    def test_stray_number_dropped(self, soup_of):
        records = [
            _record(soup_of, "http://example.com/p1", "1"),
            _record(soup_of, "http://example.com/p2", "2"),
            _record(soup_of, "http://example.com/y", "2024"),
        ]
        assert [r.nav_text for r in cleanup_nav_links(records, PAGE)] == ["1", "2"]

    def test_pager_with_next_and_stray_hundred(self, soup_of):
        records = [
            _record(soup_of, f"http://example.com/p{text}", text)
            for text in ["1", "2", "3", "Next", "100"]
        ]
        kept = cleanup_nav_links(records, PAGE)
        assert [r.nav_text for r in kept] == ["1", "2", "3", "Next"]

    def test_huge_number_is_dropped(self, soup_of):
        records = [
            _record(soup_of, "http://example.com/p2", "9" * 5000),
            _record(soup_of, "http://example.com/p1", "1"),
        ]
        assert [r.nav_text for r in cleanup_nav_links(records, PAGE)] == ["1"]

    def test_leading_zeros(self, soup_of):
        records = [
            _record(soup_of, "http://example.com/p1", "01"),
            _record(soup_of, "http://example.com/p2", "0002"),
            _record(soup_of, "http://example.com/p9", "0009"),
        ]
        assert [r.nav_text for r in cleanup_nav_links(records, PAGE)] == ["01", "0002"]

    def test_huge_number_does_not_stop_the_pipeline(self):
        html = (
            "<html><body><p>Story text that is long enough to be kept around.</p>"
            "<a href='/p2'>" + "9" * 5000 + "</a><a href='/p1'>1</a></body></html>"
        )
        result = tranquilize(html, PAGE)
        assert [r.nav_text for r in result.nav_links] == ["1"]


class TestFilterMoreLinks:
    def test_filters(self, soup_of):
        records = [
            _record(soup_of, "http://x.com/dup", "Duplicate link, first copy"),
            _record(soup_of, "http://x.com/in-body", "Already present in the body"),
            _record(soup_of, "javascript:void(0)", "Open the comments widget"),
            _record(soup_of, "http://example.com/story#comments", "Jump down to comments"),
            _record(soup_of, "http://spam.com/", "http://spam.com/some/long/path"),
            _record(soup_of, "http://x.com/keep", "A link worth keeping around"),
            _record(soup_of, "http://x.com/dup", "Duplicate link, second copy"),
        ]
        kept = filter_more_links(records, {"http://x.com/in-body"}, PAGE)
        assert [r.text for r in kept] == [
            "Duplicate link, first copy",
            "A link worth keeping around",
        ]


class TestCollectHrefs:
    def test_collects_targets(self, soup_of):
        soup = soup_of("<body><a href='a'>1</a><a href='b'>2</a><a href='a'>3</a></body>")
        assert collect_hrefs(soup) == {"a", "b"}
