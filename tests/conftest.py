import pytest
from bs4 import BeautifulSoup

PAGE_URL = "http://example.com/story"


@pytest.fixture
def soup_of():
    """Parse an HTML string with the same backend as the pipeline."""

    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    return _make


@pytest.fixture
def page_url():
    return PAGE_URL
