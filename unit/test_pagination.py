"""Test the paginated crawl loop."""

import pytest
from bs4 import BeautifulSoup

from collectors.pagination import Done, HasNextPage, PaginatedCrawler, pager_next
from components.interfaces import PageStructureError

BASE = "http://dev.example.org/pub/list"


class RowCounter(PaginatedCrawler):
    """Counts rows instead of reconciling them."""

    name = "test listing"

    def __init__(self, pages, reconciler, max_pages=0):
        super().__init__(pages, reconciler, max_pages)
        self.seen = []

    def process_row(self, row, page_url):
        self.seen.append(row.get_text(strip=True))


def add_chain(pages, page_factory, count):
    """Pages 1..count, each linking to the next; the last has no link."""
    for n in range(1, count + 1):
        next_href = f"{BASE}?page={n + 1}" if n < count else None
        pages.add(f"{BASE}?page={n}", page_factory.listing([[f"row{n}"]], next_href))


class TestPagerNext:
    """Test reading the pager control."""

    def test_next_link(self, page_factory):
        soup = BeautifulSoup(page_factory.listing([], "?page=3"), "html.parser")
        assert pager_next(soup, BASE) == HasNextPage(f"{BASE}?page=3")

    def test_last_page(self, page_factory):
        soup = BeautifulSoup(page_factory.listing([], None), "html.parser")
        assert isinstance(pager_next(soup, BASE), Done)

    def test_missing_pager_is_fatal(self, page_factory):
        soup = BeautifulSoup(page_factory.listing([], pager=False), "html.parser")
        with pytest.raises(PageStructureError):
            pager_next(soup, BASE)


class TestCrawl:
    """Test crawl termination."""

    def test_stops_naturally(self, pages, page_factory, reconciler):
        add_chain(pages, page_factory, 3)
        crawler = RowCounter(pages, reconciler, max_pages=10)
        assert crawler.crawl(f"{BASE}?page=1") == 3
        assert crawler.seen == ["row1", "row2", "row3"]

    def test_stops_at_page_bound(self, pages, page_factory, reconciler):
        add_chain(pages, page_factory, 5)
        crawler = RowCounter(pages, reconciler, max_pages=2)
        assert crawler.crawl(f"{BASE}?page=1") == 2
        assert pages.fetched == [f"{BASE}?page=1", f"{BASE}?page=2"]

    def test_unbounded(self, pages, page_factory, reconciler):
        add_chain(pages, page_factory, 4)
        assert RowCounter(pages, reconciler).crawl(f"{BASE}?page=1") == 4

    def test_only_data_rows_are_processed(self, pages, page_factory, reconciler):
        pages.add(BASE, page_factory.listing([["a"], ["b"]]))
        crawler = RowCounter(pages, reconciler)
        crawler.crawl(BASE)
        assert crawler.seen == ["a", "b"]
