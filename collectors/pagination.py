"""Walk a paginated listing one page at a time.

A crawl is a loop over an explicit state: either there is a next page to
read, or the crawl is done. Running out of pages (or hitting the page
bound) is the ordinary way a crawl ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag  # type: ignore

from components.interfaces import PageSource, PageStructureError
from components.reconciler import Reconciler


@dataclass(frozen=True)
class HasNextPage:
    """The crawl continues at ``url``."""

    url: str


@dataclass(frozen=True)
class Done:
    """The crawl is over."""

    reason: str = "no next page"


CrawlState = Union[HasNextPage, Done]


def pager_next(soup: BeautifulSoup, page_url: str) -> CrawlState:
    """Next-page state from a portal listing's ``div.pager``.

    The pager's last element holds the "next" link; on the last page that
    element is present but has no labelled link.

    Raises:
        PageStructureError: the page has no pager at all
    """
    pager = soup.select_one("div.pager")
    if pager is None:
        raise PageStructureError(f"No pager on {page_url}")
    elements = [c for c in pager.children if isinstance(c, Tag)]
    if not elements:
        return Done()
    last = elements[-1]
    links = [last] if last.name == "a" else last.find_all("a")
    if not links or not links[-1].get_text(strip=True):
        return Done()
    href = links[-1].get("href")
    if not href:
        return Done()
    return HasNextPage(urljoin(page_url, href))


class PaginatedCrawler:
    """Shared crawl loop; subclasses say what a row is and what it means."""

    name = "listing"
    row_selector = "tr.b_data_row"

    def __init__(
        self, pages: PageSource, reconciler: Reconciler, max_pages: int = 0
    ) -> None:
        self.pages = pages
        self.reconciler = reconciler
        self.max_pages = max_pages
        self.pages_read = 0

    @property
    def context(self):
        return self.reconciler.context

    @property
    def log(self):
        return self.reconciler.context.logger

    def rows(self, soup: BeautifulSoup) -> list[Tag]:
        """Data rows of a listing page."""
        return soup.select(self.row_selector)

    def process_row(self, row: Tag, page_url: str) -> None:
        """Turn one row into facts and upsert them."""
        raise NotImplementedError

    def next_state(self, soup: BeautifulSoup, page_url: str) -> CrawlState:
        """Where the crawl goes after this page."""
        return pager_next(soup, page_url)

    def step(self, url: str) -> CrawlState:
        """Read one page and return the following state."""
        if self.max_pages and self.pages_read >= self.max_pages:
            return Done(f"page limit {self.max_pages} reached")
        self.log.debug("New %s page with nextlink %s", self.name, url)
        soup = self.pages.soup(url)
        self.pages_read += 1
        for row in self.rows(soup):
            self.process_row(row, url)
        return self.next_state(soup, url)

    def crawl(self, start_url: str) -> int:
        """Crawl from ``start_url`` until done.

        Returns:
            Number of pages read
        """
        state: CrawlState = HasNextPage(start_url)
        while True:
            match state:
                case HasNextPage(url=url):
                    state = self.step(url)
                case Done(reason=reason):
                    self.log.info(
                        "Finished %s after %d pages (%s)",
                        self.name, self.pages_read, reason,
                    )
                    return self.pages_read
