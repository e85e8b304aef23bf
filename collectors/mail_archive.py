"""Add WG/TG ballot events from the mailing list archive.

The archive index lists messages as ``<li><strong><a href=...>title``.
Ballot announcements have titles like
"[802.1 - 123] Working group recirc ballot of P802.1Qcc/D1.2"; each one
becomes a ballot event on the project, dated from the message header and
ending on the ballot's closing date.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from bs4 import BeautifulSoup, Tag  # type: ignore

from collectors.pagination import CrawlState, Done, HasNextPage, PaginatedCrawler
from components.interfaces import PageSource, PageStructureError
from components.models import Event
from components.reconciler import Reconciler
from parsers.announcement import is_response, parse_announcement, parse_ballot_title


@dataclass
class CrawlTally:  # pylint: disable=too-many-instance-attributes
    """Running counts for one archive crawl."""

    messages: int = 0
    responses: int = 0
    malformed_titles: int = 0
    ballots: int = 0
    blacklisted: int = 0
    filtered: int = 0
    unparseable: int = 0
    projects_missing: int = 0
    events_added: int = 0
    pages: int = 0

    def summary(self) -> str:
        """One line per counter, for the end-of-run log."""
        return "\n".join(f"{k}: {v}" for k, v in asdict(self).items())


def _message_link(item: Tag) -> Optional[Tag]:
    """The link of an index entry whose first element is ``<strong>``."""
    first = next(
        (c for c in item.children if isinstance(c, Tag) or str(c).strip()), None
    )
    if not isinstance(first, Tag) or first.name != "strong":
        return None
    return first.find("a", href=True)


class MailArchiveCrawler(PaginatedCrawler):
    """Walks the archive index pages from newest to oldest."""

    name = "mail archive"

    def __init__(
        self,
        pages: PageSource,
        reconciler: Reconciler,
        archive_url: str,
        max_pages: int = 0,
    ) -> None:
        super().__init__(pages, reconciler, max_pages)
        self.archive_url = archive_url.rstrip("/")
        self.tally = CrawlTally()

    def archive_link(self, href: str) -> str:
        """Archive links are relative to the archive root."""
        return f"{self.archive_url}/{href}"

    def rows(self, soup: BeautifulSoup) -> list[Tag]:
        index = soup.find("ul")
        if index is None:
            return []
        return [li for li in index.find_all("li") if _message_link(li) is not None]

    def next_state(self, soup: BeautifulSoup, page_url: str) -> CrawlState:
        """The archive's navigation table: 5th cell of its 2nd row."""
        table_rows = soup.find_all("tr")
        if len(table_rows) < 2:
            raise PageStructureError(f"No navigation table on {page_url}")
        cells = table_rows[1].find_all("td")
        link = cells[4].find("a", href=True) if len(cells) > 4 else None
        if link is None:
            return Done()
        return HasNextPage(self.archive_link(link["href"]))

    def process_row(self, row: Tag, page_url: str) -> None:
        tally = self.tally
        link = _message_link(row)
        tally.messages += 1
        title = link.get_text(strip=True)
        url = self.archive_link(link["href"])
        if is_response(title):
            tally.responses += 1
            return
        ballot = parse_ballot_title(title)
        if ballot is None:
            tally.malformed_titles += 1
            return
        tally.ballots += 1
        self.log.debug("%s: %s: %s", ballot.number, ballot.description, url)
        if self.context.is_blacklisted(ballot.number):
            tally.blacklisted += 1
            self.log.info("Ignoring blacklisted item %s", ballot.number)
            return

        announcement = parse_announcement(self.pages.fetch(url))
        if announcement is None or announcement.date is None:
            self.log.error("Couldn't parse ballot announcement %s", url)
            tally.unparseable += 1
            return
        designation = ballot.designation
        if not self.context.allows(designation):
            tally.filtered += 1
            self.log.debug(
                "Ignoring ballot announcement %s about %s", ballot.number, designation
            )
            return

        project = self.reconciler.find_project(designation)
        if project is None:
            tally.projects_missing += 1
            self.log.error(
                "Expected project %s (from mailserv) not found in database: %s",
                designation, url,
            )
            return
        start = self.reconciler.first_event_date(project, "PAR Approval")
        if start is None:
            self.log.error("Project %s has no PAR Approval date", designation)
            return
        if announcement.date < start:
            self.log.info(
                "Not adding ballot on %s as it starts before %s", ballot.draft, start
            )
            return
        event = Event(
            date=announcement.date,
            end_date=announcement.closing,
            name=ballot.event_name,
            description=ballot.description,
            url=url,
        )
        tally.events_added += self.reconciler.upsert_events(project, [event])

    def crawl(self, start_url: str) -> int:
        pages = super().crawl(start_url)
        self.tally.pages = pages
        self.log.warning("Mail archive tally:\n%s", self.tally.summary())
        return pages
