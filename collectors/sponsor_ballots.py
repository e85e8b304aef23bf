"""Add sponsor ballot events from the portal's Messages (notifications) list."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag  # type: ignore

from collectors.active_pars import noscript_date
from collectors.pagination import PaginatedCrawler
from components.interfaces import PageStructureError
from components.models import Event, MatchStyle, Project
from parsers.par_detail import parse_sb_notification
from timeline.designation import SUBJECT_DESIGNATION_RE, strip_designation

NOTIFICATION_KINDS = [
    (re.compile(r"^Sponsor Ballot Opening"), "Sponsor Ballot"),
    (re.compile(r"^Ballot Recirculation"), "Sponsor Ballot recirc"),
]


def messages_url(landing: BeautifulSoup, base_url: str) -> str:
    """URL of the "Messages" link on the page shown after logging in."""
    for a in landing.find_all("a", href=True):
        if a.get_text(strip=True) == "Messages":
            return urljoin(base_url, a["href"])
    raise PageStructureError("No Messages link after portal login")


def notification_kind(subject: str) -> Optional[str]:
    """Event name for a ballot notification subject, None for other mail."""
    for pattern, name in NOTIFICATION_KINDS:
        if pattern.search(subject):
            return name
    return None


class SponsorBallotCrawler(PaginatedCrawler):
    """Adds sponsor ballot and recirculation events to existing projects.

    Row cells: [0] notification date, [4] subject linking to the message.
    A ballot is only recorded when it opens inside the project's PAR
    (between its "PAR Approval" and "PAR Expiry" events); older ballots
    belong to an earlier project with the same designation.
    """

    name = "Sponsor ballot notifications"

    def in_par_window(self, project: Project, event: Event) -> bool:
        """Whether ``event`` starts within the project's PAR lifetime."""
        start = self.reconciler.first_event_date(project, "PAR Approval")
        if start is None:
            self.log.error("Project %s has no PAR Approval date", project.designation)
            return False
        if event.date < start:
            self.log.debug(
                "Not adding sponsor ballot on %s as it starts before %s",
                project.designation, start,
            )
            return False
        end = self.reconciler.first_event_date(project, "PAR Expiry")
        if end is None:
            self.log.error("Project %s has no PAR Expiry date", project.designation)
            return False
        if event.date > end:
            self.log.info(
                "Not adding sponsor ballot on %s as it starts after %s",
                project.designation, end,
            )
            return False
        return True

    def process_row(self, row: Tag, page_url: str) -> None:
        cells = row.find_all("td")
        if len(cells) < 5:
            self.log.debug("Skipping short row on %s", page_url)
            return
        link = cells[4].find("a", href=True)
        if link is None:
            self.log.debug("Skipping notification without a subject link")
            return
        subject = link.get_text(strip=True)
        self.log.debug("Examining announcement %s (%s)", subject, noscript_date(cells[0]))
        m = SUBJECT_DESIGNATION_RE.search(subject)
        if not m:
            return
        designation = strip_designation(m.group("desig"))
        if not self.context.allows(designation):
            self.log.debug("Ignoring announcement about %s: %s", designation, subject)
            return
        kind = notification_kind(subject)
        if kind is None:
            return
        self.log.debug("Considering announcement about %s: %s", designation, subject)
        url = urljoin(page_url, link["href"])
        events = parse_sb_notification(self.pages.fetch(url), kind)
        if not events:
            return

        project = self.reconciler.find_project(
            designation, match_style=MatchStyle.ALLOW_REV
        )
        if project is None:
            self.log.error(
                "Expected project %s (from SB Notification) not found in database",
                designation,
            )
            return
        self.log.debug(
            "Matching Sponsor Ballot %s to project %s", designation, project.designation
        )
        if not self.in_par_window(project, events[0]):
            return
        self.reconciler.upsert_events(project, events)
