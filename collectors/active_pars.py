"""Update projects from the portal's Active PARs listing."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

from bs4 import Tag  # type: ignore

from collectors.pagination import PaginatedCrawler
from components.models import Event, MatchStyle
from parsers.par_detail import parse_par_page
from timeline.dates import parse_date_lenient
from timeline.designation import DESIGNATION_PATTERN, strip_designation


def active_pars_url(base_url: str, search: str = "802.1") -> str:
    """First page of the Active PARs listing."""
    return urljoin(base_url, f"/pub/active-pars?s={search}")


def noscript_date(cell: Tag):
    """Date shown in a cell's ``<noscript>`` fallback text."""
    noscript = cell.find("noscript")
    return parse_date_lenient(noscript.get_text(strip=True)) if noscript else None


def row_link(cell: Tag) -> Optional[Tag]:
    """The cell's first link."""
    return cell.find("a", href=True)


class ActiveParsCrawler(PaginatedCrawler):
    """Adds PAR events to existing projects and refreshes title and PAR URL.

    Row cells: [1] designation linking to the PAR detail page, [3] PAR
    document URL, [4] approval date.
    """

    name = "Active PARs"

    def process_row(self, row: Tag, page_url: str) -> None:
        cells = row.find_all("td")
        if len(cells) < 5:
            self.log.debug("Skipping short row on %s", page_url)
            return
        link = row_link(cells[1])
        designation = link.get_text(strip=True) if link else ""
        if not DESIGNATION_PATTERN.search(designation):
            self.log.debug("Skipping row without a designation: %r", designation)
            return
        self.log.debug("Considering project %s", designation)
        events: list[Event] = []
        approval = noscript_date(cells[4])
        if approval:
            events.append(Event(
                date=approval,
                name="PAR Approval",
                description=f"PAR Approval: {approval.isoformat()}",
            ))
        par_link = urljoin(page_url, link["href"])
        detail = parse_par_page(self.pages.fetch(par_link), par_link)
        events.extend(detail.events)
        par_url = cells[3].get_text(strip=True)

        designation = strip_designation(designation)
        project = self.reconciler.find_project(
            designation, match_style=MatchStyle.ALLOW_REV
        )
        if project is None:
            self.log.error(
                "Expected project %s (from Active PARs) not found in database",
                designation,
            )
            return
        self.log.debug(
            "Matching PAR %s to project %s", designation, project.designation
        )
        if events:
            self.reconciler.upsert_events(project, events)
        if detail.title or par_url:
            self.reconciler.update_project(
                project, {"title": detail.title, "par_url": par_url}
            )
