"""Add or update projects from the portal's PAR report.

Revision projects reuse their base designation, so the report is not
trusted to say which projects exist: only designations named in an
approved list (designation -> task group abbreviation) are handled.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

from bs4 import Tag  # type: ignore
from yaml import safe_load  # type: ignore

from collectors.active_pars import row_link
from collectors.pagination import PaginatedCrawler
from components.interfaces import PageSource
from components.models import TaskGroup
from components.reconciler import Reconciler
from parsers.par_detail import parse_par_page
from timeline.designation import DESIGNATION_PATTERN, strip_designation
from timeline.normalizers import parse_par_report_status

NEW_PROJECT_NEXT_ACTION = "EditorsDraft"


def par_report_url(base_url: str, search: str = "802.1") -> str:
    """First page of the PAR report."""
    return urljoin(base_url, f"/pub/par-report?par_report=1&committee_id=&s={search}")


def load_approved_list(path: str) -> dict[str, str]:
    """Read the approved designation -> task group abbreviation mapping."""
    with open(path, "r", encoding="utf-8") as f:
        data = safe_load(f) or {}
    return {str(k): str(v) for k, v in data.items()}


class ParReportCrawler(PaginatedCrawler):
    """Creates approved projects missing from the database and adds events.

    Row cells: [0] designation linking to the PAR detail page, [1] PAR type,
    [10] report status.
    """

    name = "PAR report"

    def __init__(
        self,
        pages: PageSource,
        reconciler: Reconciler,
        approved: dict[str, str],
        task_groups: list[TaskGroup],
        max_pages: int = 0,
    ) -> None:
        super().__init__(pages, reconciler, max_pages)
        self.approved = approved
        self.task_groups = task_groups

    def task_group_for(self, designation: str) -> Optional[TaskGroup]:
        """Task group the approved list places ``designation`` in."""
        abbrev = self.approved.get(designation)
        return next((t for t in self.task_groups if t.abbrev == abbrev), None)

    def process_row(self, row: Tag, page_url: str) -> None:
        cells = row.find_all("td")
        if len(cells) < 11:
            self.log.debug("Skipping short row on %s", page_url)
            return
        link = row_link(cells[0])
        designation = link.get_text(strip=True) if link else ""
        if not DESIGNATION_PATTERN.search(designation):
            self.log.debug("Skipping row without a designation: %r", designation)
            return
        par_type = cells[1].get_text(strip=True)
        status_text = cells[10].get_text(strip=True)
        self.log.debug("Considering project %s (%s)", designation, par_type)

        par_link = urljoin(page_url, link["href"])
        detail = parse_par_page(self.pages.fetch(par_link), par_link)
        events = list(detail.events)

        designation = strip_designation(designation)
        if par_type == "Revision":
            designation += "-REV"
        if designation not in self.approved:
            self.log.info(
                "Not adding project %s (%s) as it's not in the approved list",
                designation, par_type,
            )
            return

        project = self.reconciler.find_project(designation)
        if project is None:
            self.log.error(
                "Expected project %s (from PAR report) not found in database: adding it",
                designation,
            )
            task_group = self.task_group_for(designation)
            if task_group is None:
                self.log.error(
                    "Task group %s from approved list not found",
                    self.approved[designation],
                )
                return
            status, status_events = parse_par_report_status(status_text)
            events.extend(status_events)
            project = self.reconciler.create_project(task_group, designation, {
                "short_title": "unset",
                "title": "unset",
                "status": status,
                "next_action": NEW_PROJECT_NEXT_ACTION,
            })
        else:
            self.log.debug(
                "Matching PAR %s to project %s", designation, project.designation
            )
        self.log.warning(
            "Updating project %s and adding up to %d events",
            project.designation, len(events),
        )
        if events:
            self.reconciler.upsert_events(project, events)
        if detail.title or detail.par_url:
            self.reconciler.update_project(
                project, {"title": detail.title, "par_url": detail.par_url}
            )
