"""Record each project's latest draft from its file archive directory."""

from __future__ import annotations

from datetime import date
from typing import Optional

import requests  # type: ignore

from components.interfaces import PageSource
from components.models import Event, Project
from components.reconciler import Reconciler
from parsers.directory_listing import (
    DRAFT_FILE_RE,
    ListingEntry,
    draft_number,
    parse_directory_listing,
)


def latest_draft(entries: list[ListingEntry]) -> Optional[ListingEntry]:
    """Most recently modified draft PDF in a listing.

    Server order is alphabetical, which misorders "d0-2" after "D0-5", so
    the modification date decides and server order only breaks ties.
    """
    drafts = [(i, e) for i, e in enumerate(entries) if DRAFT_FILE_RE.search(e.name)]
    if not drafts:
        return None
    _, latest = max(drafts, key=lambda pair: (pair[1].date or date.min, pair[0]))
    return latest


class DraftScanner:
    """Scans every project's ``files_url`` for draft PDFs."""

    def __init__(self, pages: PageSource, reconciler: Reconciler) -> None:
        self.pages = pages
        self.reconciler = reconciler

    @property
    def log(self):
        return self.reconciler.context.logger

    def scan_project(self, project: Project) -> bool:
        """Update one project from its archive; True if a draft was found."""
        designation = project.designation
        if not project.files_url:
            self.log.error("%s: files_url not set", designation)
            return False
        url = project.files_url if project.files_url.endswith("/") else project.files_url + "/"
        try:
            entries = parse_directory_listing(self.pages.fetch(url), url)
        except requests.RequestException as e:
            self.log.error("%s: could not list %s: %s", designation, url, e)
            return False
        latest = latest_draft(entries)
        if latest is None:
            self.log.debug("%s: no drafts!", designation)
            return False
        draft_no = draft_number(latest.name)
        self.log.warning("Updating %s: draft no %s: %s", designation, draft_no, latest.href)
        if latest.date is not None:
            self.reconciler.upsert_events(project, [Event(
                date=latest.date,
                name=f"Draft: {draft_no}",
                description=f"Draft {draft_no}: {latest.date.isoformat()}",
                url=latest.href,
            )])
        else:
            self.log.warning("%s: no date for %s", designation, latest.name)
        self.reconciler.update_project(
            project, {"draft_no": draft_no, "draft_url": latest.href}
        )
        return True

    def scan(self) -> int:
        """Scan all projects allowed by the run's filter.

        Returns:
            Number of projects with a draft
        """
        context = self.reconciler.context
        found = 0
        for project in self.reconciler.tracker.list_projects():
            if not context.allows(project.designation):
                continue
            if self.scan_project(project):
                found += 1
        return found
