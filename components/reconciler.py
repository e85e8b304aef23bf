"""Matches extracted facts against the tracking database and upserts them.

Every write goes through here so that re-running a crawl over unchanged
sources leaves the database unchanged.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from components.context import RunContext
from components.models import Event, MatchStyle, Person, Project, TaskGroup
from components.notifier import is_recent
from components.tracker import TrackerClient, TrackerError
from timeline.designation import parse_designation


class ProjectCreationError(TrackerError):
    """The tracker accepted a new project but returned no record of it."""


class Reconciler:
    """Decides whether each discovered fact is new, a duplicate or an update."""

    def __init__(
        self,
        tracker: TrackerClient,
        context: RunContext,
        today: Optional[date] = None,
    ) -> None:
        self.tracker = tracker
        self.context = context
        self.today = today

    @property
    def log(self):
        return self.context.logger

    # --- Task groups and people ---

    def task_groups(self) -> list[TaskGroup]:
        """Every task group."""
        return self.tracker.list_task_groups()

    def find_task_group(self, name: str) -> Optional[TaskGroup]:
        """First task group whose name matches the search, or None."""
        found = self.tracker.list_task_groups(search=name)
        if not found:
            return None
        return self.tracker.get_task_group(found[0].id)

    def find_person(
        self, first: Optional[str], last: Optional[str], role: str
    ) -> Optional[Person]:
        """Person with this role and (caseless) name, or None."""
        if not first or not last:
            return None
        for person in self.tracker.search_people(last):
            if person.same_identity(role, first, last):
                return person
        return None

    def upsert_person(self, person: Person) -> Person:
        """Create the person, or update their email/affiliation if changed."""
        found = self.find_person(person.first_name, person.last_name, person.role)
        name = f"{person.first_name} {person.last_name}"
        if found is None:
            self.log.warning("Adding new person %s as %s", name, person.role)
            return self.tracker.create_person(person)
        same = (
            (found.email or "").casefold() == (person.email or "").casefold()
            and (found.affiliation or "").casefold()
            == (person.affiliation or "").casefold()
        )
        if same:
            self.log.info("Up-to-date person %s as %s", name, person.role)
            return found
        self.log.warning("Updating person %s as %s", name, person.role)
        return self.tracker.update_person(found.id, person)

    def upsert_task_group(self, abbrev: str, name: str, chair: Person) -> TaskGroup:
        """Create the task group or point it at its (possibly new) chair."""
        found = self.find_task_group(name)
        if found is None:
            self.log.warning("Creating task group %s", name)
            return self.tracker.create_task_group(
                TaskGroup(abbrev=abbrev, name=name, chair_id=chair.id)
            )
        self.log.warning("Updating existing task group %s", name)
        found.chair_id = chair.id
        return self.tracker.update_task_group(found)

    # --- Projects ---

    def find_project(
        self,
        designation: str,
        task_group: Optional[TaskGroup] = None,
        match_style: MatchStyle = MatchStyle.EXACT,
    ) -> Optional[Project]:
        """Find a project by designation.

        Searches the task group's projects, or all projects when no task
        group is given. A candidate matches when its designation equals the
        query ignoring case or, with ``MatchStyle.ALLOW_REV``, equals the
        query plus "-REV".

        When several candidates match, the last one in the API's order is
        used and a warning is logged: nothing distinguishes them, so this
        is a data problem to fix in the database.
        """
        candidates = self.tracker.search_projects(
            designation, task_group.id if task_group else None
        )
        matches = [
            p for p in candidates if p.designation_matches(designation, match_style)
        ]
        if not matches:
            return None
        if len(matches) > 1:
            self.log.warning(
                "Designation %s is ambiguous (%s); using %s",
                designation,
                ", ".join(f"{p.designation}#{p.id}" for p in matches),
                matches[-1].id,
            )
        return self.tracker.get_project(matches[-1].id)

    @staticmethod
    def build_project(designation: str, fields: Optional[dict[str, Any]] = None) -> Project:
        """A new Project whose type and base come from its designation."""
        project_type, base = parse_designation(designation)
        project = Project(designation=designation, project_type=project_type, base=base)
        for key, value in (fields or {}).items():
            if hasattr(project, key) and key not in ("designation", "id"):
                setattr(project, key, value)
        return project

    def create_project(
        self, task_group: TaskGroup, designation: str, fields: Optional[dict[str, Any]] = None
    ) -> Project:
        """Create a project; a rejected or empty creation ends the run."""
        project = self.build_project(designation, fields)
        self.log.warning("Adding project %s to TG %s", designation, task_group.name)
        created = self.tracker.create_project(task_group.id, project)
        if not created.saved and not self.context.dry_run:
            raise ProjectCreationError(f"Addition of project {designation} failed")
        return created

    def upsert_project(
        self,
        task_group: TaskGroup,
        designation: str,
        fields: Optional[dict[str, Any]] = None,
        update: bool = False,
        placeholders: Optional[dict[str, Any]] = None,
    ) -> Project:
        """Create the project if missing; patch it when ``update`` is set.

        Args:
            task_group: Task group the project belongs to
            designation: Project designation
            fields: Normalized field values
            update: Patch an existing project with ``fields``
            placeholders: Values used only when creating the project
        """
        project = self.find_project(designation, task_group)
        if project is None:
            self.log.info(
                "Project %s was not found for TG %s", designation, task_group.name
            )
            return self.create_project(
                task_group, designation, {**(placeholders or {}), **(fields or {})}
            )
        if update:
            self.log.info("Project %s will be updated", designation)
            changes = self.build_project(designation, fields).to_payload()
            changes.pop("designation", None)
            self.update_project(project, changes)
        else:
            self.log.debug(
                "Project %s exists as %s", designation, project.short_title
            )
        return project

    def update_project(self, project: Project, changes: dict[str, Any]) -> None:
        """Patch the non-empty ``changes`` onto ``project``."""
        changes = {k: v for k, v in changes.items() if v not in (None, "")}
        if not changes:
            return
        self.log.info("Updating project %s: %s", project.designation, sorted(changes))
        self.tracker.update_project(project, changes)
        for key, value in changes.items():
            if hasattr(project, key):
                setattr(project, key, value)

    def delete_project(self, project: Project) -> None:
        """Delete a project and, first, all of its events."""
        events = self.tracker.search_events(project)
        self.log.info("Project %s has %d events", project.designation, len(events))
        for event in events:
            self.tracker.delete_event(project, event)
        self.log.warning("Deleting existing project %s", project.designation)
        self.tracker.delete_project(project)

    # --- Events ---

    def find_events(self, project: Project, name: str) -> list[Event]:
        """Events of ``project`` named exactly ``name``."""
        return [e for e in self.tracker.search_events(project, name) if e.name == name]

    def first_event_date(self, project: Project, name: str) -> Optional[date]:
        """Date of the first event called ``name``, if any."""
        for event in self.find_events(project, name):
            if event.date:
                return event.date
        return None

    def _announce(self, project: Project, event: Event, extra: bool = False) -> None:
        notifier = self.context.notifier
        if notifier is None or self.context.dry_run:
            return
        if is_recent(event, self.today):
            notifier.post_event(project, event, extra=extra)

    def upsert_events(self, project: Project, events: list[Event]) -> int:
        """Add the events a project does not have yet.

        An event is already present when the project has an event of the
        same name on the same date. A same-named event on a different date
        is added alongside the existing ones (ballot recirculations and
        PAR modifications reuse names), never patched over them.

        Returns:
            Number of events added (or that would be added in a dry run)
        """
        added = 0
        for event in events:
            if not project.saved:
                self.log.info(
                    "Dry run: would add event %s to new project %s",
                    event, project.designation,
                )
                added += 1
                continue
            existing = self.find_events(project, event.name)
            if not existing:
                self.log.warning(
                    "Adding event %s to project %s", event, project.designation
                )
                self.tracker.create_event(project, event)
                self._announce(project, event)
                added += 1
            elif any(e.date == event.date for e in existing):
                self.log.info(
                    "Found matching event %s for project %s",
                    event.name, project.designation,
                )
            else:
                self.log.warning(
                    "Adding extra event %s to project %s", event, project.designation
                )
                self.tracker.create_event(project, event)
                self._announce(project, event, extra=True)
                added += 1
        return added
