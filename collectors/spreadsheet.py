"""Sync people, task groups and projects from the status spreadsheet.

Sheets:
    People: role, first name, last name, email, affiliation
    TaskGroups: abbreviation, name, chair first name, chair last name
        (abbreviations containing "->" are aliases and are not synced)
    Projects (first row is a header): see ``ProjectColumn``
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import Any, Iterable, Optional, Sequence

from openpyxl import load_workbook  # type: ignore

from components.models import Event, Person, TaskGroup
from components.reconciler import Reconciler
from timeline.dates import parse_date_lenient
from timeline.normalizers import parse_motion, parse_status

POOL_DAYS = 213
MEC_DAYS = 30

# Only set on newly created projects; the Active PARs crawl sets the title
NEW_PROJECT_PLACEHOLDERS = {"title": "unset"}

Row = Sequence[Any]


class ProjectColumn(IntEnum):
    """Columns of the Projects sheet that are read."""

    DESIGNATION = 0
    SHORT_TITLE = 1
    LAST_MOTION = 2
    STATUS = 3
    DRAFT_NO = 4
    NEXT_ACTION = 5
    PAR_END = 6
    TASK_GROUP = 9
    POOL_START = 11
    MEC_START = 12
    AWARD = 14


@dataclass
class TaskGroupRow:
    """A TaskGroups sheet row."""

    abbrev: str
    name: str
    chair_first_name: Optional[str]
    chair_last_name: Optional[str]

    @property
    def is_alias(self) -> bool:
        return "->" in self.abbrev


def cell(row: Optional[Row], index: int) -> Any:
    """Cell value, with blank strings and missing cells as None."""
    if row is None or index >= len(row):
        return None
    value = row[index]
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def text(row: Optional[Row], index: int) -> Optional[str]:
    """Cell value as text (numbers such as draft "1.2" come back as floats)."""
    value = cell(row, index)
    return None if value is None else str(value)


def people_from_rows(rows: Iterable[Row]) -> list[Person]:
    """People sheet rows that name a role and a person."""
    people = []
    for row in rows:
        role, first, last = text(row, 0), text(row, 1), text(row, 2)
        if not (role and first and last):
            continue
        people.append(Person(
            role=role,
            first_name=first,
            last_name=last,
            email=text(row, 3),
            affiliation=text(row, 4),
        ))
    return people


def task_groups_from_rows(rows: Iterable[Row]) -> dict[str, TaskGroupRow]:
    """TaskGroups sheet rows keyed by abbreviation."""
    groups: dict[str, TaskGroupRow] = {}
    for row in rows:
        abbrev, name = text(row, 0), text(row, 1)
        if not abbrev or not name:
            continue
        groups[abbrev] = TaskGroupRow(abbrev, name, text(row, 2), text(row, 3))
    return groups


def project_fields(row: Row) -> tuple[dict[str, Any], list[Event]]:
    """Normalized project fields of a Projects row, plus its status event."""
    status, events = parse_status(text(row, ProjectColumn.STATUS))
    fields = {
        "short_title": text(row, ProjectColumn.SHORT_TITLE),
        "draft_no": text(row, ProjectColumn.DRAFT_NO),
        "status": status,
        "last_motion": parse_motion(text(row, ProjectColumn.LAST_MOTION)),
        "next_action": parse_motion(text(row, ProjectColumn.NEXT_ACTION)),
        "award": text(row, ProjectColumn.AWARD),
    }
    return fields, events


def project_events(row: Row) -> list[Event]:
    """Events held in the date columns of a Projects row.

    The sponsor ballot pool stays open for 213 days and mandatory editorial
    coordination takes 30.
    """
    events = []
    par_end = parse_date_lenient(cell(row, ProjectColumn.PAR_END))
    if par_end:
        events.append(Event(
            date=par_end,
            name="PAR ends",
            description=f"PAR ends: {par_end.isoformat()}",
        ))
    pool = parse_date_lenient(cell(row, ProjectColumn.POOL_START))
    if pool:
        events.append(Event(
            date=pool,
            end_date=pool + timedelta(days=POOL_DAYS),
            name="Pool",
            description=f"Sponsor ballot pool: {pool.isoformat()}",
        ))
    mec = parse_date_lenient(cell(row, ProjectColumn.MEC_START))
    if mec:
        events.append(Event(
            date=mec,
            end_date=mec + timedelta(days=MEC_DAYS),
            name="MEC",
            description=f"Mandatory Editorial Coordination: {mec.isoformat()}",
        ))
    return events


def read_sheet(path: str, name: str) -> list[tuple]:
    """All rows of one sheet as tuples of cell values."""
    book = load_workbook(path, read_only=True, data_only=True)
    try:
        return list(book[name].iter_rows(values_only=True))
    finally:
        book.close()


class SpreadsheetImporter:
    """Applies the spreadsheet to the tracker.

    People and task groups are only synced when asked for; projects are
    always considered. An existing project is left alone unless the run
    updates (patch) or deletes existing projects (delete then re-create).
    """

    def __init__(
        self,
        reconciler: Reconciler,
        people: bool = False,
        task_groups: bool = False,
    ) -> None:
        self.reconciler = reconciler
        self.sync_people_sheet = people
        self.sync_task_groups_sheet = task_groups

    @property
    def context(self):
        return self.reconciler.context

    @property
    def log(self):
        return self.reconciler.context.logger

    def sync_people(self, rows: Iterable[Row]) -> None:
        for person in people_from_rows(rows):
            self.reconciler.upsert_person(person)

    def sync_task_groups(self, groups: dict[str, TaskGroupRow]) -> None:
        for group in groups.values():
            if group.is_alias:
                continue
            chair = self.reconciler.find_person(
                group.chair_first_name, group.chair_last_name, "Chair"
            )
            if chair is None:
                self.log.error(
                    "Chair %s %s not found for task group %s",
                    group.chair_first_name, group.chair_last_name, group.name,
                )
                continue
            self.reconciler.upsert_task_group(group.abbrev, group.name, chair)

    def _task_group(self, row: Row, groups: dict[str, TaskGroupRow]) -> Optional[TaskGroup]:
        abbrev = text(row, ProjectColumn.TASK_GROUP)
        group = groups.get(abbrev or "")
        if group is None:
            self.log.error("Task group %s is not on the TaskGroups sheet", abbrev)
            return None
        task_group = self.reconciler.find_task_group(group.name)
        if task_group is None:
            self.log.error("Taskgroup %s not found", group.name)
        return task_group

    def sync_project(self, number: int, row: Row, groups: dict[str, TaskGroupRow]) -> None:
        designation = text(row, ProjectColumn.DESIGNATION)
        if not designation:
            self.log.info("Skipping undesignated project in row %d", number)
            return
        task_group = self._task_group(row, groups)
        if task_group is None:
            return
        project = self.reconciler.find_project(designation, task_group)
        if project is not None and not (self.context.update or self.context.delete_existing):
            self.log.debug("Project %s exists as %s", designation, project.short_title)
            return

        fields, events = project_fields(row)
        events.extend(project_events(row))
        if project is not None and self.context.delete_existing:
            self.reconciler.delete_project(project)
        project = self.reconciler.upsert_project(
            task_group,
            designation,
            fields,
            update=self.context.update,
            placeholders=NEW_PROJECT_PLACEHOLDERS,
        )
        if events:
            self.reconciler.upsert_events(project, events)

    def run(self, path: str) -> None:
        """Import the workbook at ``path``."""
        if self.sync_people_sheet:
            self.sync_people(read_sheet(path, "People"))
        groups = task_groups_from_rows(read_sheet(path, "TaskGroups"))
        if self.sync_task_groups_sheet:
            self.sync_task_groups(groups)
        rows = read_sheet(path, "Projects")
        for number, row in enumerate(rows[1:], start=1):
            self.sync_project(number, row, groups)
