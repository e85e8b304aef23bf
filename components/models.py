"""Data models for the project tracking database."""

from __future__ import annotations

from dataclasses import dataclass, fields, asdict
from datetime import date
from enum import Enum
from typing import Any, Optional

from timeline.dates import parse_date_lenient


class ProjectType(str, Enum):
    """Kind of standards project, derived from its designation."""

    NEW_STANDARD = "NewStandard"
    AMENDMENT = "Amendment"
    REVISION = "Revision"
    CORRIGENDUM = "Corrigendum"
    ERRATUM = "Erratum"


class MatchStyle(str, Enum):
    """How a designation query is compared to stored designations."""

    EXACT = "exact_match"
    """Only case differences are allowed"""
    ALLOW_REV = "allow_rev"
    """Either the designation or designation-REV may match"""


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop empty values and render dates as ISO strings."""
    out: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, date):
            value = value.isoformat()
        out[key] = value
    return out


def _known(cls, data: dict[str, Any]) -> dict[str, Any]:
    """Keep only the keys that ``cls`` declares."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class Person:
    """A person known to the tracker (e.g., a task group chair)."""

    role: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    affiliation: Optional[str] = None
    id: Optional[int] = None

    def same_identity(self, role: str, first: str, last: str) -> bool:
        """Identity is (role, first, last) with names compared caselessly."""
        return (
            self.role == role
            and (self.first_name or "").casefold() == first.casefold()
            and (self.last_name or "").casefold() == last.casefold()
        )

    def to_payload(self) -> dict[str, Any]:
        """Request body for the tracking API."""
        return _compact({k: v for k, v in asdict(self).items() if k != "id"})

    @staticmethod
    def from_json(data: dict[str, Any]) -> "Person":
        """Create a Person from an API response body."""
        return Person(**_known(Person, data))


@dataclass
class TaskGroup:
    """An organizational subgroup that owns projects."""

    abbrev: str
    name: str
    chair_id: Optional[int] = None
    id: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        """Request body for the tracking API."""
        return _compact({k: v for k, v in asdict(self).items() if k != "id"})

    @staticmethod
    def from_json(data: dict[str, Any]) -> "TaskGroup":
        """Create a TaskGroup from an API response body."""
        return TaskGroup(**_known(TaskGroup, data))


@dataclass
class Event:
    """A dated milestone in a project's lifecycle."""

    date: date
    name: str
    description: str
    end_date: Optional[date] = None
    url: Optional[str] = None
    id: Optional[int] = None
    project_id: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        """Request body for the tracking API."""
        return _compact({
            "date": self.date,
            "end_date": self.end_date,
            "name": self.name,
            "description": self.description,
            "url": self.url,
        })

    @staticmethod
    def from_json(data: dict[str, Any]) -> "Event":
        """Create an Event from an API response body."""
        known = _known(Event, data)
        known["date"] = parse_date_lenient(known.get("date"))
        known["end_date"] = parse_date_lenient(known.get("end_date"))
        known.setdefault("name", "")
        known.setdefault("description", "")
        return Event(**known)

    def __str__(self) -> str:
        return f"{self.name} ({self.date})"


@dataclass
class Project:  # pylint: disable=too-many-instance-attributes
    """A standards project; ``designation`` is the natural key."""

    designation: str
    project_type: Optional[ProjectType] = None
    base: Optional[str] = None
    short_title: Optional[str] = None
    title: Optional[str] = None
    draft_no: Optional[str] = None
    draft_url: Optional[str] = None
    status: Optional[str] = None
    last_motion: Optional[str] = None
    next_action: Optional[str] = None
    award: Optional[str] = None
    par_url: Optional[str] = None
    files_url: Optional[str] = None
    task_group_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def saved(self) -> bool:
        """True once the tracker has assigned an id."""
        return self.id is not None

    def designation_matches(
        self, designation: str, style: MatchStyle = MatchStyle.EXACT
    ) -> bool:
        """Compare a query designation against this project's designation."""
        mine = (self.designation or "").casefold()
        if designation.casefold() == mine:
            return True
        return (
            style == MatchStyle.ALLOW_REV
            and f"{designation}-REV".casefold() == mine
        )

    def to_payload(self) -> dict[str, Any]:
        """Request body for the tracking API."""
        return _compact({k: v for k, v in asdict(self).items() if k != "id"})

    @staticmethod
    def from_json(data: dict[str, Any]) -> "Project":
        """Create a Project from an API response body."""
        known = _known(Project, data)
        ptype = known.get("project_type")
        if ptype:
            try:
                known["project_type"] = ProjectType(ptype)
            except ValueError:
                known["project_type"] = None
        return Project(**known)
