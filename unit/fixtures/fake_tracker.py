"""An in-memory stand-in for TrackerClient."""

from dataclasses import replace
from typing import Any, Optional

from components.models import Event, Person, Project, TaskGroup


def _matches(search: Optional[str], *values: Optional[str]) -> bool:
    if not search:
        return True
    return any(search.casefold() in (v or "").casefold() for v in values)


class FakeTracker:
    """Keeps task groups, people, projects and events in dicts.

    Searches are case-insensitive substring matches, like the real API.
    Every write is recorded in ``writes`` as (operation, id or name).
    """

    def __init__(self) -> None:
        self.task_groups: dict[int, TaskGroup] = {}
        self.people: dict[int, Person] = {}
        self.projects: dict[int, Project] = {}
        self.events: dict[int, Event] = {}
        self.writes: list[tuple[str, Any]] = []
        self._next_id = 1

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id - 1

    # --- Seeding helpers ---

    def add_task_group(self, abbrev: str, name: str, chair_id: Optional[int] = None) -> TaskGroup:
        group = TaskGroup(abbrev=abbrev, name=name, chair_id=chair_id, id=self._id())
        self.task_groups[group.id] = group
        return replace(group)

    def add_person(self, role: str, first: str, last: str, **kwargs) -> Person:
        person = Person(role=role, first_name=first, last_name=last, id=self._id(), **kwargs)
        self.people[person.id] = person
        return replace(person)

    def add_project(self, designation: str, task_group: TaskGroup, **kwargs) -> Project:
        project = Project(
            designation=designation, task_group_id=task_group.id, id=self._id(), **kwargs
        )
        self.projects[project.id] = project
        return replace(project)

    def add_event(self, project: Project, event: Event) -> Event:
        stored = replace(event, id=self._id(), project_id=project.id)
        self.events[stored.id] = stored
        return replace(stored)

    def events_of(self, project: Project) -> list[Event]:
        return [replace(e) for e in self.events.values() if e.project_id == project.id]

    # --- TrackerClient interface ---

    def sign_in(self, email: str, password: str) -> None:
        self.writes.append(("sign_in", email))

    def list_task_groups(self, search: Optional[str] = None) -> list[TaskGroup]:
        return [
            replace(t) for t in self.task_groups.values()
            if _matches(search, t.name, t.abbrev)
        ]

    def get_task_group(self, task_group_id: int) -> TaskGroup:
        return replace(self.task_groups[task_group_id])

    def create_task_group(self, task_group: TaskGroup) -> TaskGroup:
        self.writes.append(("create_task_group", task_group.name))
        stored = replace(task_group, id=self._id())
        self.task_groups[stored.id] = stored
        return replace(stored)

    def update_task_group(self, task_group: TaskGroup) -> TaskGroup:
        self.writes.append(("update_task_group", task_group.id))
        self.task_groups[task_group.id] = replace(task_group)
        return replace(task_group)

    def search_people(self, search: str) -> list[Person]:
        return [
            replace(p) for p in self.people.values()
            if _matches(search, p.first_name, p.last_name)
        ]

    def create_person(self, person: Person) -> Person:
        self.writes.append(("create_person", person.last_name))
        stored = replace(person, id=self._id())
        self.people[stored.id] = stored
        return replace(stored)

    def update_person(self, person_id: int, person: Person) -> Person:
        self.writes.append(("update_person", person_id))
        stored = replace(person, id=person_id)
        self.people[person_id] = stored
        return replace(stored)

    def search_projects(self, search: str, task_group_id: Optional[int] = None) -> list[Project]:
        return [
            replace(p) for p in self.projects.values()
            if _matches(search, p.designation)
            and (task_group_id is None or p.task_group_id == task_group_id)
        ]

    def list_projects(self) -> list[Project]:
        return [replace(p) for p in self.projects.values()]

    def get_project(self, project_id: int) -> Project:
        return replace(self.projects[project_id])

    def create_project(self, task_group_id: int, project: Project) -> Project:
        self.writes.append(("create_project", project.designation))
        stored = replace(project, id=self._id(), task_group_id=task_group_id)
        self.projects[stored.id] = stored
        return replace(stored)

    def update_project(self, project: Project, changes: dict[str, Any]) -> None:
        self.writes.append(("update_project", project.id))
        self.projects[project.id] = replace(self.projects[project.id], **changes)

    def delete_project(self, project: Project) -> None:
        self.writes.append(("delete_project", project.id))
        del self.projects[project.id]

    def search_events(self, project: Project, name: Optional[str] = None) -> list[Event]:
        return [e for e in self.events_of(project) if _matches(name, e.name)]

    def create_event(self, project: Project, event: Event) -> Event:
        self.writes.append(("create_event", event.name))
        return self.add_event(project, event)

    def delete_event(self, project: Project, event: Event) -> None:
        self.writes.append(("delete_event", event.id))
        del self.events[event.id]
