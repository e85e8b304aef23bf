"""A small client for the project tracking database's JSON API.

Usage:

    client = TrackerClient("https://tracker.example.org/", context)
    client.sign_in(email, password)
    for project in client.search_projects("802.1Qcc"):
        ...

Write calls (POST/PATCH/DELETE) are skipped in dry-run mode; they log what
would have happened and return the unsaved record instead.
"""

from __future__ import annotations

from typing import Any, Optional

import requests  # type: ignore

from components.context import RunContext
from components.interfaces import make_session
from components.models import Event, Person, Project, TaskGroup


# Only reads are retried: a write that got a 5xx may have been committed
RETRIED_METHODS = ("GET",)


class TrackerError(RuntimeError):
    """The tracking API could not be used."""


class TrackerApiError(TrackerError):
    """The API rejected a write with a structured ``errors`` body.

    Such a rejection means the database and the run disagree about what
    exists, so it ends the run.
    """

    def __init__(
        self, operation: str, status: int, errors: dict[str, Any]
    ) -> None:
        self.operation = operation
        self.status = status
        self.errors = errors
        super().__init__(f"{operation} failed ({status}): {errors}")

    def messages(self) -> list[tuple[str, str]]:
        """(field, message) pairs from the error body."""
        pairs: list[tuple[str, str]] = []
        for key, value in self.errors.items():
            values = value if isinstance(value, list) else [value]
            for message in values:
                pairs.append((str(key), str(message)))
        return pairs


def _error_body(response: requests.Response) -> Optional[dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("errors"), dict):
        return body["errors"]
    return None


class TrackerClient:
    """Resource-oriented access to task groups, people, projects, events."""

    def __init__(
        self,
        api_uri: str,
        context: RunContext,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ) -> None:
        if not api_uri:
            raise ValueError("api_uri is required")
        self.api_uri = api_uri.rstrip("/")
        self.context = context
        self.session = session or make_session(methods=RETRIED_METHODS)
        self.session.headers.update({"Accept": "application/json"})
        self.timeout = timeout

    @property
    def log(self):
        return self.context.logger

    def _url(self, path: str) -> str:
        return f"{self.api_uri}/{path.lstrip('/')}"

    def _check(self, response: requests.Response, operation: str) -> None:
        if response.ok:
            return
        errors = _error_body(response)
        if errors is not None:
            raise TrackerApiError(operation, response.status_code, errors)
        response.raise_for_status()

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = self.session.get(self._url(path), params=params, timeout=self.timeout)
        self._check(response, f"GET {path}")
        if not response.content:
            return []
        return response.json()

    def _write(
        self, method: str, path: str, payload: Optional[dict[str, Any]] = None
    ) -> Optional[Any]:
        operation = f"{method} {path}"
        if self.context.dry_run:
            self.log.info("Dry run: would %s %s", operation, payload or "")
            return None
        response = self.session.request(
            method, self._url(path), json=payload, timeout=self.timeout
        )
        self._check(response, operation)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # --- Session ---

    def sign_in(self, email: str, password: str) -> None:
        """Obtain a session cookie; failure ends the run."""
        body = {"user": {"email": email, "password": password}}
        response = self.session.post(
            self._url("users/sign_in"), json=body, timeout=self.timeout
        )
        if not response.ok:
            raise TrackerError(f"Could not log in: {response.text[:500]}")

    # --- Task groups ---

    def list_task_groups(self, search: Optional[str] = None) -> list[TaskGroup]:
        """All task groups, or those matching ``search``."""
        params = {"search": search} if search else None
        return [TaskGroup.from_json(t) for t in self._get("task_groups", params)]

    def get_task_group(self, task_group_id: int) -> TaskGroup:
        """One task group by id."""
        return TaskGroup.from_json(self._get(f"task_groups/{task_group_id}"))

    def create_task_group(self, task_group: TaskGroup) -> TaskGroup:
        """Create a task group."""
        body = self._write("POST", "task_groups", task_group.to_payload())
        return TaskGroup.from_json(body) if body else task_group

    def update_task_group(self, task_group: TaskGroup) -> TaskGroup:
        """Patch a task group with its current field values."""
        body = self._write(
            "PATCH", f"task_groups/{task_group.id}", task_group.to_payload()
        )
        return TaskGroup.from_json(body) if body else task_group

    # --- People ---

    def search_people(self, search: str) -> list[Person]:
        """People matching ``search`` (the API searches names)."""
        return [Person.from_json(p) for p in self._get("people", {"search": search})]

    def create_person(self, person: Person) -> Person:
        """Create a person."""
        body = self._write("POST", "people", person.to_payload())
        return Person.from_json(body) if body else person

    def update_person(self, person_id: int, person: Person) -> Person:
        """Patch an existing person."""
        body = self._write("PATCH", f"people/{person_id}", person.to_payload())
        return Person.from_json(body) if body else person

    # --- Projects ---

    def search_projects(
        self, search: str, task_group_id: Optional[int] = None
    ) -> list[Project]:
        """Projects matching ``search``, globally or within a task group."""
        path = (
            f"task_groups/{task_group_id}/projects" if task_group_id
            else "projects"
        )
        return [Project.from_json(p) for p in self._get(path, {"search": search})]

    def list_projects(self) -> list[Project]:
        """Every project in the database."""
        return [Project.from_json(p) for p in self._get("projects")]

    def get_project(self, project_id: int) -> Project:
        """One project by id."""
        return Project.from_json(self._get(f"projects/{project_id}"))

    def create_project(self, task_group_id: int, project: Project) -> Project:
        """Create a project in a task group."""
        body = self._write(
            "POST", f"task_groups/{task_group_id}/projects", project.to_payload()
        )
        if body:
            return Project.from_json(body)
        project.task_group_id = task_group_id
        return project

    def update_project(self, project: Project, changes: dict[str, Any]) -> None:
        """Patch selected fields of a project."""
        self._write(
            "PATCH",
            f"task_groups/{project.task_group_id}/projects/{project.id}",
            changes,
        )

    def delete_project(self, project: Project) -> None:
        """Delete a project (its events must be deleted first)."""
        self._write(
            "DELETE", f"task_groups/{project.task_group_id}/projects/{project.id}"
        )

    # --- Events ---

    def _events_path(self, project: Project) -> str:
        return f"task_groups/{project.task_group_id}/projects/{project.id}/events"

    def search_events(
        self, project: Project, name: Optional[str] = None
    ) -> list[Event]:
        """Events of a project, optionally filtered by name on the server."""
        params = {"search": name} if name else None
        return [
            Event.from_json(e) for e in self._get(self._events_path(project), params)
        ]

    def create_event(self, project: Project, event: Event) -> Event:
        """Add an event to a project."""
        body = self._write("POST", self._events_path(project), event.to_payload())
        return Event.from_json(body) if body else event

    def delete_event(self, project: Project, event: Event) -> None:
        """Remove an event from a project."""
        self._write("DELETE", f"{self._events_path(project)}/{event.id}")
