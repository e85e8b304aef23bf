"""Announces newly added timeline events to a chat webhook."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Optional, Protocol

import requests  # type: ignore

from components.models import Event, Project

logger = logging.getLogger(__name__)

RECENT_DAYS = 4


class Notifier(Protocol):
    """Anything that can announce a new event."""

    def post_event(self, project: Project, event: Event, extra: bool = False) -> None:
        """Announce ``event`` on ``project``."""


def is_recent(event: Event, today: Optional[date] = None) -> bool:
    """Only events from the last few days are worth announcing."""
    today = today or date.today()
    return (today - event.date).days < RECENT_DAYS


def _timestamp(day: date) -> int:
    return int(datetime.combine(day, time()).timestamp())


def _chat_date(day: date) -> str:
    return f"<!date^{_timestamp(day)}^{{date_pretty}}|{day.strftime('%c')}>"


def event_message(project: Project, event: Event) -> dict[str, Any]:
    """Webhook attachment describing ``event``."""
    fields = [{"title": "Start date", "value": _chat_date(event.date), "short": True}]
    if event.end_date:
        fields.append({
            "title": "End date", "value": _chat_date(event.end_date), "short": True
        })
    if project.draft_url:
        fields.append({
            "title": "Draft",
            "value": f"<{project.draft_url}|{project.draft_no}>",
            "short": True,
        })
    return {
        "attachments": [{
            "fallback": event.description,
            "color": "good",
            "pretext": "802.1 announcement",
            "title": event.description,
            "title_link": event.url,
            "text": project.title,
            "fields": fields,
            "footer": "802.1",
            "ts": _timestamp(event.date),
        }]
    }


class WebhookNotifier:
    """Posts event announcements to an incoming-webhook URL."""

    def __init__(
        self, url: str, session: Optional[requests.Session] = None, timeout: int = 10
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def post_event(self, project: Project, event: Event, extra: bool = False) -> None:
        """Announce ``event``; delivery failures are logged, not raised."""
        try:
            response = self.session.post(
                self.url, json=event_message(project, event), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(
                "Could not announce %s%s on %s: %s",
                "extra " if extra else "", event.name, project.designation, e,
            )
