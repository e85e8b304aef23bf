"""Status and motion normalization.

Free-text strings from the spreadsheet and the portal are mapped onto the
canonical labels the tracker uses. See ``timeline.nodes`` for the rule
tables themselves.
"""

from __future__ import annotations

import logging
from typing import Optional

from components.models import Event
from timeline.dates import parse_date_lenient
from timeline.models import RuleTable
from timeline.nodes import MOTION_RULES, PAR_REPORT_RULES, STATUS_RULES

logger = logging.getLogger(__name__)

DONE = "Done"


def parse_status(
    text: Optional[str], table: RuleTable = STATUS_RULES
) -> tuple[str, list[Event]]:
    """Normalize a status string, pulling out a trailing " - <date>".

    "TG Ballot - 3 Jan 2018" gives ("TgBallot", [event]) where the event is
    named after the label and described as "TG Ballot - 3 Jan 2018: ...".

    Args:
        text: Raw status text
        table: Rule table to apply (the spreadsheet status rules by default)

    Returns:
        Canonical label (identity when no rule matches) and zero or one
        events
    """
    if not text:
        return "", []
    head, sep, tail = str(text).partition(" - ")
    label = table.normalize(head.strip())
    events: list[Event] = []
    if sep:
        when = parse_date_lenient(tail)
        if when is None:
            logger.warning("Unparseable date in status %r", text)
        else:
            events.append(Event(
                date=when,
                name=label,
                description=f"{text}: {when.isoformat()}",
            ))
    return label, events


def parse_motion(text: Optional[str], table: RuleTable = MOTION_RULES) -> str:
    """Normalize a last-motion/next-action string.

    An absent or empty value means nothing is pending, which is ``Done``.
    """
    if text is None or not str(text).strip():
        return DONE
    return table.normalize(str(text).strip())


def parse_par_report_status(text: Optional[str]) -> tuple[str, list[Event]]:
    """Normalize the status column of the PAR report.

    Committee agenda statuses ("NesCom Agenda 05-Dec-2017") keep only the
    committee word and yield an event for the agenda date.
    """
    if not text:
        return "", []
    raw = str(text).strip()
    rule = PAR_REPORT_RULES.lookup(raw)
    if rule is None:
        return raw, []
    if not rule.metadata.get("agenda"):
        return rule.label, []
    m = rule.match(raw)
    committee = m.group("committee")
    events: list[Event] = []
    when = parse_date_lenient(m.group("date"))
    if when:
        events.append(Event(
            date=when,
            name=committee,
            description=f"{committee}: {when.isoformat()}",
        ))
    return committee, events
