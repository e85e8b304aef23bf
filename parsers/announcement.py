"""A parser for ballot announcements posted to the mailing list archive.

Announcements follow a stylised form: a message header list with the real
posting date, a "TO:" line, then prose in which a few stock sentences mark
where the voter list and the closing date begin.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup, Comment  # type: ignore

from timeline.dates import parse_date_lenient
from timeline.designation import strip_designation

logger = logging.getLogger(__name__)

# "[802.1 - 123] Working group recirc ballot of P802.1Qcc/D1.2"
BALLOT_TITLE_RE = re.compile(
    r"^\[802\.1 - (?P<number>\d+)\]\s+(?P<type>\w+)\sgroup\s+"
    r"(?P<recirc>recirc\w*)?\s*ballot\s+(?:of|for)\s+(?P<draft>P?802\S+)",
    re.I,
)
RESPONSE_RE = re.compile(r"^re", re.I)

# Format gate: both markers must start a line somewhere in the body
RESPONSES_MARKER_RE = re.compile(r"^NOTE.*ALL.*RESPONSES", re.M)
COMMENTS_MARKER_RE = re.compile(r"^INCLUDE COMMENTS ONLY", re.M)
TO_LINE_RE = re.compile(r"^TO:\s*(?P<name>.+)$", re.M)

VOTERS_START_RE = re.compile(r"^The 802\.1 voting members that are entitled", re.I)
CLOSING_START_RE = re.compile(r"^The closing date of this", re.I)
BODY_START_RE = re.compile(r"can be found at", re.I)
END_OF_MESSAGE_RE = re.compile(r"^\s*={3,}\s*$")


class Section(str, Enum):
    """States of the announcement segmenter."""

    BODY = "body"
    VOTERS = "voters"
    CLOSING = "closing"


@dataclass(frozen=True)
class BallotTitle:
    """A ballot announcement recognized from its archive title."""

    number: str
    group_type: str
    recirc: bool
    draft: str

    @property
    def designation(self) -> str:
        """Project designation: the draft without "P" or "/D<n>"."""
        return strip_designation(self.draft.split("/D", 1)[0])

    @property
    def draft_no(self) -> Optional[str]:
        """Draft number, e.g. "D1.2"."""
        parts = self.draft.split("/D", 1)
        return f"D{parts[1]}" if len(parts) > 1 else None

    @property
    def is_task_group(self) -> bool:
        """True for task group (rather than working group) ballots."""
        return "task" in self.group_type.lower()

    @property
    def event_name(self) -> str:
        """Timeline event name, e.g. "WG recirc: D1.2"."""
        group = "TG" if self.is_task_group else "WG"
        kind = "recirc" if self.recirc else "ballot"
        return f"{group} {kind}: {self.draft_no or 'D'}"

    @property
    def description(self) -> str:
        """Timeline event description."""
        recirc = "recirculation " if self.recirc else ""
        return f"{self.group_type} group {recirc}ballot of {self.draft}"


@dataclass
class Announcement:
    """Fields extracted from a ballot announcement."""

    name: str
    date: Optional[date] = None
    voters: Optional[str] = None
    closing: Optional[date] = None
    sections: dict[Section, str] = field(default_factory=dict)


def is_response(title: str) -> bool:
    """Replies ("Re: ...") to other items are not announcements."""
    return bool(RESPONSE_RE.match(title.strip()))


def parse_ballot_title(title: str) -> Optional[BallotTitle]:
    """Recognize a ballot announcement title.

    Args:
        title: Message title from the archive index

    Returns:
        BallotTitle, or None when the title is not an announcement
    """
    m = BALLOT_TITLE_RE.match(title.strip())
    if not m:
        return None
    return BallotTitle(
        number=str(int(m.group("number"))),
        group_type=m.group("type"),
        recirc=m.group("recirc") is not None,
        draft=m.group("draft"),
    )


def _body_text(soup: BeautifulSoup) -> str:
    """All text nodes of the body, concatenated as they appear."""
    root = soup.body or soup
    return "".join(
        str(s) for s in root.find_all(string=True)
        if not isinstance(s, Comment)
    )


def _header_date(soup: BeautifulSoup) -> Optional[date]:
    """Posting date from the "Head-of-Message" list.

    The header's Date is when the message was really posted, which may
    differ from any date mentioned in the prose.
    """
    header = soup.find("ul")
    if header is None:
        return None
    for li in header.find_all("li"):
        em = li.find("em")
        if em is None or "Date" not in em.get_text():
            continue
        value = "".join(
            s if isinstance(s, str) else s.get_text()
            for s in em.next_siblings
        )
        return parse_date_lenient(value.strip().lstrip(":").strip())
    return None


def segment_lines(text: str) -> dict[Section, str]:
    """Split an announcement body into sections.

    A line-based state machine: the stock sentences switch state, the
    switching line itself is dropped, and everything accumulated so far is
    committed to the state being left, replacing what an earlier visit to
    that state committed. A line made of "=" ends the message.

    Args:
        text: Plain text of the announcement body

    Returns:
        Mapping of section to its stripped text (absent if never entered)
    """
    sections: dict[Section, str] = {}
    state = Section.BODY
    buffer: list[str] = []

    def commit() -> None:
        sections[state] = "".join(buffer).strip()
        buffer.clear()

    for line in text.splitlines(keepends=True):
        if VOTERS_START_RE.match(line):
            commit()
            state = Section.VOTERS
            continue
        if CLOSING_START_RE.match(line):
            commit()
            state = Section.CLOSING
            continue
        if BODY_START_RE.search(line):
            commit()
            state = Section.BODY
            continue
        if END_OF_MESSAGE_RE.match(line):
            break
        buffer.append(line)
    commit()
    return sections


def _closing_date(text: Optional[str]) -> Optional[date]:
    """Closing date from the closing section (first dated line wins)."""
    if not text:
        return None
    for line in text.splitlines():
        when = parse_date_lenient(line)
        if when:
            return when
    return parse_date_lenient(text)


def parse_announcement(html: str) -> Optional[Announcement]:
    """Parse a ballot announcement page.

    Args:
        html: Archive page for one message

    Returns:
        Announcement, or None when the page is not a well-formed
        announcement (format markers or the "TO:" line are missing)
    """
    soup = BeautifulSoup(html, "html.parser")
    text = _body_text(soup)
    if not RESPONSES_MARKER_RE.search(text):
        logger.debug("No NOTE ... RESPONSES marker")
        return None
    if not COMMENTS_MARKER_RE.search(text):
        logger.debug("No INCLUDE COMMENTS ONLY marker")
        return None
    posted = _header_date(soup)
    to_line = TO_LINE_RE.search(text)
    if not to_line:
        logger.warning("Parse error (TO) in announcement")
        return None
    sections = segment_lines(text)
    return Announcement(
        name=to_line.group("name").strip(),
        date=posted,
        voters=sections.get(Section.VOTERS),
        closing=_closing_date(sections.get(Section.CLOSING)),
        sections=sections,
    )
