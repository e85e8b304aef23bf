"""Parsers for the portal's PAR detail and ballot notification pages."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag  # type: ignore

from components.models import Event
from timeline.dates import parse_date_lenient

logger = logging.getLogger(__name__)

PROJECT_KINDS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"Modify Existing"), "Modification"),
    (re.compile(r"Revision to"), "Revision"),
    (re.compile(r"Amendment to"), "Amendment"),
    (re.compile(r"New IEEE"), "New"),
]

BALLOT_OPENS_RE = re.compile(r"BALLOT OPENS:")
BALLOT_CLOSES_RE = re.compile(r"BALLOT CLOSES:")


@dataclass
class ParDetail:
    """What a PAR detail page tells us about a project."""

    title: str = ""
    par_url: str = ""
    kind: str = ""
    events: list[Event] = field(default_factory=list)


Item = Union[Tag, NavigableString]


def _text(item: Item) -> str:
    if isinstance(item, Tag):
        return item.get_text(" ", strip=True)
    return str(item).strip()


def _flatten(boxes: list[Tag]) -> list[Item]:
    """Children of every box, minus whitespace-only strings."""
    items: list[Item] = []
    for box in boxes:
        for child in box.children:
            if isinstance(child, Tag) or str(child).strip():
                items.append(child)
    return items


def _dated_event(name: str, value: str) -> Optional[Event]:
    when = parse_date_lenient(value)
    if when is None:
        return None
    return Event(date=when, name=name, description=f"{name}: {when.isoformat()}")


def _title_from(label: Item, following: Optional[Item]) -> str:
    """The title sits either in the label's own cell or in the next item."""
    if isinstance(label, Tag):
        cell = label.select_one("td.b_align_nw")
        if cell is not None:
            children = list(cell.children)
            if len(children) > 1:
                return _text(children[1])
    return _text(following) if following is not None else ""


class ParPageScanner:
    """Scans the flat label/value list of a PAR detail page.

    Each item is tested against ``headings`` in order; the first heading
    whose pattern matches decides how the item (and usually the one after
    it) is interpreted.
    """

    def __init__(self) -> None:
        self.detail = ParDetail()
        self.headings: list[tuple[re.Pattern, Callable[[Item, Optional[Item]], None]]] = [
            (re.compile(r"Type of Project"), self._project_type),
            (re.compile(r"PAR Request Date"), self._requested),
            (re.compile(r"PAR Approval Date"), self._approved),
            (re.compile(r"PAR Expiration Date"), self._expiry),
            # PAR modifications carry the root PAR's approval date
            (re.compile(r"Approved on"), self._root_approved),
            (re.compile(r"2\.1 Title"), self._title),
            (re.compile(r"4\.2.*Initial Sponsor Ballot"), self._expected_ballot),
            (re.compile(r"4\.3.*RevCom"), self._expected_revcom),
        ]

    @property
    def _is_modification(self) -> bool:
        return self.detail.kind == "Modification"

    def _add(self, name: str, value: Optional[Item]) -> None:
        if value is None:
            return
        event = _dated_event(name, _text(value))
        if event:
            logger.debug("Creating event for %s %s", name, event.date)
            self.detail.events.append(event)

    def _project_type(self, _label: Item, value: Optional[Item]) -> None:
        text = _text(value) if value is not None else ""
        for pattern, kind in PROJECT_KINDS:
            if pattern.search(text):
                self.detail.kind = kind
                return

    def _requested(self, _label: Item, value: Optional[Item]) -> None:
        name = (
            "PAR Modification Requested" if self._is_modification
            else "PAR Requested"
        )
        self._add(name, value)

    def _approved(self, _label: Item, value: Optional[Item]) -> None:
        name = (
            "PAR Modification Approval" if self._is_modification
            else "PAR Approval"
        )
        self._add(name, value)

    def _expiry(self, _label: Item, value: Optional[Item]) -> None:
        self._add("PAR Expiry", value)

    def _root_approved(self, label: Item, _value: Optional[Item]) -> None:
        self._add("PAR Approval", label)

    def _title(self, label: Item, value: Optional[Item]) -> None:
        self.detail.title = _title_from(label, value)

    def _expected_ballot(self, _label: Item, value: Optional[Item]) -> None:
        self._add("Expected Initial Sponsor Ballot", value)

    def _expected_revcom(self, _label: Item, value: Optional[Item]) -> None:
        self._add("Expected RevCom", value)

    def scan(self, items: list[Item]) -> ParDetail:
        """Interpret every item in page order."""
        for index, item in enumerate(items):
            following = items[index + 1] if index + 1 < len(items) else None
            label = _text(item)
            for pattern, handler in self.headings:
                if pattern.search(label):
                    handler(item, following)
                    break
        return self.detail


def parse_par_page(html: str, page_url: str) -> ParDetail:
    """Parse a PAR detail page.

    Args:
        html: The PAR detail page
        page_url: URL the page was fetched from (for resolving links)

    Returns:
        ParDetail with the full title, the PAR document URL and any dated
        events (request, approval, expiry, expected ballot/RevCom)
    """
    soup = BeautifulSoup(html, "html.parser")
    boxes = soup.select("div.tab-content-box")
    if not boxes:
        logger.warning("No PAR detail box on %s", page_url)
        return ParDetail()
    detail = ParPageScanner().scan(_flatten(boxes))
    menu_link = soup.select_one("div.task_menu a[href]")
    if menu_link is not None:
        detail.par_url = urljoin(page_url, menu_link["href"])
    return detail


def parse_sb_notification(html: str, name: str) -> list[Event]:
    """Parse a sponsor ballot notification into ballot events.

    The notification prose has "BALLOT OPENS:" and "BALLOT CLOSES:" lines;
    each closing line completes an event that started at the last opening.

    Args:
        html: Notification page
        name: Event name (e.g., "Sponsor Ballot")

    Returns:
        Events spanning opening to closing
    """
    soup = BeautifulSoup(html, "html.parser")
    events: list[Event] = []
    opening = None
    for prose in soup.select("p.prose"):
        for br in prose.find_all("br"):
            br.replace_with("\n")
        for line in prose.get_text().splitlines():
            if BALLOT_OPENS_RE.search(line):
                opening = parse_date_lenient(line.split(":", 1)[1])
            elif BALLOT_CLOSES_RE.search(line):
                closing = parse_date_lenient(line.split(":", 1)[1])
                if opening is None:
                    logger.warning("Ballot closes without an opening: %s", line)
                    continue
                events.append(Event(
                    date=opening, end_date=closing, name=name, description=name
                ))
    return events
