"""A parser for web server directory listings (the draft file archive)."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup  # type: ignore

from timeline.dates import parse_date_lenient

# Listing dates look like "2018-01-15 10:12" or "15-Jan-2018 10:12"
LISTING_DATE_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}(?:\s+\d{1,2}:\d{2})?|\d{1,2}-[A-Za-z]{3}-\d{4}(?:\s+\d{1,2}:\d{2})?"
)
DRAFT_FILE_RE = re.compile(r"(?P<draftno>[dD]\d+(-\d+)?)\.pdf$")


@dataclass(frozen=True)
class ListingEntry:
    """One file in a directory listing."""

    name: str
    href: str
    date: Optional[date]


def _entry_date(text: str) -> Optional[date]:
    m = LISTING_DATE_RE.search(text)
    return parse_date_lenient(m.group(0)) if m else None


def parse_directory_listing(html: str, base_url: str) -> list[ListingEntry]:
    """Files listed on a directory index page, in server order.

    Handles both table listings (one row per file) and preformatted
    listings (anchor followed by the modification date on the same line).
    """
    soup = BeautifulSoup(html, "html.parser")
    entries: list[ListingEntry] = []
    for a in soup.find_all("a", href=True):
        href = a["href"]
        if href.startswith(("?", "/")) or href in ("../", "./"):
            continue
        row = a.find_parent("tr")
        if row is not None:
            context = row.get_text(" ", strip=True)
        else:
            sibling = a.next_sibling
            context = str(sibling).split("\n", 1)[0] if sibling else ""
        entries.append(ListingEntry(
            name=a.get_text(strip=True),
            href=urljoin(base_url, href),
            date=_entry_date(context),
        ))
    return entries


def draft_number(name: str) -> Optional[str]:
    """Draft number of a draft PDF name ("802-1Qcr-d0-5.pdf" -> "D0.5")."""
    m = DRAFT_FILE_RE.search(name)
    if not m:
        return None
    return m.group("draftno").replace("-", ".").upper()
