"""Lenient date extraction for spreadsheet cells, listing rows and pages."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as dateutil_parser


_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"

# "jan 18", "June18", "sep '20" -> first of that month in 20YY
SHORT_DATE_RE: re.Pattern = re.compile(
    r"^\s*(?P<month>jan|feb|mar|apr|may|june?|july?|aug|sept?|oct|nov|dec)"
    r"[a-z]*\.?\s*'?(?P<year>\d{2})\s*$",
    re.I,
)

# A complete date inside prose ("Root PAR Approved on 2015-12-05")
EMBEDDED_DATE_RE: re.Pattern = re.compile(
    r"\d{4}-\d{1,2}-\d{1,2}"
    rf"|\d{{1,2}}[-\s]{_MONTH}[-\s,]*\d{{4}}"
    rf"|{_MONTH}\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}",
    re.I,
)

# Two defaults that differ in year, month and day: a string parses to the
# same date under both only when it supplies all three itself
_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _rewrite_short_date(text: str) -> str:
    """Expand a short month/year form to a full date string."""
    m = SHORT_DATE_RE.match(text)
    if not m:
        return text
    return f"1 {m.group('month')[:3]} 20{m.group('year')}"


def _complete_date(text: str) -> Optional[date]:
    """Strict parse that rejects text missing a day, month or year."""
    try:
        first, second = (
            dateutil_parser.parse(text, default=d).date() for d in _DEFAULTS
        )
    except (ValueError, OverflowError, TypeError):
        return None
    return first if first == second else None


def parse_date_lenient(text: Any) -> Optional[date]:
    """Parse a date out of free text.

    Accepts ISO dates, natural forms ("3 Jan 2018", "January 3, 2018") and
    the short "jan 18" form. When the whole text is not a date, the first
    complete date embedded in it is used. Text without a day, month and
    year ("D1.2", "Q3", "23:59 ET") is not a date.

    Args:
        text: Text to parse; ``date`` and ``datetime`` values pass through

    Returns:
        Parsed date, or None when nothing usable is present
    """
    if isinstance(text, datetime):
        return text.date()
    if isinstance(text, date):
        return text
    if not isinstance(text, str) or not text.strip():
        return None
    when = _complete_date(_rewrite_short_date(text.strip()))
    if when is not None:
        return when
    m = EMBEDDED_DATE_RE.search(text)
    return _complete_date(m.group(0)) if m else None
