"""Designation parsing: project designation text to (type, base)."""

from __future__ import annotations

import re
from typing import Optional

from components.models import ProjectType


# Rows in portal listings that concern an 802.1 (or bare 802) project
DESIGNATION_PATTERN: re.Pattern = re.compile(r"802\.1[a-zA-Z]+|802[a-zA-Z]|802$")

# Designation mentioned somewhere in a notification subject
SUBJECT_DESIGNATION_RE: re.Pattern = re.compile(
    r"P?(?P<desig>802\.1[a-zA-Z]+|802[a-zA-Z])"
)

_LETTERS = r"802(?:\.\d+)?(?:[A-Z]+|[a-z]+)"

# Ordered, first match wins. The base is the uppercase stem, plus the
# publication year ("802.1Q-2014") for corrigenda and errata.
DESIGNATION_RULES: list[tuple[re.Pattern, Optional[ProjectType]]] = [
    (
        re.compile(rf"^P*(?P<base>{_LETTERS})(?P<suffix>[a-z]*)\s*$"),
        None,  # NewStandard or Amendment, decided by the suffix
    ),
    (
        re.compile(rf"^P*(?P<base>{_LETTERS})(?P<suffix>[a-z]*)-(?i:rev)\b"),
        ProjectType.REVISION,
    ),
    (
        re.compile(rf"^P*(?P<base>{_LETTERS})[a-z]*(?P<year>-*\d*)/(?i:cor)-*(?P<num>\d+)"),
        ProjectType.CORRIGENDUM,
    ),
    (
        re.compile(rf"^P*(?P<base>{_LETTERS})[a-z]*(?P<year>-*\d*)/(?i:err)-*(?P<num>\d+)"),
        ProjectType.ERRATUM,
    ),
]


def strip_designation(text: str) -> str:
    """Remove the leading "P" (PAR prefix) and surrounding whitespace."""
    return re.sub(r"^P*", "", text.strip())


def parse_designation(
    text: Optional[str],
) -> tuple[Optional[ProjectType], Optional[str]]:
    """Map a designation to its project type and base standard.

    Args:
        text: Designation such as "802.1Qcc", "P802.1Q-REV" or
            "802.1Q-2014/Cor1"

    Returns:
        (project type, base) or (None, None) when the text is not a
        recognizable designation
    """
    if not text:
        return None, None
    candidate = text.strip()
    for pattern, project_type in DESIGNATION_RULES:
        m = pattern.match(candidate)
        if not m:
            continue
        if project_type is None:
            project_type = (
                ProjectType.AMENDMENT if m.group("suffix")
                else ProjectType.NEW_STANDARD
            )
        return project_type, m.group("base") + (m.groupdict().get("year") or "")
    return None, None
