"""Per-run settings handed to every component explicitly."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from components.notifier import Notifier


def parse_only(value: Optional[str]) -> Optional[frozenset[str]]:
    """Split an --only value ("802.1Qcc, 802.1CB") into a lowercase set."""
    if not value:
        return None
    items = [item for item in value.replace(",", " ").split() if item]
    return frozenset(item.lower() for item in items) or None


@dataclass
class RunContext:
    """Everything a component needs to know about the current run."""

    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("tracker_sync")
    )
    dry_run: bool = False
    """Perform reads but no create/update/delete calls"""
    only: Optional[frozenset[str]] = None
    """Lowercase designations to restrict processing to (None = all)"""
    blacklist: frozenset[str] = frozenset()
    """Mail archive message numbers to skip"""
    update: bool = False
    """Patch existing projects with freshly extracted fields"""
    delete_existing: bool = False
    """Delete existing spreadsheet projects before re-creating them"""
    notifier: Optional[Notifier] = None

    @classmethod
    def build(
        cls,
        dry_run: bool = False,
        only: Optional[str] = None,
        blacklist: Iterable[str] = (),
        **kwargs,
    ) -> RunContext:
        """Build a context from command-line style values."""
        return cls(
            dry_run=dry_run,
            only=parse_only(only),
            blacklist=frozenset(str(n) for n in blacklist),
            **kwargs,
        )

    def allows(self, designation: str) -> bool:
        """Whether the designation passes the --only filter."""
        return self.only is None or designation.lower() in self.only

    def is_blacklisted(self, number: str) -> bool:
        """Whether a mail archive message must be skipped."""
        return str(number) in self.blacklist
