"""Core data models for the normalization rule tables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class StatusRule:
    """One entry of an ordered normalization table.

    A rule maps any text matching ``pattern`` to the canonical ``label``.
    Tables are evaluated top to bottom and the first matching rule wins,
    so the position of a rule in its table is part of its meaning.
    """

    pattern: re.Pattern
    label: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def match(self, text: str) -> Optional[re.Match]:
        """Search the text for this rule's pattern."""
        return self.pattern.search(text)


class RuleTable:
    """An ordered, first-match-wins list of StatusRules.

    Unmatched text passes through unchanged, so the label vocabulary is
    open: callers must not assume every result is a known label.
    """

    def __init__(self, name: str, rules: list[StatusRule]) -> None:
        self.name = name
        self.rules = list(rules)

    def lookup(self, text: str) -> Optional[StatusRule]:
        """Return the first rule matching ``text``, or None."""
        for rule in self.rules:
            if rule.match(text):
                return rule
        return None

    def normalize(self, text: str) -> str:
        """Canonical label for ``text`` (identity when nothing matches)."""
        rule = self.lookup(text)
        return rule.label if rule else text

    @property
    def labels(self) -> list[str]:
        """Labels in precedence order."""
        return [rule.label for rule in self.rules]

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)
