"""Test fixtures and enums for unit testing."""

from enum import Enum


class Designation(str, Enum):
    """Designations used across the tests."""

    QCC = "802.1Qcc"
    Q = "802.1Q"
    Q_REV = "802.1Q-REV"
    CB = "802.1CB"


class Role(str, Enum):
    """Person roles."""

    CHAIR = "Chair"
    EDITOR = "Editor"
