"""Pytest configuration and shared fixtures."""

import logging
from datetime import date

import pytest

from components.context import RunContext
from components.reconciler import Reconciler
from unit.fixtures.fake_tracker import FakeTracker
from unit.fixtures.page_factory import FakePageSource, PageFactory


class RecordingNotifier:
    """Collects announced events instead of posting them."""

    def __init__(self) -> None:
        self.posted = []

    def post_event(self, project, event, extra=False):
        self.posted.append((project.designation, event.name, extra))


@pytest.fixture
def context():
    """A plain run context with a test logger."""
    return RunContext(logger=logging.getLogger("unit"))


@pytest.fixture
def tracker():
    """Provide an empty FakeTracker."""
    return FakeTracker()


@pytest.fixture
def task_group(tracker):
    """The TSN task group, already in the tracker."""
    return tracker.add_task_group("TSN", "Time-Sensitive Networking")


@pytest.fixture
def reconciler(tracker, context):
    """Reconciler over the fake tracker, with a fixed 'today'."""
    return Reconciler(tracker, context, today=date(2018, 1, 10))


@pytest.fixture
def notifier():
    """Provide a RecordingNotifier."""
    return RecordingNotifier()


@pytest.fixture
def page_factory():
    """Provide PageFactory instance."""
    return PageFactory()


@pytest.fixture
def pages():
    """Provide an empty FakePageSource."""
    return FakePageSource()
