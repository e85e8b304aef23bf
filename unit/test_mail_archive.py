"""Test the mailing list archive crawl and its tally."""

import logging
from datetime import date

import pytest

from collectors.mail_archive import MailArchiveCrawler
from components.context import RunContext
from components.models import Event
from components.reconciler import Reconciler

ARCHIVE = "http://archive.example.org/email-pages/stds-802-1-l"

ENTRIES_PAGE_1 = [
    ("msg00001.html", "[802.1 - 101] Working group recirc ballot of P802.1Qcc/D1.2"),
    ("msg00002.html", "Re: [802.1 - 101] Working group recirc ballot of P802.1Qcc/D1.2"),
    ("msg00003.html", "[802.1] Agenda for the January interim"),
    ("msg00004.html", "[802.1 - 102] Task group ballot of P802.1CB/D2.0"),
    ("msg00005.html", "[802.1 - 103] Working group ballot of P802.1AS/D3.0"),
    ("msg00006.html", "[802.1 - 104] Working group ballot of P802.1Qzz/D0.1"),
]
ENTRIES_PAGE_2 = [
    ("msg00007.html", "[802.1 - 105] Task group ballot of P802.1Qcc/D1.0"),
]


@pytest.fixture
def archive(pages, page_factory):
    """Two index pages; returns the first page's URL."""
    pages.add(f"{ARCHIVE}/maillist.html", page_factory.archive_index(ENTRIES_PAGE_1, "mail2.html"))
    pages.add(f"{ARCHIVE}/mail2.html", page_factory.archive_index(ENTRIES_PAGE_2))
    pages.add(f"{ARCHIVE}/msg00001.html", page_factory.announcement())
    pages.add(f"{ARCHIVE}/msg00004.html", page_factory.announcement())
    pages.add(f"{ARCHIVE}/msg00005.html", page_factory.announcement(with_markers=False))
    pages.add(f"{ARCHIVE}/msg00006.html", page_factory.announcement())
    pages.add(
        f"{ARCHIVE}/msg00007.html",
        page_factory.announcement(posted="Mon, 5 Jan 2015 09:00:00 -0500"),
    )
    return f"{ARCHIVE}/maillist.html"


@pytest.fixture
def qcc(tracker, task_group):
    project = tracker.add_project("802.1Qcc", task_group)
    tracker.add_event(project, Event(date(2016, 2, 4), "PAR Approval", "PAR Approval"))
    return project


def archive_reconciler(tracker, **kwargs):
    context = RunContext.build(logger=logging.getLogger("unit"), **kwargs)
    return Reconciler(tracker, context, today=date(2018, 1, 10))


def test_tally(archive, pages, tracker, qcc):
    reconciler = archive_reconciler(tracker, blacklist=["102"])
    crawler = MailArchiveCrawler(pages, reconciler, ARCHIVE)
    assert crawler.crawl(archive) == 2

    tally = crawler.tally
    assert tally.messages == 7
    assert tally.responses == 1
    assert tally.malformed_titles == 1
    assert tally.ballots == 5
    assert tally.blacklisted == 1
    assert tally.unparseable == 1
    assert tally.projects_missing == 1
    assert tally.filtered == 0
    assert tally.events_added == 1
    assert tally.pages == 2
    # blacklisted message is never fetched
    assert f"{ARCHIVE}/msg00004.html" not in pages.fetched


def test_ballot_event(archive, pages, tracker, qcc):
    MailArchiveCrawler(pages, archive_reconciler(tracker), ARCHIVE).crawl(archive)
    ballots = [e for e in tracker.events_of(qcc) if e.name != "PAR Approval"]
    assert len(ballots) == 1
    ballot = ballots[0]
    assert ballot.name == "WG recirc: D1.2"
    assert ballot.date == date(2018, 1, 8)
    assert ballot.end_date == date(2018, 2, 9)
    assert ballot.url == f"{ARCHIVE}/msg00001.html"


def test_rerun_adds_nothing(archive, pages, tracker, qcc):
    MailArchiveCrawler(pages, archive_reconciler(tracker), ARCHIVE).crawl(archive)
    again = MailArchiveCrawler(pages, archive_reconciler(tracker), ARCHIVE)
    again.crawl(archive)
    assert again.tally.events_added == 0
    assert len(tracker.events_of(qcc)) == 2


def test_only_filter(archive, pages, tracker, qcc):
    reconciler = archive_reconciler(tracker, only="802.1CB")
    crawler = MailArchiveCrawler(pages, reconciler, ARCHIVE)
    crawler.crawl(archive)
    # Qcc twice, Qzz once; CB is a ballot but its project does not exist
    assert crawler.tally.filtered == 3
    assert crawler.tally.projects_missing == 1
    assert len(tracker.events_of(qcc)) == 1


def test_page_bound(archive, pages, tracker, qcc):
    crawler = MailArchiveCrawler(pages, archive_reconciler(tracker), ARCHIVE, max_pages=1)
    assert crawler.crawl(archive) == 1
    assert crawler.tally.messages == 6
