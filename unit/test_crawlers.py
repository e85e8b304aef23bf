"""Test the portal crawlers and the draft scan against canned pages."""

from datetime import date

import pytest
from bs4 import BeautifulSoup

from collectors.active_pars import ActiveParsCrawler, active_pars_url
from collectors.drafts import DraftScanner, latest_draft
from collectors.par_report import ParReportCrawler, par_report_url
from collectors.sponsor_ballots import SponsorBallotCrawler, messages_url, notification_kind
from components.interfaces import PageStructureError
from components.models import Event
from parsers.directory_listing import ListingEntry

DEV = "http://dev.example.org"


def names(tracker, project):
    return sorted(e.name for e in tracker.events_of(project))


class TestActivePars:
    """Test the Active PARs crawler."""

    @pytest.fixture
    def listing(self, pages, page_factory):
        start = active_pars_url(DEV)
        pages.add(start, page_factory.listing([
            page_factory.active_par_row("P802.1Qcc", "/pub/par/1"),
            page_factory.active_par_row("P1588", "/pub/par/2"),
            page_factory.active_par_row("P802.1Qzz", "/pub/par/3"),
            page_factory.active_par_row("P802.1Q", "/pub/par/4"),
        ]))
        pages.add(f"{DEV}/pub/par/1", page_factory.par_detail())
        pages.add(f"{DEV}/pub/par/3", page_factory.par_detail())
        pages.add(f"{DEV}/pub/par/4", page_factory.par_detail(kind="Revision to IEEE Standard 802.1Q-2014", title="Bridges"))
        return start

    def test_events_and_title(self, listing, pages, reconciler, tracker, task_group):
        qcc = tracker.add_project("802.1Qcc", task_group, title="unset")
        rev = tracker.add_project("802.1Q-REV", task_group)
        ActiveParsCrawler(pages, reconciler).crawl(listing)
        assert names(tracker, qcc) == ["PAR Approval", "PAR Expiry", "PAR Requested"]
        stored = tracker.get_project(qcc.id)
        assert stored.title.endswith("Stream Reservation")
        assert stored.par_url == "http://example.org/par/P802.1Qcc.pdf"
        assert tracker.get_project(rev.id).title == "Bridges"

    def test_non_802_1_rows_are_not_followed(self, listing, pages, reconciler, tracker, task_group):
        tracker.add_project("802.1Qcc", task_group)
        ActiveParsCrawler(pages, reconciler).crawl(listing)
        assert f"{DEV}/pub/par/2" not in pages.fetched

    def test_rerun_adds_nothing(self, listing, pages, reconciler, tracker, task_group):
        qcc = tracker.add_project("802.1Qcc", task_group)
        ActiveParsCrawler(pages, reconciler).crawl(listing)
        ActiveParsCrawler(pages, reconciler).crawl(listing)
        assert len(tracker.events_of(qcc)) == 3


class TestParReport:
    """Test the PAR report crawler."""

    @pytest.fixture
    def listing(self, pages, page_factory):
        start = par_report_url(DEV)
        pages.add(start, page_factory.listing([
            page_factory.par_report_row("P802.1Qcc", "/pub/par/1", "New", "NesCom Agenda 05-Dec-2017"),
            page_factory.par_report_row("P802.1Q", "/pub/par/2", "Revision", "Sponsor Ballot: Invitation"),
            page_factory.par_report_row("P802.1AB", "/pub/par/3"),
        ]))
        for n in (1, 2, 3):
            pages.add(f"{DEV}/pub/par/{n}", page_factory.par_detail(title=f"Title {n}"))
        return start

    def test_creates_approved_projects(self, listing, pages, reconciler, tracker, task_group):
        rev = tracker.add_project("802.1Q-REV", task_group)
        approved = {"802.1Qcc": "TSN", "802.1Q-REV": "TSN"}
        ParReportCrawler(pages, reconciler, approved, [task_group]).crawl(listing)

        created = reconciler.find_project("802.1Qcc")
        assert created is not None
        assert created.status == "NesCom"
        assert created.next_action == "EditorsDraft"
        assert created.title == "Title 1"
        assert created.par_url == "http://dev.example.org/documents/par/802.1Qcc.pdf"
        assert "NesCom" in names(tracker, created)
        assert names(tracker, rev) == ["PAR Approval", "PAR Expiry", "PAR Requested"]
        assert reconciler.find_project("802.1AB") is None

    def test_unknown_task_group(self, listing, pages, reconciler, tracker, task_group):
        ParReportCrawler(pages, reconciler, {"802.1Qcc": "NOPE"}, [task_group]).crawl(listing)
        assert tracker.projects == {}


class TestSponsorBallots:
    """Test the sponsor ballot notification crawler."""

    @pytest.fixture
    def listing(self, pages, page_factory):
        start = f"{DEV}/messages"
        pages.add(start, page_factory.listing([
            page_factory.notification_row("Sponsor Ballot Opening for P802.1Qcc", "/msg/1"),
            page_factory.notification_row("Ballot Recirculation: P802.1CB", "/msg/2"),
            page_factory.notification_row("Meeting notice", "/msg/3"),
        ]))
        pages.add(f"{DEV}/msg/1", page_factory.sb_notification())
        pages.add(f"{DEV}/msg/2", page_factory.sb_notification())
        return start

    def with_par(self, tracker, project, approved=date(2016, 2, 4), expires=date(2019, 12, 31)):
        tracker.add_event(project, Event(approved, "PAR Approval", "PAR Approval"))
        tracker.add_event(project, Event(expires, "PAR Expiry", "PAR Expiry"))

    def test_ballots_inside_par_window(self, listing, pages, reconciler, tracker, task_group):
        qcc = tracker.add_project("802.1Qcc", task_group)
        self.with_par(tracker, qcc)
        cb = tracker.add_project("802.1CB", task_group)
        SponsorBallotCrawler(pages, reconciler).crawl(listing)
        assert names(tracker, qcc) == ["PAR Approval", "PAR Expiry", "Sponsor Ballot"]
        ballot = [e for e in tracker.events_of(qcc) if e.name == "Sponsor Ballot"][0]
        assert ballot.end_date == date(2017, 3, 31)
        # no PAR Approval event: skipped
        assert tracker.events_of(cb) == []
        assert f"{DEV}/msg/3" not in pages.fetched

    def test_ballot_before_par_is_skipped(self, listing, pages, reconciler, tracker, task_group):
        qcc = tracker.add_project("802.1Qcc", task_group)
        self.with_par(tracker, qcc, approved=date(2017, 6, 1))
        SponsorBallotCrawler(pages, reconciler).crawl(listing)
        assert names(tracker, qcc) == ["PAR Approval", "PAR Expiry"]

    def test_ballot_after_expiry_is_skipped(self, listing, pages, reconciler, tracker, task_group):
        qcc = tracker.add_project("802.1Qcc", task_group)
        self.with_par(tracker, qcc, expires=date(2016, 12, 31))
        SponsorBallotCrawler(pages, reconciler).crawl(listing)
        assert names(tracker, qcc) == ["PAR Approval", "PAR Expiry"]

    def test_recirculation_kind(self):
        assert notification_kind("Ballot Recirculation: P802.1CB") == "Sponsor Ballot recirc"
        assert notification_kind("Sponsor Ballot Opening for P802.1Qcc") == "Sponsor Ballot"
        assert notification_kind("Invitation to ballot") is None

    def test_messages_link(self):
        landing = BeautifulSoup('<a href="/my/home">Home</a><a href="/my/messages">Messages</a>', "html.parser")
        assert messages_url(landing, DEV) == f"{DEV}/my/messages"
        with pytest.raises(PageStructureError):
            messages_url(BeautifulSoup("<p>Login failed</p>", "html.parser"), DEV)


class TestDrafts:
    """Test the draft directory scan."""

    LISTING = (
        "<table>"
        '<tr><td><a href="802-1Qcc-D1-0.pdf">802-1Qcc-D1-0.pdf</a></td><td>2017-01-10 10:00</td></tr>'
        '<tr><td><a href="802-1Qcc-D1-2.pdf">802-1Qcc-D1-2.pdf</a></td><td>2017-05-02 10:00</td></tr>'
        '<tr><td><a href="802-1Qcc-d0-5.pdf">802-1Qcc-d0-5.pdf</a></td><td>2016-06-01 10:00</td></tr>'
        '<tr><td><a href="comments.xlsx">comments.xlsx</a></td><td>2017-06-01 10:00</td></tr>'
        "</table>"
    )

    def test_latest_by_date(self):
        entries = [
            ListingEntry("802-1Qcr-D0-5.pdf", "a", date(2018, 3, 1)),
            ListingEntry("802-1Qcr-d0-2.pdf", "b", date(2017, 12, 1)),
            ListingEntry("notes.pdf", "c", date(2019, 1, 1)),
        ]
        assert latest_draft(entries).href == "a"
        assert latest_draft([]) is None

    def test_scan(self, pages, reconciler, tracker, task_group):
        qcc = tracker.add_project("802.1Qcc", task_group, files_url="http://files.example.org/802.1Qcc")
        tracker.add_project("802.1CB", task_group)
        pages.add("http://files.example.org/802.1Qcc/", self.LISTING)
        assert DraftScanner(pages, reconciler).scan() == 1
        stored = tracker.get_project(qcc.id)
        assert stored.draft_no == "D1.2"
        assert stored.draft_url == "http://files.example.org/802.1Qcc/802-1Qcc-D1-2.pdf"
        assert names(tracker, qcc) == ["Draft: D1.2"]

    def test_unreachable_archive(self, pages, reconciler, tracker, task_group):
        tracker.add_project("802.1Qcc", task_group, files_url="http://files.example.org/gone/")
        assert DraftScanner(pages, reconciler).scan() == 0
