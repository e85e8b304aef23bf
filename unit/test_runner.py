"""Test command-line handling, configuration, notifications and run exit status."""

import logging
from datetime import date
from unittest.mock import Mock, patch

import pytest
import requests  # type: ignore

from app import Mode, build_parser
from components.interfaces import Config, PageStructureError
from components.models import Event, Project
from components.notifier import WebhookNotifier, event_message, is_recent
from components.runner import build_context, main
from components.tracker import TrackerApiError


class TestCommandLine:
    """Test that parsed arguments build a Mode."""

    def test_flags(self):
        args = build_parser().parse_args(
            ["-f", "status.xlsx", "-p", "-t", "-u", "-O", "802.1Qcc", "-n", "-z"]
        )
        mode = Mode(**vars(args))
        assert mode.filepath == "status.xlsx"
        assert mode.people and mode.task_groups and mode.update
        assert mode.only == "802.1Qcc"
        assert mode.dryrun
        assert mode.slackpost
        assert mode.config == "config.yaml"

    def test_long_options(self):
        args = build_parser().parse_args(
            ["--par-report", "approved.yaml", "--delete-existing", "--mailserv", "--drafts"]
        )
        mode = Mode(**vars(args))
        assert mode.par_report == "approved.yaml"
        assert mode.delete_existing
        assert mode.mailserv and mode.drafts
        assert not mode.active


class TestConfig:
    """Test configuration defaults and environment overrides."""

    def test_defaults(self):
        cfg = Config.from_mapping({})
        assert cfg.log_level == "WARNING"
        assert cfg.portal.max_pages == 0
        assert cfg.portal.search == "802.1"
        assert cfg.mail_archive.start == "maillist.html"
        assert cfg.mail_archive.blacklist == []

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("TRACKER_EMAIL", "bot@example.org")
        cfg = Config.from_mapping({"tracker": {"email": "file@example.org"}})
        assert cfg.tracker.email == "bot@example.org"

    def test_context(self):
        cfg = Config.from_mapping({"mail_archive": {"blacklist": [102, "230"]}})
        context = build_context(cfg, Mode(only="802.1Qcc, 802.1CB", dryrun=True, slackpost=True))
        assert context.dry_run
        assert context.only == frozenset({"802.1qcc", "802.1cb"})
        assert context.is_blacklisted("102")
        # no webhook configured
        assert context.notifier is None


class TestNotifier:
    """Test event announcements."""

    def test_recent(self):
        event = Event(date(2018, 1, 8), "WG recirc: D1.2", "x")
        assert is_recent(event, date(2018, 1, 10))
        assert not is_recent(event, date(2018, 1, 12))

    def test_message(self):
        project = Project("802.1Qcc", title="Stream Reservation", draft_no="D1.2", draft_url="http://x/d.pdf")
        event = Event(date(2018, 1, 8), "WG recirc: D1.2", "Working group recirculation", end_date=date(2018, 2, 9))
        attachment = event_message(project, event)["attachments"][0]
        assert attachment["title"] == "Working group recirculation"
        assert attachment["text"] == "Stream Reservation"
        assert [f["title"] for f in attachment["fields"]] == ["Start date", "End date", "Draft"]

    def test_delivery_failure_is_logged(self, caplog):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("refused")
        notifier = WebhookNotifier("http://hooks.example.org/x", session=session)
        with caplog.at_level(logging.WARNING):
            notifier.post_event(Project("802.1Qcc"), Event(date(2018, 1, 8), "MEC", "MEC"))
        assert "Could not announce" in caplog.text


class TestExitStatus:
    """Test that fatal errors end the run with status 1."""

    @pytest.mark.parametrize("error", [
        TrackerApiError("POST task_groups/3/projects", 422, {"designation": ["has already been taken"]}),
        PageStructureError("No pager on http://dev.example.org/pub/list"),
    ])
    def test_fatal(self, error, caplog):
        with patch("components.runner.run_sync", side_effect=error):
            with pytest.raises(SystemExit) as excinfo:
                main(Config.from_mapping({}), Mode())
        assert excinfo.value.code == 1
        assert any(r.levelno == logging.CRITICAL for r in caplog.records)
