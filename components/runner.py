"""Runs the selected synchronization sources against the tracker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from collectors.active_pars import ActiveParsCrawler, active_pars_url
from collectors.drafts import DraftScanner
from collectors.mail_archive import MailArchiveCrawler
from collectors.par_report import ParReportCrawler, load_approved_list, par_report_url
from collectors.spreadsheet import SpreadsheetImporter
from collectors.sponsor_ballots import SponsorBallotCrawler, messages_url
from components.context import RunContext
from components.interfaces import Config, PageSource, PageStructureError
from components.notifier import Notifier, WebhookNotifier
from components.reconciler import Reconciler
from components.tracker import TrackerApiError, TrackerClient, TrackerError

if TYPE_CHECKING:
    from app import Mode

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(threadName)-12s] %(levelname)-8s %(message)s"


def configure_logging(level: str = "WARNING", debug: bool = False) -> None:
    """Configure the root logger once for the whole run."""
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level, logging.WARNING),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def build_notifier(cfg: Config, mode: Mode) -> Optional[Notifier]:
    """Webhook notifier when --slackpost is given and a webhook is set."""
    if not mode.slackpost:
        return None
    if not cfg.slack_webhook:
        logger.warning("--slackpost given but no slack_webhook is configured")
        return None
    return WebhookNotifier(cfg.slack_webhook)


def build_context(cfg: Config, mode: Mode) -> RunContext:
    """Run context from the configuration and the command line."""
    return RunContext.build(
        dry_run=mode.dryrun,
        only=mode.only,
        blacklist=cfg.mail_archive.blacklist,
        update=mode.update,
        delete_existing=mode.delete_existing,
        notifier=build_notifier(cfg, mode),
    )


def sync_portal(cfg: Config, mode: Mode, reconciler: Reconciler) -> None:
    """Log in to the portal and crawl the selected listings."""
    portal = cfg.portal
    pages = PageSource()
    landing = pages.login(portal.base_url, portal.user, portal.password)
    if mode.par_report:
        logger.info("Updating projects from PAR report on development server")
        ParReportCrawler(
            pages,
            reconciler,
            load_approved_list(mode.par_report),
            reconciler.task_groups(),
            portal.max_pages,
        ).crawl(par_report_url(portal.base_url, portal.search))
    if mode.active:
        logger.info("Updating projects from Active PARs page on development server")
        ActiveParsCrawler(pages, reconciler, portal.max_pages).crawl(
            active_pars_url(portal.base_url, portal.search)
        )
    if mode.sb:
        logger.info("Adding sponsor ballot info from development server")
        SponsorBallotCrawler(pages, reconciler, portal.max_pages).crawl(
            messages_url(landing, portal.base_url)
        )


def sync_archive(cfg: Config, mode: Mode, reconciler: Reconciler) -> None:
    """Crawl the mail archive and/or scan draft directories."""
    archive = cfg.mail_archive
    pages = PageSource()
    pages.use_basic_auth(archive.user, archive.password)
    if mode.mailserv:
        logger.info("Updating projects from Mail Archive")
        crawler = MailArchiveCrawler(pages, reconciler, archive.url, archive.limit)
        crawler.crawl(crawler.archive_link(archive.start))
    if mode.drafts:
        logger.info("Scanning project archives for drafts")
        found = DraftScanner(pages, reconciler).scan()
        logger.info("Found drafts for %d projects", found)


def run_sync(cfg: Config, mode: Mode) -> None:
    """Apply every selected source, in a fixed order."""
    context = build_context(cfg, mode)
    if context.dry_run:
        logger.warning("Dry run mode: NO CHANGES to database")
    tracker = TrackerClient(cfg.tracker.api_uri, context, timeout=cfg.tracker.timeout)
    tracker.sign_in(cfg.tracker.email, cfg.tracker.password)
    reconciler = Reconciler(tracker, context)

    if mode.filepath:
        SpreadsheetImporter(
            reconciler, people=mode.people, task_groups=mode.task_groups
        ).run(mode.filepath)
    if mode.par_report or mode.active or mode.sb:
        sync_portal(cfg, mode, reconciler)
    if mode.mailserv or mode.drafts:
        sync_archive(cfg, mode, reconciler)


def main(cfg: Config, mode: Mode) -> None:
    """Run the sync; a rejected write or a broken page ends it with status 1."""
    configure_logging(cfg.log_level, mode.debug)
    try:
        run_sync(cfg, mode)
    except TrackerApiError as e:
        logger.critical("%s was rejected (%s)", e.operation, e.status)
        for field, message in e.messages():
            logger.critical("%s: %s", field, message)
        raise SystemExit(1) from e
    except (TrackerError, PageStructureError) as e:
        logger.critical("%s", e)
        raise SystemExit(1) from e
