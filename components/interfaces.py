"""Configuration and HTML document access for the tracker synchronizer."""

from __future__ import annotations

import logging
from os import getenv
from typing import Any, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
import requests  # type: ignore
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from yaml import safe_load  # type: ignore

logger = logging.getLogger(__name__)

USER_AGENT = "tracker-sync/0.1"


def make_session(
    retries: int = 3,
    backoff_factor: float = 1,
    methods: tuple[str, ...] = ("GET", "POST"),
) -> requests.Session:
    """Create an HTTP session with connection pooling and retries.

    Args:
        retries: Total retry budget per request
        backoff_factor: Exponential backoff factor between retries
        methods: Methods retried after a read error or a retryable status
    """
    session = requests.Session()
    retry_strategy = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=list(methods),
    )
    adapter = HTTPAdapter(
        pool_connections=10,
        pool_maxsize=20,
        max_retries=retry_strategy,
        pool_block=False,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    logger.debug("Created HTTP session")
    return session


class PageSource:
    """Fetches HTML documents for the crawlers.

    Wraps one ``requests.Session`` so that cookies from a form login or
    basic-auth credentials apply to every page of a crawl.
    """

    def __init__(
        self, session: Optional[requests.Session] = None, timeout: int = 20
    ) -> None:
        self.session = session or make_session()
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        """Return the body of ``url``; HTTP errors propagate."""
        logger.debug("Fetching: %s", url)
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def soup(self, url: str) -> BeautifulSoup:
        """Fetch and parse ``url``."""
        return BeautifulSoup(self.fetch(url), "html.parser")

    def use_basic_auth(self, user: Optional[str], password: Optional[str]) -> None:
        """Send HTTP basic credentials with every request."""
        if user:
            self.session.auth = (user, password or "")

    def login(self, url: str, user: str, password: str) -> BeautifulSoup:
        """Log in through the first form on ``url``.

        The portal's form names the username ``x1`` and the password
        ``x2``; ``f0`` selects the landing page and the privacy consent box
        must be ticked.

        Returns:
            The page shown after logging in
        """
        page = self.soup(url)
        form = page.find("form")
        if form is None:
            raise PageStructureError(f"No login form on {url}")
        data: dict[str, Any] = {}
        for field in form.find_all(["input", "select", "textarea"]):
            name = field.get("name")
            if not name:
                continue
            kind = (field.get("type") or "").lower()
            if kind in ("checkbox", "radio") and not field.has_attr("checked"):
                continue
            if kind in ("submit", "button", "image"):
                continue
            data[name] = field.get("value", "")
        data.update({"x1": user, "x2": password, "f0": "3"})
        consent = form.find("input", attrs={"name": "privacyconsent"})
        if consent is not None:
            data["privacyconsent"] = consent.get("value", "on")
        submit = form.find(["input", "button"], attrs={"type": "submit"})
        if submit is not None and submit.get("name"):
            data[submit["name"]] = submit.get("value", "")
        action = urljoin(url, form.get("action") or url)
        method = (form.get("method") or "post").lower()
        logger.info("Logging in to %s", action)
        if method == "get":
            response = self.session.get(action, params=data, timeout=self.timeout)
        else:
            response = self.session.post(action, data=data, timeout=self.timeout)
        response.raise_for_status()
        return BeautifulSoup(response.text, "html.parser")


class PageStructureError(RuntimeError):
    """A page lacks an element the crawl cannot continue without."""


class Config:
    """Provides an interface and safe defaults for config.yaml values.

    Secrets may be supplied through the environment (or a .env file), which
    takes precedence over the YAML file.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        self.config: dict[str, Any] = {}
        if config_path:
            with open(config_path, "r", encoding="utf-8") as f:
                self.config = safe_load(f) or {}

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Config:
        """Build a Config from an in-memory mapping."""
        cfg = cls()
        cfg.config = dict(data)
        return cfg

    @property
    def slack_webhook(self) -> Optional[str]:
        """Webhook URL for new-event notifications."""
        return getenv("SLACK_WEBHOOK") or self.config.get("slack_webhook")

    @property
    def log_level(self) -> str:
        """Default log level name."""
        return str(self.config.get("log_level", "WARNING")).upper()

    class Tracker:
        """Tracking database API configuration."""

        def __init__(self, config: dict[str, Any]) -> None:
            self.tracker = config.get("tracker", {}) or {}

        @property
        def api_uri(self) -> str:
            """Base URI of the tracking API."""
            return str(self.tracker.get("api_uri", "http://localhost:3000"))

        @property
        def email(self) -> str:
            """Sign-in email."""
            return getenv("TRACKER_EMAIL") or str(self.tracker.get("email", ""))

        @property
        def password(self) -> str:
            """Sign-in password."""
            return getenv("TRACKER_PASSWORD") or str(
                self.tracker.get("password", "")
            )

        @property
        def timeout(self) -> int:
            """Request timeout in seconds."""
            return int(self.tracker.get("timeout", 30))

    @property
    def tracker(self) -> Config.Tracker:
        """Tracking database API configuration."""
        return Config.Tracker(self.config)

    class Portal:
        """Development server (web portal) configuration."""

        def __init__(self, config: dict[str, Any]) -> None:
            self.portal = config.get("portal", {}) or {}

        @property
        def host(self) -> str:
            """Host name of the portal."""
            return str(self.portal.get("host", "development.standards.ieee.org"))

        @property
        def base_url(self) -> str:
            """Root URL of the portal."""
            return f"http://{self.host}"

        @property
        def user(self) -> str:
            """Portal login name."""
            return getenv("PORTAL_USER") or str(self.portal.get("user", ""))

        @property
        def password(self) -> str:
            """Portal password."""
            return getenv("PORTAL_PASSWORD") or str(
                self.portal.get("password", "")
            )

        @property
        def max_pages(self) -> int:
            """Maximum listing pages per crawl (0 means unbounded)."""
            return int(self.portal.get("max_pages", 0))

        @property
        def search(self) -> str:
            """Working group filter for the portal listings."""
            return str(self.portal.get("search", "802.1"))

    @property
    def portal(self) -> Config.Portal:
        """Development server configuration."""
        return Config.Portal(self.config)

    class MailArchive:
        """Mailing list archive configuration."""

        def __init__(self, config: dict[str, Any]) -> None:
            self.mail_archive = config.get("mail_archive", {}) or {}

        @property
        def url(self) -> str:
            """Archive root URL (message links are relative to it)."""
            return str(self.mail_archive.get("url", "")).rstrip("/")

        @property
        def start(self) -> str:
            """First index page, relative to the archive root."""
            return str(self.mail_archive.get("start", "maillist.html"))

        @property
        def user(self) -> str:
            """Basic-auth user."""
            return getenv("ARCHIVE_USER") or str(self.mail_archive.get("user", ""))

        @property
        def password(self) -> str:
            """Basic-auth password."""
            return getenv("ARCHIVE_PASSWORD") or str(
                self.mail_archive.get("password", "")
            )

        @property
        def limit(self) -> int:
            """Maximum index pages to read (0 means unbounded)."""
            return int(self.mail_archive.get("limit", 0))

        @property
        def blacklist(self) -> list[str]:
            """Message numbers never to process."""
            return [str(n) for n in self.mail_archive.get("blacklist", []) or []]

    @property
    def mail_archive(self) -> Config.MailArchive:
        """Mailing list archive configuration."""
        return Config.MailArchive(self.config)
