"""Builders for portal, archive and announcement pages, and a fake PageSource."""

from typing import Optional

from bs4 import BeautifulSoup
import requests  # type: ignore


class FakePageSource:
    """Serves canned HTML by URL and remembers what was fetched."""

    def __init__(self, pages: Optional[dict[str, str]] = None) -> None:
        self.pages = dict(pages or {})
        self.fetched: list[str] = []

    def add(self, url: str, html: str) -> None:
        self.pages[url] = html

    def fetch(self, url: str) -> str:
        self.fetched.append(url)
        if url not in self.pages:
            raise requests.HTTPError(f"404 Not Found: {url}")
        return self.pages[url]

    def soup(self, url: str) -> BeautifulSoup:
        return BeautifulSoup(self.fetch(url), "html.parser")


class PageFactory:
    """Factory for HTML pages shaped like the real sources."""

    @staticmethod
    def pager(next_href: Optional[str]) -> str:
        """A ``div.pager`` whose last element links on only if there is more."""
        last = f'<a href="{next_href}">next ›</a>' if next_href else ""
        return (
            '<div class="pager">'
            '<span class="pager-item"><a href="?page=0">1</a></span>'
            f'<span class="pager-next">{last}</span>'
            "</div>"
        )

    @classmethod
    def listing(cls, rows: list[list[str]], next_href: Optional[str] = None, pager: bool = True) -> str:
        """A portal listing with one ``tr.b_data_row`` per row of cell HTML."""
        body = "".join(
            '<tr class="b_data_row">' + "".join(f"<td>{c}</td>" for c in row) + "</tr>"
            for row in rows
        )
        return (
            "<html><body><table><tr><th>Header</th></tr>"
            f"{body}</table>{cls.pager(next_href) if pager else ''}</body></html>"
        )

    @staticmethod
    def active_par_row(designation: str, par_link: str, approval: str = "2016-02-04") -> list[str]:
        return [
            "",
            f'<a href="{par_link}">{designation}</a>',
            "Some title",
            f'<a href="/par/{designation}.pdf">http://example.org/par/{designation}.pdf</a>',
            f"<script>document.write('x')</script><noscript>{approval}</noscript>",
        ]

    @staticmethod
    def par_report_row(designation: str, par_link: str, par_type: str = "New", status: str = "WG Draft Development") -> list[str]:
        cells = [f'<a href="{par_link}">{designation}</a>', par_type]
        cells += ["", "", "", "", "2016-02-04", "2019-12-31", "", ""]
        cells.append(status)
        return cells

    @staticmethod
    def notification_row(subject: str, href: str, posted: str = "2017-03-01") -> list[str]:
        return [
            f"<noscript>{posted}</noscript>",
            "", "", "",
            f'<a href="{href}">{subject}</a>',
        ]

    @staticmethod
    def par_detail(
        kind: str = "Amendment to IEEE Standard 802.1Q-2014",
        title: str = "Standard for Local and Metropolitan Area Networks Amendment: Stream Reservation",
        requested: str = "2015-12-01",
        approved: str = "2016-02-04",
        expires: str = "2019-12-31",
        par_href: str = "/documents/par/802.1Qcc.pdf",
    ) -> str:
        return (
            "<html><body>"
            f'<div class="task_menu"><a href="{par_href}">View PAR</a></div>'
            '<div class="tab-content-box">'
            f"<span>Type of Project:</span><span>{kind}</span>"
            f"<span>PAR Request Date:</span><span>{requested}</span>"
            f"<span>PAR Approval Date:</span><span>{approved}</span>"
            f"<span>PAR Expiration Date:</span><span>{expires}</span>"
            f"<span>2.1 Title:</span><span>{title}</span>"
            "</div></body></html>"
        )

    @staticmethod
    def sb_notification(opens: str = "1 March 2017", closes: str = "31 March 2017") -> str:
        return (
            '<html><body><p class="prose">Sponsor ballot on P802.1Qcc/D2.0<br/>'
            f"BALLOT OPENS: {opens}<br/>BALLOT CLOSES: {closes}<br/>"
            "Thank you</p></body></html>"
        )

    @staticmethod
    def archive_index(entries: list[tuple[str, str]], next_href: Optional[str] = None) -> str:
        """Archive index: navigation table, then ``li > strong > a`` entries."""
        nav = f'<a href="{next_href}">Next page</a>' if next_href else "Last page"
        items = "".join(
            f'<li><strong><a href="{href}">{title}</a></strong> <em>Some One</em></li>'
            for href, title in entries
        )
        return (
            "<html><body><table>"
            "<tr><th colspan='5'>802.1 archive</th></tr>"
            f"<tr><td>a</td><td>b</td><td>c</td><td>d</td><td>{nav}</td></tr>"
            f"</table><ul>{items}</ul></body></html>"
        )

    @staticmethod
    def announcement(
        posted: str = "Mon, 8 Jan 2018 09:00:00 -0500",
        to: str = "IEEE 802.1 Working Group",
        closing: str = "Friday, 9 February 2018",
        with_markers: bool = True,
        with_to: bool = True,
    ) -> str:
        markers = (
            "NOTE THAT ALL RESPONSES MUST BE SUBMITTED ELECTRONICALLY\n"
            "INCLUDE COMMENTS ONLY WITH YOUR BALLOT RESPONSE\n"
        ) if with_markers else ""
        to_line = f"TO: {to}\n" if with_to else ""
        return (
            "<html><body>"
            f"<ul><li><em>From</em>: Chair</li><li><em>Date</em>: {posted}</li></ul>\n"
            "<pre>\n"
            f"{to_line}"
            "This is a recirculation ballot on P802.1Qcc/D1.2.\n"
            "The draft can be found at http://example.org/private/\n"
            "Please review the draft.\n"
            "The 802.1 voting members that are entitled to vote are:\n"
            "Alice Example\n"
            "Bob Example\n"
            "The closing date of this ballot is:\n"
            f"{closing}\n"
            f"{markers}"
            "=====================\n"
            "Trailing signature\n"
            "</pre></body></html>"
        )
