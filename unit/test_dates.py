"""Test lenient date parsing."""

from datetime import date, datetime

import pytest

from timeline.dates import parse_date_lenient


class TestParseDateLenient:
    """Test the date extractor."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2018-01-03", date(2018, 1, 3)),
            ("3 Jan 2018", date(2018, 1, 3)),
            ("January 3, 2018", date(2018, 1, 3)),
            ("05-Dec-2017", date(2017, 12, 5)),
        ],
    )
    def test_full_dates(self, text, expected):
        """Test ISO and natural forms."""
        assert parse_date_lenient(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("jan 18", date(2018, 1, 1)),
            ("June18", date(2018, 6, 1)),
            ("sep 20", date(2020, 9, 1)),
            ("Sept '19", date(2019, 9, 1)),
        ],
    )
    def test_short_month_year(self, text, expected):
        """Test that month/2-digit-year means the first of that month."""
        assert parse_date_lenient(text) == expected

    def test_full_date_is_not_taken_for_short_form(self):
        """Test that "3 Jan 2018" is not read as January 2020."""
        assert parse_date_lenient("3 Jan 2018") == date(2018, 1, 3)

    def test_date_values_pass_through(self):
        """Test spreadsheet cells that are already dates."""
        assert parse_date_lenient(date(2020, 1, 1)) == date(2020, 1, 1)
        assert parse_date_lenient(datetime(2020, 1, 1, 12, 30)) == date(2020, 1, 1)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Approved on 2016-03-31", date(2016, 3, 31)),
            ("Comments are due by 23:59 ET on\nFriday 9 February 2018", date(2018, 2, 9)),
            ("Root PAR Approved on Dec 5, 2015 by the board", date(2015, 12, 5)),
        ],
    )
    def test_date_inside_prose(self, text, expected):
        """Test that a complete date embedded in text is found."""
        assert parse_date_lenient(text) == expected

    @pytest.mark.parametrize(
        "text", ["D1.2", "Q3", "23:59 ET on", "TBD in Q3", "2018", "Friday", "March 2019"]
    )
    def test_partial_dates_are_not_dates(self, text):
        """Test that text without a day, month and year gives None."""
        assert parse_date_lenient(text) is None

    @pytest.mark.parametrize(
        "value", [None, "", "   ", "zzz", "banana", 42, []]
    )
    def test_never_raises(self, value):
        """Test that unusable input gives None."""
        assert parse_date_lenient(value) is None

