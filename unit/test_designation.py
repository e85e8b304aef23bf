"""Test designation parsing."""

import pytest

from components.models import ProjectType
from timeline.designation import (
    DESIGNATION_PATTERN,
    parse_designation,
    strip_designation,
)


class TestParseDesignation:
    """Test mapping designations to (type, base)."""

    @pytest.mark.parametrize(
        "text,base",
        [("802.1Q", "802.1Q"), ("802.1AB", "802.1AB"), ("P802.1CB", "802.1CB"), ("802.1X", "802.1X")],
    )
    def test_new_standard(self, text, base):
        """Test designations with no lowercase suffix."""
        assert parse_designation(text) == (ProjectType.NEW_STANDARD, base)

    @pytest.mark.parametrize(
        "text,base",
        [("802.1Qcc", "802.1Q"), ("P802.1Qbv", "802.1Q"), ("802.1CBdb", "802.1CB"), ("802.1ABcu", "802.1AB")],
    )
    def test_amendment(self, text, base):
        """Test designations with a lowercase amendment suffix."""
        assert parse_designation(text) == (ProjectType.AMENDMENT, base)

    @pytest.mark.parametrize("text", ["802.1Q-REV", "P802.1Q-Rev", "802.1AB-rev"])
    def test_revision(self, text):
        project_type, base = parse_designation(text)
        assert project_type == ProjectType.REVISION
        assert base == strip_designation(text).split("-")[0]

    def test_corrigendum(self):
        project_type, base = parse_designation("802.1Q-2014/Cor-1")
        assert project_type == ProjectType.CORRIGENDUM
        assert base == "802.1Q-2014"

    def test_corrigendum_without_separator(self):
        assert parse_designation("802.1AB/COR1")[0] == ProjectType.CORRIGENDUM

    def test_erratum(self):
        assert parse_designation("802.1AS/Err2")[0] == ProjectType.ERRATUM

    @pytest.mark.parametrize("text,expected", [
        ("802.1Qcc-REV", (ProjectType.REVISION, "802.1Q")),
        ("802.1Qbv/Cor1", (ProjectType.CORRIGENDUM, "802.1Q")),
        ("P802.1Qbv-2015/Cor-1", (ProjectType.CORRIGENDUM, "802.1Q-2015")),
        ("802.1AEbw/Err1", (ProjectType.ERRATUM, "802.1AE")),
    ])
    def test_amendment_suffix_before_marker(self, text, expected):
        """Test revisions, corrigenda and errata of amendments."""
        assert parse_designation(text) == expected

    @pytest.mark.parametrize("text", [None, "", "hello", "803.1Q", "Project 802.1Q"])
    def test_unrecognized(self, text):
        """Test that anything else yields (None, None)."""
        assert parse_designation(text) == (None, None)


class TestDesignationHelpers:
    """Test designation helpers used by the crawlers."""

    def test_strip_designation(self):
        assert strip_designation("PP802.1Qcc ") == "802.1Qcc"
        assert strip_designation("802.1Qcc") == "802.1Qcc"

    @pytest.mark.parametrize("text", ["P802.1Qcc", "802.1CB", "P802E", "802"])
    def test_listing_pattern_matches(self, text):
        assert DESIGNATION_PATTERN.search(text)

    @pytest.mark.parametrize("text", ["P1588", "802.3bt", ""])
    def test_listing_pattern_rejects(self, text):
        assert not DESIGNATION_PATTERN.search(text)
