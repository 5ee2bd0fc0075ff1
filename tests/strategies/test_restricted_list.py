"""
Tests for the restricted instrument list.
"""

import pytest

from protective_put.strategies.restricted_list import (
    RestrictedList,
    RestrictedListError,
    load_restricted_list,
    normalize_isin,
)

CSV_TEXT = """Issuer,ISIN,Country
"Apple Inc"," us0378331005 ",US
Microsoft Corp,US5949181045,US
Blank Row Corp,,US
"""


class TestNormalizeIsin:
    """Tests for ISIN normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("US0378331005", "US0378331005"),
            ("  us0378331005 ", "US0378331005"),
            ('"us0378331005"', "US0378331005"),
            ("", None),
            ("   ", None),
            (None, None),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_isin(raw) == expected


class TestRestrictedList:
    """Tests for RestrictedList."""

    def test_contains_normalizes(self):
        restricted = RestrictedList(["US0378331005"])

        assert restricted.contains(" us0378331005")
        assert "US0378331005" in restricted
        assert not restricted.contains("US5949181045")

    def test_missing_isin_never_restricted(self):
        restricted = RestrictedList(["US0378331005"])

        assert restricted.contains(None) is False
        assert restricted.contains("") is False

    def test_from_csv_text_uses_second_column(self):
        restricted = RestrictedList.from_csv_text(CSV_TEXT)

        assert restricted.isins == frozenset({"US0378331005", "US5949181045"})
        assert len(restricted) == 2

    def test_header_only(self):
        assert len(RestrictedList.from_csv_text("Issuer,ISIN\n")) == 0

    def test_single_column_file(self):
        assert len(RestrictedList.from_csv_text("ISIN\nUS0378331005\n")) == 0

    def test_empty_text(self):
        assert len(RestrictedList.from_csv_text("")) == 0


class TestLoadRestrictedList:
    """Tests for load_restricted_list."""

    def test_load_file(self, tmp_path):
        path = tmp_path / "restricted.csv"
        path.write_text(CSV_TEXT)

        restricted = load_restricted_list(path)

        assert restricted.contains("US5949181045")

    def test_missing_file_returns_empty(self, tmp_path):
        restricted = load_restricted_list(tmp_path / "missing.csv")

        assert len(restricted) == 0

    def test_missing_file_strict_raises(self, tmp_path):
        with pytest.raises(RestrictedListError, match="missing.csv"):
            load_restricted_list(tmp_path / "missing.csv", strict=True)
