"""Tests for date and amount parsing utilities."""

from datetime import date, timedelta

import pytest

from kakeibo.utils.amount_parser import parse_amount
from kakeibo.utils.date_parser import (
    current_year_month,
    days_between,
    get_date_range,
    looks_like_date,
    month_bounds,
    months_between,
    normalize_date,
    parse_date,
    validate_iso_date,
    validate_year_month,
)


class TestNormalizeDate:
    """Tests for CSV date normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024/5/1", "2024-05-01"),
            ("2024-5-1", "2024-05-01"),
            ("2024/05/01", "2024-05-01"),
            (" 2024/12/31 ", "2024-12-31"),
        ],
    )
    def test_valid(self, raw, expected):
        """Test accepted shapes."""
        assert normalize_date(raw) == expected

    @pytest.mark.parametrize("raw", ["2024/2/30", "5/1/2024", "20240501", "", "2024/13/1"])
    def test_invalid(self, raw):
        """Test rejected values."""
        with pytest.raises(ValueError):
            normalize_date(raw)

    def test_looks_like_date(self):
        """Test the header detection helper."""
        assert looks_like_date("2024/5/1")
        assert not looks_like_date("日付")


class TestValidation:
    """Tests for ISO validators."""

    def test_validate_iso_date(self):
        """Test strict ISO days."""
        assert validate_iso_date("2024-02-29") == "2024-02-29"
        with pytest.raises(ValueError):
            validate_iso_date("2023-02-29")
        with pytest.raises(ValueError):
            validate_iso_date("2024-5-1")

    def test_validate_year_month(self):
        """Test month strings."""
        assert validate_year_month("2024-05") == "2024-05"
        with pytest.raises(ValueError):
            validate_year_month("2024-5")


class TestRanges:
    """Tests for range helpers."""

    def test_month_bounds(self):
        """Test first and last day of months."""
        assert month_bounds("2024-02") == ("2024-02-01", "2024-02-29")
        assert month_bounds("2024-12") == ("2024-12-01", "2024-12-31")

    def test_months_between(self):
        """Test months touched by a range."""
        assert months_between("2023-11-15", "2024-02-01") == ["2023-11", "2023-12", "2024-01", "2024-02"]

    def test_days_between(self):
        """Test days of a range."""
        assert days_between("2024-02-28", "2024-03-01") == ["2024-02-28", "2024-02-29", "2024-03-01"]

    def test_current_year_month(self):
        """Test the month of a given day."""
        assert current_year_month(date(2024, 7, 15)) == "2024-07"

    def test_get_date_range_this_month(self):
        """Test the this-month period."""
        start, end = get_date_range("this-month")
        today = date.today()
        assert start == today.replace(day=1)
        assert (end + timedelta(days=1)).day == 1
        assert start <= today <= end

    def test_get_date_range_last_3_months(self):
        """Test that the period spans three whole months."""
        start, end = get_date_range("last-3-months")
        assert start.day == 1
        assert len(months_between(start.isoformat(), end.isoformat())) == 3

    def test_get_date_range_unknown(self):
        """Test an unsupported period."""
        with pytest.raises(ValueError, match="Unknown period"):
            get_date_range("next-decade")


class TestParseDate:
    """Tests for free-form CLI dates."""

    def test_relative(self):
        """Test relative keywords."""
        today = date.today()
        assert parse_date("today") == today
        assert parse_date("Yesterday") == today - timedelta(days=1)
        assert parse_date("this month") == today.replace(day=1)

    def test_absolute(self):
        """Test absolute dates."""
        assert parse_date("2024/5/1") == date(2024, 5, 1)
        assert parse_date("2024-05-01") == date(2024, 5, 1)
        assert parse_date("May 1, 2024") == date(2024, 5, 1)

    def test_invalid(self):
        """Test an unparseable value."""
        with pytest.raises(ValueError):
            parse_date("not a date at all")


class TestParseAmount:
    """Tests for amount parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [("1200", 1200), ("¥1,200", 1200), ("￥1,200", 1200), ("1、200", 1200), ("-300", 300), ("99.9", 99)],
    )
    def test_valid(self, raw, expected):
        """Test accepted amounts."""
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "¥"])
    def test_invalid(self, raw):
        """Test rejected amounts."""
        with pytest.raises(ValueError):
            parse_amount(raw)

    def test_negative_rejected_for_manual_entry(self):
        """Test allow_negative=False."""
        assert parse_amount("¥1,200", allow_negative=False) == 1200
        with pytest.raises(ValueError, match="must not be negative"):
            parse_amount("-500", allow_negative=False)
        with pytest.raises(ValueError, match="must not be negative"):
            parse_amount("¥-1,200", allow_negative=False)
