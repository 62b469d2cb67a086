"""Date parsing utilities.

Ledger dates are ``YYYY-MM-DD`` strings. Zero padding makes them sort and
compare lexicographically in calendar order, which the range queries rely
on.
"""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
# Loose form accepted from foreign CSV files: 2024/5/1, 2024-05-01, ...
CSV_DATE_PATTERN = re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})$")


def looks_like_date(value: str) -> bool:
    """Return True if value has the shape of a CSV date."""
    return CSV_DATE_PATTERN.match(value.strip()) is not None


def normalize_date(value: str) -> str:
    """Normalize ``YYYY/M/D`` or ``YYYY-M-D`` to ``YYYY-MM-DD``.

    Raises:
        ValueError: If value does not match or is not a calendar day
    """
    match = CSV_DATE_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Could not parse date '{value}'")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day).isoformat()


def validate_iso_date(value: str) -> str:
    """Check that value is a real calendar day in ``YYYY-MM-DD`` form.

    Raises:
        ValueError: If value is malformed
    """
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        raise ValueError(f"Invalid date '{value}'")
    date.fromisoformat(value)
    return value


def validate_year_month(value: str) -> str:
    """Check that value is a ``YYYY-MM`` month.

    Raises:
        ValueError: If value is malformed
    """
    if not isinstance(value, str) or not YEAR_MONTH_PATTERN.match(value):
        raise ValueError(f"Invalid month '{value}'")
    date.fromisoformat(f"{value}-01")
    return value


def current_year_month(today: Optional[date] = None) -> str:
    """Return the ``YYYY-MM`` month containing today."""
    return (today or date.today()).strftime("%Y-%m")


def month_bounds(year_month: str) -> tuple[str, str]:
    """Return first and last day of a ``YYYY-MM`` month as ISO strings."""
    first = date.fromisoformat(f"{validate_year_month(year_month)}-01")
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first.isoformat(), last.isoformat()


def months_between(start: str, end: str) -> list[str]:
    """Return every ``YYYY-MM`` month touched by the inclusive date range."""
    current = date.fromisoformat(start).replace(day=1)
    last = date.fromisoformat(end).replace(day=1)
    months = []
    while current <= last:
        months.append(current.strftime("%Y-%m"))
        current += relativedelta(months=1)
    return months


def days_between(start: str, end: str) -> list[str]:
    """Return every day of the inclusive date range as ISO strings."""
    current = date.fromisoformat(start)
    last = date.fromisoformat(end)
    days = []
    while current <= last:
        days.append(current.isoformat())
        current += timedelta(days=1)
    return days


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "2024/1/15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            # Monday of last week
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    if looks_like_date(date_str):
        return date.fromisoformat(normalize_date(date_str))

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: Period string (this-month, this-year, last-month, last-3-months)

    Returns:
        Tuple of (start_date, end_date) covering whole months

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()
    this_month = today.replace(day=1)

    if period == "this-month":
        return (this_month, this_month + relativedelta(months=1) - timedelta(days=1))

    elif period == "last-month":
        start_date = this_month - relativedelta(months=1)
        return (start_date, this_month - timedelta(days=1))

    elif period == "last-3-months":
        # Current month and the two before it
        start_date = this_month - relativedelta(months=2)
        return (start_date, this_month + relativedelta(months=1) - timedelta(days=1))

    elif period == "this-year":
        return (today.replace(month=1, day=1), today.replace(month=12, day=31))

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, last-month, "
            "last-3-months, this-year"
        )
