"""CLI helpers for date range resolution."""

from datetime import date
from functools import wraps

import click

from kakeibo.utils.date_parser import get_date_range, month_bounds, parse_date

PERIODS = ("this-month", "last-month", "last-3-months", "this-year")


def date_range_options(func):
    """Add --start-date/--end-date and the period flags to a command.

    The wrapped command receives ``start_date``, ``end_date`` and
    ``period_flags`` (period name -> bool).
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        kwargs["period_flags"] = {
            period: kwargs.pop(period.replace("-", "_")) for period in PERIODS
        }
        return func(*args, **kwargs)

    for period in reversed(PERIODS):
        wrapper = click.option(f"--{period}", is_flag=True, help=f"Limit to {period.replace('-', ' ')}")(
            wrapper
        )
    wrapper = click.option(
        "--end-date", help="End date (YYYY-MM-DD or relative like 'today')"
    )(wrapper)
    wrapper = click.option(
        "--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')"
    )(wrapper)
    return wrapper


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[str, str]:
    """Resolve CLI date range from period flags or explicit dates.

    Returns:
        Inclusive (start, end) as ISO date strings. A missing end defaults to
        the start's month end; with nothing given, ``default_range`` (or the
        current month) applies.
    """
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --last-month, --last-3-months, --this-year) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period_count == 1:
        period = next(name for name, is_set in period_flags.items() if is_set)
        start, end = get_date_range(period)
        return start.isoformat(), end.isoformat()

    start = None
    end = None

    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is None and end is None:
        start, end = default_range or get_date_range("this-month")
    elif start is None:
        start = end.replace(day=1)
    elif end is None:
        _, end = get_month_range(start)

    if start > end:
        click.echo("Error: Start date must not be after end date.", err=True)
        ctx.exit(1)

    return start.isoformat(), end.isoformat()


def get_month_range(day: date) -> tuple[date, date]:
    """First and last day of the month containing ``day``."""
    first, last = month_bounds(day.strftime("%Y-%m"))
    return date.fromisoformat(first), date.fromisoformat(last)
