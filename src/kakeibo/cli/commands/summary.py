"""Summary command."""

import click

from kakeibo.cli.date_filters import date_range_options, resolve_cli_date_range
from kakeibo.cli.formatting import format_amount
from kakeibo.domain.summary import SummaryService


@click.command("summary")
@date_range_options
@click.option("--daily", is_flag=True, help="Also show per-day expense totals")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    daily: bool,
):
    """Show totals for a period (default: this month).

    Examples:
        kakeibo summary --last-month
        kakeibo summary --start-date 2024-01-01 --end-date 2024-03-31
    """
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    report = SummaryService(ctx.obj["db"]).period_summary(start, end)

    click.echo(f"\nSummary {report.start_date} .. {report.end_date}")
    click.echo("=" * 40)
    click.echo(f"Income:   {format_amount(report.total_income):>14}")
    click.echo(f"Expense:  {format_amount(report.total_expense):>14}")
    click.echo(f"Balance:  {format_amount(report.balance):>14}")
    click.echo(f"  Fixed:    {format_amount(report.fixed_expense):>12}")
    click.echo(f"  Variable: {format_amount(report.variable_expense):>12}")

    if report.by_category:
        click.echo("\nBy category:")
        for name, total in report.by_category.items():
            click.echo(f"  {name:<12} {format_amount(total):>12}")

    if len(report.monthly) > 1:
        click.echo("\nBy month:")
        for month in report.monthly:
            click.echo(
                f"  {month.month}  income {format_amount(month.income):>12}  "
                f"expense {format_amount(month.expense):>12}"
            )

    if daily:
        click.echo("\nBy day:")
        for day in report.daily:
            if day.expense:
                click.echo(f"  {day.date}  {format_amount(day.expense):>12}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
