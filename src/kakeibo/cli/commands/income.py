"""Income commands."""

from datetime import date as date_cls

import click

from kakeibo.cli.date_filters import date_range_options, resolve_cli_date_range
from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.cli.formatting import echo_incomes, format_amount
from kakeibo.cli.resolution import resolve_income_source_or_exit
from kakeibo.domain.entities import RecordKind
from kakeibo.domain.errors import DomainError
from kakeibo.domain.income_source import IncomeSourceService
from kakeibo.domain.ledger import LedgerService
from kakeibo.utils.amount_parser import parse_amount
from kakeibo.utils.date_parser import parse_date


@click.group()
def income_group():
    """Record and browse incomes."""
    pass


@income_group.command("add")
@click.option("--date", "income_date", help="Income date (YYYY-MM-DD or relative like 'today'); defaults to today")
@click.option("--source", required=True, help="Income source ID or name (e.g., 給与)")
@click.option("--amount", required=True, help="Amount")
@click.option("--memo", default="", help="Memo")
@click.pass_context
def add_income(ctx, income_date: str | None, source: str, amount: str, memo: str):
    """Record an income.

    Examples:
        kakeibo income add --source 給与 --amount 250000 --date 2024-05-25
    """
    db = ctx.obj["db"]
    ledger_service = LedgerService(db)
    source_obj = resolve_income_source_or_exit(ctx, IncomeSourceService(db), source)

    try:
        day = parse_date(income_date).isoformat() if income_date else date_cls.today().isoformat()
        value = parse_amount(amount, allow_negative=False)
        income = ledger_service.add_income(
            date=day, source_id=source_obj.id, amount=value, memo=memo
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Added income {format_amount(income.amount)} on {income.date} "
        f"({source_obj.name}) (ID: {income.id})"
    )


@income_group.command("list")
@date_range_options
@click.option("--source", help="Income source ID or name")
@click.pass_context
def list_incomes(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    source: str | None,
):
    """List incomes of a period (default: this month)."""
    db = ctx.obj["db"]
    ledger_service = LedgerService(db)
    source_service = IncomeSourceService(db)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    source_id = resolve_income_source_or_exit(ctx, source_service, source).id if source else None

    incomes = ledger_service.search(RecordKind.INCOME, start, end, source_id=source_id)
    if not incomes:
        click.echo("No incomes found.")
        return

    names = {s.id: s.name for s in source_service.list_income_sources()}
    click.echo(f"\nIncomes {start} .. {end}:")
    echo_incomes(incomes, names)
    click.echo(f"\nTotal: {format_amount(sum(i.amount for i in incomes))} ({len(incomes)} income(s))")


@income_group.command("delete")
@click.argument("income_id")
@click.pass_context
def delete_income(ctx, income_id: str):
    """Delete an income (kept in storage, hidden from every view)."""
    db = ctx.obj["db"]
    try:
        LedgerService(db).delete_income(income_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted income {income_id}")


def register_commands(cli):
    """Register income commands with main CLI."""
    cli.add_command(income_group, name="income")
