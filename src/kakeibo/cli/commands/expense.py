"""Expense commands."""

from datetime import date as date_cls

import click

from kakeibo.cli.date_filters import date_range_options, resolve_cli_date_range
from kakeibo.cli.error_handling import exit_with_error, handle_domain_error
from kakeibo.cli.formatting import echo_expenses, format_amount
from kakeibo.cli.resolution import (
    resolve_category_or_exit,
    resolve_payment_method_or_exit,
)
from kakeibo.domain.category import CategoryService
from kakeibo.domain.csv_parser import normalize_rating
from kakeibo.domain.entities import RecordKind
from kakeibo.domain.errors import DomainError
from kakeibo.domain.ledger import LedgerService
from kakeibo.domain.payment_method import PaymentMethodService
from kakeibo.utils.amount_parser import parse_amount
from kakeibo.utils.date_parser import parse_date


def _parse_date_or_exit(ctx, value: str) -> str:
    try:
        return parse_date(value).isoformat()
    except ValueError as e:
        exit_with_error(ctx, f"Invalid date format: {e}")


def _parse_amount_or_exit(ctx, value: str) -> int:
    try:
        return parse_amount(value, allow_negative=False)
    except ValueError as e:
        exit_with_error(ctx, f"Invalid amount format: {e}")


def _rating(value: str | None) -> str | None:
    if not value:
        return value
    return normalize_rating(value) or value


@click.group()
def expense_group():
    """Record and browse expenses."""
    pass


@expense_group.command("add")
@click.option("--date", "expense_date", help="Expense date (YYYY-MM-DD or relative like 'today'); defaults to today")
@click.option("--category", required=True, help="Category ID or label (e.g., '食費 > 外食')")
@click.option("--payment-method", help="Payment method ID or name; defaults to cash")
@click.option("--amount", required=True, help="Amount (e.g., 1200 or ¥1,200)")
@click.option("--description", default="", help="Description")
@click.option("--rating", help="Rating: ○, △ or ✖")
@click.option("--memo", default="", help="Memo")
@click.pass_context
def add_expense(
    ctx,
    expense_date: str | None,
    category: str,
    payment_method: str | None,
    amount: str,
    description: str,
    rating: str | None,
    memo: str,
):
    """Record an expense.

    Examples:
        kakeibo expense add --category "食費 > 外食" --amount 1200 --description ランチ
        kakeibo expense add --date yesterday --category 交通 --payment-method 現金 --amount 220
    """
    db = ctx.obj["db"]
    ledger_service = LedgerService(db)
    category_service = CategoryService(db)
    payment_method_service = PaymentMethodService(db)

    day = _parse_date_or_exit(ctx, expense_date) if expense_date else date_cls.today().isoformat()
    value = _parse_amount_or_exit(ctx, amount)
    category_obj = resolve_category_or_exit(ctx, category_service, category)

    if payment_method:
        method = resolve_payment_method_or_exit(ctx, payment_method_service, payment_method)
    else:
        method = payment_method_service.default_payment_method()
        if method is None:
            exit_with_error(ctx, "No active payment method available")

    try:
        expense = ledger_service.add_expense(
            date=day,
            category_id=category_obj.id,
            payment_method_id=method.id,
            amount=value,
            description=description,
            rating=_rating(rating),
            memo=memo,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Added expense {format_amount(expense.amount)} on {expense.date} "
        f"({category_obj.label}, {method.name}) (ID: {expense.id})"
    )


@expense_group.command("list")
@click.option("--date", "day", help="Show a single day (newest entries first)")
@date_range_options
@click.option("--category", help="Category ID or label")
@click.option("--payment-method", help="Payment method ID or name")
@click.option("--rating", help="Rating: ○, △ or ✖")
@click.option("--fixed/--variable", "fixed", default=None, help="Only fixed-cost or only variable expenses")
@click.pass_context
def list_expenses(
    ctx,
    day: str | None,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    category: str | None,
    payment_method: str | None,
    rating: str | None,
    fixed: bool | None,
):
    """List expenses of a day or a period (default: this month)."""
    db = ctx.obj["db"]
    ledger_service = LedgerService(db)
    category_service = CategoryService(db)
    payment_method_service = PaymentMethodService(db)

    if day:
        start = end = _parse_date_or_exit(ctx, day)
    else:
        start, end = resolve_cli_date_range(
            ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
        )

    category_id = resolve_category_or_exit(ctx, category_service, category).id if category else None
    method_id = (
        resolve_payment_method_or_exit(ctx, payment_method_service, payment_method).id
        if payment_method
        else None
    )

    try:
        if day and not (category_id or method_id or rating or fixed is not None):
            expenses = ledger_service.daily_expenses(start)
        else:
            expenses = ledger_service.search(
                RecordKind.EXPENSE,
                start,
                end,
                category_id=category_id,
                payment_method_id=method_id,
                rating=_rating(rating),
                fixed=fixed,
            )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not expenses:
        click.echo("No expenses found.")
        return

    labels = {c.id: c.label for c in category_service.list_categories()}
    names = {m.id: m.name for m in payment_method_service.list_payment_methods()}
    click.echo(f"\nExpenses {start} .. {end}:")
    echo_expenses(expenses, labels, names)
    click.echo(f"\nTotal: {format_amount(sum(e.amount for e in expenses))} ({len(expenses)} expense(s))")


@expense_group.command("update")
@click.argument("expense_id")
@click.option("--date", "expense_date", help="Expense date")
@click.option("--category", help="Category ID or label")
@click.option("--payment-method", help="Payment method ID or name")
@click.option("--amount", help="Amount")
@click.option("--description", help="Description")
@click.option("--rating", help="Rating: ○, △ or ✖, or empty string to clear")
@click.option("--memo", help="Memo")
@click.pass_context
def update_expense(
    ctx,
    expense_id: str,
    expense_date: str | None,
    category: str | None,
    payment_method: str | None,
    amount: str | None,
    description: str | None,
    rating: str | None,
    memo: str | None,
):
    """Update an expense.

    Updates only the fields that are provided.
    """
    db = ctx.obj["db"]
    ledger_service = LedgerService(db)

    fields = {}
    if expense_date is not None:
        fields["date"] = _parse_date_or_exit(ctx, expense_date)
    if category is not None:
        fields["category_id"] = resolve_category_or_exit(ctx, CategoryService(db), category).id
    if payment_method is not None:
        fields["payment_method_id"] = resolve_payment_method_or_exit(
            ctx, PaymentMethodService(db), payment_method
        ).id
    if amount is not None:
        fields["amount"] = _parse_amount_or_exit(ctx, amount)
    if description is not None:
        fields["description"] = description
    if rating is not None:
        fields["rating"] = _rating(rating)
    if memo is not None:
        fields["memo"] = memo

    if not fields:
        exit_with_error(ctx, "Nothing to update")

    try:
        ledger_service.update_expense(expense_id, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated expense {expense_id}")


@expense_group.command("delete")
@click.argument("expense_id")
@click.pass_context
def delete_expense(ctx, expense_id: str):
    """Delete an expense (kept in storage, hidden from every view)."""
    db = ctx.obj["db"]
    try:
        LedgerService(db).delete_expense(expense_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted expense {expense_id}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
