"""Text rendering helpers shared by CLI commands."""

from typing import Iterable, Mapping

import click

from kakeibo.domain.entities import Expense, Income


def format_amount(amount: int) -> str:
    return f"¥{amount:,}"


def echo_expenses(
    expenses: Iterable[Expense],
    category_labels: Mapping[str, str],
    method_names: Mapping[str, str],
) -> None:
    """Print one line per expense."""
    for expense in expenses:
        parts = [
            expense.date,
            f"{format_amount(expense.amount):>10}",
            category_labels.get(expense.category_id, "Unknown"),
            method_names.get(expense.payment_method_id, "Unknown"),
        ]
        if expense.description:
            parts.append(expense.description)
        if expense.rating:
            parts.append(expense.rating)
        if expense.is_fixed:
            parts.append("[fixed]")
        if expense.memo:
            parts.append(f"({expense.memo})")
        click.echo("  ".join(parts) + f"  (ID: {expense.id})")


def echo_incomes(incomes: Iterable[Income], source_names: Mapping[str, str]) -> None:
    """Print one line per income."""
    for income in incomes:
        parts = [
            income.date,
            f"{format_amount(income.amount):>10}",
            source_names.get(income.source_id, "Unknown"),
        ]
        if income.memo:
            parts.append(f"({income.memo})")
        click.echo("  ".join(parts) + f"  (ID: {income.id})")
