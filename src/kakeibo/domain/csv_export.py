"""CSV export of expenses."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

from kakeibo.database.base import Database
from kakeibo.domain.category import CategoryService
from kakeibo.domain.csv_parser import EXPORT_HEADER
from kakeibo.domain.entities import Category, Expense, PaymentMethod
from kakeibo.domain.ledger import LedgerService
from kakeibo.domain.payment_method import PaymentMethodService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportFile:
    """A generated export, ready to be written."""

    filename: str
    content: str


def quote_field(value: str) -> str:
    """Quote a field only when it contains a comma, quote or newline."""
    if any(ch in value for ch in (",", '"', "\n")):
        return '"' + value.replace('"', '""') + '"'
    return value


def generate_csv(
    expenses: Iterable[Expense],
    categories: Iterable[Category],
    payment_methods: Iterable[PaymentMethod],
) -> str:
    """Render expenses as CSV text.

    Rows are ordered by date, then by entry time. Unknown category or payment
    method references render as empty fields.

    Args:
        expenses: Expenses to export
        categories: Categories used to resolve major/minor names
        payment_methods: Payment methods used to resolve names

    Returns:
        CSV text, lines joined with ``\\n`` and no trailing newline
    """
    category_index = {c.id: c for c in categories}
    method_index = {m.id: m.name for m in payment_methods}

    lines = [",".join(EXPORT_HEADER)]
    for expense in sorted(expenses, key=lambda e: (e.date, e.created_at)):
        category = category_index.get(expense.category_id)
        fields = [
            expense.date,
            category.major_name if category else "",
            (category.minor_name or "") if category else "",
            str(expense.amount),
            expense.description or "",
            expense.rating or "",
            method_index.get(expense.payment_method_id, ""),
            expense.memo or "",
        ]
        lines.append(",".join(quote_field(field) for field in fields))
    return "\n".join(lines)


def export_filename(start_date: str, end_date: str) -> str:
    return f"kakeibo_{start_date}_{end_date}.csv"


def write_export(export: ExportFile, directory: Union[str, Path]) -> Path:
    """Write an export into a directory as UTF-8 without BOM.

    Returns:
        Path of the written file
    """
    path = Path(directory) / export.filename
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(export.content)
    logger.info("Wrote export to %s", path)
    return path


class CSVExportService:
    """Service for exporting a period of expenses."""

    def __init__(self, db: Database):
        """Initialize CSV export service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger_service = LedgerService(db)
        self.category_service = CategoryService(db)
        self.payment_method_service = PaymentMethodService(db)

    def export_period(self, start_date: str, end_date: str) -> ExportFile:
        """Export non-deleted expenses dated within the inclusive range.

        Hidden categories and payment methods still resolve to their names.
        """
        expenses = self.ledger_service.period_expenses(start_date, end_date)
        content = generate_csv(
            expenses,
            self.category_service.list_categories(),
            self.payment_method_service.list_payment_methods(),
        )
        logger.debug("Exported %d expenses for %s..%s", len(expenses), start_date, end_date)
        return ExportFile(filename=export_filename(start_date, end_date), content=content)
