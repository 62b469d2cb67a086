"""Ledger domain service: expenses and incomes."""

from typing import Any, Callable, Iterable, Optional

from kakeibo.database.base import Database
from kakeibo.database.observers import Subscription
from kakeibo.domain.entities import Expense, Income, LedgerRecord, RecordKind, Table
from kakeibo.domain.errors import NotFoundError, ValidationError, record_not_found
from kakeibo.domain.validators import (
    check_fields,
    check_rating,
    require_amount,
    require_date,
    require_text,
)

EXPENSE_UPDATABLE_FIELDS = (
    "date",
    "category_id",
    "payment_method_id",
    "amount",
    "description",
    "rating",
    "memo",
    "is_fixed",
    "fixed_cost_id",
)
INCOME_UPDATABLE_FIELDS = ("date", "source_id", "amount", "memo")

_TABLES = {
    RecordKind.EXPENSE: Table.EXPENSES,
    RecordKind.INCOME: Table.INCOMES,
}


def _newest_first(records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


def _live(records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
    return [r for r in records if not r.deleted]


def _check_fixed_link(is_fixed: bool, fixed_cost_id: Optional[str]) -> None:
    if fixed_cost_id is not None and not is_fixed:
        raise ValidationError("fixed_cost_id is only allowed on fixed expenses")


class LedgerService:
    """Service for recording and querying expenses and incomes.

    Deletes are logical: rows are flagged ``deleted`` and drop out of every
    query here, but stay in storage.
    """

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    # Expenses
    def _expense_fields(
        self,
        date: str,
        category_id: str,
        payment_method_id: str,
        amount: int,
        description: str = "",
        rating: Optional[str] = None,
        memo: str = "",
        is_fixed: bool = False,
        fixed_cost_id: Optional[str] = None,
    ) -> dict[str, Any]:
        _check_fixed_link(is_fixed, fixed_cost_id)
        return {
            "date": require_date(date),
            "category_id": require_text("category_id", category_id),
            "payment_method_id": require_text("payment_method_id", payment_method_id),
            "amount": require_amount(amount),
            "description": description or "",
            "rating": check_rating(rating),
            "memo": memo or "",
            "deleted": False,
            "is_fixed": is_fixed,
            "fixed_cost_id": fixed_cost_id,
        }

    def add_expense(
        self,
        date: str,
        category_id: str,
        payment_method_id: str,
        amount: int,
        description: str = "",
        rating: Optional[str] = None,
        memo: str = "",
        is_fixed: bool = False,
        fixed_cost_id: Optional[str] = None,
    ) -> Expense:
        """Record an expense.

        Args:
            date: Day of the expense (YYYY-MM-DD)
            category_id: Category ID
            payment_method_id: Payment method ID
            amount: Amount in the smallest currency unit (>= 0)
            description: Free text
            rating: One of ○, △, ✖ or None
            memo: Free text
            is_fixed: True for rows generated from a fixed cost
            fixed_cost_id: Originating fixed cost, only with is_fixed

        Returns:
            The stored expense

        Raises:
            ValidationError: If a field is missing or invalid
        """
        fields = self._expense_fields(
            date,
            category_id,
            payment_method_id,
            amount,
            description=description,
            rating=rating,
            memo=memo,
            is_fixed=is_fixed,
            fixed_cost_id=fixed_cost_id,
        )
        return self.db.add(Table.EXPENSES, fields)

    def bulk_add_expenses(self, records: Iterable[dict[str, Any]]) -> list[Expense]:
        """Validate and insert many expenses in one write.

        Each record takes the keyword arguments of ``add_expense``. Nothing
        is written if any record is invalid.
        """
        prepared = [self._expense_fields(**record) for record in records]
        return self.db.bulk_add(Table.EXPENSES, prepared)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        """Get expense by ID, deleted or not."""
        return self.db.get(Table.EXPENSES, expense_id)

    def update_expense(self, expense_id: str, **fields) -> Expense:
        """Merge fields into an expense. ``id`` and ``created_at`` are fixed.

        Raises:
            ValidationError: If a field is unknown or invalid
            NotFoundError: If the expense doesn't exist
        """
        check_fields(Table.EXPENSES.value, fields, EXPENSE_UPDATABLE_FIELDS)
        if "date" in fields:
            require_date(fields["date"])
        if "amount" in fields:
            require_amount(fields["amount"])
        for field in ("category_id", "payment_method_id"):
            if field in fields:
                fields[field] = require_text(field, fields[field])
        if "rating" in fields:
            fields["rating"] = check_rating(fields["rating"])

        if "is_fixed" not in fields and "fixed_cost_id" not in fields:
            return self.db.update(Table.EXPENSES, expense_id, fields)

        # The link rule applies to the merged record
        with self.db.transaction():
            current = self.db.get(Table.EXPENSES, expense_id)
            if current is None:
                raise NotFoundError(record_not_found(Table.EXPENSES.value, expense_id))
            _check_fixed_link(
                fields.get("is_fixed", current.is_fixed),
                fields.get("fixed_cost_id", current.fixed_cost_id),
            )
            return self.db.update(Table.EXPENSES, expense_id, fields)

    def delete_expense(self, expense_id: str) -> Expense:
        """Logically delete an expense."""
        return self.db.update(Table.EXPENSES, expense_id, {"deleted": True})

    def daily_expenses(self, date: str) -> list[Expense]:
        """Non-deleted expenses of one day, most recently entered first."""
        return _newest_first(_live(self.db.where_equals(Table.EXPENSES, "date", require_date(date))))

    def period_expenses(self, start_date: str, end_date: str) -> list[Expense]:
        """Non-deleted expenses dated within the inclusive range."""
        rows = self.db.where_between(
            Table.EXPENSES, "date", require_date(start_date), require_date(end_date)
        )
        return _live(rows)

    # Incomes
    def add_income(self, date: str, source_id: str, amount: int, memo: str = "") -> Income:
        """Record an income.

        Raises:
            ValidationError: If a field is missing or invalid
        """
        return self.db.add(
            Table.INCOMES,
            {
                "date": require_date(date),
                "source_id": require_text("source_id", source_id),
                "amount": require_amount(amount),
                "memo": memo or "",
                "deleted": False,
            },
        )

    def get_income(self, income_id: str) -> Optional[Income]:
        """Get income by ID, deleted or not."""
        return self.db.get(Table.INCOMES, income_id)

    def update_income(self, income_id: str, **fields) -> Income:
        """Merge fields into an income. ``id`` and ``created_at`` are fixed."""
        check_fields(Table.INCOMES.value, fields, INCOME_UPDATABLE_FIELDS)
        if "date" in fields:
            require_date(fields["date"])
        if "amount" in fields:
            require_amount(fields["amount"])
        if "source_id" in fields:
            fields["source_id"] = require_text("source_id", fields["source_id"])
        return self.db.update(Table.INCOMES, income_id, fields)

    def delete_income(self, income_id: str) -> Income:
        """Logically delete an income."""
        return self.db.update(Table.INCOMES, income_id, {"deleted": True})

    def daily_incomes(self, date: str) -> list[Income]:
        """Non-deleted incomes of one day, most recently entered first."""
        return _newest_first(_live(self.db.where_equals(Table.INCOMES, "date", require_date(date))))

    def period_incomes(self, start_date: str, end_date: str) -> list[Income]:
        """Non-deleted incomes dated within the inclusive range."""
        rows = self.db.where_between(
            Table.INCOMES, "date", require_date(start_date), require_date(end_date)
        )
        return _live(rows)

    # Shared record views
    def daily(self, kind: RecordKind, date: str) -> list[LedgerRecord]:
        """Daily query for either record kind."""
        if kind == RecordKind.EXPENSE:
            return self.daily_expenses(date)
        return self.daily_incomes(date)

    def period(self, kind: RecordKind, start_date: str, end_date: str) -> list[LedgerRecord]:
        """Period query for either record kind."""
        if kind == RecordKind.EXPENSE:
            return self.period_expenses(start_date, end_date)
        return self.period_incomes(start_date, end_date)

    def search(
        self,
        kind: RecordKind,
        start_date: str,
        end_date: str,
        category_id: Optional[str] = None,
        payment_method_id: Optional[str] = None,
        rating: Optional[str] = None,
        fixed: Optional[bool] = None,
        source_id: Optional[str] = None,
    ) -> list[LedgerRecord]:
        """Filter a period's records, newest date first.

        Args:
            kind: Expense or income
            start_date: Inclusive start (YYYY-MM-DD)
            end_date: Inclusive end (YYYY-MM-DD)
            category_id: Expenses only
            payment_method_id: Expenses only
            rating: Expenses only
            fixed: Expenses only; True for fixed-cost rows, False for the rest
            source_id: Incomes only
        """
        records = self.period(kind, start_date, end_date)

        if kind == RecordKind.EXPENSE:
            if category_id:
                records = [r for r in records if r.category_id == category_id]
            if payment_method_id:
                records = [r for r in records if r.payment_method_id == payment_method_id]
            if rating:
                records = [r for r in records if r.rating == rating]
            if fixed is not None:
                records = [r for r in records if r.is_fixed == fixed]
        elif source_id:
            records = [r for r in records if r.source_id == source_id]

        records = sorted(records, key=lambda r: r.created_at, reverse=True)
        return sorted(records, key=lambda r: r.date, reverse=True)

    # Live queries
    def watch_daily(
        self, kind: RecordKind, date: str, callback: Callable[[list[LedgerRecord]], None]
    ) -> Subscription:
        """Deliver the daily query now and after every relevant write."""
        require_date(date)
        return self.db.subscribe([_TABLES[kind]], lambda: self.daily(kind, date), callback)

    def watch_period(
        self,
        kind: RecordKind,
        start_date: str,
        end_date: str,
        callback: Callable[[list[LedgerRecord]], None],
    ) -> Subscription:
        """Deliver the period query now and after every relevant write."""
        require_date(start_date)
        require_date(end_date)
        return self.db.subscribe(
            [_TABLES[kind]], lambda: self.period(kind, start_date, end_date), callback
        )
