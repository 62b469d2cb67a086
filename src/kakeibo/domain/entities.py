"""Domain model entities for kakeibo.

These are pure data classes representing ledger concepts, independent of
the database schema. Storage rows are converted to these by
``kakeibo.database.mappers``.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union


class Table(str, Enum):
    """Logical tables of the ledger store."""

    EXPENSES = "expenses"
    CATEGORIES = "categories"
    PAYMENT_METHODS = "payment_methods"
    INCOMES = "incomes"
    INCOME_SOURCES = "income_sources"
    FIXED_COSTS = "fixed_costs"
    CATEGORY_MAPPINGS = "category_mappings"


class RecordKind(str, Enum):
    """Discriminant for ledger records shared by list and search views."""

    EXPENSE = "expense"
    INCOME = "income"


class DeleteResult(str, Enum):
    """Outcome of deleting a reference entity."""

    HIDDEN = "hidden"
    REMOVED = "removed"


RATINGS = ("○", "△", "✖")


@dataclass(frozen=True)
class Expense:
    """Expense record."""

    kind: ClassVar[RecordKind] = RecordKind.EXPENSE

    id: str
    date: str
    category_id: str
    payment_method_id: str
    amount: int
    description: str
    rating: Optional[str]
    memo: str
    deleted: bool
    is_fixed: bool
    fixed_cost_id: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Income:
    """Income record."""

    kind: ClassVar[RecordKind] = RecordKind.INCOME

    id: str
    date: str
    source_id: str
    amount: int
    memo: str
    deleted: bool
    created_at: datetime
    updated_at: datetime


LedgerRecord = Union[Expense, Income]


@dataclass(frozen=True)
class Category:
    """Expense category with an optional minor refinement."""

    id: str
    major_name: str
    minor_name: Optional[str]
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def label(self) -> str:
        """Display label, e.g. ``"食費 > 外食"``."""
        if self.minor_name:
            return f"{self.major_name} > {self.minor_name}"
        return self.major_name


@dataclass(frozen=True)
class PaymentMethod:
    """Payment method reference entity."""

    id: str
    name: str
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class IncomeSource:
    """Income source reference entity."""

    id: str
    name: str
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class FixedCost:
    """Monthly recurring expense template."""

    id: str
    name: str
    category_id: str
    payment_method_id: str
    amount: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CategoryMapping:
    """Persisted association from a CSV category label to a category."""

    id: str
    csv_category: str
    category_id: str
    created_at: datetime
    updated_at: datetime
