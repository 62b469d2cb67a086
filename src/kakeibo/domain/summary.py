"""Period summary domain service."""

from collections import defaultdict
from dataclasses import dataclass

from kakeibo.database.base import Database
from kakeibo.domain.category import CategoryService
from kakeibo.domain.ledger import LedgerService
from kakeibo.utils.date_parser import days_between, months_between

UNKNOWN_CATEGORY = "Unknown"


@dataclass(frozen=True)
class MonthTotal:
    """Income and expense totals of one month."""

    month: str
    income: int
    expense: int


@dataclass(frozen=True)
class DayTotal:
    """Expense total of one day."""

    date: str
    expense: int


@dataclass(frozen=True)
class PeriodSummary:
    """Aggregates of a date range."""

    start_date: str
    end_date: str
    total_expense: int
    total_income: int
    fixed_expense: int
    variable_expense: int
    by_category: dict[str, int]
    monthly: list[MonthTotal]
    daily: list[DayTotal]

    @property
    def balance(self) -> int:
        return self.total_income - self.total_expense


class SummaryService:
    """Service for computing totals over a period."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger_service = LedgerService(db)
        self.category_service = CategoryService(db)

    def period_summary(self, start_date: str, end_date: str) -> PeriodSummary:
        """Summarize non-deleted expenses and incomes of an inclusive range.

        Args:
            start_date: Inclusive start (YYYY-MM-DD)
            end_date: Inclusive end (YYYY-MM-DD)

        Returns:
            PeriodSummary. Category totals are keyed by major category name
            (``Unknown`` for missing categories) and sorted by amount,
            largest first. Monthly totals cover every month the range
            touches; daily totals cover every day of the range.
        """
        expenses = self.ledger_service.period_expenses(start_date, end_date)
        incomes = self.ledger_service.period_incomes(start_date, end_date)
        majors = {c.id: c.major_name for c in self.category_service.list_categories()}

        by_category: dict[str, int] = defaultdict(int)
        monthly_expense: dict[str, int] = defaultdict(int)
        monthly_income: dict[str, int] = defaultdict(int)
        daily_expense: dict[str, int] = defaultdict(int)
        fixed_expense = 0

        for expense in expenses:
            by_category[majors.get(expense.category_id, UNKNOWN_CATEGORY)] += expense.amount
            monthly_expense[expense.date[:7]] += expense.amount
            daily_expense[expense.date] += expense.amount
            if expense.is_fixed:
                fixed_expense += expense.amount

        for income in incomes:
            monthly_income[income.date[:7]] += income.amount

        total_expense = sum(e.amount for e in expenses)
        return PeriodSummary(
            start_date=start_date,
            end_date=end_date,
            total_expense=total_expense,
            total_income=sum(i.amount for i in incomes),
            fixed_expense=fixed_expense,
            variable_expense=total_expense - fixed_expense,
            by_category=dict(
                sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
            ),
            monthly=[
                MonthTotal(month=m, income=monthly_income[m], expense=monthly_expense[m])
                for m in months_between(start_date, end_date)
            ],
            daily=[
                DayTotal(date=d, expense=daily_expense[d])
                for d in days_between(start_date, end_date)
            ],
        )
