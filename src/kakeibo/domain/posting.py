"""Monthly fixed cost posting.

Each active fixed cost turns into one expense dated the first of the month.
Posting is guarded at the month level: once any fixed-cost expense exists in
a month, nothing more is posted for that month. A fixed cost added after the
month's posting therefore first appears the following month.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from kakeibo.database.base import Database
from kakeibo.domain.entities import Table
from kakeibo.domain.errors import ValidationError, invalid_year_month
from kakeibo.domain.fixed_cost import FixedCostService
from kakeibo.domain.ledger import LedgerService
from kakeibo.utils.date_parser import current_year_month, validate_year_month

logger = logging.getLogger(__name__)

FIXED_COST_MEMO = "固定費自動計上"


@dataclass(frozen=True)
class PostingResult:
    """Outcome of the startup auto-post."""

    posted: int
    already_posted: bool


class FixedCostPostingService:
    """Service that materializes fixed costs into monthly expenses."""

    def __init__(self, db: Database):
        """Initialize posting service.

        Args:
            db: Database instance
        """
        self.db = db
        self.fixed_cost_service = FixedCostService(db)
        self.ledger_service = LedgerService(db)

    def _check_month(self, year_month: str) -> str:
        try:
            return validate_year_month(year_month)
        except ValueError:
            raise ValidationError(invalid_year_month(year_month))

    def _posted_count(self, year_month: str) -> int:
        return self.db.count(
            Table.EXPENSES,
            predicate=lambda e: e.date.startswith(year_month),
            is_fixed=True,
            deleted=False,
        )

    def has_posted_for_month(self, year_month: str) -> bool:
        """Check whether fixed costs were already posted for a month.

        Args:
            year_month: Month in YYYY-MM form
        """
        return self._posted_count(self._check_month(year_month)) > 0

    def post_for_month(self, year_month: str) -> int:
        """Post every active fixed cost for a month, at most once.

        The existence check and the insert share one storage transaction, so
        concurrent calls cannot both post.

        Args:
            year_month: Month in YYYY-MM form

        Returns:
            Number of expenses created (0 if already posted or nothing to post)
        """
        year_month = self._check_month(year_month)

        with self.db.transaction():
            if self._posted_count(year_month) > 0:
                logger.debug("Fixed costs already posted for %s", year_month)
                return 0

            fixed_costs = self.fixed_cost_service.list_active_fixed_costs()
            if not fixed_costs:
                return 0

            first_of_month = f"{year_month}-01"
            posted = self.ledger_service.bulk_add_expenses(
                {
                    "date": first_of_month,
                    "category_id": fc.category_id,
                    "payment_method_id": fc.payment_method_id,
                    "amount": fc.amount,
                    "description": fc.name,
                    "rating": None,
                    "memo": FIXED_COST_MEMO,
                    "is_fixed": True,
                    "fixed_cost_id": fc.id,
                }
                for fc in fixed_costs
            )

        logger.info("Posted %d fixed costs for %s", len(posted), year_month)
        return len(posted)

    def auto_post_current_month(self, today: Optional[date] = None) -> PostingResult:
        """Post fixed costs for the current month; run once at startup."""
        posted = self.post_for_month(current_year_month(today))
        return PostingResult(posted=posted, already_posted=posted == 0)
