"""Fixed cost domain service."""

from typing import Optional

from kakeibo.database.base import Database
from kakeibo.domain.entities import DeleteResult, FixedCost, Table
from kakeibo.domain.reference import delete_reference
from kakeibo.domain.validators import check_fields, require_amount, require_text

UPDATABLE_FIELDS = ("name", "category_id", "payment_method_id", "amount", "is_active")


class FixedCostService:
    """Service for managing monthly fixed cost templates."""

    def __init__(self, db: Database):
        """Initialize fixed cost service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_fixed_cost(
        self,
        name: str,
        category_id: str,
        payment_method_id: str,
        amount: int,
        is_active: bool = True,
    ) -> FixedCost:
        """Create a fixed cost template.

        Args:
            name: Name, used as the description of posted expenses
            category_id: Category of posted expenses
            payment_method_id: Payment method of posted expenses
            amount: Monthly amount (>= 0)
            is_active: Inactive templates are not posted

        Raises:
            ValidationError: If a required field is empty or amount is negative
        """
        return self.db.add(
            Table.FIXED_COSTS,
            {
                "name": require_text("name", name),
                "category_id": require_text("category_id", category_id),
                "payment_method_id": require_text("payment_method_id", payment_method_id),
                "amount": require_amount(amount),
                "is_active": is_active,
            },
        )

    def get_fixed_cost(self, fixed_cost_id: str) -> Optional[FixedCost]:
        """Get fixed cost by ID."""
        return self.db.get(Table.FIXED_COSTS, fixed_cost_id)

    def update_fixed_cost(self, fixed_cost_id: str, **fields) -> FixedCost:
        """Update fixed cost fields.

        Raises:
            ValidationError: If a field is unknown or invalid
            NotFoundError: If the fixed cost doesn't exist
        """
        check_fields(Table.FIXED_COSTS.value, fields, UPDATABLE_FIELDS)
        for field in ("name", "category_id", "payment_method_id"):
            if field in fields:
                fields[field] = require_text(field, fields[field])
        if "amount" in fields:
            require_amount(fields["amount"])
        return self.db.update(Table.FIXED_COSTS, fixed_cost_id, fields)

    def delete_fixed_cost(self, fixed_cost_id: str) -> DeleteResult:
        """Deactivate the fixed cost if it has posted expenses, otherwise remove it."""
        return delete_reference(
            self.db, Table.FIXED_COSTS, fixed_cost_id, Table.EXPENSES, "fixed_cost_id"
        )

    def list_fixed_costs(self) -> list[FixedCost]:
        """All fixed costs in creation order."""
        return self.db.order_by(Table.FIXED_COSTS, "created_at")

    def list_active_fixed_costs(self) -> list[FixedCost]:
        """Fixed costs that are posted each month."""
        return [fc for fc in self.list_fixed_costs() if fc.is_active]
