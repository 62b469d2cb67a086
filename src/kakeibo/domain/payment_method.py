"""Payment method domain service."""

from typing import Optional, Sequence

from kakeibo.domain.entities import DeleteResult, PaymentMethod, Table
from kakeibo.domain.reference import SortableReferenceService
from kakeibo.domain.validators import require_text

# Preferred default for imported rows, in order; seeded names first
CASH_NAMES = ("現金", "cash")
UNSET_NAMES = ("未設定", "unset")


def select_default_payment_method(
    methods: Sequence[PaymentMethod],
) -> Optional[PaymentMethod]:
    """Pick the payment method assigned to imported expenses.

    Prefers a method named cash, then one named unset, then the first one.

    Args:
        methods: Active payment methods in display order
    """
    for names in (CASH_NAMES, UNSET_NAMES):
        for method in methods:
            if method.name in names:
                return method
    return methods[0] if methods else None


class PaymentMethodService(SortableReferenceService):
    """Service for managing payment methods."""

    table = Table.PAYMENT_METHODS
    usage_table = Table.EXPENSES
    usage_field = "payment_method_id"
    updatable_fields = ("name", "sort_order", "is_active")

    def add_payment_method(self, name: str) -> PaymentMethod:
        """Create a payment method at the end of the manual order.

        Raises:
            ValidationError: If name is empty
        """
        return self._add({"name": require_text("name", name)})

    def get_payment_method(self, method_id: str) -> Optional[PaymentMethod]:
        """Get payment method by ID."""
        return self._get(method_id)

    def update_payment_method(self, method_id: str, **fields) -> PaymentMethod:
        """Update payment method fields (name, sort_order, is_active)."""
        if "name" in fields:
            fields["name"] = require_text("name", fields["name"])
        return self._update(method_id, fields)

    def delete_payment_method(self, method_id: str) -> DeleteResult:
        """Hide the method if any expense uses it, otherwise remove it."""
        return self._delete(method_id)

    def list_payment_methods(self) -> list[PaymentMethod]:
        """All payment methods ordered by sort_order."""
        return self._list()

    def list_active_payment_methods(self) -> list[PaymentMethod]:
        """Active payment methods ordered by sort_order."""
        return self._list_active()

    def move_payment_method(self, method_id: str, direction: str) -> bool:
        """Move a payment method one place up or down in the active order."""
        return self._move(method_id, direction)

    def default_payment_method(self) -> Optional[PaymentMethod]:
        """Default method for imports among the active methods."""
        return select_default_payment_method(self.list_active_payment_methods())
