"""Income source domain service."""

from typing import Optional

from kakeibo.domain.entities import DeleteResult, IncomeSource, Table
from kakeibo.domain.reference import SortableReferenceService
from kakeibo.domain.validators import require_text


class IncomeSourceService(SortableReferenceService):
    """Service for managing income sources."""

    table = Table.INCOME_SOURCES
    usage_table = Table.INCOMES
    usage_field = "source_id"
    updatable_fields = ("name", "sort_order", "is_active")

    def add_income_source(self, name: str) -> IncomeSource:
        """Create an income source at the end of the manual order.

        Raises:
            ValidationError: If name is empty
        """
        return self._add({"name": require_text("name", name)})

    def get_income_source(self, source_id: str) -> Optional[IncomeSource]:
        """Get income source by ID."""
        return self._get(source_id)

    def update_income_source(self, source_id: str, **fields) -> IncomeSource:
        """Update income source fields (name, sort_order, is_active)."""
        if "name" in fields:
            fields["name"] = require_text("name", fields["name"])
        return self._update(source_id, fields)

    def delete_income_source(self, source_id: str) -> DeleteResult:
        """Hide the source if any income uses it, otherwise remove it."""
        return self._delete(source_id)

    def list_income_sources(self) -> list[IncomeSource]:
        """All income sources ordered by sort_order."""
        return self._list()

    def list_active_income_sources(self) -> list[IncomeSource]:
        """Active income sources ordered by sort_order."""
        return self._list_active()

    def move_income_source(self, source_id: str, direction: str) -> bool:
        """Move an income source one place up or down in the active order."""
        return self._move(source_id, direction)
