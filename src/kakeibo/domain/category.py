"""Category domain service."""

from typing import Optional

from kakeibo.domain.entities import Category, DeleteResult, Table
from kakeibo.domain.reference import SortableReferenceService
from kakeibo.domain.validators import require_text


class CategoryService(SortableReferenceService):
    """Service for managing expense categories."""

    table = Table.CATEGORIES
    usage_table = Table.EXPENSES
    usage_field = "category_id"
    updatable_fields = ("major_name", "minor_name", "sort_order", "is_active")

    def add_category(self, major_name: str, minor_name: Optional[str] = None) -> Category:
        """Create a category at the end of the manual order.

        Args:
            major_name: Major category name (required)
            minor_name: Optional refinement; blank means none

        Returns:
            The created category

        Raises:
            ValidationError: If major_name is empty
        """
        major_name = require_text("major_name", major_name)
        minor_name = minor_name.strip() if minor_name and minor_name.strip() else None
        return self._add({"major_name": major_name, "minor_name": minor_name})

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        return self._get(category_id)

    def update_category(self, category_id: str, **fields) -> Category:
        """Update category fields (major_name, minor_name, sort_order, is_active).

        Raises:
            ValidationError: If a field is unknown or major_name is emptied
            NotFoundError: If the category doesn't exist
        """
        if "major_name" in fields:
            fields["major_name"] = require_text("major_name", fields["major_name"])
        if "minor_name" in fields:
            minor = fields["minor_name"]
            fields["minor_name"] = minor.strip() if minor and minor.strip() else None
        return self._update(category_id, fields)

    def delete_category(self, category_id: str) -> DeleteResult:
        """Hide the category if any expense uses it, otherwise remove it."""
        return self._delete(category_id)

    def list_categories(self) -> list[Category]:
        """All categories ordered by sort_order (management view)."""
        return self._list()

    def list_active_categories(self) -> list[Category]:
        """Active categories ordered by sort_order (selection view)."""
        return self._list_active()

    def move_category(self, category_id: str, direction: str) -> bool:
        """Move a category one place up or down in the active order."""
        return self._move(category_id, direction)

    def find_by_label(self, label: str) -> Optional[Category]:
        """Find an active category whose label equals ``label``.

        Args:
            label: ``"major"`` or ``"major > minor"``
        """
        label = label.strip()
        for category in self.list_active_categories():
            if category.label == label:
                return category
        return None
