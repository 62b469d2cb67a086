"""Shared behaviour of reference data (categories, payment methods, ...).

Reference rows are never destroyed while ledger rows point at them: a
delete of a referenced row only hides it (``is_active = False``).
"""

import logging
from typing import Any

from kakeibo.database.base import Database
from kakeibo.domain.entities import DeleteResult, Table
from kakeibo.domain.errors import NotFoundError, ValidationError, record_not_found
from kakeibo.domain.validators import check_fields

logger = logging.getLogger(__name__)

MOVE_UP = "up"
MOVE_DOWN = "down"


def delete_reference(
    db: Database, table: Table, record_id: str, usage_table: Table, usage_field: str
) -> DeleteResult:
    """Hide a referenced row or physically remove an unreferenced one.

    Any row of ``usage_table`` pointing at the record counts as a use,
    including logically deleted ones.

    Raises:
        NotFoundError: If the record does not exist
    """
    with db.transaction():
        if db.get(table, record_id) is None:
            raise NotFoundError(record_not_found(table.value, record_id))

        used = db.count(usage_table, **{usage_field: record_id})
        if used > 0:
            db.update(table, record_id, {"is_active": False})
            logger.info(
                "Hid %s %s referenced by %d %s rows", table.value, record_id, used, usage_table.value
            )
            return DeleteResult.HIDDEN

        db.delete(table, record_id)
        logger.info("Removed unreferenced %s %s", table.value, record_id)
        return DeleteResult.REMOVED


class SortableReferenceService:
    """Base for manually ordered reference data.

    Subclasses set ``table``, the referencing ``usage_table``/``usage_field``
    and the fields callers may update.
    """

    table: Table
    usage_table: Table
    usage_field: str
    updatable_fields: tuple[str, ...] = ("sort_order", "is_active")

    def __init__(self, db: Database):
        """Initialize service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get(self, record_id: str) -> Any:
        return self.db.get(self.table, record_id)

    def _add(self, fields: dict[str, Any]) -> Any:
        """Append a row after the current last ``sort_order``."""
        with self.db.transaction():
            ordered = self.db.order_by(self.table, "sort_order", descending=True)
            sort_order = ordered[0].sort_order + 1 if ordered else 0
            return self.db.add(
                self.table, {**fields, "sort_order": sort_order, "is_active": True}
            )

    def _update(self, record_id: str, fields: dict[str, Any]) -> Any:
        check_fields(self.table.value, fields, self.updatable_fields)
        return self.db.update(self.table, record_id, fields)

    def _delete(self, record_id: str) -> DeleteResult:
        return delete_reference(self.db, self.table, record_id, self.usage_table, self.usage_field)

    def _list(self) -> list[Any]:
        return self.db.order_by(self.table, "sort_order")

    def _list_active(self) -> list[Any]:
        return [item for item in self._list() if item.is_active]

    def _move(self, record_id: str, direction: str) -> bool:
        """Swap ``sort_order`` with the neighbour in the active ordered list.

        Returns:
            True if two rows were swapped; False for boundary moves and for
            rows not in the active list
        """
        if direction not in (MOVE_UP, MOVE_DOWN):
            raise ValidationError(f"Invalid direction '{direction}': expected 'up' or 'down'")

        with self.db.transaction():
            items = self._list_active()
            positions = [item.id for item in items]
            if record_id not in positions:
                if self._get(record_id) is None:
                    raise NotFoundError(record_not_found(self.table.value, record_id))
                return False

            index = positions.index(record_id)
            target = index - 1 if direction == MOVE_UP else index + 1
            if target < 0 or target >= len(items):
                return False

            current, neighbour = items[index], items[target]
            self.db.update(self.table, current.id, {"sort_order": neighbour.sort_order})
            self.db.update(self.table, neighbour.id, {"sort_order": current.sort_order})
            return True
