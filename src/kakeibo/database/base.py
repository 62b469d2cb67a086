"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from kakeibo.domain.entities import Table
from kakeibo.database.observers import Subscription


class Database(ABC):
    """Abstract table-oriented storage interface for kakeibo.

    Records are passed in as plain field dicts and returned as frozen domain
    entities. Every write refreshes ``updated_at``; ``add`` and ``bulk_add``
    assign ``id`` and ``created_at`` when the caller leaves them out.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> Optional[int]:
        """Create tables, run pending migrations and seed a fresh database.

        Returns:
            The schema version found before upgrading, or None if the
            database was empty
        """
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Run the enclosed storage calls as one atomic, serialized unit."""
        pass

    # Single-record operations
    @abstractmethod
    def get(self, table: Table, record_id: str) -> Optional[Any]:
        """Get record by ID."""
        pass

    @abstractmethod
    def add(self, table: Table, fields: dict[str, Any]) -> Any:
        """Insert a record. Returns the stored entity."""
        pass

    @abstractmethod
    def update(self, table: Table, record_id: str, fields: dict[str, Any]) -> Any:
        """Merge fields into a record. Returns the updated entity."""
        pass

    @abstractmethod
    def delete(self, table: Table, record_id: str) -> None:
        """Physically remove a record."""
        pass

    @abstractmethod
    def bulk_add(self, table: Table, records: Iterable[dict[str, Any]]) -> list[Any]:
        """Insert many records in a single all-or-nothing write."""
        pass

    # Queries
    @abstractmethod
    def where_between(self, table: Table, field: str, low: Any, high: Any) -> list[Any]:
        """Records with ``low <= field <= high``."""
        pass

    @abstractmethod
    def where_equals(self, table: Table, field: str, value: Any) -> list[Any]:
        """Records with ``field == value``."""
        pass

    @abstractmethod
    def where_prefix(self, table: Table, field: str, prefix: str) -> list[Any]:
        """Records whose string field starts with ``prefix``."""
        pass

    @abstractmethod
    def order_by(self, table: Table, field: str, descending: bool = False) -> list[Any]:
        """All records ordered by a field."""
        pass

    @abstractmethod
    def count(
        self,
        table: Table,
        predicate: Optional[Callable[[Any], bool]] = None,
        **equals: Any,
    ) -> int:
        """Count records matching field equalities and an optional predicate."""
        pass

    # Reactive queries
    @abstractmethod
    def subscribe(
        self,
        tables: Iterable[Table],
        query: Callable[[], Any],
        callback: Callable[[Any], None],
    ) -> Subscription:
        """Deliver ``query()`` now and after every commit touching ``tables``."""
        pass
