"""Generic SQLAlchemy database implementation."""

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, UTC
from typing import Any, Callable, Iterable, Iterator, Optional

from sqlalchemy.orm import Session

from kakeibo.database.base import Database
from kakeibo.database.mappers import TABLE_MAPPERS
from kakeibo.database.migrations import has_version_record, upgrade_schema
from kakeibo.database.models import create_db_engine, create_session_factory
from kakeibo.database.observers import ObserverRegistry, Subscription
from kakeibo.database.seed import seed_defaults
from kakeibo.domain.entities import Table
from kakeibo.domain.errors import (
    NotFoundError,
    ValidationError,
    immutable_field,
    record_not_found,
    unknown_field,
)

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "created_at")


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface.

    All access goes through one re-entrant lock. Each public call runs in its
    own session and commits on success; inside ``transaction()`` calls share
    a single session and commit together when the outermost block exits.
    Live query subscribers are notified after that commit, still under the
    lock, so they observe commits in order.
    """

    def __init__(self, database_url: str, clock: Optional[Callable[[], datetime]] = None):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
            clock: Returns the timestamp stamped on writes. Defaults to UTC now.
        """
        self.database_url = database_url
        self.clock = clock or (lambda: datetime.now(UTC))
        self.engine = create_db_engine(database_url)
        self.session_factory = create_session_factory(self.engine)
        self.observers = ObserverRegistry()
        self._lock = threading.RLock()
        self._session: Optional[Session] = None
        self._touched: set[Table] = set()

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        with self._lock:
            self.engine.dispose()

    def initialize_schema(self) -> Optional[int]:
        """Create or migrate the schema; seed defaults on first initialization."""
        with self._session_scope() as session:
            connection = session.connection()
            first_run = not has_version_record(connection)
            previous_version = upgrade_schema(connection)
            if first_run:
                seed_defaults(session, self._now())
                self._touched.update(
                    {Table.CATEGORIES, Table.PAYMENT_METHODS, Table.INCOME_SOURCES}
                )
            return previous_version

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed storage calls as one atomic, serialized unit."""
        with self._session_scope():
            yield

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Yield the active session, opening and committing one if needed."""
        with self._lock:
            if self._session is not None:
                yield self._session
                return

            session = self.session_factory()
            self._session = session
            try:
                yield session
                session.commit()
            except BaseException:
                session.rollback()
                self._touched.clear()
                raise
            finally:
                self._session = None
                session.close()

            touched, self._touched = self._touched, set()
            self.observers.notify(touched)

    def _now(self) -> datetime:
        """Current timestamp as naive UTC, the form SQLite hands back."""
        now = self.clock()
        if now.tzinfo is not None:
            now = now.astimezone(UTC).replace(tzinfo=None)
        return now

    def _model(self, table: Table):
        return TABLE_MAPPERS[Table(table)][0]

    def _to_domain(self, table: Table, row) -> Any:
        return TABLE_MAPPERS[Table(table)][1](row)

    def _column(self, table: Table, field: str):
        model = self._model(table)
        if field not in model.__table__.columns:
            raise ValidationError(unknown_field(Table(table).value, field))
        return getattr(model, field)

    def _new_row(self, table: Table, fields: dict[str, Any], now: datetime):
        model = self._model(table)
        for field in fields:
            if field not in model.__table__.columns:
                raise ValidationError(unknown_field(Table(table).value, field))
        values = dict(fields)
        values.setdefault("id", str(uuid.uuid4()))
        values.setdefault("created_at", now)
        values["updated_at"] = now
        return model(**values)

    # Single-record operations
    def get(self, table: Table, record_id: str) -> Optional[Any]:
        """Get record by ID."""
        with self._session_scope() as session:
            row = session.get(self._model(table), record_id)
            if row is None:
                return None
            return self._to_domain(table, row)

    def add(self, table: Table, fields: dict[str, Any]) -> Any:
        """Insert a record. Returns the stored entity."""
        with self._session_scope() as session:
            row = self._new_row(table, fields, self._now())
            session.add(row)
            session.flush()
            self._touched.add(Table(table))
            return self._to_domain(table, row)

    def update(self, table: Table, record_id: str, fields: dict[str, Any]) -> Any:
        """Merge fields into a record. Returns the updated entity."""
        for field in IMMUTABLE_FIELDS:
            if field in fields:
                raise ValidationError(immutable_field(field))
        with self._session_scope() as session:
            row = session.get(self._model(table), record_id)
            if row is None:
                raise NotFoundError(record_not_found(Table(table).value, record_id))
            for field, value in fields.items():
                self._column(table, field)
                setattr(row, field, value)
            row.updated_at = self._now()
            session.flush()
            self._touched.add(Table(table))
            return self._to_domain(table, row)

    def delete(self, table: Table, record_id: str) -> None:
        """Physically remove a record."""
        with self._session_scope() as session:
            row = session.get(self._model(table), record_id)
            if row is None:
                raise NotFoundError(record_not_found(Table(table).value, record_id))
            session.delete(row)
            session.flush()
            self._touched.add(Table(table))

    def bulk_add(self, table: Table, records: Iterable[dict[str, Any]]) -> list[Any]:
        """Insert many records in a single all-or-nothing write."""
        with self._session_scope() as session:
            now = self._now()
            rows = [self._new_row(table, fields, now) for fields in records]
            if not rows:
                return []
            session.add_all(rows)
            session.flush()
            self._touched.add(Table(table))
            return [self._to_domain(table, row) for row in rows]

    # Queries
    def where_between(self, table: Table, field: str, low: Any, high: Any) -> list[Any]:
        """Records with ``low <= field <= high``."""
        column = self._column(table, field)
        with self._session_scope() as session:
            rows = (
                session.query(self._model(table))
                .filter(column >= low, column <= high)
                .order_by(column)
                .all()
            )
            return [self._to_domain(table, row) for row in rows]

    def where_equals(self, table: Table, field: str, value: Any) -> list[Any]:
        """Records with ``field == value``."""
        column = self._column(table, field)
        with self._session_scope() as session:
            rows = session.query(self._model(table)).filter(column == value).all()
            return [self._to_domain(table, row) for row in rows]

    def where_prefix(self, table: Table, field: str, prefix: str) -> list[Any]:
        """Records whose string field starts with ``prefix``."""
        column = self._column(table, field)
        with self._session_scope() as session:
            rows = (
                session.query(self._model(table))
                .filter(column.startswith(prefix, autoescape=True))
                .order_by(column)
                .all()
            )
            return [self._to_domain(table, row) for row in rows]

    def order_by(self, table: Table, field: str, descending: bool = False) -> list[Any]:
        """All records ordered by a field."""
        column = self._column(table, field)
        with self._session_scope() as session:
            ordering = column.desc() if descending else column
            rows = session.query(self._model(table)).order_by(ordering).all()
            return [self._to_domain(table, row) for row in rows]

    def count(
        self,
        table: Table,
        predicate: Optional[Callable[[Any], bool]] = None,
        **equals: Any,
    ) -> int:
        """Count records matching field equalities and an optional predicate.

        Equalities are evaluated by the database; the predicate, when given,
        is applied to the matching domain entities.
        """
        filters = [self._column(table, field) == value for field, value in equals.items()]
        with self._session_scope() as session:
            query = session.query(self._model(table)).filter(*filters)
            if predicate is None:
                return query.count()
            return sum(1 for row in query.all() if predicate(self._to_domain(table, row)))

    # Reactive queries
    def subscribe(
        self,
        tables: Iterable[Table],
        query: Callable[[], Any],
        callback: Callable[[Any], None],
    ) -> Subscription:
        """Deliver ``query()`` now and after every commit touching ``tables``.

        An exception from the first delivery propagates and nothing is
        registered.
        """
        with self._lock:
            callback(query())
            return self.observers.add(tables, query, callback)
