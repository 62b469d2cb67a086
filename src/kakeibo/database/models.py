"""SQLAlchemy models for the kakeibo database.

References between tables (``category_id``, ``payment_method_id``,
``source_id``, ``fixed_cost_id``) are soft: there are no foreign-key
constraints, integrity is kept by the domain services.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def _utcnow() -> datetime:
    # Naive UTC, matching what SQLite returns
    return datetime.now(UTC).replace(tzinfo=None)


class Expense(Base):
    """Expense record model."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True)
    date = Column(String(10), nullable=False, index=True)
    category_id = Column(String(36), nullable=False, index=True)
    payment_method_id = Column(String(36), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    description = Column(String, nullable=False, default="")
    rating = Column(String(1), nullable=True)
    memo = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)
    deleted = Column(Boolean, default=False, nullable=False, index=True)
    # Added in schema version 2; rows from version 1 are backfilled by migration
    is_fixed = Column(Boolean, default=False, index=True)
    fixed_cost_id = Column(String(36), nullable=True, index=True)


class Income(Base):
    """Income record model."""

    __tablename__ = "incomes"

    id = Column(String(36), primary_key=True)
    date = Column(String(10), nullable=False, index=True)
    source_id = Column(String(36), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    memo = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)
    deleted = Column(Boolean, default=False, nullable=False, index=True)


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True)
    major_name = Column(String, nullable=False)
    minor_name = Column(String, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class PaymentMethod(Base):
    """Payment method model."""

    __tablename__ = "payment_methods"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class IncomeSource(Base):
    """Income source model."""

    __tablename__ = "income_sources"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class FixedCost(Base):
    """Fixed cost template model."""

    __tablename__ = "fixed_costs"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    category_id = Column(String(36), nullable=False, index=True)
    payment_method_id = Column(String(36), nullable=False)
    amount = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class CategoryMapping(Base):
    """CSV category label to category mapping model."""

    __tablename__ = "category_mappings"

    id = Column(String(36), primary_key=True)
    csv_category = Column(String, nullable=False, unique=True, index=True)
    category_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class SchemaMeta(Base):
    """Key/value store for schema bookkeeping (e.g. the schema version)."""

    __tablename__ = "schema_meta"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)


def _begin_immediate(engine: Engine) -> None:
    """Open SQLite transactions with ``BEGIN IMMEDIATE``.

    The write lock is taken at BEGIN rather than at the first write, so
    other connections (other processes included) wait until a
    read-then-write transaction has committed.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine.

    SQLite connections may be used from several threads; access is
    serialized by the database lock within a process and by SQLite's write
    lock across processes.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)

    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory databases live as long as their single connection
        engine = create_engine(
            database_url, echo=False, connect_args=connect_args, poolclass=StaticPool
        )
    else:
        engine = create_engine(database_url, echo=False, connect_args=connect_args)
    _begin_immediate(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    return sessionmaker(bind=engine)
