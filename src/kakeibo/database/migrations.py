"""Versioned schema migration.

The schema version lives in the ``schema_meta`` table. A database that has
ledger tables but no version record predates versioning and is treated as
version 1 (expenses without the fixed-cost columns, no income or fixed-cost
tables).

Version history:
    1: expenses, categories, payment_methods
    2: incomes, income_sources, fixed_costs, category_mappings;
       expenses.is_fixed and expenses.fixed_cost_id
"""

import logging
from typing import Any, Optional

from sqlalchemy import inspect, select, text, update, insert
from sqlalchemy.engine import Connection

from kakeibo.database.models import Base, SchemaMeta

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
VERSION_KEY = "schema_version"

# version -> table -> column -> value for rows that predate the column
BACKFILL_DEFAULTS: dict[int, dict[str, dict[str, Any]]] = {
    2: {"expenses": {"is_fixed": False}},
}


def column_exists(connection: Connection, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table."""
    inspector = inspect(connection)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def has_version_record(connection: Connection) -> bool:
    """Return True once a schema version has been written."""
    if SchemaMeta.__tablename__ not in inspect(connection).get_table_names():
        return False
    return connection.execute(
        select(SchemaMeta.value).where(SchemaMeta.key == VERSION_KEY)
    ).first() is not None


def get_schema_version(connection: Connection) -> Optional[int]:
    """Return the recorded schema version.

    Returns:
        The stored version, 1 for an unversioned database that already has
        ledger tables, or None for an empty database
    """
    table_names = set(inspect(connection).get_table_names())
    if SchemaMeta.__tablename__ in table_names:
        value = connection.execute(
            select(SchemaMeta.value).where(SchemaMeta.key == VERSION_KEY)
        ).scalar_one_or_none()
        if value is not None:
            return int(value)
    if "expenses" in table_names:
        return 1
    return None


def _set_schema_version(connection: Connection, version: int) -> None:
    meta = SchemaMeta.__table__
    exists = connection.execute(
        select(meta.c.key).where(meta.c.key == VERSION_KEY)
    ).first()
    if exists is None:
        connection.execute(insert(meta).values(key=VERSION_KEY, value=str(version)))
    else:
        connection.execute(
            update(meta).where(meta.c.key == VERSION_KEY).values(value=str(version))
        )


def _add_missing_columns(connection: Connection) -> list[str]:
    """Add columns defined on the models but missing from existing tables.

    Added columns are nullable; existing rows get NULL until backfilled.
    """
    added = []
    for table in Base.metadata.sorted_tables:
        for column in table.columns:
            if column_exists(connection, table.name, column.name):
                continue
            column_type = column.type.compile(dialect=connection.dialect)
            connection.execute(
                text(f"ALTER TABLE {table.name} ADD COLUMN {column.name} {column_type}")
            )
            added.append(f"{table.name}.{column.name}")
            logger.info("Added column %s.%s", table.name, column.name)
    return added


def _create_missing_indexes(connection: Connection) -> None:
    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            index.create(connection, checkfirst=True)


def _backfill(connection: Connection, from_version: int) -> None:
    for version in range(from_version + 1, SCHEMA_VERSION + 1):
        for table_name, defaults in BACKFILL_DEFAULTS.get(version, {}).items():
            table = Base.metadata.tables[table_name]
            for column_name, value in defaults.items():
                column = table.c[column_name]
                result = connection.execute(
                    update(table).where(column.is_(None)).values({column_name: value})
                )
                logger.info(
                    "Backfilled %s.%s=%r on %d rows", table_name, column_name, value, result.rowcount
                )


def upgrade_schema(connection: Connection) -> Optional[int]:
    """Bring the schema up to ``SCHEMA_VERSION``.

    Creates missing tables, columns and indexes and backfills rows that
    predate newly introduced fields. Safe to run repeatedly. The caller owns
    the transaction.

    Returns:
        The version found before upgrading, or None if the database was empty
    """
    previous = get_schema_version(connection)
    if previous is not None and previous > SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {previous} is newer than supported version {SCHEMA_VERSION}"
        )

    Base.metadata.create_all(connection)
    if previous is not None and previous < SCHEMA_VERSION:
        logger.info("Migrating schema from version %d to %d", previous, SCHEMA_VERSION)
        _add_missing_columns(connection)
        _create_missing_indexes(connection)
        _backfill(connection, previous)

    _set_schema_version(connection, SCHEMA_VERSION)
    return previous
