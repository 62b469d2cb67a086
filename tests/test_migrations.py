"""Tests for schema versioning, migration and first-run seeding."""

import os
import tempfile

import pytest
from sqlalchemy import create_engine, text

from kakeibo.database.factories import create_sqlite_database
from kakeibo.database.migrations import SCHEMA_VERSION, column_exists, get_schema_version
from kakeibo.database.seed import (
    DEFAULT_CATEGORIES,
    DEFAULT_INCOME_SOURCES,
    DEFAULT_PAYMENT_METHODS,
)
from kakeibo.domain.category import CategoryService
from kakeibo.domain.entities import Table
from kakeibo.domain.income_source import IncomeSourceService
from kakeibo.domain.payment_method import PaymentMethodService

VERSION_1_SCHEMA = [
    """CREATE TABLE expenses (
        id VARCHAR(36) PRIMARY KEY,
        date VARCHAR(10) NOT NULL,
        category_id VARCHAR(36) NOT NULL,
        payment_method_id VARCHAR(36) NOT NULL,
        amount INTEGER NOT NULL,
        description VARCHAR NOT NULL,
        rating VARCHAR(1),
        memo VARCHAR NOT NULL,
        created_at DATETIME NOT NULL,
        updated_at DATETIME NOT NULL,
        deleted BOOLEAN NOT NULL
    )""",
    """CREATE TABLE categories (
        id VARCHAR(36) PRIMARY KEY,
        major_name VARCHAR NOT NULL,
        minor_name VARCHAR,
        sort_order INTEGER NOT NULL,
        is_active BOOLEAN NOT NULL,
        created_at DATETIME NOT NULL,
        updated_at DATETIME NOT NULL
    )""",
    """CREATE TABLE payment_methods (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        is_active BOOLEAN NOT NULL,
        created_at DATETIME NOT NULL,
        updated_at DATETIME NOT NULL
    )""",
]


@pytest.fixture
def legacy_db_path():
    """A database file laid out as schema version 1, with one expense."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    engine = create_engine(f"sqlite:///{db_path}")
    stamp = "2024-01-01 00:00:00.000000"
    with engine.begin() as connection:
        for statement in VERSION_1_SCHEMA:
            connection.execute(text(statement))
        connection.execute(
            text(
                "INSERT INTO categories VALUES "
                "('cat-1', '自作', NULL, 0, 1, :stamp, :stamp)"
            ),
            {"stamp": stamp},
        )
        connection.execute(
            text(
                "INSERT INTO payment_methods VALUES "
                "('pm-1', '財布', 0, 1, :stamp, :stamp)"
            ),
            {"stamp": stamp},
        )
        connection.execute(
            text(
                "INSERT INTO expenses VALUES "
                "('exp-1', '2024-01-05', 'cat-1', 'pm-1', 500, 'パン', NULL, '', :stamp, :stamp, 0)"
            ),
            {"stamp": stamp},
        )
    engine.dispose()

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


class TestFreshDatabase:
    """Tests for a newly created database."""

    def test_schema_version_recorded(self, temp_db):
        """Test that a fresh database is stamped with the current version."""
        with temp_db.engine.connect() as connection:
            assert get_schema_version(connection) == SCHEMA_VERSION

    def test_defaults_seeded(self, category_service, payment_method_service, income_source_service):
        """Test the default reference data of a fresh database."""
        expected_categories = sum(len(minors) or 1 for _, minors in DEFAULT_CATEGORIES)
        categories = category_service.list_categories()

        assert len(categories) == expected_categories
        assert categories[0].label == "食費 > 外食"
        assert categories[-1].label == "その他"
        assert [c.sort_order for c in categories] == list(range(expected_categories))
        assert [m.name for m in payment_method_service.list_payment_methods()] == DEFAULT_PAYMENT_METHODS
        assert [s.name for s in income_source_service.list_income_sources()] == DEFAULT_INCOME_SOURCES

    def test_initialize_twice_does_not_reseed(self, temp_db, category_service):
        """Test that seeding only happens on first initialization."""
        for category in category_service.list_categories():
            temp_db.delete(Table.CATEGORIES, category.id)

        assert temp_db.initialize_schema() == SCHEMA_VERSION
        assert category_service.list_categories() == []

    def test_initialize_returns_none_for_empty_database(self):
        """Test the reported previous version of an empty database."""
        db = create_sqlite_database(database_path=":memory:")
        assert db.initialize_schema() is None
        db.disconnect()


class TestLegacyMigration:
    """Tests for upgrading a version 1 database."""

    def test_unversioned_database_is_version_1(self, legacy_db_path):
        """Test version detection without a version record."""
        engine = create_engine(f"sqlite:///{legacy_db_path}")
        with engine.connect() as connection:
            assert get_schema_version(connection) == 1
        engine.dispose()

    def test_upgrade_adds_columns_tables_and_backfills(self, legacy_db_path):
        """Test the version 1 to 2 upgrade."""
        db = create_sqlite_database(database_path=legacy_db_path)
        assert db.initialize_schema() == 1

        with db.engine.connect() as connection:
            assert column_exists(connection, "expenses", "is_fixed")
            assert column_exists(connection, "expenses", "fixed_cost_id")
            assert get_schema_version(connection) == SCHEMA_VERSION

        expense = db.get(Table.EXPENSES, "exp-1")
        assert expense.is_fixed is False
        assert expense.fixed_cost_id is None
        assert expense.amount == 500
        assert expense.description == "パン"
        db.disconnect()

    def test_upgrade_seeds_only_empty_tables(self, legacy_db_path):
        """Test that existing reference data is kept as is."""
        db = create_sqlite_database(database_path=legacy_db_path)
        db.initialize_schema()

        assert [c.label for c in CategoryService(db).list_categories()] == ["自作"]
        assert [m.name for m in PaymentMethodService(db).list_payment_methods()] == ["財布"]
        assert [s.name for s in IncomeSourceService(db).list_income_sources()] == DEFAULT_INCOME_SOURCES
        db.disconnect()

    def test_upgrade_is_idempotent(self, legacy_db_path):
        """Test that running the upgrade again changes nothing."""
        db = create_sqlite_database(database_path=legacy_db_path)
        db.initialize_schema()
        before = db.get(Table.EXPENSES, "exp-1")

        assert db.initialize_schema() == SCHEMA_VERSION
        assert db.get(Table.EXPENSES, "exp-1") == before
        assert len(IncomeSourceService(db).list_income_sources()) == len(DEFAULT_INCOME_SOURCES)
        db.disconnect()
