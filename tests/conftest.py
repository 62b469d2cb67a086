"""Shared pytest fixtures for kakeibo tests."""

import logging
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from kakeibo.database.factories import create_sqlite_database
from kakeibo.domain.category import CategoryService
from kakeibo.domain.csv_import import CSVImportService
from kakeibo.domain.fixed_cost import FixedCostService
from kakeibo.domain.income_source import IncomeSourceService
from kakeibo.domain.ledger import LedgerService
from kakeibo.domain.payment_method import PaymentMethodService
from kakeibo.domain.posting import FixedCostPostingService


class TickingClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    """Deterministic, strictly increasing timestamps."""
    return TickingClock()


@pytest.fixture
def temp_db(clock):
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.clock = clock
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def reset_kakeibo_logger():
    """Undo logging configuration done by CLI invocations."""
    yield
    logger = logging.getLogger("kakeibo")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def payment_method_service(temp_db):
    """Create a PaymentMethodService with a temporary database."""
    return PaymentMethodService(temp_db)


@pytest.fixture
def income_source_service(temp_db):
    """Create an IncomeSourceService with a temporary database."""
    return IncomeSourceService(temp_db)


@pytest.fixture
def fixed_cost_service(temp_db):
    """Create a FixedCostService with a temporary database."""
    return FixedCostService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def posting_service(temp_db):
    """Create a FixedCostPostingService with a temporary database."""
    return FixedCostPostingService(temp_db)


@pytest.fixture
def csv_import_service(temp_db):
    """Create a CSVImportService with a temporary database."""
    return CSVImportService(temp_db)


@pytest.fixture
def food(category_service):
    """The seeded 食費 > 外食 category."""
    return category_service.find_by_label("食費 > 外食")


@pytest.fixture
def cash(payment_method_service):
    """The seeded 現金 payment method."""
    return next(m for m in payment_method_service.list_payment_methods() if m.name == "現金")


@pytest.fixture
def salary(income_source_service):
    """The seeded 給与 income source."""
    return next(s for s in income_source_service.list_income_sources() if s.name == "給与")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def tmp_csv(tmp_path):
    """Write CSV text to a file and return its path."""

    def write(content: str, name: str = "import.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return write
