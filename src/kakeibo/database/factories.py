"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from kakeibo.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV = "KAKEIBO_DB_PATH"
DEFAULT_DB_PATH = Path("~/.kakeibo/kakeibo.db")


def database_url_for(database_path: str) -> str:
    """SQLAlchemy URL for a file path; values that already are URLs pass through."""
    if "://" in database_path:
        return database_path
    path = Path(database_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance, SQLite unless a URL says otherwise.

    Args:
        database_path: Path to the SQLite database file, or a SQLAlchemy URL
            such as ``sqlite://`` for an in-memory database. If None, checks
            the KAKEIBO_DB_PATH environment variable, then defaults to
            ~/.kakeibo/kakeibo.db. Missing parent directories are created.

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV) or str(DEFAULT_DB_PATH)

    database_url = database_url_for(database_path)
    logger.debug("Using database %s", database_url)
    return SQLAlchemyDatabase(database_url)
