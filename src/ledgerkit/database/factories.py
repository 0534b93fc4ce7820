"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgerkit.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "LEDGERKIT_DB_PATH"


def default_database_path() -> Path:
    """Return ~/.ledgerkit/ledgerkit.db, creating the directory if needed."""
    db_dir = Path.home() / ".ledgerkit"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "ledgerkit.db"


def resolve_database_url(database: Optional[str] = None) -> str:
    """Turn a file path or SQLAlchemy URL into a URL.

    Values containing ``://`` are taken as SQLAlchemy URLs as-is; anything
    else is a SQLite file path. ``None`` falls back to LEDGERKIT_DB_PATH and
    then to the default path.
    """
    if database is None:
        database = os.environ.get(DB_PATH_ENV) or str(default_database_path())
    if "://" in database:
        return database
    return f"sqlite:///{Path(database).expanduser()}"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance, SQLite unless a full URL is given.

    Args:
        database_path: SQLite file path or SQLAlchemy URL. If None, checks the
            LEDGERKIT_DB_PATH environment variable, then defaults to
            ~/.ledgerkit/ledgerkit.db

    Returns:
        SQLAlchemyDatabase instance
    """
    return SQLAlchemyDatabase(resolve_database_url(database_path))
