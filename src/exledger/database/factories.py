"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from exledger.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DB_DIR = Path.home() / ".exledger"
MEMORY = ":memory:"


def sqlite_url(database_path: str) -> str:
    """Return the SQLAlchemy URL for a SQLite file (or ``:memory:``)."""
    if database_path == MEMORY:
        return "sqlite://"
    return f"sqlite:///{database_path}"


def create_database(database_url: str) -> SQLAlchemyDatabase:
    """Create a database for any SQLAlchemy URL, e.g. a shop's shared server."""
    return SQLAlchemyDatabase(database_url)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to the SQLite file, or ``:memory:``. If None, checks
            the EXLEDGER_DB_PATH environment variable, then defaults to
            ~/.exledger/exledger.db (the directory is created on demand)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("EXLEDGER_DB_PATH")

    if database_path is None:
        DEFAULT_DB_DIR.mkdir(parents=True, exist_ok=True)
        database_path = str(DEFAULT_DB_DIR / "exledger.db")

    return create_database(sqlite_url(database_path))
