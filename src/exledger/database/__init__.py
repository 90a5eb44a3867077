"""Persistence for exchanges, credit, expenses and cash days.

Services depend only on the abstract ``Database``; ``SQLAlchemyDatabase`` is
the one implementation.
"""

# The domain services import database.base, so the domain package has to
# finish loading before base starts importing its entities.
import exledger.domain  # noqa: F401
from exledger.database.base import Database
from exledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
