"""SQLite database layer: connection management and repository implementations."""

from shared.db.connection import Database, StorageError
from shared.db.user_repository import SqliteUserRepository

__all__ = [
    "Database",
    "SqliteUserRepository",
    "StorageError",
]
