"""SQLite implementation of the game repository."""

from duel.db.game_repository import SqliteGameRepository

__all__ = [
    "SqliteGameRepository",
]
