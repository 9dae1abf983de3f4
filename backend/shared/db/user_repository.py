"""SQLite-backed user repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

import structlog

from shared.auth.models import User
from shared.dal.user_repository import UserRepository
from shared.db.connection import StorageError

if TYPE_CHECKING:
    from datetime import datetime

    from shared.db.connection import Database

logger = structlog.get_logger()

_TOP_PLAYERS_SQL = """\
SELECT data FROM users
WHERE json_extract(data, '$.games_played') > 0
ORDER BY
    CAST(json_extract(data, '$.games_won') AS REAL) / json_extract(data, '$.games_played') DESC,
    json_extract(data, '$.games_won') DESC,
    rowid
LIMIT ?
"""


class SqliteUserRepository(UserRepository):
    """SQLite implementation of UserRepository.

    Stores the full user record as JSON next to an indexed email column.
    Writes run under an asyncio lock; uniqueness relies on the database
    constraint and IntegrityError is mapped to a domain ValueError.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_user(self, user: User) -> None:
        """Insert a user. Raises ValueError on duplicate id or email."""
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    conn.execute(
                        "INSERT INTO users (id, email, data) VALUES (?, ?, ?)",
                        (user.user_id, user.email, user.model_dump_json()),
                    )
            except sqlite3.IntegrityError as exc:
                error_msg = str(exc).lower()
                if "users.email" in error_msg or "idx_users_email" in error_msg:
                    raise ValueError("User already exists with this email") from exc
                if "users.id" in error_msg:
                    raise ValueError(f"User with id '{user.user_id}' already exists") from exc
                raise ValueError(str(exc)) from exc  # pragma: no cover
            except sqlite3.Error as exc:
                raise StorageError("Failed to create user") from exc

    async def get_by_id(self, user_id: str) -> User | None:
        return self._fetch_one("SELECT data FROM users WHERE id = ?", (user_id,))

    async def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive)."""
        return self._fetch_one("SELECT data FROM users WHERE email = ? COLLATE NOCASE", (email,))

    async def top_players(self, limit: int) -> list[User]:
        """Order by win rate, then games won; ties keep registration order."""
        try:
            rows = self._db.connection.execute(_TOP_PLAYERS_SQL, (limit,)).fetchall()
        except sqlite3.Error as exc:
            raise StorageError("Failed to read leaderboard") from exc
        return [User.model_validate(json.loads(row[0])) for row in rows]

    async def record_login(self, user_id: str, at: datetime) -> User | None:
        """Stamp last_login and return the updated user."""
        return await self._patch(user_id, "json_set(data, '$.last_login', ?)", (at.isoformat(),))

    async def update_profile(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        avatar: str | None = None,
    ) -> User | None:
        """Update display fields. Fields left as None are not changed."""
        assignments: list[str] = []
        params: list[str] = []
        if full_name is not None:
            assignments.append("'$.full_name', ?")
            params.append(full_name)
        if avatar is not None:
            assignments.append("'$.avatar', ?")
            params.append(avatar)
        if not assignments:
            return await self.get_by_id(user_id)
        return await self._patch(user_id, f"json_set(data, {', '.join(assignments)})", tuple(params))

    async def _patch(self, user_id: str, data_expr: str, params: tuple[str, ...]) -> User | None:
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    cursor = conn.execute(f"UPDATE users SET data = {data_expr} WHERE id = ?", (*params, user_id))  # noqa: S608
            except sqlite3.Error as exc:
                raise StorageError("Failed to update user") from exc
        if cursor.rowcount == 0:
            logger.warning("user update had no effect (not found)", user_id=user_id)
            return None
        return await self.get_by_id(user_id)

    def _fetch_one(self, sql: str, params: tuple[str, ...]) -> User | None:
        try:
            row = self._db.connection.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StorageError("Failed to read user") from exc
        if row is None:
            return None
        return User.model_validate(json.loads(row[0]))
