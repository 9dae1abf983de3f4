"""SQLite-backed game repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

import structlog

from duel.dal.game_repository import GameRepository, StaleGameError
from duel.dal.models import GameStatsSummary
from duel.logic.enums import GameStatus, Winner
from duel.logic.types import Game
from shared.db.connection import StorageError

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()

_ROLL_UP_USER_STATS_SQL = """\
UPDATE users SET data = json_set(data,
    '$.games_played', json_extract(data, '$.games_played') + 1,
    '$.games_won', json_extract(data, '$.games_won') + ?,
    '$.total_damage_dealt', json_extract(data, '$.total_damage_dealt') + ?,
    '$.total_damage_taken', json_extract(data, '$.total_damage_taken') + ?
)
WHERE id = ?
"""

_STATS_SUMMARY_SQL = """\
SELECT
    COUNT(*),
    COALESCE(SUM(json_extract(data, '$.winner') = ?), 0),
    COALESCE(SUM(json_extract(data, '$.winner') = ?), 0),
    COALESCE(SUM(json_extract(data, '$.winner') = ?), 0),
    COALESCE(SUM(json_extract(data, '$.total_damage_dealt')), 0),
    COALESCE(SUM(json_extract(data, '$.total_damage_taken')), 0),
    AVG(json_extract(data, '$.duration'))
FROM games
WHERE user_id = ?
"""


class SqliteGameRepository(GameRepository):
    """SQLite implementation of GameRepository.

    Stores full game snapshots as JSON with indexed columns for owner,
    status and version. Writes are serialized with an asyncio lock and
    guarded by a version check, so two concurrent submissions for the same
    game cannot both apply.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_game(self, game: Game) -> None:
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    conn.execute(
                        "INSERT INTO games (id, user_id, status, version, created_at, completed_at, data) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?)",
                        (
                            game.game_id,
                            game.user_id,
                            game.status.value,
                            game.version,
                            game.created_at.isoformat(),
                            game.completed_at.isoformat() if game.completed_at else None,
                            game.model_dump_json(),
                        ),
                    )
            except sqlite3.Error as exc:
                raise StorageError("Failed to create game") from exc

    async def get_game(self, game_id: str, user_id: str) -> Game | None:
        return self._fetch_one("SELECT data FROM games WHERE id = ? AND user_id = ?", (game_id, user_id))

    async def get_active_game(self, game_id: str, user_id: str) -> Game | None:
        return self._fetch_one(
            "SELECT data FROM games WHERE id = ? AND user_id = ? AND status = ?",
            (game_id, user_id, GameStatus.ACTIVE.value),
        )

    async def save_turn(self, game: Game, *, expected_version: int, finished: bool) -> None:
        """Persist a turn; on a finishing turn also roll the game into the user's stats.

        Raises StaleGameError when the stored version no longer matches
        ``expected_version`` or the game is no longer active. Nothing is
        written in that case.
        """
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    cursor = conn.execute(
                        "UPDATE games SET status = ?, version = ?, completed_at = ?, data = ? "
                        "WHERE id = ? AND user_id = ? AND version = ? AND status = ?",
                        (
                            game.status.value,
                            game.version,
                            game.completed_at.isoformat() if game.completed_at else None,
                            game.model_dump_json(),
                            game.game_id,
                            game.user_id,
                            expected_version,
                            GameStatus.ACTIVE.value,
                        ),
                    )
                    if cursor.rowcount == 0:
                        raise StaleGameError(f"Game {game.game_id} changed since version {expected_version}")
                    if finished:
                        conn.execute(
                            _ROLL_UP_USER_STATS_SQL,
                            (
                                1 if game.winner == Winner.PLAYER else 0,
                                game.total_damage_dealt,
                                game.total_damage_taken,
                                game.user_id,
                            ),
                        )
            except sqlite3.Error as exc:
                raise StorageError("Failed to save game turn") from exc

        if finished:
            logger.info(
                "game finished",
                game_id=game.game_id,
                user_id=game.user_id,
                status=game.status,
                winner=game.winner,
            )

    async def list_games(self, user_id: str, *, limit: int, offset: int = 0) -> list[Game]:
        """Return a user's games, newest first."""
        try:
            rows = self._db.connection.execute(
                "SELECT data FROM games WHERE user_id = ? ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (user_id, limit, offset),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError("Failed to list games") from exc
        return [Game.model_validate(json.loads(row[0])) for row in rows]

    async def count_games(self, user_id: str) -> int:
        try:
            row = self._db.connection.execute("SELECT COUNT(*) FROM games WHERE user_id = ?", (user_id,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError("Failed to count games") from exc
        return int(row[0])

    async def get_stats_summary(self, user_id: str) -> GameStatsSummary:
        try:
            row = self._db.connection.execute(
                _STATS_SUMMARY_SQL,
                (Winner.PLAYER.value, Winner.MONSTER.value, Winner.TIMEOUT.value, user_id),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError("Failed to aggregate game stats") from exc

        total, won, lost, draw, dealt, taken, avg_duration = row
        return GameStatsSummary(
            total_games=total,
            games_won=won,
            games_lost=lost,
            games_draw=draw,
            total_damage_dealt=dealt,
            total_damage_taken=taken,
            avg_game_duration=round(avg_duration) if avg_duration else 0,
            win_rate=round(won / total * 100) if total > 0 else 0,
        )

    def _fetch_one(self, sql: str, params: tuple[str, ...]) -> Game | None:
        try:
            row = self._db.connection.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StorageError("Failed to read game") from exc
        if row is None:
            return None
        return Game.model_validate(json.loads(row[0]))
