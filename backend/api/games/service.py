"""Games service: sequences the turn state machine with persistence."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from api.games.types import Pagination
from duel.logic.turn import RECENT_LOG_LIMIT, apply_action, create_game, summarize

if TYPE_CHECKING:
    import random
    from collections.abc import Callable

    from duel.dal.game_repository import GameRepository
    from duel.dal.models import GameStatsSummary
    from duel.logic.enums import GameAction
    from duel.logic.types import Game, GameSummary

logger = structlog.get_logger()


class GameNotFoundError(Exception):
    """No game matched the id and owner (or it is no longer active)."""


def _utc_now() -> datetime:
    return datetime.now(UTC)


class GamesService:
    """Start games, apply turns, and read game history for a user.

    Every turn is read, resolved and written back with a version check;
    the repository rolls finished games into the user's stats in the same
    transaction.
    """

    def __init__(
        self,
        game_repo: GameRepository,
        *,
        clock: Callable[[], datetime] = _utc_now,
        rng: random.Random | None = None,
        log_limit: int = RECENT_LOG_LIMIT,
    ) -> None:
        self._game_repo = game_repo
        self._clock = clock
        self._rng = rng
        self._log_limit = log_limit

    async def start_game(self, user_id: str, player_name: str, game_time: int) -> GameSummary:
        game = create_game(user_id, player_name, game_time, now=self._clock())
        await self._game_repo.create_game(game)
        logger.info("game started", game_id=game.game_id, user_id=user_id, game_time=game_time)
        return summarize(game, self._log_limit)

    async def perform_action(
        self,
        game_id: str,
        user_id: str,
        action: GameAction,
        time_remaining: int,
    ) -> GameSummary:
        """Apply one turn to the user's active game.

        Raises GameNotFoundError when there is no such active game and
        StaleGameError when a concurrent turn was saved first.
        """
        game = await self._game_repo.get_active_game(game_id, user_id)
        if game is None:
            raise GameNotFoundError("Active game not found")

        resolution = apply_action(game, action, time_remaining, now=self._clock(), rng=self._rng)
        await self._game_repo.save_turn(resolution.game, expected_version=game.version, finished=resolution.finished)

        updated = resolution.game
        logger.debug(
            "turn applied",
            game_id=game_id,
            action=action,
            player_health=updated.player_health,
            monster_health=updated.monster_health,
            status=updated.status,
        )
        return summarize(updated, self._log_limit, resolution.action_result)

    async def get_game(self, game_id: str, user_id: str) -> Game:
        game = await self._game_repo.get_game(game_id, user_id)
        if game is None:
            raise GameNotFoundError("Game not found")
        return game

    async def list_games(self, user_id: str, *, page: int, limit: int) -> tuple[list[Game], Pagination]:
        """Return one page of the user's games (newest first) and its pagination info."""
        games = await self._game_repo.list_games(user_id, limit=limit, offset=(page - 1) * limit)
        total = await self._game_repo.count_games(user_id)
        return games, Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))

    async def recent_games(self, user_id: str, limit: int) -> list[Game]:
        return await self._game_repo.list_games(user_id, limit=limit)

    async def stats_summary(self, user_id: str) -> GameStatsSummary:
        return await self._game_repo.get_stats_summary(user_id)
