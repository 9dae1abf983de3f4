"""
Turn state machine for a duel game.

Games move from ``active`` to either ``completed`` or ``surrendered`` exactly
once. Every function here is pure: it takes a frozen Game and returns a new
one. Persistence and user statistics live in the games service.

Remaining time is reported by the client each turn, but the server never lets
it run past what has actually elapsed since the game was created.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING
from uuid import uuid4

from duel.logic.actions import MONSTER_NAME, resolve_action
from duel.logic.end_conditions import evaluate_end
from duel.logic.enums import GameAction, GameStatus, LogAction, Winner
from duel.logic.types import MAX_HEALTH, ActionResult, Game, GameLogEntry, GameSummary, TurnResolution

if TYPE_CHECKING:
    import random
    from datetime import datetime

DEFAULT_GAME_TIME = 60
MIN_GAME_TIME = 30
MAX_GAME_TIME = 300
RECENT_LOG_LIMIT = 10


class GameNotActiveError(Exception):
    """Raised when an action targets a game that has already finished."""


def create_game(
    user_id: str,
    player_name: str,
    game_time: int = DEFAULT_GAME_TIME,
    *,
    now: datetime,
    game_id: str | None = None,
) -> Game:
    """Build a fresh active game with full health and its ``game_start`` log entry."""
    start_log = GameLogEntry(
        action=LogAction.GAME_START,
        player_health_after=MAX_HEALTH,
        monster_health_after=MAX_HEALTH,
        timestamp=now,
        description=f"Game started! {player_name} vs {MONSTER_NAME} ({game_time}s timer)",
    )
    return Game(
        game_id=game_id or str(uuid4()),
        user_id=user_id,
        player_name=player_name,
        game_time=game_time,
        time_remaining=game_time,
        game_logs=(start_log,),
        created_at=now,
    )


def effective_time_remaining(game: Game, reported: int, now: datetime) -> int:
    """Cross-check the client countdown against server elapsed time.

    The lower of the two wins, so a client cannot extend a game by
    reporting more time than is actually left.
    """
    elapsed = max((now - game.created_at).total_seconds(), 0.0)
    server_remaining = max(game.game_time - math.floor(elapsed), 0)
    return max(min(reported, server_remaining), 0)


def end_description(winner: Winner, player_name: str) -> str:
    if winner == Winner.PLAYER:
        return f"Game ended! {player_name} wins!"
    if winner == Winner.MONSTER:
        return f"Game ended! {MONSTER_NAME} wins!"
    return "Game ended! Draw!"


def apply_action(
    game: Game,
    action: GameAction,
    time_remaining: int,
    *,
    now: datetime,
    rng: random.Random | None = None,
) -> TurnResolution:
    """Apply one turn to an active game.

    Raises GameNotActiveError if the game already reached a terminal state;
    the input game is never modified.
    """
    if not game.is_active:
        raise GameNotActiveError(f"Game {game.game_id} is {game.status}")

    remaining = effective_time_remaining(game, time_remaining, now)
    outcome = resolve_action(action, game.player_health, game.monster_health, rng)

    update: dict[str, object] = {"time_remaining": remaining}
    winner: Winner | None = None
    if action == GameAction.GIVEUP:
        winner = Winner.MONSTER
        update.update(status=GameStatus.SURRENDERED, winner=winner, completed_at=now)
        player_health, monster_health = game.player_health, game.monster_health
    else:
        player_health = outcome.player_health_after
        monster_health = outcome.monster_health_after
        update.update(
            player_health=player_health,
            monster_health=monster_health,
            total_damage_dealt=game.total_damage_dealt + outcome.monster_damage,
            total_damage_taken=game.total_damage_taken + outcome.player_damage,
        )
        verdict = evaluate_end(player_health, monster_health, remaining)
        if verdict is not None:
            winner = verdict.winner
            update.update(status=GameStatus.COMPLETED, winner=winner, completed_at=now)

    logs = [
        *game.game_logs,
        GameLogEntry(
            action=LogAction(action.value),
            player_damage=outcome.player_damage,
            monster_damage=outcome.monster_damage,
            healing_amount=outcome.healing_amount,
            player_health_after=outcome.player_health_after,
            monster_health_after=outcome.monster_health_after,
            timestamp=now,
            description=outcome.description,
        ),
    ]

    finished = winner is not None
    if winner is not None:
        logs.append(
            GameLogEntry(
                action=LogAction.GAME_END,
                player_health_after=player_health,
                monster_health_after=monster_health,
                timestamp=now,
                description=end_description(winner, game.player_name),
            ),
        )

    update["game_logs"] = tuple(logs)
    update["version"] = game.version + 1

    action_result = ActionResult(
        action=action,
        player_damage=outcome.player_damage,
        monster_damage=outcome.monster_damage,
        healing_amount=outcome.healing_amount,
        description=outcome.description,
    )
    return TurnResolution(game=game.model_copy(update=update), action_result=action_result, finished=finished)


def summarize(
    game: Game,
    log_limit: int = RECENT_LOG_LIMIT,
    action_result: ActionResult | None = None,
) -> GameSummary:
    """Project a game for client display, keeping only the last ``log_limit`` log entries."""
    return GameSummary(
        game_id=game.game_id,
        player_name=game.player_name,
        player_health=game.player_health,
        monster_health=game.monster_health,
        game_time=game.game_time,
        time_remaining=game.time_remaining,
        status=game.status,
        winner=game.winner,
        game_logs=game.game_logs[-log_limit:] if log_limit > 0 else (),
        created_at=game.created_at,
        action_result=action_result,
    )
