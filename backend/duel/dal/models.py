"""Persistence-facing models for the game repository."""

from duel.logic.types import WireModel


class GameStatsSummary(WireModel):
    """Aggregate over every game a user has started."""

    total_games: int = 0
    games_won: int = 0
    games_lost: int = 0
    games_draw: int = 0
    total_damage_dealt: int = 0
    total_damage_taken: int = 0
    avg_game_duration: int = 0  # seconds, finished games only
    win_rate: int = 0  # percentage of total games won
