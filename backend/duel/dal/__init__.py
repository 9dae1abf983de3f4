"""Game data access layer: repository interface and aggregate models."""

from duel.dal.game_repository import GameRepository, StaleGameError
from duel.dal.models import GameStatsSummary

__all__ = [
    "GameRepository",
    "GameStatsSummary",
    "StaleGameError",
]
