"""Abstract interface for duel game persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duel.dal.models import GameStatsSummary
    from duel.logic.types import Game


class StaleGameError(Exception):
    """The stored game changed since it was read; the turn was not applied."""


class GameRepository(ABC):
    """Abstract interface for game persistence.

    ``save_turn`` is a compare-and-swap on the game's version. When the turn
    finished the game, the owning user's lifetime stats are rolled up in the
    same transaction.
    """

    @abstractmethod
    async def create_game(self, game: Game) -> None: ...

    @abstractmethod
    async def get_game(self, game_id: str, user_id: str) -> Game | None: ...

    @abstractmethod
    async def get_active_game(self, game_id: str, user_id: str) -> Game | None: ...

    @abstractmethod
    async def save_turn(self, game: Game, *, expected_version: int, finished: bool) -> None: ...

    @abstractmethod
    async def list_games(self, user_id: str, *, limit: int, offset: int = 0) -> list[Game]: ...

    @abstractmethod
    async def count_games(self, user_id: str) -> int: ...

    @abstractmethod
    async def get_stats_summary(self, user_id: str) -> GameStatsSummary: ...
