"""Abstract interface for user persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from shared.auth.models import User


class UserRepository(ABC):
    """Abstract interface for user persistence.

    Lifetime game statistics are not written here; they are rolled into the
    user record by the game repository in the same transaction that finishes
    a game.
    """

    @abstractmethod
    async def create_user(self, user: User) -> None: ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def top_players(self, limit: int) -> list[User]:
        """Users with at least one finished game, best win rate first."""

    @abstractmethod
    async def record_login(self, user_id: str, at: datetime) -> User | None: ...

    @abstractmethod
    async def update_profile(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        avatar: str | None = None,
    ) -> User | None: ...
