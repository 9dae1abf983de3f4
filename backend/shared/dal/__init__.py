"""Data access layer: repository interfaces."""

from shared.dal.user_repository import UserRepository

__all__ = [
    "UserRepository",
]
