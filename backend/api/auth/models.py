"""User model for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from starlette.authentication import BaseUser


class AuthenticatedUser(BaseUser):
    """Authenticated user for Starlette's request.user, built from a valid session."""

    def __init__(self, user_id: str, full_name: str, session_id: str) -> None:
        self._user_id = user_id
        self._full_name = full_name
        self._session_id = session_id

    @property
    def is_authenticated(self) -> bool:  # pragma: no cover
        return True

    @property
    def display_name(self) -> str:
        return self._full_name

    @property
    def identity(self) -> str:  # pragma: no cover
        return self._user_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def session_id(self) -> str:
        return self._session_id
