"""Auth service coordinating registration, login, and session management."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from shared.auth.models import User, default_avatar_url

if TYPE_CHECKING:
    from shared.auth.models import AuthSession
    from shared.auth.password import PasswordHasher
    from shared.auth.session_store import AuthSessionStore
    from shared.dal.user_repository import UserRepository

logger = structlog.get_logger()

FULL_NAME_MIN_LENGTH = 2
FULL_NAME_MAX_LENGTH = 50
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72  # bcrypt truncates at 72 bytes


class AuthError(Exception):
    """Authentication or authorization failure."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Coordinate user registration, login, and session validation."""

    def __init__(
        self,
        user_repo: UserRepository,
        session_store: AuthSessionStore,
        *,
        password_hasher: PasswordHasher,
    ) -> None:
        self._user_repo = user_repo
        self._session_store = session_store
        self._hasher = password_hasher

    async def register(self, full_name: str, email: str, password: str, avatar: str | None = None) -> User:
        """Register a new account. Field shapes are validated by the caller."""
        email = normalize_email(email)
        if await self._user_repo.get_by_email(email) is not None:
            raise AuthError("User already exists with this email")

        user = User(
            user_id=str(uuid4()),
            full_name=full_name.strip(),
            email=email,
            password_hash=await self._hasher.hash(password),
            avatar=avatar or default_avatar_url(full_name.strip()),
            created_at=datetime.now(UTC),
        )
        try:
            await self._user_repo.create_user(user)
        except ValueError as e:
            raise AuthError(str(e)) from e
        logger.info("user registered", user_id=user.user_id)
        return user

    async def login(self, email: str, password: str) -> tuple[AuthSession, User]:
        """Validate credentials, stamp last_login, and create a session."""
        user = await self._user_repo.get_by_email(normalize_email(email))
        if user is None:
            raise AuthError("Invalid credentials")
        if not await self._hasher.verify(password, user.password_hash):
            raise AuthError("Invalid credentials")

        updated = await self._user_repo.record_login(user.user_id, datetime.now(UTC))
        session = self._session_store.create_session(user.user_id, user.full_name)
        return session, updated or user

    def validate_session(self, session_id: str | None) -> AuthSession | None:
        """Return the session if valid and not expired, otherwise None."""
        if session_id is None:
            return None
        return self._session_store.get_session(session_id)

    def logout(self, session_id: str) -> None:
        """Destroy a session."""
        self._session_store.delete_session(session_id)

    async def get_user(self, user_id: str) -> User | None:
        return await self._user_repo.get_by_id(user_id)

    async def leaderboard(self, limit: int) -> list[User]:
        return await self._user_repo.top_players(limit)

    async def update_profile(self, user_id: str, *, full_name: str | None, avatar: str | None) -> User | None:
        """Update display fields and refresh the name cached on live sessions."""
        if full_name is not None:
            full_name = full_name.strip()
        user = await self._user_repo.update_profile(user_id, full_name=full_name, avatar=avatar)
        if user is not None and full_name is not None:
            self._session_store.rename_sessions(user_id, user.full_name)
        return user
