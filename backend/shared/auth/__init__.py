"""Authentication: user model, password hashing, sessions, and the auth service."""

from shared.auth.models import AuthSession, User
from shared.auth.password import get_hasher
from shared.auth.service import AuthError, AuthService
from shared.auth.session_store import AuthSessionStore
from shared.auth.settings import AuthSettings

__all__ = [
    "AuthError",
    "AuthService",
    "AuthSession",
    "AuthSessionStore",
    "AuthSettings",
    "User",
    "get_hasher",
]
