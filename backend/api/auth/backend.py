"""Starlette AuthenticationBackend that validates session tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import AuthCredentials, AuthenticationBackend

from api.auth.models import AuthenticatedUser

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from shared.auth.service import AuthService

TOKEN_COOKIE_NAME = "token"
_BEARER_PREFIX = "bearer "


def extract_token(conn: HTTPConnection) -> str | None:
    """Return the session token from the Authorization header or the token cookie.

    The header wins when both are present.
    """
    authorization = conn.headers.get("authorization", "")
    if authorization.lower().startswith(_BEARER_PREFIX):
        token = authorization[len(_BEARER_PREFIX) :].strip()
        if token:
            return token
    return conn.cookies.get(TOKEN_COOKIE_NAME) or None


class SessionTokenBackend(AuthenticationBackend):
    """Authenticate requests via ``Authorization: Bearer <token>`` or the ``token`` cookie."""

    def __init__(self, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, AuthenticatedUser] | None:
        session = self._auth_service.validate_session(extract_token(conn))
        if session is None:
            return None
        return AuthCredentials(["authenticated"]), AuthenticatedUser(
            user_id=session.user_id,
            full_name=session.full_name,
            session_id=session.session_id,
        )
