"""Auth endpoints: register, login, logout, and current user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from api.auth.backend import TOKEN_COOKIE_NAME, extract_token
from api.auth.requests import LoginRequest, RegisterRequest
from api.views.responses import error, invalid_json, parse_json_body, success, user_payload, validation_error
from shared.auth.service import AuthError

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from shared.auth.models import AuthSession, User
    from shared.auth.service import AuthService
    from shared.auth.settings import AuthSettings


def _token_response(session: AuthSession, user: User, auth_settings: AuthSettings, status_code: int) -> Response:
    """Return the session token in the body and as an HttpOnly cookie."""
    response = success(status_code, token=session.session_id, user=user_payload(user))
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=session.session_id,
        httponly=True,
        samesite="strict",
        secure=auth_settings.cookie_secure,
        max_age=auth_settings.session_ttl_seconds,
        path="/",
    )
    return response


async def register(request: Request) -> Response:
    """POST /api/auth/register {fullName, email, password, avatar?} - create account and log in."""
    auth_service: AuthService = request.app.state.auth_service
    auth_settings: AuthSettings = request.app.state.auth_settings

    body = await parse_json_body(request)
    if body is None:
        return invalid_json()
    try:
        req = RegisterRequest.model_validate(body)
    except ValidationError as e:
        return validation_error(e)

    try:
        await auth_service.register(req.full_name, req.email, req.password, req.avatar)
        session, user = await auth_service.login(req.email, req.password)
    except AuthError as e:
        return error(str(e), 400)
    return _token_response(session, user, auth_settings, 201)


async def login(request: Request) -> Response:
    """POST /api/auth/login {email, password} - validate credentials and issue a session token."""
    auth_service: AuthService = request.app.state.auth_service
    auth_settings: AuthSettings = request.app.state.auth_settings

    body = await parse_json_body(request)
    if body is None:
        return invalid_json()
    try:
        req = LoginRequest.model_validate(body)
    except ValidationError as e:
        return validation_error(e)

    try:
        session, user = await auth_service.login(req.email, req.password)
    except AuthError:
        return error("Invalid credentials", 401)
    return _token_response(session, user, auth_settings, 200)


async def logout(request: Request) -> Response:
    """POST /api/auth/logout - destroy the session (if any) and clear the cookie."""
    auth_service: AuthService = request.app.state.auth_service
    token = extract_token(request)
    if token:
        auth_service.logout(token)
    response = success(message="Logged out successfully")
    response.delete_cookie(key=TOKEN_COOKIE_NAME, path="/", httponly=True, samesite="strict")
    return response


async def me(request: Request) -> Response:
    """GET /api/auth/me - profile of the authenticated user."""
    auth_service: AuthService = request.app.state.auth_service
    user = await auth_service.get_user(request.user.user_id)
    if user is None:
        return error("Not authorized", 401)
    return success(user=user_payload(user))
