"""API authentication: Starlette backend, user model, and route policy."""

from api.auth.backend import TOKEN_COOKIE_NAME, SessionTokenBackend
from api.auth.models import AuthenticatedUser
from api.auth.policy import protected_api, public_route, validate_route_auth_policy

__all__ = [
    "TOKEN_COOKIE_NAME",
    "AuthenticatedUser",
    "SessionTokenBackend",
    "protected_api",
    "public_route",
    "validate_route_auth_policy",
]
