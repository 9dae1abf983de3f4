from __future__ import annotations

import contextlib
import sqlite3
from http import HTTPStatus
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from api.auth.backend import SessionTokenBackend
from api.auth.policy import protected_api, public_route, validate_route_auth_policy
from api.games.service import GamesService
from api.server.middleware import SecurityHeadersMiddleware, SlashNormalizationMiddleware
from api.server.rate_limit import RateLimitMiddleware
from api.server.settings import ServerSettings
from api.views import (
    create_game,
    get_game,
    get_profile,
    leaderboard,
    list_games,
    login,
    logout,
    me,
    perform_action,
    recent_games,
    register,
    stats_summary,
    update_profile,
)
from api.views.responses import error
from duel.dal.game_repository import StaleGameError
from duel.db import SqliteGameRepository
from shared.auth import AuthService, AuthSessionStore, AuthSettings, get_hasher
from shared.build_info import APP_VERSION, GIT_COMMIT
from shared.db import Database, SqliteUserRepository, StorageError
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    import random
    from collections.abc import AsyncGenerator, Callable
    from datetime import datetime

    from starlette.requests import Request

HEALTH_PATH = "/api/health"

_HTTP_ERROR_MESSAGES = {
    HTTPStatus.UNAUTHORIZED: "Not authorized",
    HTTPStatus.NOT_FOUND: "Route not found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method not allowed",
}


async def _http_error_handler(_request: Request, exc: Exception) -> Response:
    """Render framework HTTP errors (401 from the auth policy, unknown routes) as JSON envelopes."""
    http_exc = cast("HTTPException", exc)
    if http_exc.status_code in {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}:
        return Response(status_code=http_exc.status_code, headers=http_exc.headers)
    message = _HTTP_ERROR_MESSAGES.get(HTTPStatus(http_exc.status_code), http_exc.detail)
    response = error(message, http_exc.status_code)
    if http_exc.headers:
        response.headers.update(http_exc.headers)
    return response


async def _stale_game_handler(request: Request, exc: Exception) -> Response:
    logger.warning("concurrent turn rejected", path=request.url.path, error=str(exc))
    return error("Game was updated by another request, please retry", HTTPStatus.CONFLICT)


async def _storage_error_handler(request: Request, exc: Exception) -> Response:
    logger.error("storage failure", path=request.url.path, exc_info=exc)
    return error("Server error, please try again later", HTTPStatus.INTERNAL_SERVER_ERROR)


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "OK", "version": APP_VERSION, "commit": GIT_COMMIT})


def _open_database(path: str) -> Database:
    """Connect to storage; the process cannot serve anything without it."""
    db = Database(path)
    try:
        db.connect()
    except (sqlite3.Error, OSError) as exc:
        logger.critical("storage initialization failed", path=path, error=str(exc))
        raise SystemExit(1) from exc
    return db


def create_app(
    settings: ServerSettings | None = None,
    auth_settings: AuthSettings | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
    rng: random.Random | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = ServerSettings()
    if auth_settings is None:  # pragma: no cover
        auth_settings = AuthSettings()

    routes = [
        Route(HEALTH_PATH, public_route(health), methods=["GET"], name="health"),
        # Auth
        Route("/api/auth/register", public_route(register), methods=["POST"], name="register"),
        Route("/api/auth/login", public_route(login), methods=["POST"], name="login"),
        Route("/api/auth/logout", public_route(logout), methods=["POST"], name="logout"),
        Route("/api/auth/me", protected_api(me), methods=["GET"], name="me"),
        # Games (stats route must precede the {game_id} route)
        Route("/api/games", protected_api(create_game), methods=["POST"], name="create_game"),
        Route("/api/games", protected_api(list_games), methods=["GET"], name="list_games"),
        Route("/api/games/stats/summary", protected_api(stats_summary), methods=["GET"], name="stats_summary"),
        Route("/api/games/{game_id}", protected_api(get_game), methods=["GET"], name="get_game"),
        Route("/api/games/{game_id}/action", protected_api(perform_action), methods=["POST"], name="perform_action"),
        # Users
        Route("/api/users/profile", protected_api(get_profile), methods=["GET"], name="get_profile"),
        Route("/api/users/profile", protected_api(update_profile), methods=["PUT"], name="update_profile"),
        Route("/api/users/recent-games", protected_api(recent_games), methods=["GET"], name="recent_games"),
        Route("/api/users/leaderboard", public_route(leaderboard), methods=["GET"], name="leaderboard"),
    ]
    validate_route_auth_policy(routes)

    db = _open_database(auth_settings.database_path)
    user_repo = SqliteUserRepository(db)
    session_store = AuthSessionStore(ttl_seconds=auth_settings.session_ttl_seconds)
    auth_service = AuthService(user_repo, session_store, password_hasher=get_hasher(auth_settings.password_hasher))

    games_service_kwargs: dict = {"rng": rng, "log_limit": settings.recent_log_limit}
    if clock is not None:
        games_service_kwargs["clock"] = clock
    games_service = GamesService(SqliteGameRepository(db), **games_service_kwargs)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:  # pragma: no cover
        session_store.start_cleanup()
        try:
            yield
        finally:
            await session_store.stop_cleanup()
            db.close()
            logger.info("api server stopped")

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            HTTPException: _http_error_handler,
            StaleGameError: _stale_game_handler,
            StorageError: _storage_error_handler,
        },
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(AuthenticationMiddleware, backend=SessionTokenBackend(auth_service))  # type: ignore[arg-type]
    # Inside CORS so 429 responses still carry the allow-origin headers.
    app.add_middleware(
        RateLimitMiddleware,  # type: ignore[arg-type]
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        exempt_paths=frozenset({HEALTH_PATH}),
    )
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]

    app.state.db = db
    app.state.settings = settings
    app.state.auth_settings = auth_settings
    app.state.auth_service = auth_service
    app.state.games_service = games_service

    logger.info("api server ready")
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory api.server.app:get_app."""
    settings = ServerSettings()
    setup_logging(log_dir=settings.log_dir)
    return create_app(settings=settings, auth_settings=AuthSettings())
