"""User endpoints: profile read/update, recent games and the public leaderboard."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from api.auth.requests import ProfileUpdateRequest
from api.games.types import LeaderboardQuery, RecentGamesQuery
from api.views.responses import (
    error,
    game_payload,
    invalid_json,
    leaderboard_payload,
    parse_json_body,
    success,
    user_payload,
    validation_error,
)

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from api.games.service import GamesService
    from shared.auth.service import AuthService


async def get_profile(request: Request) -> Response:
    """GET /api/users/profile"""
    auth_service: AuthService = request.app.state.auth_service
    user = await auth_service.get_user(request.user.user_id)
    if user is None:
        return error("User not found", 404)
    return success(user=user_payload(user))


async def update_profile(request: Request) -> Response:
    """PUT /api/users/profile {fullName?, avatar?}"""
    auth_service: AuthService = request.app.state.auth_service

    body = await parse_json_body(request)
    if body is None:
        return invalid_json()
    try:
        req = ProfileUpdateRequest.model_validate(body)
    except ValidationError as e:
        return validation_error(e)

    user = await auth_service.update_profile(request.user.user_id, full_name=req.full_name, avatar=req.avatar)
    if user is None:
        return error("User not found", 404)
    return success(user=user_payload(user))


async def recent_games(request: Request) -> Response:
    """GET /api/users/recent-games?limit - the user's latest games without logs."""
    games_service: GamesService = request.app.state.games_service
    try:
        query = RecentGamesQuery.model_validate(dict(request.query_params))
    except ValidationError as e:
        return validation_error(e)

    games = await games_service.recent_games(request.user.user_id, query.limit)
    return success(games=[game_payload(g, include_logs=False) for g in games])


async def leaderboard(request: Request) -> Response:
    """GET /api/users/leaderboard?limit - public standings of players with finished games."""
    auth_service: AuthService = request.app.state.auth_service
    try:
        query = LeaderboardQuery.model_validate(dict(request.query_params))
    except ValidationError as e:
        return validation_error(e)

    users = await auth_service.leaderboard(query.limit)
    return success(leaderboard=[leaderboard_payload(u) for u in users])
