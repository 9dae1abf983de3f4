"""Game endpoints: start a game, submit turns, and read game history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from api.games.service import GameNotFoundError
from api.games.types import ActionRequest, CreateGameRequest, PageQuery
from api.views.responses import error, game_payload, invalid_json, parse_json_body, success, validation_error, wire

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from api.games.service import GamesService


async def create_game(request: Request) -> Response:
    """POST /api/games {gameTime?} - start a new game for the current user."""
    games_service: GamesService = request.app.state.games_service

    body = await parse_json_body(request)
    if body is None:
        return invalid_json()
    try:
        req = CreateGameRequest.model_validate(body)
    except ValidationError as e:
        return validation_error(e)

    user = request.user
    summary = await games_service.start_game(user.user_id, user.display_name, req.game_time)
    return success(201, game=wire(summary))


async def list_games(request: Request) -> Response:
    """GET /api/games?page&limit - the current user's games, newest first, without logs."""
    games_service: GamesService = request.app.state.games_service
    try:
        query = PageQuery.model_validate(dict(request.query_params))
    except ValidationError as e:
        return validation_error(e)

    games, pagination = await games_service.list_games(request.user.user_id, page=query.page, limit=query.limit)
    return success(
        games=[game_payload(g, include_logs=False) for g in games],
        pagination=pagination.model_dump(),
    )


async def get_game(request: Request) -> Response:
    """GET /api/games/{game_id} - full game including every log entry."""
    games_service: GamesService = request.app.state.games_service
    try:
        game = await games_service.get_game(request.path_params["game_id"], request.user.user_id)
    except GameNotFoundError as e:
        return error(str(e), 404)
    return success(game=game_payload(game))


async def perform_action(request: Request) -> Response:
    """POST /api/games/{game_id}/action {action, timeRemaining} - apply one turn."""
    games_service: GamesService = request.app.state.games_service

    body = await parse_json_body(request)
    if body is None:
        return invalid_json()
    try:
        req = ActionRequest.model_validate(body)
    except ValidationError as e:
        return validation_error(e)

    try:
        summary = await games_service.perform_action(
            request.path_params["game_id"],
            request.user.user_id,
            req.action,
            req.time_remaining,
        )
    except GameNotFoundError as e:
        return error(str(e), 404)
    return success(game=wire(summary))


async def stats_summary(request: Request) -> Response:
    """GET /api/games/stats/summary - aggregate results over the user's games."""
    games_service: GamesService = request.app.state.games_service
    stats = await games_service.stats_summary(request.user.user_id)
    return success(stats=wire(stats))
