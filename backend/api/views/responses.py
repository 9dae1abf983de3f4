"""JSON response envelopes and client projections shared by the API handlers.

Successful responses carry ``"success": true`` plus their payload; failures
carry ``"success": false``, a ``message`` and, for validation failures, a
list of per-field ``errors``.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError
from starlette.responses import JSONResponse

from duel.logic.types import WireModel

if TYPE_CHECKING:
    from starlette.requests import Request

    from duel.logic.types import Game
    from shared.auth.models import User


class UserProfile(WireModel):
    user_id: str = Field(serialization_alias="id")
    full_name: str
    email: str
    avatar: str
    games_played: int
    games_won: int
    win_rate: float
    total_damage_dealt: int
    total_damage_taken: int
    created_at: datetime
    last_login: datetime | None


def user_payload(user: User) -> dict[str, Any]:
    """Public profile fields; the password hash never leaves the server."""
    return wire(UserProfile.model_validate(user.model_dump()))


class LeaderboardEntry(WireModel):
    full_name: str
    avatar: str
    games_played: int
    games_won: int
    win_rate: float
    total_damage_dealt: int
    total_damage_taken: int


def leaderboard_payload(user: User) -> dict[str, Any]:
    """Public standing for one player; no id or email."""
    return wire(LeaderboardEntry.model_validate(user.model_dump()))


def game_payload(game: Game, *, include_logs: bool = True) -> dict[str, Any]:
    """Dump a full game for the client; list views leave the turn log out."""
    exclude = {"version"} if include_logs else {"version", "game_logs"}
    return game.model_dump(by_alias=True, mode="json", exclude=exclude)


def wire(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def success(status_code: int = 200, **payload: Any) -> JSONResponse:  # noqa: ANN401
    return JSONResponse({"success": True, **payload}, status_code=status_code)


def error(message: str, status_code: int, errors: list[dict[str, str]] | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return JSONResponse(body, status_code=status_code)


def validation_error(exc: ValidationError) -> JSONResponse:
    """Flatten pydantic errors into ``[{"field", "message"}]`` with a 400 status."""
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"]) or "body",
            "message": str(err["msg"]).removeprefix("Value error, "),
        }
        for err in exc.errors()
    ]
    return error("Validation failed", 400, errors)


async def parse_json_body(request: Request) -> dict | None:
    """Parse a JSON object body. An empty body parses as ``{}``; anything else invalid returns None."""
    raw_body = await request.body()
    if not raw_body.strip():
        return {}
    try:
        body = json.loads(raw_body)
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    return body


def invalid_json() -> JSONResponse:
    return error("Invalid JSON body", 400)
