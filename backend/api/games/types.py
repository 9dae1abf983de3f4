"""Request and response models for the games API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from duel.logic.enums import GameAction
from duel.logic.turn import DEFAULT_GAME_TIME, MAX_GAME_TIME, MIN_GAME_TIME

MAX_PAGE_SIZE = 100


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CreateGameRequest(_RequestModel):
    game_time: int = Field(default=DEFAULT_GAME_TIME, ge=MIN_GAME_TIME, le=MAX_GAME_TIME)


class ActionRequest(_RequestModel):
    action: GameAction
    time_remaining: int = Field(ge=0)

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, v: Any) -> Any:  # noqa: ANN401
        if isinstance(v, str):
            return GameAction.parse(v)
        return v


class PageQuery(_RequestModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)


class RecentGamesQuery(_RequestModel):
    limit: int = Field(default=5, ge=1, le=MAX_PAGE_SIZE)


class LeaderboardQuery(_RequestModel):
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)


class Pagination(BaseModel, frozen=True):
    page: int
    limit: int
    total: int
    pages: int
