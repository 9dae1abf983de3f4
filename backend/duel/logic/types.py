"""
Pydantic models for duel game state.

Models are frozen; state transitions produce new instances via model_copy.
Field names are snake_case in Python and camelCase on the wire
(serialize with ``model_dump(by_alias=True, mode="json")``).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from duel.logic.enums import GameAction, GameStatus, LogAction, Winner

MAX_HEALTH = 100
MIN_HEALTH = 0


class WireModel(BaseModel):
    """Base for models exchanged with the browser client."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class GameLogEntry(WireModel):
    """One append-only entry in a game's turn log."""

    action: LogAction
    player_damage: int = 0
    monster_damage: int = 0
    healing_amount: int = 0
    player_health_after: int
    monster_health_after: int
    timestamp: datetime
    description: str


class ActionOutcome(BaseModel, frozen=True):
    """Health deltas produced by resolving a single action."""

    player_damage: int
    monster_damage: int
    healing_amount: int = 0
    player_health_after: int = Field(ge=MIN_HEALTH, le=MAX_HEALTH)
    monster_health_after: int = Field(ge=MIN_HEALTH, le=MAX_HEALTH)
    description: str


class GameEnd(BaseModel, frozen=True):
    """Terminal verdict from the end-condition evaluator."""

    winner: Winner
    reason: str


class ActionResult(WireModel):
    """Structured description of one turn, returned to the client."""

    action: GameAction
    player_damage: int
    monster_damage: int
    healing_amount: int
    description: str


class Game(WireModel):
    """A single player-vs-monster match."""

    game_id: str = Field(serialization_alias="id")
    user_id: str
    player_name: str
    player_health: int = Field(default=MAX_HEALTH, ge=MIN_HEALTH, le=MAX_HEALTH)
    monster_health: int = Field(default=MAX_HEALTH, ge=MIN_HEALTH, le=MAX_HEALTH)
    game_time: int
    time_remaining: int
    status: GameStatus = GameStatus.ACTIVE
    winner: Winner | None = None
    game_logs: tuple[GameLogEntry, ...] = ()
    total_damage_dealt: int = 0
    total_damage_taken: int = 0
    created_at: datetime
    completed_at: datetime | None = None
    version: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == GameStatus.ACTIVE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration(self) -> int | None:
        """Whole seconds between creation and completion, None while active."""
        if self.completed_at is None:
            return None
        return round((self.completed_at - self.created_at).total_seconds())


class GameSummary(WireModel):
    """Client projection of a game: current state plus the most recent log entries."""

    game_id: str = Field(serialization_alias="id")
    player_name: str
    player_health: int
    monster_health: int
    game_time: int
    time_remaining: int
    status: GameStatus
    winner: Winner | None
    game_logs: tuple[GameLogEntry, ...]
    created_at: datetime
    action_result: ActionResult | None = None


class TurnResolution(BaseModel, frozen=True):
    """Result of applying one action to a game."""

    game: Game
    action_result: ActionResult
    finished: bool
