"""Enumerations for duel game state and wire identifiers."""

from __future__ import annotations

from enum import StrEnum


class GameAction(StrEnum):
    """Turn actions a player can submit.

    Values are the wire identifiers used by the browser client, including
    their mixed casing.
    """

    ATTACK = "attack"
    BLAST = "Blast"
    HEAL = "heal"
    GIVEUP = "Giveup"

    @classmethod
    def parse(cls, value: str) -> GameAction:
        """Match a client-supplied action name case-insensitively."""
        lowered = value.strip().lower()
        for action in cls:
            if action.value.lower() == lowered:
                return action
        raise ValueError(f"Invalid action: {value!r}")


class LogAction(StrEnum):
    """Tags stored on game log entries: every turn action plus start/end markers."""

    ATTACK = "attack"
    BLAST = "Blast"
    HEAL = "heal"
    GIVEUP = "Giveup"
    GAME_START = "game_start"
    GAME_END = "game_end"


class GameStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    SURRENDERED = "surrendered"


class Winner(StrEnum):
    PLAYER = "player"
    MONSTER = "monster"
    TIMEOUT = "timeout"
