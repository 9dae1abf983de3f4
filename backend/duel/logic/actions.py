"""
Action resolution: map a turn action and the current health values to an outcome.

Each handler is pure apart from drawing random magnitudes. Health results are
clamped to [0, 100]. Unknown actions never reach this module; request
validation rejects them first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from duel.logic.enums import GameAction
from duel.logic.outcomes import (
    ATTACK_MONSTER_DAMAGE,
    ATTACK_PLAYER_DAMAGE,
    BLAST_MONSTER_DAMAGE,
    BLAST_PLAYER_DAMAGE,
    HEAL_AMOUNT,
    HEAL_INCIDENTAL_DAMAGE,
    roll,
)
from duel.logic.types import MAX_HEALTH, MIN_HEALTH, ActionOutcome

if TYPE_CHECKING:
    import random
    from collections.abc import Callable

MONSTER_NAME = "Covid Monster"


def clamp_health(value: int) -> int:
    return max(MIN_HEALTH, min(MAX_HEALTH, value))


def _attack(player_health: int, monster_health: int, rng: random.Random | None) -> ActionOutcome:
    player_damage = roll(ATTACK_PLAYER_DAMAGE, rng)
    monster_damage = roll(ATTACK_MONSTER_DAMAGE, rng)
    return ActionOutcome(
        player_damage=player_damage,
        monster_damage=monster_damage,
        player_health_after=clamp_health(player_health - player_damage),
        monster_health_after=clamp_health(monster_health - monster_damage),
        description=(
            f"Player attacks {MONSTER_NAME} for {monster_damage} damage, "
            f"but gets infected for {player_damage} damage"
        ),
    )


def _blast(player_health: int, monster_health: int, rng: random.Random | None) -> ActionOutcome:
    player_damage = roll(BLAST_PLAYER_DAMAGE, rng)
    monster_damage = roll(BLAST_MONSTER_DAMAGE, rng)
    return ActionOutcome(
        player_damage=player_damage,
        monster_damage=monster_damage,
        player_health_after=clamp_health(player_health - player_damage),
        monster_health_after=clamp_health(monster_health - monster_damage),
        description=(
            f"Player launches BLAST on {MONSTER_NAME} for {monster_damage} damage, "
            f"but suffers power infection for {player_damage} damage"
        ),
    )


def _heal(player_health: int, monster_health: int, rng: random.Random | None) -> ActionOutcome:
    """Restore player health; the monster still takes a small hit during the heal.

    The hit is reported as ``player_damage`` (it counts toward damage taken
    totals) while ``monster_damage`` stays 0.
    """
    healing_amount = roll(HEAL_AMOUNT, rng)
    incidental = roll(HEAL_INCIDENTAL_DAMAGE, rng)
    return ActionOutcome(
        player_damage=incidental,
        monster_damage=0,
        healing_amount=healing_amount,
        player_health_after=clamp_health(player_health + healing_amount),
        monster_health_after=clamp_health(monster_health - incidental),
        description=(
            f"Player uses healing potion and recovers {healing_amount} health, "
            f"but {MONSTER_NAME} attacks for {incidental} damage during healing"
        ),
    )


def _giveup(player_health: int, monster_health: int, _rng: random.Random | None) -> ActionOutcome:
    return ActionOutcome(
        player_damage=0,
        monster_damage=0,
        player_health_after=clamp_health(player_health),
        monster_health_after=clamp_health(monster_health),
        description=f"Player gives up to the {MONSTER_NAME}",
    )


_HANDLERS: dict[GameAction, Callable[[int, int, random.Random | None], ActionOutcome]] = {
    GameAction.ATTACK: _attack,
    GameAction.BLAST: _blast,
    GameAction.HEAL: _heal,
    GameAction.GIVEUP: _giveup,
}


def resolve_action(
    action: GameAction,
    player_health: int,
    monster_health: int,
    rng: random.Random | None = None,
) -> ActionOutcome:
    """Compute one turn's damage, healing and resulting health values."""
    return _HANDLERS[action](player_health, monster_health, rng)
