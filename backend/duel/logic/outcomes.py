"""Random outcome generation for action damage and healing magnitudes."""

from __future__ import annotations

import random

ATTACK_PLAYER_DAMAGE = (1, 10)
ATTACK_MONSTER_DAMAGE = (1, 10)
BLAST_PLAYER_DAMAGE = (5, 15)
BLAST_MONSTER_DAMAGE = (8, 20)
HEAL_AMOUNT = (5, 15)
HEAL_INCIDENTAL_DAMAGE = (1, 8)

_default_rng = random.Random()  # noqa: S311 - gameplay randomness, not security sensitive


def random_in_range(low: int, high: int, rng: random.Random | None = None) -> int:
    """Return a uniformly distributed integer in [low, high], both inclusive."""
    if low > high:
        raise ValueError(f"Empty range: [{low}, {high}]")
    return (rng or _default_rng).randint(low, high)


def roll(bounds: tuple[int, int], rng: random.Random | None = None) -> int:
    """Draw from one of the per-action bound pairs above."""
    return random_in_range(bounds[0], bounds[1], rng)
