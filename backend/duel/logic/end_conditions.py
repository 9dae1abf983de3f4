"""End-of-game detection.

Rules are checked in a fixed precedence: player defeat first (even when the
monster also dropped to zero on the same turn), then monster defeat, then
the time-up comparison.
"""

from duel.logic.enums import Winner
from duel.logic.types import GameEnd


def evaluate_end(player_health: int, monster_health: int, time_remaining: int) -> GameEnd | None:
    """Return the game's verdict, or None while the game is still ongoing."""
    if player_health <= 0:
        return GameEnd(winner=Winner.MONSTER, reason="Player defeated")

    if monster_health <= 0:
        return GameEnd(winner=Winner.PLAYER, reason="Monster defeated")

    if time_remaining <= 0:
        if player_health > monster_health:
            return GameEnd(winner=Winner.PLAYER, reason="Time up - Player has more health")
        if monster_health > player_health:
            return GameEnd(winner=Winner.MONSTER, reason="Time up - Monster has more health")
        return GameEnd(winner=Winner.TIMEOUT, reason="Time up - Draw")

    return None
