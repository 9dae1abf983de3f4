"""User account and session models for authentication."""

from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote_plus

from pydantic import BaseModel, computed_field

AVATAR_URL_TEMPLATE = "https://ui-avatars.com/api/?name={name}"


def default_avatar_url(full_name: str) -> str:
    """Build a generated-initials avatar URL for users who did not supply one."""
    return AVATAR_URL_TEMPLATE.format(name=quote_plus(full_name))


class User(BaseModel, frozen=True):
    """User account stored in the user repository, including lifetime game stats."""

    user_id: str
    full_name: str
    email: str  # normalized to lower case
    password_hash: str
    avatar: str
    games_played: int = 0
    games_won: int = 0
    total_damage_dealt: int = 0
    total_damage_taken: int = 0
    created_at: datetime
    last_login: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def win_rate(self) -> float:
        """Fraction of finished games won, 0.0 before the first game."""
        if self.games_played == 0:
            return 0.0
        return self.games_won / self.games_played


@dataclass
class AuthSession:
    """Server-side session for authenticated users."""

    session_id: str  # UUID, stored in the token cookie
    user_id: str
    full_name: str
    created_at: float  # time.time()
    expires_at: float  # time.time() + TTL
