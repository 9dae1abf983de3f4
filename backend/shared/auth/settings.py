"""Auth and storage settings."""

from pydantic import Field
from pydantic_settings import BaseSettings

SECONDS_PER_DAY = 86400


class AuthSettings(BaseSettings):
    model_config = {"env_prefix": "AUTH_"}

    # SQLite database file path
    database_path: str = Field(default="backend/storage.db", min_length=1)

    # Cookie Secure flag -- True in production, False for local dev (HTTP)
    cookie_secure: bool = False

    session_ttl_seconds: int = Field(default=7 * SECONDS_PER_DAY, ge=60)

    # "bcrypt" in production, "simple" for tests
    password_hasher: str = "bcrypt"
