"""Shared fixtures and helpers for API integration tests."""

from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from starlette.testclient import TestClient

from api.server.app import create_app
from api.server.settings import ServerSettings
from shared.auth.settings import AuthSettings

if TYPE_CHECKING:
    from pathlib import Path

    from starlette.applications import Starlette

PASSWORD = "secret123"


class FakeClock:
    """Manually advanced clock for game timing."""

    def __init__(self) -> None:
        self.now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def build_app(tmp_path: Path, clock: FakeClock | None = None, **server_overrides) -> Starlette:
    server_settings = {"log_dir": None, "rate_limit_requests": 1000, **server_overrides}
    return create_app(
        settings=ServerSettings(**server_settings),
        auth_settings=AuthSettings(database_path=str(tmp_path / "test.db"), password_hasher="simple"),
        clock=clock,
        rng=random.Random(1234),
    )


@pytest.fixture
def app(tmp_path: Path, clock: FakeClock) -> Starlette:
    return build_app(tmp_path, clock)


@pytest.fixture
def client(app: Starlette) -> TestClient:
    return TestClient(app)


def register(client: TestClient, email: str = "alice@example.com", full_name: str = "Alice Smith") -> dict:
    """Register a user (which also logs them in) and return the response body."""
    response = client.post("/api/auth/register", json={"fullName": full_name, "email": email, "password": PASSWORD})
    assert response.status_code == 201, response.text
    return response.json()


def start_game(client: TestClient, game_time: int = 60) -> dict:
    response = client.post("/api/games", json={"gameTime": game_time})
    assert response.status_code == 201, response.text
    return response.json()["game"]
