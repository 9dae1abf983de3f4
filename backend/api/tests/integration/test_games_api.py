"""Integration tests for game play, history and stats endpoints."""

import sqlite3
from unittest.mock import MagicMock, patch

import pytest
from starlette.testclient import TestClient

from api.tests.integration.conftest import build_app, register, start_game


def _act(client: TestClient, game_id: str, action: str, time_remaining: int):
    return client.post(f"/api/games/{game_id}/action", json={"action": action, "timeRemaining": time_remaining})


class TestCreateGame:
    def test_defaults_to_sixty_seconds(self, client):
        register(client)
        response = client.post("/api/games", json={})

        assert response.status_code == 201
        game = response.json()["game"]
        assert game["gameTime"] == 60
        assert game["timeRemaining"] == 60
        assert game["playerHealth"] == 100
        assert game["monsterHealth"] == 100
        assert game["status"] == "active"
        assert game["winner"] is None
        assert [log["action"] for log in game["gameLogs"]] == ["game_start"]
        assert game["gameLogs"][0]["description"] == "Game started! Alice Smith vs Covid Monster (60s timer)"

    def test_empty_body_accepted(self, client):
        register(client)
        response = client.post("/api/games")
        assert response.status_code == 201

    @pytest.mark.parametrize("game_time", [29, 301, "soon"])
    def test_game_time_bounds(self, client, game_time):
        register(client)
        response = client.post("/api/games", json={"gameTime": game_time})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "gameTime"


class TestPlay:
    def test_attack_then_giveup_flow(self, client, clock):
        register(client)
        game = start_game(client, 60)

        clock.advance(5)
        attack = _act(client, game["id"], "attack", 55)
        assert attack.status_code == 200
        after_attack = attack.json()["game"]
        result = after_attack["actionResult"]
        assert result["action"] == "attack"
        assert 1 <= result["playerDamage"] <= 10
        assert 1 <= result["monsterDamage"] <= 10
        assert after_attack["playerHealth"] == 100 - result["playerDamage"]
        assert after_attack["monsterHealth"] == 100 - result["monsterDamage"]
        assert after_attack["timeRemaining"] == 55
        assert after_attack["status"] == "active"

        giveup = _act(client, game["id"], "Giveup", 50)
        assert giveup.status_code == 200
        final = giveup.json()["game"]
        assert final["status"] == "surrendered"
        assert final["winner"] == "monster"
        assert final["playerHealth"] == after_attack["playerHealth"]
        assert [log["action"] for log in final["gameLogs"]] == ["game_start", "attack", "Giveup", "game_end"]

        user = client.get("/api/users/profile").json()["user"]
        assert user["gamesPlayed"] == 1
        assert user["gamesWon"] == 0
        assert user["totalDamageDealt"] == result["monsterDamage"]
        assert user["totalDamageTaken"] == result["playerDamage"]

        again = _act(client, game["id"], "attack", 40)
        assert again.status_code == 404
        assert again.json() == {"success": False, "message": "Active game not found"}

    def test_action_names_case_insensitive(self, client):
        register(client)
        game = start_game(client)

        response = _act(client, game["id"], "BLAST", 55)
        assert response.status_code == 200
        assert response.json()["game"]["actionResult"]["action"] == "Blast"

    def test_heal_caps_player_health(self, client):
        register(client)
        game = start_game(client)

        final = _act(client, game["id"], "heal", 55).json()["game"]
        assert final["playerHealth"] == 100
        assert final["monsterHealth"] < 100

    def test_invalid_action(self, client):
        register(client)
        game = start_game(client)

        response = _act(client, game["id"], "dance", 55)
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "action", "message": "Invalid action: 'dance'"}]

    def test_missing_time_remaining(self, client):
        register(client)
        game = start_game(client)

        response = client.post(f"/api/games/{game['id']}/action", json={"action": "attack"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "timeRemaining"

    def test_server_clock_caps_reported_time(self, client, clock):
        register(client)
        game = start_game(client, 60)

        clock.advance(45)
        final = _act(client, game["id"], "attack", 55).json()["game"]
        assert final["timeRemaining"] == 15

    def test_time_up_ends_game(self, client, clock):
        register(client)
        game = start_game(client, 60)

        clock.advance(61)
        final = _act(client, game["id"], "attack", 30).json()["game"]

        assert final["timeRemaining"] == 0
        assert final["status"] == "completed"
        if final["playerHealth"] > final["monsterHealth"]:
            assert final["winner"] == "player"
        elif final["monsterHealth"] > final["playerHealth"]:
            assert final["winner"] == "monster"
        else:
            assert final["winner"] == "timeout"

    def test_play_until_finished(self, client):
        register(client)
        game = start_game(client, 300)

        status = "active"
        turns = 0
        while status == "active":
            turns += 1
            assert turns < 50
            state = _act(client, game["id"], "Blast", 250).json()["game"]
            status = state["status"]

        assert status == "completed"
        assert state["playerHealth"] == 0 or state["monsterHealth"] == 0
        if state["playerHealth"] == 0:
            assert state["winner"] == "monster"
        else:
            assert state["winner"] == "player"

        user = client.get("/api/users/profile").json()["user"]
        assert user["gamesPlayed"] == 1
        assert user["gamesWon"] == (1 if state["winner"] == "player" else 0)

    def test_recent_logs_limited(self, client):
        register(client)
        game = start_game(client, 300)
        for _ in range(11):
            state = _act(client, game["id"], "heal", 250).json()["game"]

        assert len(state["gameLogs"]) == 10
        full = client.get(f"/api/games/{game['id']}").json()["game"]
        assert len(full["gameLogs"]) == 12

    def test_other_users_game_hidden(self, app, client):
        register(client)
        game = start_game(client)

        other = TestClient(app)
        register(other, email="bob@example.com", full_name="Bob Jones")

        assert other.get(f"/api/games/{game['id']}").status_code == 404
        assert _act(other, game["id"], "attack", 55).status_code == 404


class TestHistory:
    def test_list_games_paginated_without_logs(self, client, clock):
        register(client)
        ids = []
        for _ in range(3):
            ids.append(start_game(client)["id"])
            clock.advance(1)

        response = client.get("/api/games", params={"page": 1, "limit": 2})
        assert response.status_code == 200
        body = response.json()
        assert [g["id"] for g in body["games"]] == [ids[2], ids[1]]
        assert all("gameLogs" not in g for g in body["games"])
        assert "version" not in body["games"][0]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

        second = client.get("/api/games", params={"page": 2, "limit": 2}).json()
        assert [g["id"] for g in second["games"]] == [ids[0]]

    def test_list_games_bad_query(self, client):
        register(client)
        response = client.get("/api/games", params={"limit": 500})
        assert response.status_code == 400

    def test_get_game_includes_all_logs(self, client):
        register(client)
        game = start_game(client)
        _act(client, game["id"], "Giveup", 55)

        response = client.get(f"/api/games/{game['id']}")
        assert response.status_code == 200
        full = response.json()["game"]
        assert full["status"] == "surrendered"
        assert full["completedAt"] is not None
        assert full["duration"] == 0
        assert len(full["gameLogs"]) == 3

    def test_get_unknown_game(self, client):
        register(client)
        response = client.get("/api/games/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Game not found"}

    def test_recent_games(self, client, clock):
        register(client)
        for _ in range(7):
            start_game(client)
            clock.advance(1)

        games = client.get("/api/users/recent-games").json()["games"]
        assert len(games) == 5
        assert all("gameLogs" not in g for g in games)

        assert len(client.get("/api/users/recent-games", params={"limit": 2}).json()["games"]) == 2


class TestStatsSummary:
    def test_empty(self, client):
        register(client)
        stats = client.get("/api/games/stats/summary").json()["stats"]
        assert stats == {
            "totalGames": 0,
            "gamesWon": 0,
            "gamesLost": 0,
            "gamesDraw": 0,
            "totalDamageDealt": 0,
            "totalDamageTaken": 0,
            "avgGameDuration": 0,
            "winRate": 0,
        }

    def test_counts_surrender_as_loss(self, client, clock):
        register(client)
        game = start_game(client)
        clock.advance(20)
        _act(client, game["id"], "Giveup", 40)
        start_game(client)

        stats = client.get("/api/games/stats/summary").json()["stats"]
        assert stats["totalGames"] == 2
        assert stats["gamesLost"] == 1
        assert stats["gamesWon"] == 0
        assert stats["avgGameDuration"] == 20
        assert stats["winRate"] == 0


class TestServerErrors:
    def test_turns_loaded_from_same_version_conflict(self, app, client):
        register(client)
        game = start_game(client)

        game_repo = app.state.games_service._game_repo
        load_active = game_repo.get_active_game
        first_load = []

        async def same_snapshot(game_id: str, user_id: str):
            if not first_load:
                first_load.append(await load_active(game_id, user_id))
            return first_load[0]

        with patch.object(game_repo, "get_active_game", same_snapshot):
            first = _act(client, game["id"], "attack", 55)
            second = _act(client, game["id"], "Blast", 55)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json() == {"success": False, "message": "Game was updated by another request, please retry"}

        stored = client.get(f"/api/games/{game['id']}").json()["game"]
        assert [log["action"] for log in stored["gameLogs"]] == ["game_start", "attack"]
        assert stored["playerHealth"] == first.json()["game"]["playerHealth"]

    def test_storage_failure_is_500(self, app, client):
        register(client)
        broken = MagicMock()
        broken.execute.side_effect = sqlite3.OperationalError("disk I/O error")
        app.state.db._conn = broken

        response = client.get("/api/games/stats/summary")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Server error, please try again later"}
        assert "disk I/O" not in response.text


class TestRateLimit:
    def test_rejects_over_budget(self, tmp_path):
        client = TestClient(build_app(tmp_path, rate_limit_requests=3))
        for _ in range(3):
            client.get("/api/auth/me")

        response = client.get("/api/auth/me")
        assert response.status_code == 429
        assert response.json()["message"] == "Too many requests, please try again later"
        assert client.get("/api/health").status_code == 200

    def test_rejection_readable_cross_origin(self, tmp_path):
        client = TestClient(build_app(tmp_path, rate_limit_requests=1))
        origin = {"Origin": "http://localhost:3000"}
        client.get("/api/auth/me", headers=origin)

        response = client.get("/api/auth/me", headers=origin)
        assert response.status_code == 429
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-allow-credentials"] == "true"


class TestLeaderboard:
    def test_public_and_lists_only_players_with_finished_games(self, app, client):
        register(client)
        _act(client, start_game(client)["id"], "Giveup", 55)

        idle = TestClient(app)
        register(idle, email="bob@example.com", full_name="Bob Jones")

        anonymous = TestClient(app)
        response = anonymous.get("/api/users/leaderboard")

        assert response.status_code == 200
        board = response.json()["leaderboard"]
        assert [entry["fullName"] for entry in board] == ["Alice Smith"]
        assert board[0]["gamesPlayed"] == 1
        assert board[0]["winRate"] == 0
        assert "email" not in board[0]
        assert "passwordHash" not in board[0]

    def test_limit_validated(self, client):
        response = client.get("/api/users/leaderboard", params={"limit": 0})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "limit"
