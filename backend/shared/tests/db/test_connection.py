"""Tests for Database connection, schema, and transactions."""

from __future__ import annotations

import sqlite3
import stat
import sys
from typing import TYPE_CHECKING

import pytest

from shared.db.connection import Database

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def db(tmp_path: Path):
    database = Database(tmp_path / "test.db")
    database.connect()
    yield database
    database.close()


class TestConnect:
    def test_creates_schema(self, db):
        tables = {row[0] for row in db.connection.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"users", "games"} <= tables

    def test_creates_parent_directory(self, tmp_path: Path):
        database = Database(tmp_path / "nested" / "dir" / "test.db")
        database.connect()
        assert (tmp_path / "nested" / "dir" / "test.db").exists()
        database.close()

    def test_enables_foreign_keys(self, db):
        assert db.connection.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_reconnect_is_idempotent(self, tmp_path: Path):
        database = Database(tmp_path / "test.db")
        database.connect()
        database.close()
        database.connect()
        assert database.connection is not None
        database.close()

    def test_connection_raises_when_closed(self, tmp_path: Path):
        database = Database(tmp_path / "test.db")
        with pytest.raises(RuntimeError, match="not connected"):
            _ = database.connection

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_restricts_file_permissions(self, db, tmp_path: Path):
        mode = stat.S_IMODE((tmp_path / "test.db").stat().st_mode)
        assert mode == 0o600


class TestSchemaConstraints:
    def test_email_unique_case_insensitive(self, db):
        db.connection.execute("INSERT INTO users (id, email, data) VALUES ('u1', 'a@example.com', '{}')")
        with pytest.raises(sqlite3.IntegrityError):
            db.connection.execute("INSERT INTO users (id, email, data) VALUES ('u2', 'A@EXAMPLE.com', '{}')")

    def test_game_requires_existing_user(self, db):
        with pytest.raises(sqlite3.IntegrityError):
            db.connection.execute(
                "INSERT INTO games (id, user_id, status, version, created_at, data) "
                "VALUES ('g1', 'missing', 'active', 0, '2025-01-01', '{}')",
            )


class TestTransaction:
    def test_commits_on_success(self, db):
        with db.transaction() as conn:
            conn.execute("INSERT INTO users (id, email, data) VALUES ('u1', 'a@example.com', '{}')")
        assert db.connection.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1

    def test_rolls_back_every_statement_on_error(self, db):
        with pytest.raises(ValueError, match="boom"), db.transaction() as conn:
            conn.execute("INSERT INTO users (id, email, data) VALUES ('u1', 'a@example.com', '{}')")
            conn.execute("INSERT INTO users (id, email, data) VALUES ('u2', 'b@example.com', '{}')")
            raise ValueError("boom")
        assert db.connection.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0

    def test_failed_commit_rolls_back_and_frees_connection(self, db):
        real_conn = db.connection
        db._conn = _CommitFailsOnce(real_conn)

        with pytest.raises(sqlite3.OperationalError, match="locked"), db.transaction() as conn:
            conn.execute("INSERT INTO users (id, email, data) VALUES ('u1', 'a@example.com', '{}')")

        assert not real_conn.in_transaction
        with db.transaction() as conn:
            conn.execute("INSERT INTO users (id, email, data) VALUES ('u2', 'b@example.com', '{}')")
        assert [row[0] for row in real_conn.execute("SELECT id FROM users")] == ["u2"]


class _CommitFailsOnce:
    """Connection wrapper whose first COMMIT fails like a busy database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._failed = False

    def execute(self, sql: str, *args):
        if sql == "COMMIT" and not self._failed:
            self._failed = True
            raise sqlite3.OperationalError("database is locked")
        return self._conn.execute(sql, *args)

    def __getattr__(self, name: str):
        return getattr(self._conn, name)
