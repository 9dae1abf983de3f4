"""In-memory auth sessions keyed by the token handed to the client."""

import asyncio
import contextlib
import time
from uuid import uuid4

import structlog

from shared.auth.models import AuthSession

CLEANUP_INTERVAL_SECONDS = 300
DEFAULT_SESSION_TTL_SECONDS = 7 * 86400

logger = structlog.get_logger()


class AuthSessionStore:
    """Token -> session map with expiry.

    Sessions do not survive a restart. Expired entries are dropped lazily on
    lookup and in bulk by a background sweep started with start_cleanup().
    """

    def __init__(self, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS) -> None:
        self._ttl_seconds = ttl_seconds
        self._sessions: dict[str, AuthSession] = {}
        self._cleanup_task: asyncio.Task[None] | None = None

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def create_session(self, user_id: str, full_name: str, ttl_seconds: int | None = None) -> AuthSession:
        issued_at = time.time()
        lifetime = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        session = AuthSession(
            session_id=str(uuid4()),
            user_id=user_id,
            full_name=full_name,
            created_at=issued_at,
            expires_at=issued_at + lifetime,
        )
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> AuthSession | None:
        """Look up a token; an expired session is removed and reported as missing."""
        session = self._sessions.get(session_id)
        if session is not None and time.time() > session.expires_at:
            del self._sessions[session_id]
            return None
        return session

    def delete_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def rename_sessions(self, user_id: str, full_name: str) -> None:
        """Keep the cached display name in step with the user's profile."""
        for session in self._sessions.values():
            if session.user_id == user_id:
                session.full_name = full_name

    def cleanup_expired(self) -> int:
        """Drop every expired session and return how many were removed."""
        cutoff = time.time()
        stale = [token for token, session in self._sessions.items() if cutoff > session.expires_at]
        for token in stale:
            del self._sessions[token]
        if stale:
            logger.info("expired sessions removed", count=len(stale), remaining=len(self._sessions))
        return len(stale)

    def start_cleanup(self) -> None:
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._sweep_forever())

    async def stop_cleanup(self) -> None:
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            self.cleanup_expired()
