"""Password hashing: bcrypt for production, unsalted SHA-256 for tests.

bcrypt is CPU-bound (~100ms per call), so hashing and verification run in a
worker thread via anyio to keep the event loop responsive.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

import bcrypt
from anyio import to_thread


@runtime_checkable
class PasswordHasher(Protocol):
    async def hash(self, plain: str) -> str: ...

    async def verify(self, plain: str, hashed: str) -> bool: ...


class BcryptHasher:
    async def hash(self, plain: str) -> str:
        encoded = plain.encode("utf-8")
        return await to_thread.run_sync(lambda: bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8"))

    async def verify(self, plain: str, hashed: str) -> bool:
        """Return False for malformed hashes instead of raising."""
        encoded_plain = plain.encode("utf-8")
        encoded_hash = hashed.encode("utf-8")
        try:
            return await to_thread.run_sync(lambda: bcrypt.checkpw(encoded_plain, encoded_hash))
        except ValueError:
            return False


_SIMPLE_PREFIX = "simple$"


class SimpleHasher:
    """Instant SHA-256 hasher. Test use only."""

    async def hash(self, plain: str) -> str:
        return _SIMPLE_PREFIX + hashlib.sha256(plain.encode("utf-8")).hexdigest()

    async def verify(self, plain: str, hashed: str) -> bool:
        if not hashed.startswith(_SIMPLE_PREFIX):
            return False
        return hashed == await self.hash(plain)


_HASHERS: dict[str, type[BcryptHasher | SimpleHasher]] = {
    "bcrypt": BcryptHasher,
    "simple": SimpleHasher,
}


def get_hasher(name: str = "bcrypt") -> PasswordHasher:
    """Return a PasswordHasher by name ("bcrypt" or "simple")."""
    try:
        return _HASHERS[name]()
    except KeyError:
        raise ValueError(f"Unknown password hasher: {name!r}") from None
