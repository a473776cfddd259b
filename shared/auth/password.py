"""
Password Hashing
================

Secure password hashing using bcrypt with a configurable work factor.

Hashing and verification are CPU-bound; the async variants run them in a
worker thread so request handling is not blocked.

Version: 0.1.0
"""

import asyncio
from functools import lru_cache

from passlib.context import CryptContext

from shared.config import settings


class PasswordHasher:
    """bcrypt hasher with a fixed number of rounds."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            str: Bcrypt hash of the password
        """
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Bcrypt hash to verify against

        Returns:
            bool: True if password matches hash
        """
        return self._context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        """Spend the time of a real verification (used for unknown accounts)."""
        self._context.dummy_verify()

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(self.verify, plain_password, hashed_password)

    async def dummy_verify_async(self) -> None:
        await asyncio.to_thread(self.dummy_verify)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Process-wide hasher using the configured work factor."""
    return PasswordHasher(rounds=settings.password.bcrypt_rounds)

