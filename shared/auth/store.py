"""
Credential Store Interface
==========================

Abstract base class for the store that owns user records: password hash,
role, status, and the bounded set of currently valid refresh tokens.

Implementations:
- MongoCredentialStore (production, `STORAGE_MODE=mongodb`)
- InMemoryCredentialStore (development/testing, `STORAGE_MODE=memory`)

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from typing import Any

from shared.auth.password import PasswordHasher, get_password_hasher
from shared.config import StorageMode, settings
from shared.errors import InvalidCredentials
from shared.logging import get_logger
from shared.models.common import RecordStatus
from shared.models.user import Role, UserRecord, normalize_email

logger = get_logger(__name__)


class CredentialStore(ABC):
    """
    Abstract credential store.

    Every mutation bumps the record's `updated_at`. Refresh token lists
    never exceed `MAX_REFRESH_TOKENS`; the oldest entries are evicted first.
    """

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self.hasher = hasher or get_password_hasher()

    @property
    @abstractmethod
    def mode(self) -> StorageMode:
        """Get the storage mode."""
        ...

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check store health."""
        ...

    # =========================================================================
    # Lookup
    # =========================================================================

    @abstractmethod
    async def find_by_email(self, email: str) -> UserRecord | None:
        """Find a user by (normalized) email."""
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> UserRecord | None:
        """Find a user by id, including disabled users."""
        ...

    @abstractmethod
    async def list_users(self, page: int, page_size: int) -> tuple[list[UserRecord], int]:
        """
        List users, newest first.

        Returns:
            Tuple of (users on the page, total user count)
        """
        ...

    # =========================================================================
    # Creation and profile
    # =========================================================================

    @abstractmethod
    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.USER,
    ) -> UserRecord:
        """
        Create an active user.

        Raises:
            DuplicateEmail: if the email is already registered
        """
        ...

    @abstractmethod
    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
    ) -> UserRecord | None:
        """
        Update name and/or email.

        Raises:
            DuplicateEmail: if the email belongs to another user
        """
        ...

    @abstractmethod
    async def set_status(self, user_id: str, status: RecordStatus) -> UserRecord | None:
        """Enable or disable an account (soft delete)."""
        ...

    @abstractmethod
    async def set_role(self, user_id: str, role: Role) -> UserRecord | None:
        """Change a user's role."""
        ...

    @abstractmethod
    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        """Replace the stored password hash."""
        ...

    # =========================================================================
    # Refresh tokens
    # =========================================================================

    @abstractmethod
    async def append_refresh_token(self, user_id: str, token: str) -> None:
        """Append a token, evicting the oldest entries beyond the limit."""
        ...

    @abstractmethod
    async def remove_refresh_token(self, user_id: str, token: str) -> None:
        """Remove a token by exact value; no-op when absent."""
        ...

    @abstractmethod
    async def clear_refresh_tokens(self, user_id: str) -> None:
        """Remove every stored token for the user."""
        ...

    @abstractmethod
    async def has_refresh_token(self, user_id: str, token: str) -> bool:
        """Membership test for a token."""
        ...

    @abstractmethod
    async def rotate_refresh_token(self, user_id: str, old_token: str, new_token: str) -> bool:
        """
        Replace `old_token` with `new_token` if and only if `old_token` is present.

        The presence check and the removal are a single conditional update,
        so of two concurrent rotations of the same token exactly one returns
        True.

        Returns:
            True if the old token was present and has been replaced
        """
        ...

    # =========================================================================
    # Credentials
    # =========================================================================

    async def verify_credentials(self, email: str, password: str) -> UserRecord:
        """
        Look up a user by email and check the password.

        Unknown email and wrong password are indistinguishable to the caller;
        an unknown email still costs one hash comparison.

        Raises:
            InvalidCredentials: on either failure
        """
        user = await self.find_by_email(normalize_email(email))

        if user is None:
            await self.hasher.dummy_verify_async()
            logger.info("login_failed", reason="unknown_email")
            raise InvalidCredentials()

        if not await self.hasher.verify_async(password, user.password_hash):
            logger.info("login_failed", reason="password_mismatch", user_id=user.id)
            raise InvalidCredentials()

        return user


# Global store instance
_store: CredentialStore | None = None


def get_credential_store() -> CredentialStore:
    """
    Get the configured credential store instance.

    Returns:
        CredentialStore instance based on settings
    """
    global _store

    if _store is None:
        mode = settings.storage.mode

        if mode == StorageMode.MEMORY:
            from shared.auth.memory_store import InMemoryCredentialStore

            _store = InMemoryCredentialStore()
        elif mode == StorageMode.MONGODB:
            from shared.auth.mongo_store import MongoCredentialStore

            _store = MongoCredentialStore()
        else:
            raise ValueError(f"Unknown storage mode: {mode}")

        logger.info("credential_store_initialized", mode=mode.value)

    return _store


def set_credential_store(store: CredentialStore) -> None:
    """
    Set a custom credential store.

    Args:
        store: CredentialStore instance
    """
    global _store
    _store = store
    logger.info("credential_store_set", mode=store.mode.value)


def reset_credential_store() -> None:
    """Reset the store to be re-initialized."""
    global _store
    _store = None
