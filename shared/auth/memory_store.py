"""
In-Memory Credential Store
==========================

Dictionary-backed credential store for development and testing.

Data is stored in memory and lost on restart. Records handed out are
copies; all mutations go through the store under a single lock.

Version: 0.1.0
"""

import asyncio
import uuid
from typing import Any

from shared.auth.password import PasswordHasher
from shared.auth.store import CredentialStore
from shared.config import StorageMode
from shared.errors import DuplicateEmail
from shared.logging import get_logger
from shared.models.common import RecordStatus, utcnow
from shared.models.user import (
    MAX_REFRESH_TOKENS,
    RefreshTokenEntry,
    Role,
    UserRecord,
    normalize_email,
)

logger = get_logger(__name__)


class InMemoryCredentialStore(CredentialStore):
    """In-memory credential store."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        super().__init__(hasher)
        self._users: dict[str, UserRecord] = {}
        self._by_email: dict[str, str] = {}
        self._lock = asyncio.Lock()

        logger.debug("memory_credential_store_initialized")

    @property
    def mode(self) -> StorageMode:
        return StorageMode.MEMORY

    async def health_check(self) -> dict[str, Any]:
        """Check store health."""
        return {
            "status": "healthy",
            "mode": self.mode.value,
            "users": len(self._users),
        }

    def clear_all(self) -> None:
        """Clear all stored users (for testing)."""
        self._users.clear()
        self._by_email.clear()

    def _touch(self, user: UserRecord) -> None:
        user.updated_at = utcnow()

    # =========================================================================
    # Lookup
    # =========================================================================

    async def find_by_email(self, email: str) -> UserRecord | None:
        user_id = self._by_email.get(normalize_email(email))
        if user_id is None:
            return None
        return self._users[user_id].model_copy(deep=True)

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def list_users(self, page: int, page_size: int) -> tuple[list[UserRecord], int]:
        ordered = sorted(self._users.values(), key=lambda u: u.created_at, reverse=True)
        start = (page - 1) * page_size
        items = [u.model_copy(deep=True) for u in ordered[start : start + page_size]]
        return items, len(ordered)

    # =========================================================================
    # Creation and profile
    # =========================================================================

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.USER,
    ) -> UserRecord:
        email = normalize_email(email)
        async with self._lock:
            if email in self._by_email:
                raise DuplicateEmail()

            user = UserRecord(
                id=uuid.uuid4().hex,
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
            )
            self._users[user.id] = user
            self._by_email[email] = user.id

        logger.info("user_created", user_id=user.id, role=role.value)
        return user.model_copy(deep=True)

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
    ) -> UserRecord | None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None

            if email is not None:
                email = normalize_email(email)
                owner = self._by_email.get(email)
                if owner is not None and owner != user_id:
                    raise DuplicateEmail("Email already in use")
                del self._by_email[user.email]
                self._by_email[email] = user_id
                user.email = email

            if name is not None:
                user.name = name

            self._touch(user)
            return user.model_copy(deep=True)

    async def set_status(self, user_id: str, status: RecordStatus) -> UserRecord | None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user.status = status
            self._touch(user)
            return user.model_copy(deep=True)

    async def set_role(self, user_id: str, role: Role) -> UserRecord | None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user.role = role
            self._touch(user)
            return user.model_copy(deep=True)

    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            user.password_hash = password_hash
            self._touch(user)
            return True

    # =========================================================================
    # Refresh tokens
    # =========================================================================

    async def append_refresh_token(self, user_id: str, token: str) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return
            user.refresh_tokens.append(RefreshTokenEntry(token=token))
            user.refresh_tokens = user.refresh_tokens[-MAX_REFRESH_TOKENS:]
            self._touch(user)

    async def remove_refresh_token(self, user_id: str, token: str) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return
            user.refresh_tokens = [e for e in user.refresh_tokens if e.token != token]
            self._touch(user)

    async def clear_refresh_tokens(self, user_id: str) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return
            user.refresh_tokens = []
            self._touch(user)

    async def has_refresh_token(self, user_id: str, token: str) -> bool:
        user = self._users.get(user_id)
        return user is not None and user.has_refresh_token(token)

    async def rotate_refresh_token(self, user_id: str, old_token: str, new_token: str) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None or not user.has_refresh_token(old_token):
                return False
            remaining = [e for e in user.refresh_tokens if e.token != old_token]
            remaining.append(RefreshTokenEntry(token=new_token))
            user.refresh_tokens = remaining[-MAX_REFRESH_TOKENS:]
            self._touch(user)
            return True
