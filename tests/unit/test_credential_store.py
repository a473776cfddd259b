"""
Unit tests for the in-memory credential store.
"""

import asyncio

import pytest
import pytest_asyncio

from shared.auth.memory_store import InMemoryCredentialStore
from shared.errors import DuplicateEmail, InvalidCredentials
from shared.models.common import RecordStatus
from shared.models.user import MAX_REFRESH_TOKENS, Role, UserRecord


@pytest_asyncio.fixture
async def user(store: InMemoryCredentialStore) -> UserRecord:
    password_hash = store.hasher.hash("Passw0rd1")
    return await store.create_user("Alice Smith", "Alice@Example.com", password_hash)


class TestUserRecords:
    """Tests for user creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_user_defaults(self, user: UserRecord) -> None:
        """Test that new users are active regular users with no tokens."""
        assert user.role == Role.USER
        assert user.status == RecordStatus.ACTIVE
        assert user.is_active is True
        assert user.refresh_tokens == []
        assert user.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_find_by_email_is_case_insensitive(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test email normalization on lookup."""
        found = await store.find_by_email("  ALICE@example.COM ")

        assert found is not None
        assert found.id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_email(self, store: InMemoryCredentialStore, user: UserRecord) -> None:
        """Test that a second account with the same email is refused."""
        with pytest.raises(DuplicateEmail):
            await store.create_user("Other", "alice@example.com", "hash")

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that mutating a returned record does not touch the store."""
        user.role = Role.ADMIN

        stored = await store.find_by_id(user.id)
        assert stored is not None
        assert stored.role == Role.USER

    @pytest.mark.asyncio
    async def test_update_profile_email_conflict(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that an email belonging to another account is refused."""
        await store.create_user("Bob Jones", "bob@example.com", "hash")

        with pytest.raises(DuplicateEmail):
            await store.update_profile(user.id, email="bob@example.com")

    @pytest.mark.asyncio
    async def test_update_profile_moves_email_index(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that the old email no longer resolves after a change."""
        await store.update_profile(user.id, email="alice.new@example.com")

        assert await store.find_by_email("alice@example.com") is None
        assert await store.find_by_email("alice.new@example.com") is not None

    @pytest.mark.asyncio
    async def test_set_status_bumps_updated_at(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that mutations refresh the update timestamp."""
        updated = await store.set_status(user.id, RecordStatus.DISABLED)

        assert updated is not None
        assert updated.is_active is False
        assert updated.updated_at >= user.updated_at

    @pytest.mark.asyncio
    async def test_list_users_paginates(self, store: InMemoryCredentialStore) -> None:
        """Test page slicing and total count."""
        for i in range(7):
            await store.create_user(f"User {chr(65 + i)}", f"user{i}@example.com", "hash")

        page, total = await store.list_users(page=2, page_size=5)

        assert total == 7
        assert len(page) == 2


class TestVerifyCredentials:
    """Tests for email/password verification."""

    @pytest.mark.asyncio
    async def test_valid_credentials(self, store: InMemoryCredentialStore, user: UserRecord) -> None:
        """Test that the right password returns the user."""
        found = await store.verify_credentials("alice@example.com", "Passw0rd1")

        assert found.id == user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, store: InMemoryCredentialStore, user: UserRecord) -> None:
        """Test that a wrong password is rejected."""
        with pytest.raises(InvalidCredentials) as exc_info:
            await store.verify_credentials("alice@example.com", "Wrong0000")

        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email_same_error(self, store: InMemoryCredentialStore) -> None:
        """Test that an unknown email is indistinguishable from a wrong password."""
        with pytest.raises(InvalidCredentials) as exc_info:
            await store.verify_credentials("nobody@example.com", "Passw0rd1")

        assert exc_info.value.message == "Invalid email or password"


class TestRefreshTokens:
    """Tests for the bounded refresh token set."""

    @pytest.mark.asyncio
    async def test_append_and_check(self, store: InMemoryCredentialStore, user: UserRecord) -> None:
        await store.append_refresh_token(user.id, "t1")

        assert await store.has_refresh_token(user.id, "t1") is True
        assert await store.has_refresh_token(user.id, "t2") is False

    @pytest.mark.asyncio
    async def test_sixth_token_evicts_oldest(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test FIFO eviction beyond the limit."""
        for i in range(MAX_REFRESH_TOKENS + 1):
            await store.append_refresh_token(user.id, f"t{i}")

        stored = await store.find_by_id(user.id)
        assert stored is not None
        assert [e.token for e in stored.refresh_tokens] == ["t1", "t2", "t3", "t4", "t5"]

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        await store.append_refresh_token(user.id, "t1")

        await store.remove_refresh_token(user.id, "t1")
        await store.remove_refresh_token(user.id, "t1")

        assert await store.has_refresh_token(user.id, "t1") is False

    @pytest.mark.asyncio
    async def test_clear(self, store: InMemoryCredentialStore, user: UserRecord) -> None:
        for token in ("t1", "t2", "t3"):
            await store.append_refresh_token(user.id, token)

        await store.clear_refresh_tokens(user.id)

        stored = await store.find_by_id(user.id)
        assert stored is not None
        assert stored.refresh_tokens == []

    @pytest.mark.asyncio
    async def test_rotate_replaces_token(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that rotation swaps the old token for the new one, newest last."""
        await store.append_refresh_token(user.id, "old")
        await store.append_refresh_token(user.id, "other")

        assert await store.rotate_refresh_token(user.id, "old", "new") is True

        stored = await store.find_by_id(user.id)
        assert stored is not None
        assert [e.token for e in stored.refresh_tokens] == ["other", "new"]

    @pytest.mark.asyncio
    async def test_rotate_unknown_token(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that rotating a token that is not stored changes nothing."""
        await store.append_refresh_token(user.id, "current")

        assert await store.rotate_refresh_token(user.id, "stale", "new") is False
        assert await store.has_refresh_token(user.id, "new") is False

    @pytest.mark.asyncio
    async def test_concurrent_rotation_single_winner(
        self,
        store: InMemoryCredentialStore,
        user: UserRecord,
    ) -> None:
        """Test that two concurrent rotations of one token cannot both succeed."""
        await store.append_refresh_token(user.id, "shared")

        results = await asyncio.gather(
            store.rotate_refresh_token(user.id, "shared", "from-a"),
            store.rotate_refresh_token(user.id, "shared", "from-b"),
        )

        assert sorted(results) == [False, True]
        stored = await store.find_by_id(user.id)
        assert stored is not None
        assert len(stored.refresh_tokens) == 1
