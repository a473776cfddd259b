"""
Test Configuration
==================

Pytest fixtures for catalog tests.
"""

import os
from collections.abc import AsyncGenerator, Iterator
from http.cookiejar import CookieJar, DefaultCookiePolicy

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["STORAGE_MODE"] = "memory"
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret-0123456789abcdef"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdef"

from shared.auth import AuthContext, PasswordHasher  # noqa: E402
from shared.auth.memory_store import InMemoryCredentialStore  # noqa: E402
from shared.auth.jwt import TokenCodec  # noqa: E402
from shared.config import JWTSettings  # noqa: E402
from tests.helpers import (  # noqa: E402
    ADMIN_EMAIL,
    DEFAULT_PASSWORD,
    USER_EMAIL,
    SessionInfo,
    make_admin,
    register,
)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_stores() -> Iterator[None]:
    """Fresh in-memory stores for every test."""
    from services.catalog.services import reset_product_store
    from shared.auth import reset_credential_store

    reset_credential_store()
    reset_product_store()
    yield
    reset_credential_store()
    reset_product_store()


@pytest.fixture
def jwt_config() -> JWTSettings:
    """Token settings independent of the environment."""
    return JWTSettings(
        access_secret="unit-access-secret-0123456789abcdef",
        refresh_secret="unit-refresh-secret-0123456789abcdef",
    )


@pytest.fixture
def codec(jwt_config: JWTSettings) -> TokenCodec:
    return TokenCodec(jwt_config)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def store(hasher: PasswordHasher) -> InMemoryCredentialStore:
    return InMemoryCredentialStore(hasher=hasher)


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client for the Catalog Service.

    The cookie jar refuses every cookie, so each request carries exactly
    the cookies a test passes explicitly.
    """
    from services.catalog.main import app

    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies=jar,
    ) as client:
        yield client


@pytest_asyncio.fixture
async def user_session(client: AsyncClient) -> SessionInfo:
    """A registered regular user."""
    return await register(client, "Alice Smith", USER_EMAIL, DEFAULT_PASSWORD)


@pytest_asyncio.fixture
async def admin_session(client: AsyncClient) -> SessionInfo:
    """A registered user promoted to admin."""
    session = await register(client, "Bob Admin", ADMIN_EMAIL, DEFAULT_PASSWORD)
    await make_admin(session.user_id)
    return session


@pytest.fixture
def admin_context() -> AuthContext:
    from datetime import UTC, datetime

    from shared.models.user import PublicUser, Role

    now = datetime.now(UTC)
    user = PublicUser(
        id="admin-1",
        name="Admin",
        email="admin@example.com",
        role=Role.ADMIN,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    return AuthContext(user=user, user_id=user.id, role=Role.ADMIN)
