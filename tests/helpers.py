"""
Test Helpers
============

Session setup and cookie inspection for HTTP tests.
"""

from dataclasses import dataclass
from http.cookies import Morsel, SimpleCookie
from typing import Any

from httpx import AsyncClient, Response

REFRESH_COOKIE = "refreshToken"
DEFAULT_PASSWORD = "Passw0rd1"
USER_EMAIL = "alice@example.com"
ADMIN_EMAIL = "bob@example.com"


@dataclass
class SessionInfo:
    """Tokens and identity returned by register/login."""

    user_id: str
    email: str
    access_token: str
    refresh_token: str

    @property
    def headers(self) -> dict[str, str]:
        return bearer(self.access_token)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def with_refresh_cookie(token: str, headers: dict[str, str] | None = None) -> dict[str, str]:
    """Request headers carrying the refresh cookie."""
    return {**(headers or {}), "Cookie": f"{REFRESH_COOKIE}={token}"}


def refresh_morsel(response: Response) -> Morsel[str] | None:
    """The refresh cookie set by a response, if any."""
    for header in response.headers.get_list("set-cookie"):
        parsed: SimpleCookie = SimpleCookie()
        parsed.load(header)
        if REFRESH_COOKIE in parsed:
            return parsed[REFRESH_COOKIE]
    return None


def refresh_token_from(response: Response) -> str:
    morsel = refresh_morsel(response)
    assert morsel is not None, "response did not set the refresh cookie"
    return morsel.value


def session_from(response: Response) -> SessionInfo:
    data: dict[str, Any] = response.json()["data"]
    return SessionInfo(
        user_id=data["user"]["id"],
        email=data["user"]["email"],
        access_token=data["accessToken"],
        refresh_token=refresh_token_from(response),
    )


async def register(client: AsyncClient, name: str, email: str, password: str) -> SessionInfo:
    response = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return session_from(response)


async def login(client: AsyncClient, email: str, password: str) -> SessionInfo:
    response = await client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return session_from(response)


async def make_admin(user_id: str) -> None:
    from shared.auth import get_credential_store
    from shared.models.user import Role

    await get_credential_store().set_role(user_id, Role.ADMIN)
