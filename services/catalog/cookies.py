"""
Refresh Token Cookie
====================

The refresh token travels only in an HttpOnly, SameSite=Strict cookie
scoped to the auth routes. It is never part of a JSON response body.

Version: 0.1.0
"""

from fastapi import Request, Response

from shared.config import settings
from shared.models.user import RefreshRequest


def set_refresh_cookie(response: Response, token: str) -> None:
    """Attach the refresh token cookie to a response."""
    response.set_cookie(
        key=settings.cookies.refresh_name,
        value=token,
        max_age=settings.jwt.refresh_ttl_seconds,
        path=settings.cookies.path,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.cookies.samesite,  # type: ignore[arg-type]
    )


def clear_refresh_cookie(response: Response) -> None:
    """Empty and expire the refresh token cookie."""
    response.delete_cookie(
        key=settings.cookies.refresh_name,
        path=settings.cookies.path,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.cookies.samesite,  # type: ignore[arg-type]
    )


def read_refresh_token(request: Request, body: RefreshRequest | None) -> str | None:
    """Cookie first, then the request body."""
    token = request.cookies.get(settings.cookies.refresh_name)
    if token:
        return token
    if body is not None and body.refresh_token:
        return body.refresh_token
    return None
