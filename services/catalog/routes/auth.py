"""
Auth Routes
===========

Registration, login, token refresh and logout.

Version: 0.1.0
"""

from fastapi import APIRouter, Body, Request, Response, status

from services.catalog.cookies import (
    clear_refresh_cookie,
    read_refresh_token,
    set_refresh_cookie,
)
from shared.auth import CurrentUser, Sessions, SessionResult
from shared.errors import NoToken
from shared.logging import get_logger
from shared.models.common import BaseResponse
from shared.models.user import (
    AccessTokenPayload,
    AuthPayload,
    LoginRequest,
    PasswordChangeRequest,
    PublicUser,
    RefreshRequest,
    RegisterRequest,
    UserPayload,
)

logger = get_logger(__name__)

router = APIRouter()


def _auth_payload(result: SessionResult) -> AuthPayload:
    return AuthPayload(
        user=PublicUser.from_record(result.user),
        access_token=result.tokens.access_token,
        expires_in=result.tokens.expires_in,
    )


@router.post(
    "/register",
    response_model=BaseResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    response: Response,
    sessions: Sessions,
) -> BaseResponse[AuthPayload]:
    """
    Create an account and sign in.

    The refresh token is set as a cookie; the access token is returned in
    the body.
    """
    result = await sessions.register(body.name, body.email, body.password)
    set_refresh_cookie(response, result.tokens.refresh_token)

    return BaseResponse(data=_auth_payload(result), message="User registered successfully")


@router.post("/login", response_model=BaseResponse[AuthPayload])
async def login(
    body: LoginRequest,
    response: Response,
    sessions: Sessions,
) -> BaseResponse[AuthPayload]:
    """Sign in with email and password."""
    result = await sessions.login(body.email, body.password)
    set_refresh_cookie(response, result.tokens.refresh_token)

    return BaseResponse(data=_auth_payload(result), message="Login successful")


@router.post("/refresh", response_model=BaseResponse[AccessTokenPayload])
async def refresh(
    request: Request,
    response: Response,
    sessions: Sessions,
    body: RefreshRequest | None = Body(default=None),
) -> BaseResponse[AccessTokenPayload]:
    """
    Exchange the refresh token for a new token pair.

    The presented refresh token is consumed; a replaced cookie carries its
    successor.
    """
    token = read_refresh_token(request, body)
    if token is None:
        raise NoToken("Refresh token not provided")

    tokens = await sessions.refresh(token)
    set_refresh_cookie(response, tokens.refresh_token)

    return BaseResponse(
        data=AccessTokenPayload(
            access_token=tokens.access_token,
            expires_in=tokens.expires_in,
        ),
        message="Token refreshed successfully",
    )


@router.post("/logout", response_model=BaseResponse[None])
async def logout(
    request: Request,
    response: Response,
    ctx: CurrentUser,
    sessions: Sessions,
    body: RefreshRequest | None = Body(default=None),
) -> BaseResponse[None]:
    """Revoke the current refresh token and clear the cookie."""
    await sessions.logout(ctx.user_id, read_refresh_token(request, body))
    clear_refresh_cookie(response)

    return BaseResponse(message="Logout successful")


@router.post("/logout-all", response_model=BaseResponse[None])
async def logout_all(
    response: Response,
    ctx: CurrentUser,
    sessions: Sessions,
) -> BaseResponse[None]:
    """Revoke every refresh token of the account (all devices)."""
    await sessions.logout_all(ctx.user_id)
    clear_refresh_cookie(response)

    return BaseResponse(message="Logged out from all devices")


@router.get("/me", response_model=BaseResponse[UserPayload])
async def me(ctx: CurrentUser) -> BaseResponse[UserPayload]:
    """Current user profile."""
    return BaseResponse(data=UserPayload(user=ctx.user))


@router.put("/password", response_model=BaseResponse[AuthPayload])
async def change_password(
    body: PasswordChangeRequest,
    response: Response,
    ctx: CurrentUser,
    sessions: Sessions,
) -> BaseResponse[AuthPayload]:
    """
    Change the password.

    Every existing session is revoked; the caller receives a fresh pair.
    """
    result = await sessions.change_password(
        ctx.user_id,
        body.current_password,
        body.new_password,
    )
    set_refresh_cookie(response, result.tokens.refresh_token)

    return BaseResponse(data=_auth_payload(result), message="Password changed successfully")
