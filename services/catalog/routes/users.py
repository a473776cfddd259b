"""
User Routes
===========

Account administration. Users may read, edit and deactivate their own
account; admins may do so for any account and list all users.

Version: 0.1.0
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from services.catalog.cookies import clear_refresh_cookie
from services.catalog.services import ensure_owner_or_admin
from shared.auth import AdminUser, CurrentUser, Sessions
from shared.auth.store import CredentialStore, get_credential_store
from shared.errors import ResourceNotFound
from shared.logging import get_logger
from shared.models.common import BaseResponse, Pagination
from shared.models.user import ProfileUpdate, PublicUser, UserListPayload, UserPayload

logger = get_logger(__name__)

router = APIRouter()

Store = Annotated[CredentialStore, Depends(get_credential_store)]


@router.get("", response_model=BaseResponse[UserListPayload])
async def list_users(
    ctx: AdminUser,
    store: Store,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> BaseResponse[UserListPayload]:
    """List all users, newest first. Admin only."""
    records, total = await store.list_users(page, limit)

    logger.debug("users_listed", total=total, page=page)

    return BaseResponse(
        data=UserListPayload(
            users=[PublicUser.from_record(r) for r in records],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/{user_id}", response_model=BaseResponse[UserPayload])
async def get_user(user_id: str, ctx: CurrentUser, store: Store) -> BaseResponse[UserPayload]:
    """Get a user by ID."""
    ensure_owner_or_admin(ctx, user_id, "user")

    record = await store.find_by_id(user_id)
    if record is None:
        raise ResourceNotFound("User not found")

    return BaseResponse(data=UserPayload(user=PublicUser.from_record(record)))


@router.put("/{user_id}", response_model=BaseResponse[UserPayload])
async def update_user(
    user_id: str,
    body: ProfileUpdate,
    ctx: CurrentUser,
    store: Store,
) -> BaseResponse[UserPayload]:
    """
    Update name and/or email.

    Raises:
        DuplicateEmail: the new email belongs to another account
    """
    ensure_owner_or_admin(ctx, user_id, "user")

    record = await store.update_profile(user_id, name=body.name, email=body.email)
    if record is None:
        raise ResourceNotFound("User not found")

    logger.info("user_updated", target_user_id=user_id)
    return BaseResponse(
        data=UserPayload(user=PublicUser.from_record(record)),
        message="User updated successfully",
    )


@router.delete("/{user_id}", response_model=BaseResponse[None])
async def delete_user(
    user_id: str,
    response: Response,
    ctx: CurrentUser,
    sessions: Sessions,
) -> BaseResponse[None]:
    """
    Deactivate an account.

    The record is kept with status `disabled` and all of its sessions are
    revoked.
    """
    ensure_owner_or_admin(ctx, user_id, "user")

    record = await sessions.deactivate(user_id)
    if record is None:
        raise ResourceNotFound("User not found")

    if user_id == ctx.user_id:
        clear_refresh_cookie(response)

    return BaseResponse(message="User deactivated successfully")
