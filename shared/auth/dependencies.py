"""
FastAPI Authentication Dependencies
===================================

Request-time gate composed per route:

- `authenticate`: a valid access token for an existing, active user is
  mandatory
- `optional_auth`: same resolution, but any failure leaves the request
  anonymous
- `RolePolicy`: a set of permitted roles checked by `authorize` after
  `authenticate` has run

The bearer token is taken from the `Authorization: Bearer` header, or
from the access token cookie when no header is sent.

Version: 0.1.0
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.auth.jwt import TokenCodec, get_token_codec
from shared.auth.session import SessionManager
from shared.auth.store import CredentialStore, get_credential_store
from shared.config import settings
from shared.errors import (
    AccountDeactivated,
    AuthenticationError,
    CatalogError,
    InsufficientRole,
    NoToken,
    UserNotFound,
)
from shared.logging import bind_context, get_logger
from shared.models.user import PublicUser, Role


logger = get_logger(__name__)

# Bearer scheme for token extraction from Authorization header
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity attached to an authenticated request."""

    user: PublicUser
    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    """Bearer header first, then the access token cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.cookies.access_name) or None


async def _resolve(token: str, codec: TokenCodec, store: CredentialStore) -> AuthContext:
    claims = codec.verify_access(token)

    user = await store.find_by_id(claims.subject_id)
    if user is None:
        logger.warning("auth_user_not_found", user_id=claims.subject_id)
        raise UserNotFound()

    if not user.is_active:
        logger.warning("inactive_user_access_attempt", user_id=user.id)
        raise AccountDeactivated()

    return AuthContext(
        user=PublicUser.from_record(user),
        user_id=user.id,
        role=user.role,
    )


def _attach(request: Request, context: AuthContext) -> None:
    request.state.user = context.user
    request.state.user_id = context.user_id
    request.state.role = context.role
    bind_context(user_id=context.user_id)


async def authenticate(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AuthContext:
    """
    Require a valid access token.

    Raises:
        NoToken: no bearer header and no access cookie (401)
        TokenExpired, TokenMalformed, TokenTypeMismatch: verification (401)
        UserNotFound: subject does not exist (401)
        AccountDeactivated: subject is disabled (403)
    """
    token = extract_token(request, credentials)
    if token is None:
        logger.warning("auth_token_missing", path=request.url.path)
        raise NoToken()

    context = await _resolve(token, codec, store)
    _attach(request, context)

    logger.debug("user_authenticated", user_id=context.user_id)
    return context


async def optional_auth(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AuthContext | None:
    """Identify the caller if possible; never rejects the request."""
    token = extract_token(request, credentials)
    if token is None:
        return None

    try:
        context = await _resolve(token, codec, store)
    except CatalogError as e:
        logger.debug("optional_auth_ignored", reason=e.error_code)
        return None

    _attach(request, context)
    return context


def authorize(context: AuthContext | None, policy: "RolePolicy") -> AuthContext:
    """
    Check an authenticated context against a role policy.

    Raises:
        AuthenticationError: no identity (401)
        InsufficientRole: role outside the policy (403)
    """
    if context is None:
        raise AuthenticationError("Authentication required.")

    if context.role not in policy.allowed:
        logger.warning(
            "insufficient_roles",
            user_id=context.user_id,
            user_role=context.role.value,
            required_roles=sorted(r.value for r in policy.allowed),
        )
        raise InsufficientRole(
            "Access denied. Required roles: "
            + ", ".join(sorted(r.value for r in policy.allowed))
        )

    return context


@dataclass(frozen=True)
class RolePolicy:
    """
    Set of roles permitted on a route.

    Usage:
        @router.get("/admin")
        async def admin_only(ctx: AuthContext = Depends(require_admin)):
            ...
    """

    allowed: frozenset[Role]

    async def __call__(
        self,
        context: Annotated[AuthContext, Depends(authenticate)],
    ) -> AuthContext:
        return authorize(context, self)


def authorize_roles(*roles: Role) -> RolePolicy:
    """Build a policy permitting any of the given roles."""
    return RolePolicy(allowed=frozenset(roles))


require_admin = authorize_roles(Role.ADMIN)


def get_session_manager(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> SessionManager:
    """Session manager bound to the configured store and codec."""
    return SessionManager(store, codec)


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(authenticate)]
OptionalUser = Annotated[AuthContext | None, Depends(optional_auth)]
AdminUser = Annotated[AuthContext, Depends(require_admin)]
Sessions = Annotated[SessionManager, Depends(get_session_manager)]
