"""
Authentication Module
=====================

Dual-token (access + refresh) authentication and authorization.

Features:
- Access/refresh token issuance and verification with independent secrets
- Password hashing with bcrypt
- Credential store with bounded, rotating refresh token sets
- Session lifecycle (register, login, refresh, logout, logout-all)
- FastAPI dependencies for route protection and role-based access control

Usage:
    from shared.auth import CurrentUser, OptionalUser, require_admin

    @router.get("/me")
    async def me(ctx: CurrentUser):
        return {"user": ctx.user}

    @router.get("/admin")
    async def admin(ctx: AuthContext = Depends(require_admin)):
        return {"admin": True}
"""

from shared.auth.dependencies import (
    AdminUser,
    AuthContext,
    CurrentUser,
    OptionalUser,
    RolePolicy,
    Sessions,
    authenticate,
    authorize,
    authorize_roles,
    get_session_manager,
    optional_auth,
    require_admin,
)
from shared.auth.jwt import (
    AccessClaims,
    RefreshClaims,
    TokenCodec,
    TokenPair,
    TokenType,
    get_token_codec,
)
from shared.auth.password import (
    PasswordHasher,
    get_password_hasher,
)
from shared.auth.session import SessionManager, SessionResult
from shared.auth.store import (
    CredentialStore,
    get_credential_store,
    reset_credential_store,
    set_credential_store,
)

__all__ = [
    # JWT
    "AccessClaims",
    "RefreshClaims",
    "TokenCodec",
    "TokenPair",
    "TokenType",
    "get_token_codec",
    # Password
    "PasswordHasher",
    "get_password_hasher",
    # Store
    "CredentialStore",
    "get_credential_store",
    "set_credential_store",
    "reset_credential_store",
    # Sessions
    "SessionManager",
    "SessionResult",
    # Dependencies
    "AuthContext",
    "RolePolicy",
    "authenticate",
    "authorize",
    "authorize_roles",
    "optional_auth",
    "require_admin",
    "get_session_manager",
    "CurrentUser",
    "OptionalUser",
    "AdminUser",
    "Sessions",
]
