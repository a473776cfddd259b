"""
Session Manager
===============

Orchestrates the session lifecycle on top of the token codec and the
credential store:

    Anonymous --register/login--> Authenticated
    Authenticated --refresh (rotation)--> Authenticated
    Authenticated --logout--> Anonymous
    Authenticated --logout-all / deactivation / password change--> Anonymous (forced)

Refresh tokens are single use: each successful refresh replaces the
presented token with a new one, so presenting an already rotated token
fails with `InvalidRefreshToken`. Such a reuse is logged as a possible
token theft.

Cookie handling is left to the HTTP layer.

Version: 0.1.0
"""

from dataclasses import dataclass

from shared.auth.jwt import TokenCodec, TokenPair
from shared.auth.password import PasswordHasher
from shared.auth.store import CredentialStore
from shared.errors import (
    AccountDeactivated,
    DuplicateEmail,
    InvalidRefreshToken,
    UserNotFound,
    ValidationFailed,
)
from shared.logging import get_logger
from shared.models.common import RecordStatus
from shared.models.user import Role, UserRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a flow that establishes a session."""

    user: UserRecord
    tokens: TokenPair


class SessionManager:
    """Login, registration, rotation and revocation of sessions."""

    def __init__(
        self,
        store: CredentialStore,
        codec: TokenCodec,
        hasher: PasswordHasher | None = None,
    ) -> None:
        self._store = store
        self._codec = codec
        self._hasher = hasher or store.hasher

    async def _open_session(self, user: UserRecord) -> SessionResult:
        tokens = self._codec.issue_pair(user.id, user.role)
        await self._store.append_refresh_token(user.id, tokens.refresh_token)
        return SessionResult(user=user, tokens=tokens)

    async def register(self, name: str, email: str, password: str) -> SessionResult:
        """
        Create a regular, active account and open its first session.

        Raises:
            DuplicateEmail: if the email is already registered
        """
        if await self._store.find_by_email(email) is not None:
            raise DuplicateEmail()

        password_hash = await self._hasher.hash_async(password)
        user = await self._store.create_user(name, email, password_hash, Role.USER)

        result = await self._open_session(user)
        logger.info("user_registered", user_id=user.id)
        return result

    async def login(self, email: str, password: str) -> SessionResult:
        """
        Authenticate with email and password.

        Deactivation is checked only after the password matched, so a
        disabled account is indistinguishable from a wrong password unless
        the caller knows the password.

        Raises:
            InvalidCredentials: unknown email or wrong password
            AccountDeactivated: correct credentials for a disabled account
        """
        user = await self._store.verify_credentials(email, password)

        if not user.is_active:
            logger.warning("login_blocked_inactive", user_id=user.id)
            raise AccountDeactivated("Account is deactivated. Please contact support.")

        result = await self._open_session(user)
        logger.info("user_logged_in", user_id=user.id)
        return result

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair (rotation).

        Raises:
            TokenExpired, TokenMalformed, TokenTypeMismatch: token verification
            UserNotFound: subject no longer exists
            AccountDeactivated: subject has been disabled
            InvalidRefreshToken: token is not in the stored set (reuse)
        """
        claims = self._codec.verify_refresh(refresh_token)

        user = await self._store.find_by_id(claims.subject_id)
        if user is None:
            logger.warning("refresh_unknown_user", user_id=claims.subject_id)
            raise UserNotFound("User not found")

        if not user.is_active:
            logger.warning("refresh_blocked_inactive", user_id=user.id)
            raise AccountDeactivated()

        tokens = self._codec.issue_pair(user.id, user.role)
        rotated = await self._store.rotate_refresh_token(
            user.id,
            refresh_token,
            tokens.refresh_token,
        )
        if not rotated:
            logger.warning(
                "refresh_token_reuse_detected",
                user_id=user.id,
                jti=claims.token_id,
            )
            raise InvalidRefreshToken()

        logger.info("refresh_token_rotated", user_id=user.id)
        return tokens

    async def logout(self, user_id: str, refresh_token: str | None) -> None:
        """Revoke one refresh token; idempotent when absent or not given."""
        if refresh_token:
            await self._store.remove_refresh_token(user_id, refresh_token)
        logger.info("user_logged_out", user_id=user_id)

    async def logout_all(self, user_id: str) -> None:
        """Revoke every refresh token of the user (all devices)."""
        await self._store.clear_refresh_tokens(user_id)
        logger.info("user_logged_out_all", user_id=user_id)

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> SessionResult:
        """
        Replace the password, revoke every session and open a new one.

        Raises:
            UserNotFound: user no longer exists
            ValidationFailed: current password does not match
        """
        user = await self._store.find_by_id(user_id)
        if user is None:
            raise UserNotFound()

        if not await self._hasher.verify_async(current_password, user.password_hash):
            logger.info("password_change_rejected", user_id=user_id)
            raise ValidationFailed("Current password is incorrect")

        new_hash = await self._hasher.hash_async(new_password)
        await self._store.set_password_hash(user_id, new_hash)
        await self._store.clear_refresh_tokens(user_id)

        result = await self._open_session(user)
        logger.info("password_changed", user_id=user_id)
        return result

    async def deactivate(self, user_id: str) -> UserRecord | None:
        """Disable an account and revoke all of its refresh tokens."""
        user = await self._store.set_status(user_id, RecordStatus.DISABLED)
        if user is None:
            return None

        await self._store.clear_refresh_tokens(user_id)
        logger.info("user_deactivated", user_id=user_id)
        return user
