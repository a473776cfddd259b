"""
JWT Token Management
====================

Issues and verifies the two token kinds used by the session subsystem:

- access tokens: short-lived, carry the subject id and role
- refresh tokens: long-lived, carry only the subject id and are honoured
  only while present in the user's stored refresh token set

Each kind is signed with its own secret. Every token embeds a fixed issuer
and audience which are cross-checked on verification, plus a random `jti`
so that two tokens minted for the same subject in the same second differ.

Version: 0.1.0
"""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt
from pydantic import BaseModel, Field

from shared.config import JWTSettings, settings
from shared.errors import TokenExpired, TokenMalformed, TokenTypeMismatch
from shared.logging import get_logger
from shared.models.user import Role


logger = get_logger(__name__)


class TokenType(str, Enum):
    """Kind of token, embedded as the `type` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """Verified claims common to both token kinds."""

    subject_id: str = Field(..., description="Subject (user ID)")
    token_type: TokenType
    token_id: str = Field(..., description="Unique token id (jti)")
    issued_at: datetime
    expires_at: datetime


class AccessClaims(TokenClaims):
    """Verified access token claims."""

    role: Role


class RefreshClaims(TokenClaims):
    """Verified refresh token claims."""


class TokenPair(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(description="Access token expiry in seconds")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenCodec:
    """
    Encode and verify signed, expiring tokens.

    Pure with respect to its inputs: secrets, lifetimes, issuer and audience
    come from the injected configuration, and the current time from the
    injected clock.
    """

    def __init__(
        self,
        config: JWTSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or _utcnow

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(minutes=self._config.access_token_expire_minutes)

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(days=self._config.refresh_token_expire_days)

    def _secret_for(self, token_type: TokenType) -> str:
        if token_type == TokenType.ACCESS:
            return self._config.access_secret.get_secret_value()
        return self._config.refresh_secret.get_secret_value()

    def _encode(
        self,
        token_type: TokenType,
        subject_id: str,
        ttl: timedelta,
        extra: dict[str, Any] | None = None,
    ) -> str:
        now = self._clock()
        expire = now + ttl
        claims: dict[str, Any] = {
            "sub": subject_id,
            "type": token_type.value,
            "iss": self._config.issuer,
            "aud": self._config.audience,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
            "jti": uuid.uuid4().hex,
        }
        if extra:
            claims.update(extra)

        token = jwt.encode(
            claims,
            self._secret_for(token_type),
            algorithm=self._config.algorithm,
        )

        logger.debug(
            f"{token_type.value}_token_issued",
            sub=subject_id,
            expires_at=expire.isoformat(),
        )
        return token

    def issue_access(self, subject_id: str, role: Role) -> str:
        """Create an access token carrying the subject's role."""
        return self._encode(
            TokenType.ACCESS,
            subject_id,
            self.access_ttl,
            {"role": Role(role).value},
        )

    def issue_refresh(self, subject_id: str) -> str:
        """Create a refresh token carrying only the subject id."""
        return self._encode(TokenType.REFRESH, subject_id, self.refresh_ttl)

    def issue_pair(self, subject_id: str, role: Role) -> TokenPair:
        """Create both tokens for a subject."""
        return TokenPair(
            access_token=self.issue_access(subject_id, role),
            refresh_token=self.issue_refresh(subject_id),
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def _decode(self, token: str, expected: TokenType) -> dict[str, Any]:
        # The type is read before signature verification: a token of the other
        # kind is signed with the other secret and would otherwise surface as
        # a signature failure.
        try:
            unverified = jwt.get_unverified_claims(token)
        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            raise TokenMalformed() from e

        actual = unverified.get("type")
        if actual != expected.value:
            logger.warning(
                "token_type_mismatch",
                expected=expected.value,
                actual=actual,
            )
            raise TokenTypeMismatch()

        try:
            payload = jwt.decode(
                token,
                self._secret_for(expected),
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                issuer=self._config.issuer,
                options={
                    "verify_exp": False,
                    "require_exp": True,
                    "require_sub": True,
                    "require_iat": True,
                },
            )
        except JWTError as e:
            logger.warning("token_verification_failed", error=str(e))
            raise TokenMalformed() from e

        if self._clock().timestamp() >= payload["exp"]:
            logger.info("token_expired", kind=expected.value, sub=payload["sub"])
            raise TokenExpired(f"{expected.value.capitalize()} token expired")

        return payload

    @staticmethod
    def _common(payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "subject_id": payload["sub"],
            "token_type": payload["type"],
            "token_id": payload.get("jti", ""),
            "issued_at": datetime.fromtimestamp(payload["iat"], tz=UTC),
            "expires_at": datetime.fromtimestamp(payload["exp"], tz=UTC),
        }

    def verify_access(self, token: str) -> AccessClaims:
        """
        Verify an access token.

        Raises:
            TokenExpired: past expiry
            TokenMalformed: bad signature, issuer, audience or structure
            TokenTypeMismatch: not an access token
        """
        payload = self._decode(token, TokenType.ACCESS)
        try:
            role = Role(payload.get("role"))
        except ValueError as e:
            raise TokenMalformed() from e
        return AccessClaims(role=role, **self._common(payload))

    def verify_refresh(self, token: str) -> RefreshClaims:
        """
        Verify a refresh token.

        Raises:
            TokenExpired: past expiry
            TokenMalformed: bad signature, issuer, audience or structure
            TokenTypeMismatch: not a refresh token
        """
        payload = self._decode(token, TokenType.REFRESH)
        return RefreshClaims(**self._common(payload))


@lru_cache
def get_token_codec() -> TokenCodec:
    """Process-wide codec built from the loaded settings."""
    return TokenCodec(settings.jwt)
