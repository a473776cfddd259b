"""
Unit tests for token and password primitives.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from jose import jwt

from shared.auth import PasswordHasher, TokenCodec, TokenType
from shared.auth import jwt as jwt_module
from shared.config import JWTSettings
from shared.errors import TokenExpired, TokenMalformed, TokenTypeMismatch
from shared.logging.logger import _censor_secrets
from shared.models.user import Role


class FrozenClock:
    """Settable clock for expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def clocked_codec(jwt_config: JWTSettings, clock: FrozenClock) -> TokenCodec:
    return TokenCodec(jwt_config, clock=clock)


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_password_returns_bcrypt_hash(self, hasher: PasswordHasher) -> None:
        """Test that hash returns a bcrypt hash."""
        hashed = hasher.hash("Passw0rd1")

        assert hashed != "Passw0rd1"
        assert hashed.startswith("$2b$04$")
        assert len(hashed) == 60

    def test_verify_password(self, hasher: PasswordHasher) -> None:
        """Test verification of correct and incorrect passwords."""
        hashed = hasher.hash("Passw0rd1")

        assert hasher.verify("Passw0rd1", hashed) is True
        assert hasher.verify("Passw0rd2", hashed) is False

    def test_same_password_different_hashes(self, hasher: PasswordHasher) -> None:
        """Test that salting makes hashes of one password differ."""
        assert hasher.hash("Passw0rd1") != hasher.hash("Passw0rd1")

    @pytest.mark.asyncio
    async def test_async_variants(self, hasher: PasswordHasher) -> None:
        """Test hashing off the event loop."""
        hashed = await hasher.hash_async("Passw0rd1")

        assert await hasher.verify_async("Passw0rd1", hashed) is True
        assert await hasher.verify_async("wrong", hashed) is False


class TestTokenIssuance:
    """Tests for token creation."""

    def test_access_token_claims(self, codec: TokenCodec, jwt_config: JWTSettings) -> None:
        """Test that access tokens carry subject, role, type, issuer and audience."""
        token = codec.issue_access("user-1", Role.ADMIN)
        claims = jwt.get_unverified_claims(token)

        assert claims["sub"] == "user-1"
        assert claims["role"] == "admin"
        assert claims["type"] == "access"
        assert claims["iss"] == "secure-rest-api"
        assert claims["aud"] == "api-users"
        assert claims["exp"] - claims["iat"] == 15 * 60

    def test_refresh_token_has_no_role(self, codec: TokenCodec) -> None:
        """Test that refresh tokens only identify the subject."""
        claims = jwt.get_unverified_claims(codec.issue_refresh("user-1"))

        assert claims["sub"] == "user-1"
        assert claims["type"] == "refresh"
        assert "role" not in claims
        assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60

    def test_tokens_minted_together_differ(self, clocked_codec: TokenCodec) -> None:
        """Test that two tokens for one subject in the same instant are distinct."""
        first = clocked_codec.issue_refresh("user-1")
        second = clocked_codec.issue_refresh("user-1")

        assert first != second

    def test_issue_pair(self, codec: TokenCodec) -> None:
        """Test pair creation."""
        pair = codec.issue_pair("user-1", Role.USER)

        assert pair.expires_in == 900
        assert codec.verify_access(pair.access_token).subject_id == "user-1"
        assert codec.verify_refresh(pair.refresh_token).subject_id == "user-1"


class TestTokenVerification:
    """Tests for token verification."""

    def test_verify_access(self, codec: TokenCodec) -> None:
        """Test round trip of an access token."""
        claims = codec.verify_access(codec.issue_access("user-1", Role.USER))

        assert claims.subject_id == "user-1"
        assert claims.role == Role.USER
        assert claims.token_type == TokenType.ACCESS
        assert claims.token_id

    def test_access_token_valid_until_expiry(
        self,
        clocked_codec: TokenCodec,
        clock: FrozenClock,
    ) -> None:
        """Test that an access token is accepted just before expiry."""
        token = clocked_codec.issue_access("user-1", Role.USER)

        clock.advance(timedelta(minutes=14, seconds=59))

        assert clocked_codec.verify_access(token).subject_id == "user-1"

    def test_access_token_expires(self, clocked_codec: TokenCodec, clock: FrozenClock) -> None:
        """Test that an access token is rejected once past its lifetime."""
        token = clocked_codec.issue_access("user-1", Role.USER)

        clock.advance(timedelta(minutes=15, seconds=1))

        with pytest.raises(TokenExpired):
            clocked_codec.verify_access(token)

    def test_expiry_log_keeps_token_kind(
        self,
        clocked_codec: TokenCodec,
        clock: FrozenClock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that the expiry log entry names the kind and survives redaction."""
        events: list[dict[str, Any]] = []

        class Recorder:
            def _record(self, event: str, **kw: Any) -> None:
                events.append({"event": event, **kw})

            debug = info = warning = _record

        monkeypatch.setattr(jwt_module, "logger", Recorder())
        token = clocked_codec.issue_access("user-1", Role.USER)
        clock.advance(timedelta(minutes=16))

        with pytest.raises(TokenExpired):
            clocked_codec.verify_access(token)

        [entry] = [e for e in events if e["event"] == "token_expired"]
        censored = _censor_secrets(logging.getLogger("test"), "info", dict(entry))
        assert censored["kind"] == "access"

    def test_refresh_token_expires(self, clocked_codec: TokenCodec, clock: FrozenClock) -> None:
        """Test that a refresh token is rejected after seven days."""
        token = clocked_codec.issue_refresh("user-1")

        clock.advance(timedelta(days=7, seconds=1))

        with pytest.raises(TokenExpired):
            clocked_codec.verify_refresh(token)

    def test_access_token_rejected_as_refresh(self, codec: TokenCodec) -> None:
        """Test that an access token cannot be used where a refresh token is expected."""
        with pytest.raises(TokenTypeMismatch):
            codec.verify_refresh(codec.issue_access("user-1", Role.USER))

    def test_refresh_token_rejected_as_access(self, codec: TokenCodec) -> None:
        """Test that a refresh token cannot be used where an access token is expected."""
        with pytest.raises(TokenTypeMismatch):
            codec.verify_access(codec.issue_refresh("user-1"))

    def test_wrong_secret(self, codec: TokenCodec, jwt_config: JWTSettings) -> None:
        """Test that a token signed with another secret is rejected."""
        other = TokenCodec(
            jwt_config.model_copy(update={"access_secret": jwt_config.refresh_secret})
        )
        token = other.issue_access("user-1", Role.USER)

        with pytest.raises(TokenMalformed):
            codec.verify_access(token)

    def test_wrong_issuer(self, codec: TokenCodec, jwt_config: JWTSettings) -> None:
        """Test that a token from another issuer is rejected."""
        other = TokenCodec(jwt_config.model_copy(update={"issuer": "someone-else"}))

        with pytest.raises(TokenMalformed):
            codec.verify_access(other.issue_access("user-1", Role.USER))

    def test_wrong_audience(self, codec: TokenCodec, jwt_config: JWTSettings) -> None:
        """Test that a token for another audience is rejected."""
        other = TokenCodec(jwt_config.model_copy(update={"audience": "other-api"}))

        with pytest.raises(TokenMalformed):
            codec.verify_refresh(other.issue_refresh("user-1"))

    def test_tampered_role(self, codec: TokenCodec, jwt_config: JWTSettings) -> None:
        """Test that editing the payload invalidates the signature."""
        token = codec.issue_access("user-1", Role.USER)
        claims = jwt.get_unverified_claims(token)
        claims["role"] = "admin"
        forged = jwt.encode(claims, "not-the-secret", algorithm="HS256")

        with pytest.raises(TokenMalformed):
            codec.verify_access(forged)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
    def test_garbage(self, codec: TokenCodec, token: str) -> None:
        """Test that malformed input is rejected."""
        with pytest.raises(TokenMalformed):
            codec.verify_access(token)
