"""
User Models
===========

Stored user record, its public projection, and the request/response
bodies of the auth and user endpoints.

Version: 0.1.0
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, model_validator

from shared.models.common import CamelModel, Pagination, RecordStatus, utcnow

# Refresh tokens kept per user; oldest evicted first.
MAX_REFRESH_TOKENS = 5

_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")


class Role(str, Enum):
    """User roles."""

    USER = "user"
    ADMIN = "admin"


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address (login key)."""
    return email.strip().lower()


def _check_name(value: str) -> str:
    value = value.strip()
    if not 2 <= len(value) <= 50:
        raise ValueError("Name must be between 2 and 50 characters")
    if not _NAME_RE.match(value):
        raise ValueError("Name can only contain letters and spaces")
    return value


def _check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not (
        re.search(r"[a-z]", value)
        and re.search(r"[A-Z]", value)
        and re.search(r"\d", value)
    ):
        raise ValueError(
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return value


# Syntax checked by email-validator, then lower-cased as the login key
EmailField = Annotated[EmailStr, AfterValidator(normalize_email)]
NameField = Annotated[str, AfterValidator(_check_name)]
NewPasswordField = Annotated[str, AfterValidator(_check_password_strength)]


class RefreshTokenEntry(BaseModel):
    """A refresh token currently honoured for a user."""

    token: str
    created_at: datetime = Field(default_factory=utcnow)


class UserRecord(BaseModel):
    """
    User as held by the credential store.

    Carries the password hash and the refresh token history, so it must
    never be returned from an endpoint; use `PublicUser` instead.
    """

    id: str
    name: str
    email: str
    password_hash: str
    role: Role = Role.USER
    status: RecordStatus = RecordStatus.ACTIVE
    refresh_tokens: list[RefreshTokenEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def has_refresh_token(self, token: str) -> bool:
        return any(entry.token == token for entry in self.refresh_tokens)


class PublicUser(CamelModel):
    """User fields safe to expose to clients."""

    id: str
    name: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> "PublicUser":
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            role=record.role,
            is_active=record.is_active,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


# =============================================================================
# Request bodies
# =============================================================================


class RegisterRequest(CamelModel):
    name: NameField
    email: EmailField
    password: NewPasswordField


class LoginRequest(CamelModel):
    email: EmailField
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    """Optional body for refresh and logout; the cookie takes precedence."""

    refresh_token: str | None = None


class ProfileUpdate(CamelModel):
    name: NameField | None = None
    email: EmailField | None = None


class PasswordChangeRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: NewPasswordField
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChangeRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


# =============================================================================
# Response payloads
# =============================================================================


class AuthPayload(CamelModel):
    """Returned by register, login and password change."""

    user: PublicUser
    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class AccessTokenPayload(CamelModel):
    """Returned by refresh."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class UserPayload(CamelModel):
    user: PublicUser


class UserListPayload(CamelModel):
    users: list[PublicUser]
    pagination: Pagination
