"""
Error Taxonomy
==============

Typed failures raised by the token codec, the stores and the session
manager. Each class carries a fixed HTTP status and a stable error code;
the service exception handlers translate them into the JSON envelope.

Messages are deliberately generic: credential failures never reveal
whether an email address is registered.

Version: 0.1.0
"""

from typing import Any


class CatalogError(Exception):
    """Base class for errors mapped to HTTP responses."""

    status_code: int = 500
    error_code: str = "server_error"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# =============================================================================
# Input / uniqueness (400)
# =============================================================================


class ValidationFailed(CatalogError):
    status_code = 400
    error_code = "validation_error"
    default_message = "Validation failed"


class DuplicateEmail(CatalogError):
    status_code = 400
    error_code = "duplicate_email"
    default_message = "User with this email already exists"


class DuplicateSku(CatalogError):
    status_code = 400
    error_code = "duplicate_sku"
    default_message = "Product with this SKU already exists"


# =============================================================================
# Authentication (401)
# =============================================================================


class AuthenticationError(CatalogError):
    """Any failure to establish who the caller is."""

    status_code = 401
    error_code = "unauthorized"
    default_message = "Authentication required"


class InvalidCredentials(AuthenticationError):
    error_code = "invalid_credentials"
    default_message = "Invalid email or password"


class NoToken(AuthenticationError):
    error_code = "no_token"
    default_message = "Access denied. No token provided."


class TokenExpired(AuthenticationError):
    error_code = "token_expired"
    default_message = "Token expired"


class TokenMalformed(AuthenticationError):
    error_code = "token_malformed"
    default_message = "Invalid token"


class TokenTypeMismatch(AuthenticationError):
    error_code = "token_type_mismatch"
    default_message = "Invalid token type"


class UserNotFound(AuthenticationError):
    error_code = "user_not_found"
    default_message = "User not found. Token invalid."


class InvalidRefreshToken(AuthenticationError):
    """Presented refresh token is not (or no longer) in the stored set."""

    error_code = "invalid_refresh_token"
    default_message = "Invalid refresh token"


# =============================================================================
# Authorization (403)
# =============================================================================


class AuthorizationError(CatalogError):
    status_code = 403
    error_code = "forbidden"
    default_message = "Access denied"


class AccountDeactivated(AuthorizationError):
    error_code = "account_deactivated"
    default_message = "Account is deactivated."


class InsufficientRole(AuthorizationError):
    error_code = "insufficient_role"
    default_message = "Access denied. Insufficient privileges."


class AccessDenied(AuthorizationError):
    """Caller is authenticated but does not own the resource."""

    error_code = "access_denied"


# =============================================================================
# Lookup (404)
# =============================================================================


class ResourceNotFound(CatalogError):
    status_code = 404
    error_code = "not_found"
    default_message = "Resource not found"


__all__ = [
    "CatalogError",
    "ValidationFailed",
    "DuplicateEmail",
    "DuplicateSku",
    "AuthenticationError",
    "InvalidCredentials",
    "NoToken",
    "TokenExpired",
    "TokenMalformed",
    "TokenTypeMismatch",
    "UserNotFound",
    "InvalidRefreshToken",
    "AuthorizationError",
    "AccountDeactivated",
    "InsufficientRole",
    "AccessDenied",
    "ResourceNotFound",
]
