"""
Configuration Module
====================

Environment-driven settings for the catalog service. Nested groups map to
variable prefixes: `JWT_*`, `MONGODB_*`, `STORAGE_*`, `PASSWORD_*`,
`COOKIE_*` and `CORS_*`.

Usage:
    from shared.config import settings

    if settings.storage.mode == StorageMode.MEMORY:
        ...
"""

from shared.config.settings import (
    CookieSettings,
    Environment,
    JWTSettings,
    LogLevel,
    PasswordSettings,
    Settings,
    StorageMode,
    get_settings,
)


settings = get_settings()

__all__ = [
    "CookieSettings",
    "Environment",
    "JWTSettings",
    "LogLevel",
    "PasswordSettings",
    "Settings",
    "StorageMode",
    "get_settings",
    "settings",
]
