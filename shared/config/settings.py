"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageMode(str, Enum):
    """Backing store for users and products."""

    MONGODB = "mongodb"
    MEMORY = "memory"


class MongoSettings(BaseSettings):
    """MongoDB configuration."""

    model_config = SettingsConfigDict(env_prefix="MONGODB_")

    host: str = "localhost"
    port: int = 27017
    user: str = "catalog"
    password: SecretStr = SecretStr("catalog_mongo_password")
    db: str = Field(default="catalog", alias="MONGODB_DB")
    timeout_ms: int = 5000

    @property
    def uri(self) -> str:
        """Generate MongoDB connection URI."""
        pwd = self.password.get_secret_value()
        return f"mongodb://{self.user}:{pwd}@{self.host}:{self.port}/{self.db}?authSource=admin"


class StorageSettings(BaseSettings):
    """Store selection."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    mode: StorageMode = StorageMode.MONGODB


DEV_ACCESS_SECRET = "dev-access-secret-change-me-min-32-chars"
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me-min-32-chars"
MIN_SECRET_LENGTH = 32


class JWTSettings(BaseSettings):
    """
    JWT authentication configuration.

    Access and refresh tokens are signed with independent secrets so that
    leaking one cannot be used to forge the other.
    """

    model_config = SettingsConfigDict(env_prefix="JWT_")

    access_secret: SecretStr = SecretStr(DEV_ACCESS_SECRET)
    refresh_secret: SecretStr = SecretStr(DEV_REFRESH_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    issuer: str = "secure-rest-api"
    audience: str = "api-users"

    @property
    def access_ttl_seconds(self) -> int:
        return self.access_token_expire_minutes * 60

    @property
    def refresh_ttl_seconds(self) -> int:
        return self.refresh_token_expire_days * 24 * 60 * 60


class PasswordSettings(BaseSettings):
    """Password hashing work factor."""

    model_config = SettingsConfigDict(env_prefix="PASSWORD_")

    bcrypt_rounds: int = Field(default=12, ge=4, le=31)


class CookieSettings(BaseSettings):
    """Refresh token cookie configuration."""

    model_config = SettingsConfigDict(env_prefix="COOKIE_")

    refresh_name: str = "refreshToken"
    access_name: str = "accessToken"
    path: str = "/api/auth"
    samesite: str = "strict"


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:3000,http://localhost:5000"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = 5000

    # Storage
    storage: StorageSettings = Field(default_factory=StorageSettings)
    mongodb: MongoSettings = Field(default_factory=MongoSettings)

    # Authentication
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    password: PasswordSettings = Field(default_factory=PasswordSettings)
    cookies: CookieSettings = Field(default_factory=CookieSettings)

    # Security
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @model_validator(mode="after")
    def check_production_secrets(self) -> "Settings":
        """Refuse to start in production with weak or shared signing secrets."""
        if self.environment != Environment.PRODUCTION:
            return self

        access = self.jwt.access_secret.get_secret_value()
        refresh = self.jwt.refresh_secret.get_secret_value()
        if access in (DEV_ACCESS_SECRET, DEV_REFRESH_SECRET) or refresh in (
            DEV_ACCESS_SECRET,
            DEV_REFRESH_SECRET,
        ):
            raise ValueError("JWT secrets must be set explicitly in production")
        if min(len(access), len(refresh)) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT secrets must be at least {MIN_SECRET_LENGTH} characters")
        if access == refresh:
            raise ValueError("JWT access and refresh secrets must differ")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
