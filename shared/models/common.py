"""
Common Models
=============

Base response models and utilities.

Version: 0.1.0
"""

import math
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


class RecordStatus(str, Enum):
    """Lifecycle status shared by users and products (soft delete)."""

    ACTIVE = "active"
    DISABLED = "disabled"


class CamelModel(BaseModel):
    """API model serialized with camelCase keys, accepting either form on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BaseResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    data: T | None = None
    message: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class Pagination(CamelModel):
    """Pagination block returned with list endpoints."""

    page: int = 1
    limit: int = 10
    total: int = 0
    pages: int = 0

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class ErrorResponse(CamelModel):
    """Error response model."""

    success: bool = False
    error: str
    error_code: str | None = None
    status_code: int
    details: Any | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = "healthy"
    service: str
    version: str
    timestamp: datetime = Field(default_factory=utcnow)

    # Component health
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)

