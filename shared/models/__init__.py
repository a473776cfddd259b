"""
Shared Models
=============

Pydantic models shared across the catalog service.

Models:
- User models (UserRecord, PublicUser, auth request bodies)
- Product models (Product, ProductCreate, ProductUpdate)
- Common envelopes (BaseResponse, Pagination, ErrorResponse)
"""

from shared.models.common import (
    BaseResponse,
    CamelModel,
    ErrorResponse,
    HealthResponse,
    Pagination,
    RecordStatus,
    utcnow,
)
from shared.models.product import (
    Category,
    Product,
    ProductCreate,
    ProductUpdate,
)
from shared.models.user import (
    MAX_REFRESH_TOKENS,
    PublicUser,
    RefreshTokenEntry,
    Role,
    UserRecord,
    normalize_email,
)

__all__ = [
    # Common
    "BaseResponse",
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
    "Pagination",
    "RecordStatus",
    "utcnow",
    # Product
    "Category",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    # User
    "MAX_REFRESH_TOKENS",
    "PublicUser",
    "RefreshTokenEntry",
    "Role",
    "UserRecord",
    "normalize_email",
]
