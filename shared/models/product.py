"""
Product Models
==============

Catalog product record and its request bodies.

Version: 0.1.0
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, Field, HttpUrl, computed_field

from shared.models.common import CamelModel, Pagination, RecordStatus, utcnow

LOW_STOCK_THRESHOLD = 10

_SKU_RE = re.compile(r"^[A-Z0-9-]+$", re.IGNORECASE)


class Category(str, Enum):
    """Product categories."""

    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    FOOD = "Food"
    BOOKS = "Books"
    TOYS = "Toys"
    SPORTS = "Sports"
    HOME = "Home"
    BEAUTY = "Beauty"
    OTHER = "Other"


def _check_sku(value: str) -> str:
    value = value.strip()
    if not 3 <= len(value) <= 50:
        raise ValueError("SKU must be between 3 and 50 characters")
    if not _SKU_RE.match(value):
        raise ValueError("SKU can only contain letters, numbers, and hyphens")
    return value.upper()


def _check_tags(value: list[str]) -> list[str]:
    tags = [tag.strip() for tag in value]
    if any(not 1 <= len(tag) <= 30 for tag in tags):
        raise ValueError("Each tag must be between 1 and 30 characters")
    return tags


SkuField = Annotated[str, AfterValidator(_check_sku)]
TagsField = Annotated[list[str], AfterValidator(_check_tags)]
ProductName = Annotated[str, Field(min_length=2, max_length=100)]
Description = Annotated[str, Field(max_length=1000)]


class Product(CamelModel):
    """Stored product."""

    id: str
    name: str
    description: str | None = None
    price: float = Field(..., ge=0)
    category: Category
    stock: int = Field(default=0, ge=0)
    sku: str
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    status: RecordStatus = RecordStatus.ACTIVE
    created_by: str
    updated_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stock_status(self) -> str:
        if self.stock == 0:
            return "Out of Stock"
        if self.stock < LOW_STOCK_THRESHOLD:
            return "Low Stock"
        return "In Stock"


class ProductCreate(CamelModel):
    """Request model for creating a product."""

    name: ProductName
    description: Description | None = None
    price: float = Field(..., ge=0)
    category: Category
    stock: int = Field(default=0, ge=0)
    sku: SkuField
    image_url: HttpUrl | None = None
    tags: TagsField = Field(default_factory=list)


class ProductUpdate(CamelModel):
    """Request model for updating a product. `is_active` is honoured for admins only."""

    name: ProductName | None = None
    description: Description | None = None
    price: float | None = Field(default=None, ge=0)
    category: Category | None = None
    stock: int | None = Field(default=None, ge=0)
    sku: SkuField | None = None
    image_url: HttpUrl | None = None
    tags: TagsField | None = None
    is_active: bool | None = None


class ProductPayload(CamelModel):
    product: Product


class ProductListPayload(CamelModel):
    products: list[Product]
    pagination: Pagination


class CategoryListPayload(CamelModel):
    categories: list[str]
