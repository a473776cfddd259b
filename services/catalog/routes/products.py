"""
Product Routes
==============

Catalog browsing (anonymous or authenticated) and product management
(owner or admin).

Version: 0.1.0
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from services.catalog.services import (
    ProductQuery,
    ProductStore,
    ensure_owner_or_admin,
    get_product_store,
    parse_sort,
)
from shared.auth import AdminUser, AuthContext, CurrentUser, OptionalUser
from shared.errors import ResourceNotFound
from shared.logging import get_logger
from shared.models.common import BaseResponse, Pagination, RecordStatus
from shared.models.product import (
    Category,
    CategoryListPayload,
    Product,
    ProductCreate,
    ProductListPayload,
    ProductPayload,
    ProductUpdate,
)

logger = get_logger(__name__)

router = APIRouter()

Store = Annotated[ProductStore, Depends(get_product_store)]


def _visible(product: Product | None, ctx: AuthContext | None) -> Product:
    # Inactive products are hidden from everyone but admins
    if product is None or (not product.is_active and not (ctx and ctx.is_admin)):
        raise ResourceNotFound("Product not found")
    return product


async def _load(store: ProductStore, product_id: str) -> Product:
    product = await store.find_by_id(product_id)
    if product is None:
        raise ResourceNotFound("Product not found")
    return product


# ============================================================================
# Browsing
# ============================================================================


@router.get("", response_model=BaseResponse[ProductListPayload])
async def list_products(
    ctx: OptionalUser,
    store: Store,
    category: Category | None = Query(default=None),
    min_price: float | None = Query(default=None, ge=0, alias="minPrice"),
    max_price: float | None = Query(default=None, ge=0, alias="maxPrice"),
    in_stock: bool = Query(default=False, alias="inStock"),
    search: str | None = Query(default=None, max_length=100),
    is_active: bool | None = Query(default=None, alias="isActive"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> BaseResponse[ProductListPayload]:
    """
    List products with filtering, sorting and pagination.

    Anonymous callers and regular users see active products only. Admins
    see every product unless `isActive` narrows the listing.
    """
    sort_field, descending = parse_sort(sort_by)

    is_admin = ctx is not None and ctx.is_admin
    query = ProductQuery(
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        search=search or None,
        is_active=is_active if is_admin else True,
        sort_field=sort_field,
        descending=descending,
        page=page,
        limit=limit,
    )
    products, total = await store.list_products(query)

    logger.debug("products_listed", total=total, page=page, category=category)

    return BaseResponse(
        data=ProductListPayload(
            products=products,
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/categories/list", response_model=BaseResponse[CategoryListPayload])
async def list_categories() -> BaseResponse[CategoryListPayload]:
    """All product categories."""
    return BaseResponse(data=CategoryListPayload(categories=[c.value for c in Category]))


@router.get("/{product_id}", response_model=BaseResponse[ProductPayload])
async def get_product(
    product_id: str,
    ctx: OptionalUser,
    store: Store,
) -> BaseResponse[ProductPayload]:
    """Get a product by ID."""
    product = _visible(await store.find_by_id(product_id), ctx)
    return BaseResponse(data=ProductPayload(product=product))


# ============================================================================
# Management
# ============================================================================


@router.post(
    "",
    response_model=BaseResponse[ProductPayload],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreate,
    ctx: CurrentUser,
    store: Store,
) -> BaseResponse[ProductPayload]:
    """
    Create a product owned by the caller.

    Raises:
        DuplicateSku: the SKU is already taken
    """
    product = await store.create(body, created_by=ctx.user_id)
    return BaseResponse(
        data=ProductPayload(product=product),
        message="Product created successfully",
    )


@router.put("/{product_id}", response_model=BaseResponse[ProductPayload])
async def update_product(
    product_id: str,
    body: ProductUpdate,
    ctx: CurrentUser,
    store: Store,
) -> BaseResponse[ProductPayload]:
    """
    Update a product. Owner or admin.

    `isActive` is applied only for admins and ignored otherwise.
    """
    product = await _load(store, product_id)
    ensure_owner_or_admin(ctx, product.created_by, "product")

    changes: dict[str, Any] = body.model_dump(exclude_none=True, exclude={"is_active"})
    if "image_url" in changes:
        changes["image_url"] = str(changes["image_url"])

    if body.is_active is not None:
        if ctx.is_admin:
            changes["status"] = RecordStatus.ACTIVE if body.is_active else RecordStatus.DISABLED
        else:
            logger.info("product_status_change_ignored", product_id=product_id)

    updated = await store.update(product_id, changes, updated_by=ctx.user_id)
    if updated is None:
        raise ResourceNotFound("Product not found")

    logger.info("product_updated", product_id=product_id, fields=sorted(changes))
    return BaseResponse(
        data=ProductPayload(product=updated),
        message="Product updated successfully",
    )


@router.delete("/{product_id}", response_model=BaseResponse[None])
async def delete_product(
    product_id: str,
    ctx: CurrentUser,
    store: Store,
) -> BaseResponse[None]:
    """Soft delete: the product is marked disabled and hidden from listings."""
    product = await _load(store, product_id)
    ensure_owner_or_admin(ctx, product.created_by, "product")

    await store.update(product_id, {"status": RecordStatus.DISABLED}, updated_by=ctx.user_id)

    logger.info("product_deactivated", product_id=product_id)
    return BaseResponse(message="Product deleted successfully")


@router.delete("/{product_id}/permanent", response_model=BaseResponse[None])
async def delete_product_permanently(
    product_id: str,
    ctx: AdminUser,
    store: Store,
) -> BaseResponse[None]:
    """Remove a product for good. Admin only."""
    if not await store.delete(product_id):
        raise ResourceNotFound("Product not found")

    logger.info("product_deleted", product_id=product_id, admin_id=ctx.user_id)
    return BaseResponse(message="Product permanently deleted")
