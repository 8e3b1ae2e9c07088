"""
Storefront Backend — Catalog Route Handlers
=============================================

What:  Read-only endpoints for categories, products and services.
How:   Each handler extracts the raw path parameter and hands it, unparsed, to
       the resource's CatalogService. Id validation, the soft-delete check and
       error translation all live in the service.

Identifiers are declared as `str`: "abc" must reach
the service and come back as our 400 body, not as FastAPI's own 422.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db_session
from storefront.schemas.catalog import (
    CategoryResponse,
    ProductListItem,
    ProductResponse,
    ServiceResponse,
)
from storefront.schemas.common import ErrorResponse
from storefront.services.catalog_service import (
    CatalogService,
    CategoryCatalog,
    ProductCatalog,
    get_category_catalog,
    get_product_catalog,
    get_service_catalog,
)

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(tags=["Catalog"])

LOOKUP_RESPONSES = {
    400: {"description": "Identifier is not an integer", "model": ErrorResponse},
    404: {"description": "No such record, or it was deleted", "model": ErrorResponse},
    500: {"description": "Database failure", "model": ErrorResponse},
}
LIST_RESPONSES = {500: {"description": "Database failure", "model": ErrorResponse}}


# ── Categories ────────────────────────────────────────────────────────────

@router.get(
    "/categories",
    response_model=List[CategoryResponse],
    responses=LIST_RESPONSES,
    summary="List categories",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> List[CategoryResponse]:
    """Categories that have not been deleted, ordered by name."""
    return await catalog.list_active(db)


@router.get(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    responses=LOOKUP_RESPONSES,
    summary="Get a category by ID",
)
async def get_category(
    category_id: str,
    db: AsyncSession = Depends(get_db_session),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> CategoryResponse:
    return await catalog.get_by_id(db, category_id)


# ── Products ──────────────────────────────────────────────────────────────

@router.get(
    "/products",
    response_model=List[ProductListItem],
    responses=LIST_RESPONSES,
    summary="List products with their category names",
)
async def list_products(
    db: AsyncSession = Depends(get_db_session),
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> List[ProductListItem]:
    return await catalog.list_with_category_names(db)


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses=LOOKUP_RESPONSES,
    summary="Get a product by ID",
)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> ProductResponse:
    return await catalog.get_by_id(db, product_id)


# ── Services ──────────────────────────────────────────────────────────────

@router.get(
    "/services",
    response_model=List[ServiceResponse],
    responses=LIST_RESPONSES,
    summary="List services",
    description="Every service row in store order. No filtering and no pagination.",
)
async def list_services(
    db: AsyncSession = Depends(get_db_session),
    catalog: CatalogService = Depends(get_service_catalog),
) -> List[ServiceResponse]:
    return await catalog.list_all(db)


@router.get(
    "/services/{service_id}",
    response_model=ServiceResponse,
    responses=LOOKUP_RESPONSES,
    summary="Get a service by ID",
)
async def get_service(
    service_id: str,
    db: AsyncSession = Depends(get_db_session),
    catalog: CatalogService = Depends(get_service_catalog),
) -> ServiceResponse:
    return await catalog.get_by_id(db, service_id)
