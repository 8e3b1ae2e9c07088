"""
Storefront Backend — Catalog Service (Resource Reader / Lister)
================================================================

What:  Read-only lookups against the categories, products and services tables.
How:   One CatalogService class parameterized by ORM model and display name,
       instantiated once per resource. Routes depend on the instances below.

Lookup contract (get_by_id):
    1. The raw route parameter must be a base-10 integer
       (optional sign, ASCII digits only) → else ValidationError (400),
       raised before the session is touched
    2. SELECT ... WHERE id = :id LIMIT 1
    3. No row, or a soft-deleted row → NotFoundError (404)
    4. Anything else going wrong → DatabaseError (500) with the error text

The soft-delete predicate lives in is_visible() and applies to every resource.
"""

import logging
import re
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import DatabaseError, NotFoundError, ValidationError
from storefront.models.catalog import Category, Product, Service
from storefront.schemas.catalog import ProductListItem
from storefront.services.error_boundary import error_boundary

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", Category, Product, Service)

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_resource_id(raw_id: Any) -> Optional[int]:
    """
    Parse a route parameter as a base-10 integer.

    Returns None for anything that is not entirely an optionally signed run of
    ASCII digits ("12abc", " 12", "1_000", "١٢" are all rejected).
    """
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return raw_id
    if not isinstance(raw_id, str) or not _INTEGER_PATTERN.fullmatch(raw_id):
        return None
    return int(raw_id, 10)


def is_visible(record: Optional[Any]) -> bool:
    """A record is visible when it exists and carries no soft-delete marker."""
    return record is not None and getattr(record, "deleted_at", None) is None


def _fetch_failure(service: "CatalogService", *args: Any, **kwargs: Any) -> str:
    return f"Failed to fetch {service.resource_name.lower()}"


def _list_failure(service: "CatalogService", *args: Any, **kwargs: Any) -> str:
    return f"Failed to fetch {service.collection_name}"


class CatalogService(Generic[ModelT]):
    """
    Resource reader/lister for one catalog table.

    Stateless; each call receives the request's AsyncSession.
    """

    def __init__(self, model: Type[ModelT], resource_name: str, collection_name: str):
        self.model = model
        self.resource_name = resource_name
        self.collection_name = collection_name

    @error_boundary(_fetch_failure, error_cls=DatabaseError)
    async def get_by_id(self, db: AsyncSession, raw_id: Any) -> ModelT:
        """
        Fetch one visible row by its identifier.

        Raises:
            ValidationError: raw_id is not a base-10 integer (400)
            NotFoundError:   no row, or the row is soft-deleted (404)
            DatabaseError:   the query failed (500)
        """
        record_id = parse_resource_id(raw_id)
        if record_id is None:
            raise ValidationError(
                message=f"Invalid {self.resource_name.lower()} ID",
                field="id",
                context={"raw_id": str(raw_id)},
            )

        result = await db.execute(
            select(self.model).where(self.model.id == record_id).limit(1)
        )
        record = result.scalars().first()

        if not is_visible(record):
            logger.debug("%s %d absent or soft-deleted", self.resource_name, record_id)
            raise NotFoundError(resource=self.resource_name, resource_id=str(record_id))

        return record

    @error_boundary(_list_failure, error_cls=DatabaseError)
    async def list_all(self, db: AsyncSession) -> List[ModelT]:
        """
        Every row of the table, in the store's natural order.

        No filtering (soft-deleted rows included), no pagination; an empty
        table yields an empty list.
        """
        result = await db.execute(select(self.model))
        return list(result.scalars().all())


class CategoryCatalog(CatalogService[Category]):

    def __init__(self):
        super().__init__(Category, "Category", "categories")

    @error_boundary("Failed to fetch categories", error_cls=DatabaseError)
    async def list_active(self, db: AsyncSession) -> List[Category]:
        """Categories without a soft-delete marker, ordered by name."""
        result = await db.execute(
            select(Category).where(Category.deleted_at.is_(None)).order_by(Category.name)
        )
        return list(result.scalars().all())


class ProductCatalog(CatalogService[Product]):

    def __init__(self):
        super().__init__(Product, "Product", "products")

    @error_boundary("Failed to fetch products", error_cls=DatabaseError)
    async def list_with_category_names(self, db: AsyncSession) -> List[ProductListItem]:
        """
        All products, each paired with its category's name.

        A single LEFT OUTER JOIN; unlinked products get category_name None.
        """
        result = await db.execute(
            select(Product, Category.name)
            .outerjoin(Category, Product.category_id == Category.id)
            .order_by(Product.id)
        )
        return [
            ProductListItem.model_validate(product).model_copy(update={"category_name": category_name})
            for product, category_name in result.all()
        ]


# ── Singleton Instances ───────────────────────────────────────────────────
category_catalog = CategoryCatalog()
product_catalog = ProductCatalog()
service_catalog: CatalogService[Service] = CatalogService(Service, "Service", "services")


def get_category_catalog() -> CategoryCatalog:
    return category_catalog


def get_product_catalog() -> ProductCatalog:
    return product_catalog


def get_service_catalog() -> CatalogService[Service]:
    return service_catalog
