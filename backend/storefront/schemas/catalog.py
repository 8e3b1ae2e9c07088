"""
Storefront Backend — Catalog Response Schemas
===============================================

What:  Pydantic models for category, product and service records.
How:   Built from ORM rows (`from_attributes`) and serialized with camelCase
       aliases, so the wire format keeps the field names the frontend reads
       (`deletedAt`, `categoryId`, `shortDescription`, ...).

Decimal columns serialize as strings ("19.99"), preserving precision.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    type: str
    is_active: bool
    sort_order: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class ProductResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    sku: Optional[str] = None
    price: Decimal
    compare_at_price: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    stock: Optional[int] = None
    low_stock_threshold: Optional[int] = None
    track_inventory: bool
    type: str
    digital_file_url: Optional[str] = None
    weight: Optional[Decimal] = None
    dimensions: Optional[Any] = None
    is_active: bool
    is_featured: bool
    category_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class ProductListItem(ProductResponse):
    """A product row plus the name of its category (null when unlinked)."""

    category_name: Optional[str] = None


class ServiceResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Decimal
    duration: int
    buffer_time: Optional[int] = None
    image: Optional[str] = None
    is_active: bool
    max_advance_booking: Optional[int] = None
    min_advance_booking: Optional[int] = None
    category_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
