"""
Storefront Backend — Catalog SQLAlchemy Models
================================================

What:  ORM mappings for the `categories`, `products` and `services` tables.
Who:   Queried by CatalogService; the tables themselves are owned and migrated
       elsewhere, so only the columns the API returns are mapped here.

Soft delete:
    Every catalog table carries a nullable `deleted_at`. A row with a non-null
    value is logically removed and must never be returned by a direct-id lookup.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """created_at / updated_at / deleted_at columns shared by all catalog tables."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )


class Category(TimestampMixin, Base):
    """A product or service category; categories may nest through parent_id."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(String(500))
    parent_id: Mapped[Optional[int]] = mapped_column(Integer)
    # PRODUCT | SERVICE
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="PRODUCT")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[Optional[int]] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}')>"


class Product(TimestampMixin, Base):
    """A physical or digital product."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    short_description: Mapped[Optional[str]] = mapped_column(Text)
    sku: Mapped[Optional[str]] = mapped_column(String(100), unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    tax_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), default=Decimal("0.00"))
    stock: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    low_stock_threshold: Mapped[Optional[int]] = mapped_column(Integer, default=5)
    track_inventory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # PHYSICAL | DIGITAL
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="PHYSICAL")
    digital_file_url: Mapped[Optional[str]] = mapped_column(String(500))
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    # {length, width, height}
    dimensions: Mapped[Optional[Any]] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL")
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug='{self.slug}')>"


class Service(TimestampMixin, Base):
    """A bookable service; duration and buffer_time are in minutes."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    short_description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    buffer_time: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    image: Mapped[Optional[str]] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # days
    max_advance_booking: Mapped[Optional[int]] = mapped_column(Integer, default=30)
    # hours
    min_advance_booking: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL")
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, slug='{self.slug}')>"
