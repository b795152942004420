"""SQLAlchemy models for database tables.

Provides ORM models for the categories, products and users tables backing
the database record store. List-valued product fields are JSON columns;
``category_ids`` is deliberately not a foreign key so product references
survive category deletion.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_api.infrastructure.database import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampedMixin:
    """Bookkeeping columns shared by every table."""

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_now,
        onupdate=_now,
    )

    def to_record(self) -> dict[str, Any]:
        """Convert to a record-store dictionary."""
        return {column.key: getattr(self, column.key) for column in self.__table__.columns}  # type: ignore[attr-defined]


# ============================================================================
# Category Model
# ============================================================================


class CategoryModel(TimestampedMixin, Base):
    """Category model for database persistence.

    ``parent_id`` is a plain indexed column; subtree deletion is performed
    explicitly in post-order by the engine rather than by ON DELETE CASCADE.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryModel(id={self.id}, name={self.name})>"


# ============================================================================
# Product Model
# ============================================================================


class ProductModel(TimestampedMixin, Base):
    """Product model for database persistence."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    brand: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Pricing
    original_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    discounted_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    discount_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Flags
    price_includes_tax: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shipping_included: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shipping_calculated_at_checkout: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    store_purchase_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    style_pincode_prompt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Descriptive
    color: Mapped[str | None] = mapped_column(String(100), nullable=True)
    material: Mapped[str | None] = mapped_column(String(255), nullable=True)
    warranty_period: Mapped[str | None] = mapped_column(String(255), nullable=True)
    delivery: Mapped[str | None] = mapped_column(Text, nullable=True)
    installation: Mapped[str | None] = mapped_column(Text, nullable=True)
    stock_status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_care_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    return_and_cancellation_policy: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Lists
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    category_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[str | None] = mapped_column(String(20), nullable=True, default="active", index=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, name={self.name[:30]})>"


# ============================================================================
# User Model
# ============================================================================


class UserModel(TimestampedMixin, Base):
    """User model for database persistence."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<UserModel(id={self.id}, phone={self.phone})>"
