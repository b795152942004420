"""API schemas for the catalog API.

Pydantic models for response serialization and the JSON request bodies
of the user endpoints. Category and product bodies are accepted as JSON or
multipart form data and are coerced in ``catalog_api.api.coercion``.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Context needed to reconstruct the failure"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Category Schemas
# ============================================================================


class CategorySchema(BaseModel):
    """A category without its relations."""

    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Display name")
    parent_id: str | None = Field(default=None, description="Parent category ID, null for roots")
    comment: str | None = Field(default=None, description="Free-form note")
    image_url: str | None = Field(default=None, description="Banner image (roots only)")
    version: int = Field(..., description="Optimistic concurrency version")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryResponse(CategorySchema):
    """A category with its parent and children resolved.

    ``children`` is populated as deep as the endpoint documents.
    """

    parent: CategorySchema | None = Field(default=None, description="Resolved parent")
    children: list["CategoryResponse"] = Field(default_factory=list, description="Child categories")


class CategoryDeleteResponse(BaseModel):
    """Result of a category delete."""

    message: str
    category_id: str
    deleted_ids: list[str] = Field(..., description="Deleted category IDs, in deletion order")
    detached_product_count: int = Field(
        default=0, description="Products whose references to deleted categories were removed"
    )
    detach_failed: bool = Field(
        default=False, description="Categories were deleted but removing product references failed"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductStatusEnum(str, Enum):
    """Product status values."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class ProductResponse(BaseModel):
    """Product details."""

    id: str
    name: str
    brand: str | None = None

    original_price: float | None = None
    discounted_price: float | None = None
    discount_percentage: float | None = None

    price_includes_tax: bool = False
    shipping_included: bool = False
    shipping_calculated_at_checkout: bool = False
    store_purchase_only: bool = False
    style_pincode_prompt: bool = False

    color: str | None = None
    material: str | None = None
    warranty_period: str | None = None
    delivery: str | None = None
    installation: str | None = None
    stock_status: str | None = None
    note: str | None = None
    product_care_instructions: str | None = None
    return_and_cancellation_policy: str | None = None

    features: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    category_ids: list[str] = Field(
        default_factory=list,
        description="Referenced categories; may include ids of deleted categories",
    )
    status: ProductStatusEnum | None = Field(
        default=None, description="Publication status, null for legacy products"
    )
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductDeleteResponse(BaseModel):
    """Result of a product delete."""

    message: str
    product_id: str


# ============================================================================
# User Schemas
# ============================================================================


class UserRegisterRequest(BaseModel):
    """Request to register a user."""

    name: str = Field(..., description="Display name")
    phone: str = Field(..., description="Phone number, used as the login")
    password: str = Field(..., description="Password")


class UserUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    name: str | None = None
    phone: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    """Public user profile. Passwords are never returned."""

    id: str
    name: str
    phone: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserDeleteResponse(BaseModel):
    """Result of an account delete."""

    message: str
    user_id: str


class UserMessageResponse(BaseModel):
    """Acknowledgement carrying the affected user."""

    message: str
    user: UserResponse
