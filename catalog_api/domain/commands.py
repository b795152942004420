"""Typed commands handed to the catalog engine.

The API layer coerces loosely-typed request bodies into these objects;
the engine never sees raw strings for booleans, numbers or lists.

Patch commands distinguish "field absent" from "field set to None" with
the ``UNSET`` sentinel: absent fields are left untouched on update.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from catalog_api.domain.entities import ProductStatus


class _Unset:
    """Marker type for fields missing from an update payload."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    """Whether a patch field was supplied."""
    return value is not UNSET


class MembershipPolicy(str, Enum):
    """How unknown category ids on a product write are handled."""

    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True)
class ImageUpload:
    """Raw image payload received from a caller."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


# ============================================================================
# Category Commands
# ============================================================================


@dataclass
class CategoryDraft:
    """Fields for creating a category."""

    name: str
    parent_id: str | None = None
    comment: str | None = None
    image_url: str | None = None


@dataclass
class CategoryPatch:
    """Partial update of a category; ``UNSET`` fields are left alone."""

    name: Any = UNSET
    parent_id: Any = UNSET
    comment: Any = UNSET
    image_url: Any = UNSET

    def supplied(self) -> dict[str, Any]:
        """Fields present in the patch."""
        return {f.name: getattr(self, f.name) for f in fields(self) if is_set(getattr(self, f.name))}


# ============================================================================
# Product Commands
# ============================================================================


@dataclass
class ProductDraft:
    """Fields for creating a product.

    ``category_ids`` is already normalized (trimmed, deduplicated) but not yet
    validated against the tree.
    """

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
    features: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)
    category_ids: list[str] = field(default_factory=list)
    status: ProductStatus = ProductStatus.ACTIVE

    def to_record(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["status"] = self.status.value
        return data


@dataclass
class ProductPatch:
    """Partial update of a product; ``UNSET`` fields are left alone."""

    name: Any = UNSET
    brand: Any = UNSET
    original_price: Any = UNSET
    discounted_price: Any = UNSET
    discount_percentage: Any = UNSET
    price_includes_tax: Any = UNSET
    shipping_included: Any = UNSET
    shipping_calculated_at_checkout: Any = UNSET
    store_purchase_only: Any = UNSET
    style_pincode_prompt: Any = UNSET
    color: Any = UNSET
    material: Any = UNSET
    warranty_period: Any = UNSET
    delivery: Any = UNSET
    installation: Any = UNSET
    stock_status: Any = UNSET
    note: Any = UNSET
    product_care_instructions: Any = UNSET
    return_and_cancellation_policy: Any = UNSET
    features: Any = UNSET
    image_urls: Any = UNSET
    category_ids: Any = UNSET
    status: Any = UNSET

    def supplied(self) -> dict[str, Any]:
        """Fields present in the patch, with status as its stored value."""
        data = {f.name: getattr(self, f.name) for f in fields(self) if is_set(getattr(self, f.name))}
        if isinstance(data.get("status"), ProductStatus):
            data["status"] = data["status"].value
        return data
