"""Domain entities for the catalog.

Category, Product and User records as the engine sees them, plus the
resolved tree views returned by category reads. Entities are built from
record-store dictionaries with ``from_record`` and never write themselves;
persistence goes through the record store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from catalog_api.domain.base import AggregateRoot

# ============================================================================
# Product field groups
# ============================================================================

# Numeric fields parsed only when present and truthy.
PRODUCT_PRICE_FIELDS: tuple[str, ...] = (
    "original_price",
    "discounted_price",
    "discount_percentage",
)

PRODUCT_FLAG_FIELDS: tuple[str, ...] = (
    "price_includes_tax",
    "shipping_included",
    "shipping_calculated_at_checkout",
    "store_purchase_only",
    "style_pincode_prompt",
)

PRODUCT_TEXT_FIELDS: tuple[str, ...] = (
    "brand",
    "color",
    "material",
    "warranty_period",
    "delivery",
    "installation",
    "stock_status",
    "note",
    "product_care_instructions",
    "return_and_cancellation_policy",
)

_BOOKKEEPING = ("version", "created_at", "updated_at")


class ProductStatus(str, Enum):
    """Product publication status."""

    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def coerce(cls, value: Any) -> "ProductStatus":
        """Map any write-time input to a status.

        Exactly ``"inactive"`` selects INACTIVE; everything else,
        including None, selects ACTIVE.
        """
        if value == cls.INACTIVE.value or value is cls.INACTIVE:
            return cls.INACTIVE
        return cls.ACTIVE

    @classmethod
    def from_stored(cls, value: Any) -> "ProductStatus | None":
        """Read a stored status.

        Empty values mean no status. Values this version does not know are
        read as INACTIVE so they stay hidden from anonymous callers.
        """
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls.INACTIVE


# ============================================================================
# Category
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Category(AggregateRoot[str]):
    """A node in the category tree.

    Attributes:
        name: Display name, never blank.
        parent_id: Parent category, None for roots.
        comment: Free-form note.
        image_url: Banner image; only roots may carry one.
    """

    name: str
    parent_id: str | None = None
    comment: str | None = None
    image_url: str | None = None

    @property
    def is_root(self) -> bool:
        """Whether the category sits at the top of the tree."""
        return self.parent_id is None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Category":
        """Build a category from a store record."""
        return cls(
            id=record["id"],
            name=record["name"],
            parent_id=record.get("parent_id"),
            comment=record.get("comment"),
            image_url=record.get("image_url"),
            **{key: record[key] for key in _BOOKKEEPING if key in record},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "comment": self.comment,
            "image_url": self.image_url,
            "version": self.version,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class CategoryNode:
    """A category with its parent and children resolved.

    ``children`` holds nodes whose own ``children`` are populated down to
    whatever depth the producing read asked for.
    """

    category: Category
    parent: Category | None = None
    children: list["CategoryNode"] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.category.id

    def descendant_ids(self) -> list[str]:
        """Ids of every populated descendant, depth-first."""
        ids: list[str] = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            ids.append(node.id)
            stack.extend(reversed(node.children))
        return ids


# ============================================================================
# Product
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Product(AggregateRoot[str]):
    """A catalog product.

    ``category_ids`` has set semantics but keeps insertion order. The ids are
    validated only at write time; they may dangle after a category delete.
    ``status`` is None for legacy records written before status existed.
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
    status: ProductStatus | None = ProductStatus.ACTIVE

    def in_category(self, category_id: str) -> bool:
        return category_id in self.category_ids

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Product":
        """Build a product from a store record."""
        values: dict[str, Any] = {
            "id": record["id"],
            "name": record["name"],
            "features": list(record.get("features") or []),
            "image_urls": list(record.get("image_urls") or []),
            "category_ids": list(record.get("category_ids") or []),
            "status": ProductStatus.from_stored(record.get("status")),
        }
        for key in PRODUCT_PRICE_FIELDS + PRODUCT_TEXT_FIELDS:
            values[key] = record.get(key)
        for key in PRODUCT_FLAG_FIELDS:
            values[key] = bool(record.get(key, False))
        for key in _BOOKKEEPING:
            if key in record:
                values[key] = record[key]
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        for key in PRODUCT_PRICE_FIELDS + PRODUCT_FLAG_FIELDS + PRODUCT_TEXT_FIELDS:
            data[key] = getattr(self, key)
        data.update(
            {
                "features": list(self.features),
                "image_urls": list(self.image_urls),
                "category_ids": list(self.category_ids),
                "status": self.status.value if self.status else None,
                "version": self.version,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
            }
        )
        return data


# ============================================================================
# User
# ============================================================================


@dataclass(kw_only=True, eq=False)
class User(AggregateRoot[str]):
    """A credential holder. Passwords are stored and compared verbatim."""

    name: str
    phone: str
    password: str = field(repr=False)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "User":
        return cls(
            id=record["id"],
            name=record["name"],
            phone=record["phone"],
            password=record["password"],
            **{key: record[key] for key in _BOOKKEEPING if key in record},
        )

    def profile(self) -> dict[str, Any]:
        """Public view of the user, without the password."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
