"""Domain layer - Entities, commands, visibility rules and exceptions.

This module exports the core catalog building blocks:

- **Entities**: Category, Product and User records plus the CategoryNode tree view
- **Commands**: Typed create/update payloads produced by the API coercion step
- **Visibility**: Which products a caller may see
- **Exceptions**: Catalog rule violations with machine-readable error codes

Example usage:
    from catalog_api.domain import Product, ProductStatus, is_visible

    product = Product(id="p-1", name="Recliner", status=ProductStatus.INACTIVE)
    is_visible(product, is_admin=False)  # False
"""

from catalog_api.domain.base import AggregateRoot, Entity
from catalog_api.domain.commands import (
    UNSET,
    CategoryDraft,
    CategoryPatch,
    ImageUpload,
    MembershipPolicy,
    ProductDraft,
    ProductPatch,
    is_set,
)
from catalog_api.domain.entities import (
    PRODUCT_FLAG_FIELDS,
    PRODUCT_PRICE_FIELDS,
    PRODUCT_TEXT_FIELDS,
    Category,
    CategoryNode,
    Product,
    ProductStatus,
    User,
)
from catalog_api.domain.exceptions import DomainError
from catalog_api.domain.visibility import filter_visible, is_visible

__all__ = [
    # Base
    "AggregateRoot",
    "Entity",
    # Entities
    "Category",
    "CategoryNode",
    "Product",
    "ProductStatus",
    "User",
    "PRODUCT_FLAG_FIELDS",
    "PRODUCT_PRICE_FIELDS",
    "PRODUCT_TEXT_FIELDS",
    # Commands
    "UNSET",
    "CategoryDraft",
    "CategoryPatch",
    "ImageUpload",
    "MembershipPolicy",
    "ProductDraft",
    "ProductPatch",
    "is_set",
    # Visibility
    "filter_visible",
    "is_visible",
    # Exceptions
    "DomainError",
]
