"""Product visibility rules.

Admins see every product. Everyone else sees active products and legacy
products that carry no status at all. Reads of a product the caller cannot
see are reported exactly like reads of a missing product.
"""

from collections.abc import Iterable

from catalog_api.domain.entities import Product, ProductStatus


def is_visible(product: Product, is_admin: bool) -> bool:
    """Check whether a caller may see a product.

    Args:
        product: Product to check.
        is_admin: Whether the caller is privileged.

    Returns:
        True for admins, active products and products without a status.
    """
    if is_admin:
        return True
    return product.status is None or product.status == ProductStatus.ACTIVE


def filter_visible(products: Iterable[Product], is_admin: bool) -> list[Product]:
    """Keep only the products visible to the caller, preserving order."""
    return [p for p in products if is_visible(p, is_admin)]
