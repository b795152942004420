"""Tests for product visibility rules."""

import pytest

from catalog_api.domain import Product, ProductStatus, filter_visible, is_visible


def make_product(product_id: str = "p-1", status: ProductStatus | None = ProductStatus.ACTIVE) -> Product:
    """Create a test product."""
    return Product(id=product_id, name="Recliner", status=status)


class TestIsVisible:
    """Tests for is_visible."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (ProductStatus.ACTIVE, True),
            (None, True),
            (ProductStatus.INACTIVE, False),
        ],
    )
    def test_anonymous_caller(self, status: ProductStatus | None, expected: bool) -> None:
        """Non-admins see active and legacy products only."""
        assert is_visible(make_product(status=status), is_admin=False) is expected

    @pytest.mark.parametrize("status", [ProductStatus.ACTIVE, ProductStatus.INACTIVE, None])
    def test_admin_sees_everything(self, status: ProductStatus | None) -> None:
        """Admins see every product."""
        assert is_visible(make_product(status=status), is_admin=True) is True


class TestFilterVisible:
    """Tests for filter_visible."""

    def test_preserves_order_and_drops_inactive(self) -> None:
        """Should keep visible products in their original order."""
        products = [
            make_product("a"),
            make_product("b", ProductStatus.INACTIVE),
            make_product("c", None),
        ]
        assert [p.id for p in filter_visible(products, is_admin=False)] == ["a", "c"]

    def test_admin_keeps_all(self) -> None:
        """Should keep every product for admins."""
        products = [make_product("a"), make_product("b", ProductStatus.INACTIVE)]
        assert len(filter_visible(products, is_admin=True)) == 2
