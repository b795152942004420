"""Tests for domain entities."""

from datetime import datetime, timezone

from catalog_api.domain import Category, CategoryNode, Product, ProductStatus, User


# ============================================================================
# Test Fixtures
# ============================================================================


def make_category(category_id: str, parent_id: str | None = None) -> Category:
    """Create a test category."""
    return Category(id=category_id, name=category_id.title(), parent_id=parent_id)


# ============================================================================
# Category Tests
# ============================================================================


class TestCategory:
    """Tests for Category entity."""

    def test_is_root(self) -> None:
        """Only categories without a parent are roots."""
        assert make_category("sofas").is_root
        assert not make_category("recliners", parent_id="sofas").is_root

    def test_from_record(self) -> None:
        """Should build from a store record including bookkeeping."""
        now = datetime.now(timezone.utc)
        category = Category.from_record(
            {
                "id": "c-1",
                "name": "Sofas",
                "parent_id": None,
                "image_url": "https://cdn.test/sofas.png",
                "version": 3,
                "created_at": now,
                "updated_at": now,
            }
        )
        assert category.name == "Sofas"
        assert category.image_url == "https://cdn.test/sofas.png"
        assert category.version == 3
        assert category.created_at == now

    def test_identity_equality(self) -> None:
        """Categories compare by id."""
        assert make_category("a") == Category(id="a", name="Other")
        assert make_category("a") != make_category("b")


class TestCategoryNode:
    """Tests for CategoryNode view."""

    def test_descendant_ids_depth_first(self) -> None:
        """Should list populated descendants depth-first."""
        root = CategoryNode(category=make_category("root"))
        left = CategoryNode(category=make_category("left", "root"))
        right = CategoryNode(category=make_category("right", "root"))
        leaf = CategoryNode(category=make_category("leaf", "left"))
        left.children.append(leaf)
        root.children.extend([left, right])

        assert root.id == "root"
        assert root.descendant_ids() == ["left", "leaf", "right"]


# ============================================================================
# Product Tests
# ============================================================================


class TestProductStatus:
    """Tests for ProductStatus coercion."""

    def test_only_inactive_literal_is_inactive(self) -> None:
        """Exactly "inactive" selects INACTIVE."""
        assert ProductStatus.coerce("inactive") is ProductStatus.INACTIVE
        assert ProductStatus.coerce(ProductStatus.INACTIVE) is ProductStatus.INACTIVE

    def test_everything_else_is_active(self) -> None:
        """Any other input selects ACTIVE."""
        for value in ("active", "INACTIVE", "archived", "", None, 0):
            assert ProductStatus.coerce(value) is ProductStatus.ACTIVE


class TestProduct:
    """Tests for Product entity."""

    def test_from_record_defaults(self) -> None:
        """Missing list and flag fields get empty defaults."""
        product = Product.from_record({"id": "p-1", "name": "Recliner", "status": "active"})
        assert product.features == []
        assert product.category_ids == []
        assert product.shipping_included is False
        assert product.original_price is None
        assert product.status is ProductStatus.ACTIVE

    def test_from_record_legacy_status(self) -> None:
        """Records without status are legacy products."""
        assert Product.from_record({"id": "p-1", "name": "Old", "status": None}).status is None
        assert Product.from_record({"id": "p-2", "name": "Old"}).status is None

    def test_from_record_unrecognized_status(self) -> None:
        """Unrecognized stored statuses read as inactive."""
        product = Product.from_record({"id": "p-1", "name": "Old", "status": "archived"})
        assert product.status is ProductStatus.INACTIVE

    def test_in_category(self) -> None:
        """Should check category membership."""
        product = Product(id="p-1", name="Recliner", category_ids=["c-1", "c-2"])
        assert product.in_category("c-2")
        assert not product.in_category("c-3")

    def test_to_dict_round_trips_status(self) -> None:
        """Should serialize status as its value."""
        product = Product(id="p-1", name="Recliner", status=ProductStatus.INACTIVE)
        data = product.to_dict()
        assert data["status"] == "inactive"
        assert Product.from_record(data).status is ProductStatus.INACTIVE


# ============================================================================
# User Tests
# ============================================================================


class TestUser:
    """Tests for User entity."""

    def test_profile_hides_password(self) -> None:
        """The public profile never carries the password."""
        user = User(id="u-1", name="Asha", phone="5550100", password="secret")
        assert "password" not in user.profile()
        assert "secret" not in repr(user)
