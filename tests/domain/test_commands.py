"""Tests for typed commands."""

from catalog_api.domain import (
    UNSET,
    CategoryPatch,
    ProductDraft,
    ProductPatch,
    ProductStatus,
    is_set,
)


class TestUnset:
    """Tests for the UNSET sentinel."""

    def test_singleton_and_falsy(self) -> None:
        """UNSET is a falsy singleton distinct from None."""
        assert not UNSET
        assert UNSET is not None
        assert type(UNSET)() is UNSET
        assert not is_set(UNSET)
        assert is_set(None)


class TestPatches:
    """Tests for patch commands."""

    def test_category_patch_supplied(self) -> None:
        """Only supplied fields are reported, None included."""
        patch = CategoryPatch(name="Sofas", parent_id=None)
        assert patch.supplied() == {"name": "Sofas", "parent_id": None}

    def test_empty_product_patch(self) -> None:
        """An empty patch supplies nothing."""
        assert ProductPatch().supplied() == {}

    def test_product_patch_status_value(self) -> None:
        """Status is reported as its stored value."""
        patch = ProductPatch(status=ProductStatus.INACTIVE, category_ids=["c-1"])
        assert patch.supplied() == {"status": "inactive", "category_ids": ["c-1"]}


class TestProductDraft:
    """Tests for ProductDraft."""

    def test_defaults_to_active(self) -> None:
        """A draft without status is active."""
        record = ProductDraft(name="Recliner").to_record()
        assert record["status"] == "active"
        assert record["category_ids"] == []
        assert "id" not in record
