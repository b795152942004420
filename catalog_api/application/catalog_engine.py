"""Catalog integrity engine.

Application service composing the category tree manager, the product
membership validator and the visibility rules into the operations exposed
at the API boundary.

Policies:
- product creation validates category ids strictly;
- product updates validate category ids leniently, and only when the patch
  carries them;
- images are uploaded after every validation has passed and before the
  single persistence call, so a failed upload persists nothing.

Every operation returns an ``OperationResult``; domain errors never escape.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

from catalog_api.application.category_tree import CategoryTreeManager
from catalog_api.application.membership import ProductMembershipValidator
from catalog_api.application.results import OperationResult
from catalog_api.domain.commands import (
    CategoryDraft,
    CategoryPatch,
    ImageUpload,
    MembershipPolicy,
    ProductDraft,
    ProductPatch,
)
from catalog_api.domain.entities import CategoryNode, Product
from catalog_api.domain.exceptions import DomainError, NotFoundError, ValidationError
from catalog_api.domain.visibility import filter_visible, is_visible
from catalog_api.infrastructure.image_storage import ImageStorage, UnconfiguredImageStorage
from catalog_api.infrastructure.record_store import RecordKind, RecordStore

logger = structlog.get_logger()

T = TypeVar("T")

CATEGORY_IMAGE_FOLDER = "categories"
PRODUCT_IMAGE_FOLDER = "products"


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class CategoryDeletion:
    """Result of deleting a category."""

    category_id: str
    deleted_ids: list[str]
    detached_product_count: int = 0
    detach_failed: bool = False


# ============================================================================
# Catalog Engine
# ============================================================================


class CatalogEngine:
    """Application service for categories and products.

    Holds no state beyond its collaborators; build one per request.

    Example usage:
        engine = CatalogEngine(store, image_storage, request_id=request_id)
        result = await engine.create_category(CategoryDraft(name="Sofas"))
        if not result.success:
            print(result.error_code, result.details)
    """

    def __init__(
        self,
        store: RecordStore,
        image_storage: ImageStorage | None = None,
        max_images_per_upload: int = 5,
        request_id: str | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            store: Record store.
            image_storage: Upload adapter for category and product images.
            max_images_per_upload: Maximum images accepted in one product write.
            request_id: Request ID for correlation.
        """
        self.store = store
        self.image_storage = image_storage or UnconfiguredImageStorage()
        self.max_images_per_upload = max_images_per_upload
        self.request_id = request_id
        self.tree = CategoryTreeManager(store, request_id=request_id)
        self.membership = ProductMembershipValidator(store, self.tree, request_id=request_id)

    async def _run(self, operation: str, action: Callable[[], Awaitable[T]]) -> OperationResult[T]:
        try:
            return OperationResult(value=await action())
        except DomainError as e:
            logger.warning(
                "Catalog operation failed",
                operation=operation,
                error_code=e.error_code,
                error=e.message,
                details=e.details,
                request_id=self.request_id,
            )
            return OperationResult.failure(e)

    # ========================================================================
    # Categories
    # ========================================================================

    async def list_categories(self) -> OperationResult[list[CategoryNode]]:
        """All categories with parent and direct children."""
        return await self._run("list_categories", self.tree.get_flat_list)

    async def get_hierarchy(self) -> OperationResult[list[CategoryNode]]:
        """Root categories with two levels of children."""
        return await self._run("get_hierarchy", self.tree.get_hierarchy)

    async def get_category(self, category_id: str) -> OperationResult[CategoryNode]:
        """A category with its full subtree."""
        return await self._run("get_category", lambda: self.tree.get_category_by_id(category_id))

    async def get_subcategories(self, parent_id: str) -> OperationResult[list[CategoryNode]]:
        """Direct children of a category; fails with NO_CHILDREN when empty."""
        return await self._run("get_subcategories", lambda: self.tree.get_subcategories(parent_id))

    async def create_category(
        self,
        draft: CategoryDraft,
        image: ImageUpload | None = None,
    ) -> OperationResult[CategoryNode]:
        """Create a category, uploading its image first when one is given."""

        async def action() -> CategoryNode:
            validated = await self.tree.validate_draft(draft, attaching_image=image is not None)
            if image is not None:
                urls = await self.image_storage.upload([image], CATEGORY_IMAGE_FOLDER)
                validated.image_url = urls[0]
            return await self.tree.create_category(validated)

        return await self._run("create_category", action)

    async def update_category(
        self,
        category_id: str,
        patch: CategoryPatch,
        image: ImageUpload | None = None,
    ) -> OperationResult[CategoryNode]:
        """Update a category, uploading a replacement image when one is given."""

        async def action() -> CategoryNode:
            await self.tree.validate_patch(category_id, patch, attaching_image=image is not None)
            if image is not None:
                urls = await self.image_storage.upload([image], CATEGORY_IMAGE_FOLDER)
                patch.image_url = urls[0]
            return await self.tree.update_category(category_id, patch)

        return await self._run("update_category", action)

    async def delete_category(
        self,
        category_id: str,
        cascade: bool = False,
        detach_products: bool = False,
    ) -> OperationResult[CategoryDeletion]:
        """Delete a category (and with cascade its subtree).

        Products keep references to deleted categories unless
        ``detach_products`` is set. Detaching runs after the deletes are
        committed, so a detach failure is logged and reported through
        ``detach_failed`` instead of failing the operation.
        """

        async def action() -> CategoryDeletion:
            deleted = await self.tree.delete_category(category_id, cascade=cascade)
            deletion = CategoryDeletion(category_id=category_id, deleted_ids=deleted)
            if detach_products:
                try:
                    deletion.detached_product_count = await self.membership.detach_category_ids(deleted)
                except DomainError as e:
                    logger.error(
                        "Detaching products failed after category delete",
                        category_id=category_id,
                        deleted_ids=deleted,
                        error_code=e.error_code,
                        error=e.message,
                        request_id=self.request_id,
                    )
                    deletion.detach_failed = True
            return deletion

        return await self._run("delete_category", action)

    # ========================================================================
    # Products
    # ========================================================================

    async def _require_product(self, product_id: str) -> Product:
        record = await self.store.get(RecordKind.PRODUCT, product_id)
        if record is None:
            raise NotFoundError("Product", product_id)
        return Product.from_record(record)

    def _check_image_count(self, images: list[ImageUpload]) -> None:
        if len(images) > self.max_images_per_upload:
            raise ValidationError(
                "images",
                f"at most {self.max_images_per_upload} images per upload, got {len(images)}",
            )

    async def list_products(self, is_admin: bool = False) -> OperationResult[list[Product]]:
        """Every product visible to the caller."""

        async def action() -> list[Product]:
            records = await self.store.find(RecordKind.PRODUCT)
            return filter_visible((Product.from_record(r) for r in records), is_admin)

        return await self._run("list_products", action)

    async def get_product(self, product_id: str, is_admin: bool = False) -> OperationResult[Product]:
        """A single product; invisible products read as not found."""

        async def action() -> Product:
            product = await self._require_product(product_id)
            if not is_visible(product, is_admin):
                raise NotFoundError("Product", product_id)
            return product

        return await self._run("get_product", action)

    async def create_product(
        self,
        draft: ProductDraft,
        images: list[ImageUpload] | None = None,
    ) -> OperationResult[Product]:
        """Create a product. Category ids are validated strictly."""
        images = images or []

        async def action() -> Product:
            name = (draft.name or "").strip()
            if not name:
                raise ValidationError("name", "must not be empty")
            category_ids = await self.membership.resolve_category_ids(
                draft.category_ids, MembershipPolicy.STRICT
            )
            self._check_image_count(images)
            uploaded = await self.image_storage.upload(images, PRODUCT_IMAGE_FOLDER) if images else []

            data = draft.to_record()
            data.update(
                name=name,
                category_ids=category_ids,
                image_urls=[*draft.image_urls, *uploaded],
            )
            product = Product.from_record(await self.store.create(RecordKind.PRODUCT, data))
            logger.info(
                "Product created",
                product_id=product.id,
                category_count=len(product.category_ids),
                image_count=len(product.image_urls),
                request_id=self.request_id,
            )
            return product

        return await self._run("create_product", action)

    async def update_product(
        self,
        product_id: str,
        patch: ProductPatch,
        images: list[ImageUpload] | None = None,
    ) -> OperationResult[Product]:
        """Partially update a product. Category ids are validated leniently."""
        images = images or []

        async def action() -> Product:
            current = await self._require_product(product_id)
            changes = patch.supplied()

            if "name" in changes:
                name = (changes["name"] or "").strip()
                if not name:
                    raise ValidationError("name", "must not be empty")
                changes["name"] = name

            if "category_ids" in changes:
                changes["category_ids"] = await self.membership.resolve_category_ids(
                    changes["category_ids"], MembershipPolicy.LENIENT
                )

            self._check_image_count(images)
            if images:
                uploaded = await self.image_storage.upload(images, PRODUCT_IMAGE_FOLDER)
                changes["image_urls"] = [*changes.get("image_urls", current.image_urls), *uploaded]

            if not changes:
                return current

            record = await self.store.update(
                RecordKind.PRODUCT,
                product_id,
                changes,
                expected_version=current.version,
            )
            logger.info(
                "Product updated",
                product_id=product_id,
                fields=sorted(changes),
                request_id=self.request_id,
            )
            return Product.from_record(record)

        return await self._run("update_product", action)

    async def delete_product(self, product_id: str) -> OperationResult[Product]:
        """Delete a product."""

        async def action() -> Product:
            current = await self._require_product(product_id)
            await self.store.delete(RecordKind.PRODUCT, product_id, expected_version=current.version)
            logger.info("Product deleted", product_id=product_id, request_id=self.request_id)
            return current

        return await self._run("delete_product", action)

    async def add_category_to_product(self, product_id: str, category_id: str) -> OperationResult[Product]:
        """Link a category to a product."""
        return await self._run(
            "add_category_to_product",
            lambda: self.membership.add_category_to_product(product_id, category_id),
        )

    async def remove_category_from_product(
        self, product_id: str, category_id: str
    ) -> OperationResult[Product]:
        """Unlink a category from a product."""
        return await self._run(
            "remove_category_from_product",
            lambda: self.membership.remove_category_from_product(product_id, category_id),
        )

    async def list_products_by_category(
        self, category_id: str, is_admin: bool = False
    ) -> OperationResult[list[Product]]:
        """Products visible to the caller that reference a category.

        The category does not need to exist.
        """

        async def action() -> list[Product]:
            products = await self.membership.find_products_by_category(category_id)
            return filter_visible(products, is_admin)

        return await self._run("list_products_by_category", action)
