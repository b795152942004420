"""Product membership validator.

Normalizes the category ids attached to a product and checks them against
the current tree. Two policies exist:

- strict: any unknown id rejects the write with ``UnknownCategoriesError``;
- lenient: unknown ids are dropped, and only an all-unknown set is rejected
  with ``NoValidCategoriesError``.

Membership is checked at write time only. Deleting a category leaves its id
on products unless ``detach_category_ids`` is called explicitly.
"""

import json
from collections.abc import Iterable
from typing import Any

import structlog

from catalog_api.application.category_tree import CategoryTreeManager
from catalog_api.domain.commands import MembershipPolicy
from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import (
    AlreadyLinkedError,
    CategoryNotFoundError,
    ConcurrentModificationError,
    NotFoundError,
    NotLinkedError,
    NoValidCategoriesError,
    RecordNotFoundError,
    UnknownCategoriesError,
)
from catalog_api.infrastructure.record_store import RecordKind, RecordStore

logger = structlog.get_logger()


def normalize_category_ids(raw: Any) -> list[str]:
    """Normalize category ids supplied in any accepted shape.

    Accepts a list/tuple/set, a JSON-encoded list, a comma-separated string
    or a single scalar. Returns trimmed, non-empty id strings without
    duplicates, in first-seen order.

    Examples:
        normalize_category_ids('["c1", "c2"]')  # ["c1", "c2"]
        normalize_category_ids("c1, c2,,c1")    # ["c1", "c2"]
        normalize_category_ids(7)               # ["7"]
    """
    if raw is None:
        return []

    items: Iterable[Any]
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return normalize_category_ids(decoded)
            text = text.strip("[]")
        items = text.split(",")
    elif isinstance(raw, (list, tuple, set, frozenset)):
        items = raw
    else:
        items = [raw]

    seen: dict[str, None] = {}
    for item in items:
        if item is None:
            continue
        value = str(item).strip().strip('"').strip()
        if value and value not in seen:
            seen[value] = None
    return list(seen)


class ProductMembershipValidator:
    """Validates and mutates product-to-category links.

    Example usage:
        validator = ProductMembershipValidator(store, tree)
        ids = await validator.resolve_category_ids("c1,unknown", MembershipPolicy.LENIENT)
    """

    def __init__(
        self,
        store: RecordStore,
        tree: CategoryTreeManager,
        request_id: str | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            store: Record store holding products.
            tree: Category tree used for existence checks.
            request_id: Request ID for log correlation.
        """
        self.store = store
        self.tree = tree
        self.request_id = request_id

    async def resolve_category_ids(self, raw: Any, policy: MembershipPolicy) -> list[str]:
        """Normalize and validate category ids.

        Args:
            raw: Ids in any shape accepted by ``normalize_category_ids``.
            policy: How unknown ids are handled.

        Returns:
            Existing ids, in the order supplied.

        Raises:
            UnknownCategoriesError: Strict policy, some ids unknown.
            NoValidCategoriesError: Lenient policy, every id unknown.
        """
        requested = normalize_category_ids(raw)
        if not requested:
            return []

        existing = await self.tree.existing_ids(requested)
        found = [cid for cid in requested if cid in existing]
        unknown = [cid for cid in requested if cid not in existing]

        if not unknown:
            return found

        if policy == MembershipPolicy.STRICT:
            raise UnknownCategoriesError(len(requested), len(found), unknown)

        if not found:
            raise NoValidCategoriesError(len(requested))

        logger.info(
            "Dropped unknown categories",
            unknown_ids=unknown,
            kept_count=len(found),
            request_id=self.request_id,
        )
        return found

    async def _require_product(self, product_id: str) -> Product:
        record = await self.store.get(RecordKind.PRODUCT, product_id)
        if record is None:
            raise NotFoundError("Product", product_id)
        return Product.from_record(record)

    async def add_category_to_product(self, product_id: str, category_id: str) -> Product:
        """Link a category to a product.

        Raises:
            NotFoundError: If the product does not exist.
            CategoryNotFoundError: If the category does not exist.
            AlreadyLinkedError: If the product already references the category.
        """
        product = await self._require_product(product_id)
        if await self.tree.get(category_id) is None:
            raise CategoryNotFoundError(category_id)
        if product.in_category(category_id):
            raise AlreadyLinkedError(product_id, category_id)

        record = await self.store.update(
            RecordKind.PRODUCT,
            product_id,
            {"category_ids": [*product.category_ids, category_id]},
            expected_version=product.version,
        )
        logger.info(
            "Category linked to product",
            product_id=product_id,
            category_id=category_id,
            request_id=self.request_id,
        )
        return Product.from_record(record)

    async def remove_category_from_product(self, product_id: str, category_id: str) -> Product:
        """Unlink a category from a product.

        The category does not need to exist, so dangling references can be
        removed.

        Raises:
            NotFoundError: If the product does not exist.
            NotLinkedError: If the product does not reference the category.
        """
        product = await self._require_product(product_id)
        if not product.in_category(category_id):
            raise NotLinkedError(product_id, category_id)

        record = await self.store.update(
            RecordKind.PRODUCT,
            product_id,
            {"category_ids": [cid for cid in product.category_ids if cid != category_id]},
            expected_version=product.version,
        )
        logger.info(
            "Category unlinked from product",
            product_id=product_id,
            category_id=category_id,
            request_id=self.request_id,
        )
        return Product.from_record(record)

    async def find_products_by_category(self, category_id: str) -> list[Product]:
        """Every product referencing a category, whether or not it still exists."""
        records = await self.store.find(
            RecordKind.PRODUCT,
            lambda r: category_id in (r.get("category_ids") or []),
        )
        return [Product.from_record(r) for r in records]

    async def detach_category_ids(self, category_ids: list[str]) -> int:
        """Strip category ids from every product referencing them.

        Products changed or deleted by another request meanwhile are skipped
        and logged.

        Returns:
            Number of products changed.
        """
        doomed = set(category_ids)
        if not doomed:
            return 0

        records = await self.store.find(
            RecordKind.PRODUCT,
            lambda r: bool(doomed.intersection(r.get("category_ids") or [])),
        )
        changed = 0
        for record in records:
            product = Product.from_record(record)
            try:
                await self.store.update(
                    RecordKind.PRODUCT,
                    product.id,
                    {"category_ids": [cid for cid in product.category_ids if cid not in doomed]},
                    expected_version=product.version,
                )
            except (ConcurrentModificationError, RecordNotFoundError) as e:
                logger.warning(
                    "Skipped product while detaching categories",
                    product_id=product.id,
                    error_code=e.error_code,
                    request_id=self.request_id,
                )
                continue
            changed += 1

        logger.info(
            "Detached categories from products",
            category_count=len(doomed),
            product_count=changed,
            skipped_count=len(records) - changed,
            request_id=self.request_id,
        )
        return changed
