"""Category tree manager.

Enforces the structural rules of the category tree:

- names are never blank;
- a parent must exist when assigned, and a category can never become its
  own ancestor;
- only root categories carry an image, and a root that becomes a child
  loses its image;
- deleting a category with children requires cascade, and cascading
  deletes run in post-order so no child outlives its parent.

Also builds the flat, hierarchical and single-category views. Every rule
violation is raised as a ``DomainError``; the catalog engine turns those
into operation results.
"""

from collections import defaultdict
from typing import Any

import structlog

from catalog_api.domain.commands import CategoryDraft, CategoryPatch
from catalog_api.domain.entities import Category, CategoryNode
from catalog_api.domain.exceptions import (
    CycleDetectedError,
    HasChildrenError,
    InvalidImagePlacementError,
    NoChildrenError,
    NotFoundError,
    ParentNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from catalog_api.infrastructure.record_store import RecordKind, RecordStore

logger = structlog.get_logger()

# Levels below each root populated by the hierarchy view.
HIERARCHY_DEPTH = 2


class _TreeIndex:
    """Snapshot of all categories indexed by id and by parent."""

    def __init__(self, categories: list[Category]) -> None:
        self.by_id: dict[str, Category] = {c.id: c for c in categories}
        self.children: dict[str | None, list[Category]] = defaultdict(list)
        for category in categories:
            self.children[category.parent_id].append(category)

    def roots(self) -> list[Category]:
        return list(self.children.get(None, []))

    def node(self, category: Category, depth: int | None) -> CategoryNode:
        """Build a node with children populated ``depth`` levels down.

        ``depth=None`` populates the full subtree. Nodes already on the
        current path are not expanded again.
        """
        root = CategoryNode(category=category, parent=self.by_id.get(category.parent_id or ""))
        stack: list[tuple[CategoryNode, int | None, frozenset[str]]] = [
            (root, depth, frozenset({category.id}))
        ]
        while stack:
            current, remaining, path = stack.pop()
            if remaining is not None and remaining <= 0:
                continue
            for child in self.children.get(current.id, []):
                if child.id in path:
                    logger.warning("Cycle in category tree", category_id=child.id)
                    continue
                child_node = CategoryNode(category=child, parent=current.category)
                current.children.append(child_node)
                next_remaining = None if remaining is None else remaining - 1
                stack.append((child_node, next_remaining, path | {child.id}))
        return root

    def descendant_ids(self, category_id: str) -> set[str]:
        seen: set[str] = set()
        stack = [category_id]
        while stack:
            current = stack.pop()
            for child in self.children.get(current, []):
                if child.id not in seen and child.id != category_id:
                    seen.add(child.id)
                    stack.append(child.id)
        return seen

    def post_order(self, category_id: str) -> list[Category]:
        """Subtree of ``category_id`` with every node after all its descendants."""
        order: list[Category] = []
        visited: set[str] = set()
        stack: list[tuple[str, bool]] = [(category_id, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                order.append(self.by_id[current])
                continue
            if current in visited:
                continue
            visited.add(current)
            stack.append((current, True))
            for child in reversed(self.children.get(current, [])):
                if child.id not in visited:
                    stack.append((child.id, False))
        return order


class CategoryTreeManager:
    """Structural rules, views and subtree deletion for categories.

    Example usage:
        tree = CategoryTreeManager(store)
        sofas = await tree.create_category(CategoryDraft(name="Sofas"))
        await tree.create_category(CategoryDraft(name="Recliners", parent_id=sofas.id))
        await tree.delete_category(sofas.id, cascade=True)
    """

    def __init__(self, store: RecordStore, request_id: str | None = None) -> None:
        """Initialize tree manager.

        Args:
            store: Record store holding categories.
            request_id: Request ID for log correlation.
        """
        self.store = store
        self.request_id = request_id

    # ========================================================================
    # Lookups
    # ========================================================================

    async def _index(self) -> _TreeIndex:
        records = await self.store.find(RecordKind.CATEGORY)
        return _TreeIndex([Category.from_record(r) for r in records])

    async def get(self, category_id: str) -> Category | None:
        """Get a single category record, or None."""
        record = await self.store.get(RecordKind.CATEGORY, category_id)
        return Category.from_record(record) if record else None

    async def _require(self, category_id: str) -> Category:
        category = await self.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def existing_ids(self, category_ids: list[str]) -> set[str]:
        """Subset of ``category_ids`` that currently exist."""
        wanted = set(category_ids)
        if not wanted:
            return set()
        records = await self.store.find(RecordKind.CATEGORY, lambda r: r["id"] in wanted)
        return {r["id"] for r in records}

    async def subtree_ids(self, category_id: str) -> list[str]:
        """Ids of a category and all its descendants, in post-order."""
        index = await self._index()
        if category_id not in index.by_id:
            raise NotFoundError("Category", category_id)
        return [c.id for c in index.post_order(category_id)]

    # ========================================================================
    # Views
    # ========================================================================

    async def get_flat_list(self) -> list[CategoryNode]:
        """Every category with its parent and direct children resolved."""
        index = await self._index()
        return [index.node(c, depth=1) for c in index.by_id.values()]

    async def get_hierarchy(self) -> list[CategoryNode]:
        """Root categories with two levels of descendants populated."""
        index = await self._index()
        return [index.node(root, depth=HIERARCHY_DEPTH) for root in index.roots()]

    async def get_category_by_id(self, category_id: str) -> CategoryNode:
        """A category with its parent and full subtree.

        Raises:
            NotFoundError: If the category does not exist.
        """
        index = await self._index()
        category = index.by_id.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return index.node(category, depth=None)

    async def get_subcategories(self, parent_id: str) -> list[CategoryNode]:
        """Direct children of a category.

        Raises:
            NoChildrenError: If the category has no children (or does not exist).
        """
        index = await self._index()
        children = index.children.get(parent_id, [])
        if not children:
            raise NoChildrenError(parent_id)
        return [index.node(child, depth=1) for child in children]

    # ========================================================================
    # Create / Update
    # ========================================================================

    async def validate_draft(self, draft: CategoryDraft, attaching_image: bool = False) -> CategoryDraft:
        """Check a create command against the tree.

        Args:
            draft: Category fields.
            attaching_image: Whether an image upload will supply ``image_url``.

        Returns:
            The draft with a trimmed name and blank parent normalized to None.

        Raises:
            ValidationError: If the name is blank.
            ParentNotFoundError: If the parent does not exist.
            InvalidImagePlacementError: If an image is given for a non-root.
        """
        name = (draft.name or "").strip()
        if not name:
            raise ValidationError("name", "must not be empty")
        parent_id = draft.parent_id or None

        if parent_id is not None and await self.get(parent_id) is None:
            raise ParentNotFoundError(parent_id)

        if parent_id is not None and (draft.image_url or attaching_image):
            raise InvalidImagePlacementError(None, parent_id)

        return CategoryDraft(
            name=name,
            parent_id=parent_id,
            comment=draft.comment,
            image_url=draft.image_url,
        )

    async def create_category(self, draft: CategoryDraft) -> CategoryNode:
        """Persist a new category.

        Returns:
            The created category with its parent resolved and no children.
        """
        draft = await self.validate_draft(draft)
        record = await self.store.create(
            RecordKind.CATEGORY,
            {
                "name": draft.name,
                "parent_id": draft.parent_id,
                "comment": draft.comment,
                "image_url": draft.image_url,
            },
        )
        category = Category.from_record(record)
        parent = await self.get(category.parent_id) if category.parent_id else None

        logger.info(
            "Category created",
            category_id=category.id,
            parent_id=category.parent_id,
            request_id=self.request_id,
        )
        return CategoryNode(category=category, parent=parent)

    async def validate_patch(
        self,
        category_id: str,
        patch: CategoryPatch,
        attaching_image: bool = False,
    ) -> tuple[Category, dict[str, Any]]:
        """Check an update command against the current tree.

        Args:
            category_id: Category to update.
            patch: Supplied fields.
            attaching_image: Whether an image upload will supply ``image_url``.

        Returns:
            The current category and the concrete changes to persist.

        Raises:
            NotFoundError: If the category does not exist.
            ValidationError: If a supplied name is blank.
            ParentNotFoundError: If the new parent does not exist.
            CycleDetectedError: If the new parent is the category or a descendant.
            InvalidImagePlacementError: If an image is attached while either the
                existing or the new parent is set.
        """
        current = await self._require(category_id)
        changes = patch.supplied()

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError("name", "must not be empty")
            changes["name"] = name

        if "parent_id" in changes:
            changes["parent_id"] = changes["parent_id"] or None
            new_parent_id = changes["parent_id"]
            if new_parent_id is not None:
                if new_parent_id == category_id:
                    raise CycleDetectedError(category_id, new_parent_id)
                index = await self._index()
                if new_parent_id not in index.by_id:
                    raise ParentNotFoundError(new_parent_id)
                if new_parent_id in index.descendant_ids(category_id):
                    raise CycleDetectedError(category_id, new_parent_id)

        if "image_url" in changes:
            changes["image_url"] = changes["image_url"] or None
        image_requested = attaching_image or changes.get("image_url") is not None
        if image_requested:
            blocking_parent = changes.get("parent_id") or current.parent_id
            if blocking_parent is not None:
                raise InvalidImagePlacementError(category_id, blocking_parent)

        resulting_parent = changes.get("parent_id", current.parent_id)
        if current.parent_id is None and resulting_parent is not None and current.image_url:
            changes["image_url"] = None

        return current, changes

    async def update_category(self, category_id: str, patch: CategoryPatch) -> CategoryNode:
        """Apply a partial update to a category.

        Returns:
            The updated category with its parent and direct children resolved.
        """
        current, changes = await self.validate_patch(category_id, patch)
        if changes:
            await self.store.update(
                RecordKind.CATEGORY,
                category_id,
                changes,
                expected_version=current.version,
            )
            logger.info(
                "Category updated",
                category_id=category_id,
                fields=sorted(changes),
                request_id=self.request_id,
            )

        index = await self._index()
        updated = index.by_id.get(category_id)
        if updated is None:
            # Deleted by another request after the write.
            raise NotFoundError("Category", category_id)
        return index.node(updated, depth=1)

    # ========================================================================
    # Delete
    # ========================================================================

    async def delete_category(self, category_id: str, cascade: bool = False) -> list[str]:
        """Delete a category, and with ``cascade`` its whole subtree.

        Descendants are deleted in post-order: each category only after all
        of its own descendants, the requested category last.

        Args:
            category_id: Category to delete.
            cascade: Whether to delete descendants.

        Returns:
            Ids deleted, in deletion order.

        Raises:
            NotFoundError: If the category does not exist.
            HasChildrenError: If it has children and cascade is False.
        """
        index = await self._index()
        category = index.by_id.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)

        children = index.children.get(category_id, [])
        if children and not cascade:
            raise HasChildrenError(category_id, len(children))

        deleted: list[str] = []
        for node in index.post_order(category_id):
            try:
                await self.store.delete(
                    RecordKind.CATEGORY,
                    node.id,
                    expected_version=node.version,
                )
            except RecordNotFoundError:
                if node.id == category_id:
                    raise NotFoundError("Category", category_id)
                logger.warning(
                    "Subcategory already deleted",
                    category_id=node.id,
                    request_id=self.request_id,
                )
                continue
            deleted.append(node.id)

        logger.info(
            "Category deleted",
            category_id=category_id,
            cascade=cascade,
            deleted_count=len(deleted),
            request_id=self.request_id,
        )
        return deleted
