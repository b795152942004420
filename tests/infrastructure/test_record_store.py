"""Tests for the in-memory record store."""

import pytest

from catalog_api.domain.exceptions import ConcurrentModificationError, RecordNotFoundError
from catalog_api.infrastructure.record_store import InMemoryRecordStore, RecordKind

pytestmark = pytest.mark.asyncio


class TestInMemoryRecordStore:
    """Tests for InMemoryRecordStore."""

    async def test_create_assigns_bookkeeping(self, store: InMemoryRecordStore) -> None:
        """New records get an id, version 1 and timestamps."""
        record = await store.create(RecordKind.CATEGORY, {"name": "Sofas", "version": 7})
        assert record["id"]
        assert record["version"] == 1
        assert record["created_at"] == record["updated_at"]

    async def test_create_keeps_given_id(self, store: InMemoryRecordStore) -> None:
        """A supplied id is used as-is."""
        record = await store.create(RecordKind.CATEGORY, {"id": "c-1", "name": "Sofas"})
        assert record["id"] == "c-1"
        assert (await store.get(RecordKind.CATEGORY, "c-1"))["name"] == "Sofas"

    async def test_records_are_copied(self, store: InMemoryRecordStore) -> None:
        """Mutating a returned record does not touch the store."""
        record = await store.create(RecordKind.PRODUCT, {"name": "Recliner", "category_ids": ["c1"]})
        record["category_ids"].append("c2")
        stored = await store.get(RecordKind.PRODUCT, record["id"])
        assert stored["category_ids"] == ["c1"]

    async def test_find_with_predicate(self, store: InMemoryRecordStore) -> None:
        """Find filters in creation order."""
        await store.create(RecordKind.CATEGORY, {"name": "A", "parent_id": None})
        await store.create(RecordKind.CATEGORY, {"name": "B", "parent_id": "x"})
        await store.create(RecordKind.CATEGORY, {"name": "C", "parent_id": None})
        roots = await store.find(RecordKind.CATEGORY, lambda r: r["parent_id"] is None)
        assert [r["name"] for r in roots] == ["A", "C"]

    async def test_kinds_are_separate(self, store: InMemoryRecordStore) -> None:
        """Records of one kind are invisible to another."""
        record = await store.create(RecordKind.CATEGORY, {"name": "Sofas"})
        assert await store.get(RecordKind.PRODUCT, record["id"]) is None

    async def test_update_bumps_version(self, store: InMemoryRecordStore) -> None:
        """Updates apply the patch and bump the version."""
        record = await store.create(RecordKind.CATEGORY, {"name": "Sofas"})
        updated = await store.update(
            RecordKind.CATEGORY, record["id"], {"name": "Couches", "id": "ignored"}, expected_version=1
        )
        assert updated["name"] == "Couches"
        assert updated["id"] == record["id"]
        assert updated["version"] == 2

    async def test_update_version_conflict(self, store: InMemoryRecordStore) -> None:
        """A stale expected version is rejected."""
        record = await store.create(RecordKind.CATEGORY, {"name": "Sofas"})
        await store.update(RecordKind.CATEGORY, record["id"], {"name": "Couches"})
        with pytest.raises(ConcurrentModificationError) as exc_info:
            await store.update(RecordKind.CATEGORY, record["id"], {"name": "Late"}, expected_version=1)
        assert exc_info.value.details["actual_version"] == 2

    async def test_update_missing(self, store: InMemoryRecordStore) -> None:
        """Updating a missing record fails."""
        with pytest.raises(RecordNotFoundError):
            await store.update(RecordKind.PRODUCT, "missing", {"name": "X"})

    async def test_delete(self, store: InMemoryRecordStore) -> None:
        """Deleted records are gone; a second delete fails."""
        record = await store.create(RecordKind.USER, {"name": "Asha", "phone": "1", "password": "p"})
        await store.delete(RecordKind.USER, record["id"], expected_version=1)
        assert await store.get(RecordKind.USER, record["id"]) is None
        with pytest.raises(RecordNotFoundError):
            await store.delete(RecordKind.USER, record["id"])

    async def test_delete_version_conflict(self, store: InMemoryRecordStore) -> None:
        """A stale delete is rejected and the record kept."""
        record = await store.create(RecordKind.CATEGORY, {"name": "Sofas"})
        with pytest.raises(ConcurrentModificationError):
            await store.delete(RecordKind.CATEGORY, record["id"], expected_version=5)
        assert await store.get(RecordKind.CATEGORY, record["id"]) is not None

    async def test_ping(self, store: InMemoryRecordStore) -> None:
        """The in-memory store is always reachable."""
        assert await store.ping() is True
