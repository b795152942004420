"""Tests for the database record store that need no database server."""

import pytest
from sqlalchemy.exc import OperationalError

from catalog_api.domain.exceptions import StoreUnavailableError
from catalog_api.infrastructure.models import CategoryModel, ProductModel, UserModel
from catalog_api.infrastructure.record_store import RecordKind
from catalog_api.infrastructure.sql_record_store import MODELS, SqlAlchemyRecordStore


class UnreachableSession:
    """Session whose every statement fails at the driver."""

    async def __aenter__(self) -> "UnreachableSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    async def get(self, *args, **kwargs):
        self._fail()

    async def execute(self, *args, **kwargs):
        self._fail()

    async def commit(self) -> None:
        return None

    async def rollback(self) -> None:
        return None


@pytest.fixture
def unreachable_store() -> SqlAlchemyRecordStore:
    """Store whose sessions cannot reach the database."""
    return SqlAlchemyRecordStore(engine=None, session_factory=UnreachableSession)


class TestModels:
    """Tests for ORM model conversion."""

    def test_every_kind_has_a_model(self) -> None:
        """Each record kind maps to a table."""
        assert MODELS == {
            RecordKind.CATEGORY: CategoryModel,
            RecordKind.PRODUCT: ProductModel,
            RecordKind.USER: UserModel,
        }

    def test_category_to_record(self) -> None:
        """Records carry every column."""
        record = CategoryModel(id="c-1", name="Sofas", parent_id=None).to_record()
        assert set(record) == {
            "id", "name", "parent_id", "comment", "image_url",
            "version", "created_at", "updated_at",
        }
        assert record["name"] == "Sofas"

    def test_product_to_record_lists(self) -> None:
        """List fields come back as lists."""
        record = ProductModel(id="p-1", name="Recliner", category_ids=["c-1"], features=["Soft"]).to_record()
        assert record["category_ids"] == ["c-1"]
        assert record["features"] == ["Soft"]
        assert "status" in record

    def test_category_ids_not_a_foreign_key(self) -> None:
        """Product references must survive category deletes."""
        assert not ProductModel.__table__.c.category_ids.foreign_keys
        assert not CategoryModel.__table__.c.parent_id.foreign_keys


class TestStoreFailures:
    """Tests for driver error mapping."""

    @pytest.mark.asyncio
    async def test_get_maps_driver_errors(self, unreachable_store: SqlAlchemyRecordStore) -> None:
        """Driver failures surface as StoreUnavailableError."""
        with pytest.raises(StoreUnavailableError) as exc_info:
            await unreachable_store.get(RecordKind.CATEGORY, "c-1")
        assert exc_info.value.details == {"operation": "get"}

    @pytest.mark.asyncio
    async def test_find_maps_driver_errors(self, unreachable_store: SqlAlchemyRecordStore) -> None:
        """Find failures surface as StoreUnavailableError."""
        with pytest.raises(StoreUnavailableError):
            await unreachable_store.find(RecordKind.PRODUCT)

    @pytest.mark.asyncio
    async def test_ping_reports_unreachable(self, unreachable_store: SqlAlchemyRecordStore) -> None:
        """Ping answers False instead of raising."""
        assert await unreachable_store.ping() is False
