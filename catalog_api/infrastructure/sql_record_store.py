"""Database-backed record store.

Implements the record store interface over SQLAlchemy async sessions.
Each call runs in its own session and transaction. ``find`` loads the
kind's table and filters with the Python predicate in memory, which keeps
the engine's queries storage-agnostic at the cost of a full scan.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from catalog_api.domain.exceptions import (
    ConcurrentModificationError,
    RecordNotFoundError,
    StoreUnavailableError,
)
from catalog_api.infrastructure.database import Base, build_engine, build_session_factory
from catalog_api.infrastructure.models import CategoryModel, ProductModel, UserModel
from catalog_api.infrastructure.record_store import (
    RESERVED_FIELDS,
    Predicate,
    Record,
    RecordKind,
    RecordStore,
    match_all,
)

logger = structlog.get_logger()

MODELS: dict[RecordKind, Any] = {
    RecordKind.CATEGORY: CategoryModel,
    RecordKind.PRODUCT: ProductModel,
    RecordKind.USER: UserModel,
}


class SqlAlchemyRecordStore(RecordStore):
    """Record store persisting to a relational database.

    Example usage:
        store = SqlAlchemyRecordStore.from_url(settings.database_url)
        await store.create_tables()
        record = await store.get(RecordKind.CATEGORY, "c-1")
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Initialize store.

        Args:
            engine: Async engine.
            session_factory: Optional session factory; built from engine if omitted.
        """
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlAlchemyRecordStore":
        """Create a store for a database URL."""
        return cls(build_engine(database_url, echo=echo))

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, committing on success and mapping driver errors."""
        try:
            async with self.session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            logger.error("Record store operation failed", operation=operation, error=str(e))
            raise StoreUnavailableError(operation, str(e)) from e
        except OSError as e:
            logger.error("Record store unreachable", operation=operation, error=str(e))
            raise StoreUnavailableError(operation, str(e)) from e

    async def create_tables(self) -> None:
        """Create database tables if they don't exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def get(self, kind: RecordKind, record_id: str) -> Record | None:
        async with self._session("get") as session:
            row = await session.get(MODELS[kind], record_id)
            return row.to_record() if row is not None else None

    async def find(self, kind: RecordKind, predicate: Predicate = match_all) -> list[Record]:
        model = MODELS[kind]
        async with self._session("find") as session:
            result = await session.execute(select(model).order_by(model.created_at))
            records = [row.to_record() for row in result.scalars().all()]
        return [r for r in records if predicate(r)]

    async def create(self, kind: RecordKind, data: Record) -> Record:
        model = MODELS[kind]
        values = {k: v for k, v in data.items() if k not in RESERVED_FIELDS}
        if data.get("id"):
            values["id"] = data["id"]
        async with self._session("create") as session:
            row = model(**values)
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return row.to_record()

    async def update(
        self,
        kind: RecordKind,
        record_id: str,
        patch: Record,
        expected_version: int | None = None,
    ) -> Record:
        async with self._session("update") as session:
            row = await session.get(MODELS[kind], record_id, with_for_update=True)
            if row is None:
                raise RecordNotFoundError(kind.value, record_id)
            if expected_version is not None and row.version != expected_version:
                raise ConcurrentModificationError(kind.value, record_id, expected_version, row.version)
            for key, value in patch.items():
                if key not in RESERVED_FIELDS:
                    setattr(row, key, value)
            row.version += 1
            await session.flush()
            await session.refresh(row)
            return row.to_record()

    async def delete(
        self,
        kind: RecordKind,
        record_id: str,
        expected_version: int | None = None,
    ) -> Record:
        async with self._session("delete") as session:
            row = await session.get(MODELS[kind], record_id, with_for_update=True)
            if row is None:
                raise RecordNotFoundError(kind.value, record_id)
            if expected_version is not None and row.version != expected_version:
                raise ConcurrentModificationError(kind.value, record_id, expected_version, row.version)
            record = row.to_record()
            await session.delete(row)
            return record

    async def ping(self) -> bool:
        try:
            async with self._session("ping") as session:
                await session.execute(text("SELECT 1"))
            return True
        except StoreUnavailableError:
            return False

    async def close(self) -> None:
        await self.engine.dispose()
