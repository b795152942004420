"""Record store abstraction.

The record store is the only owner of persisted catalog state. Records are
plain dictionaries keyed by ``id``; the store maintains ``version``,
``created_at`` and ``updated_at`` on every record.

``update`` and ``delete`` accept an ``expected_version``: when given and the
stored version differs, the write is refused with
``ConcurrentModificationError``. Callers pass the version they read while
validating, which serializes read-modify-write cycles per record.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

import structlog

from catalog_api.domain.exceptions import (
    ConcurrentModificationError,
    RecordNotFoundError,
)

logger = structlog.get_logger()

Record = dict[str, Any]
Predicate = Callable[[Record], bool]

# Fields owned by the store; callers cannot overwrite them through a patch.
RESERVED_FIELDS = frozenset({"id", "version", "created_at", "updated_at"})


class RecordKind(str, Enum):
    """Kinds of records held by the store."""

    CATEGORY = "category"
    PRODUCT = "product"
    USER = "user"


def match_all(_: Record) -> bool:
    return True


class RecordStore(ABC):
    """Repository interface consumed by the catalog engine.

    Implementations raise ``StoreUnavailableError`` when the backing storage
    fails, ``RecordNotFoundError`` when updating or deleting a missing record
    and ``ConcurrentModificationError`` on a version mismatch.
    """

    @abstractmethod
    async def get(self, kind: RecordKind, record_id: str) -> Record | None:
        """Get a record by id, or None."""

    @abstractmethod
    async def find(self, kind: RecordKind, predicate: Predicate = match_all) -> list[Record]:
        """Get every record of a kind matching the predicate, oldest first."""

    @abstractmethod
    async def create(self, kind: RecordKind, data: Record) -> Record:
        """Persist a new record and return it with id and bookkeeping fields."""

    @abstractmethod
    async def update(
        self,
        kind: RecordKind,
        record_id: str,
        patch: Record,
        expected_version: int | None = None,
    ) -> Record:
        """Apply a partial update and return the stored record."""

    @abstractmethod
    async def delete(
        self,
        kind: RecordKind,
        record_id: str,
        expected_version: int | None = None,
    ) -> Record:
        """Remove a record and return its last state."""

    async def ping(self) -> bool:
        """Check the store is reachable."""
        return True

    async def close(self) -> None:
        """Release resources held by the store."""


class InMemoryRecordStore(RecordStore):
    """In-memory record store.

    Used for tests and local runs. Records are copied in and out so callers
    never hold references into the store.
    """

    def __init__(self) -> None:
        self._records: dict[RecordKind, dict[str, Record]] = {kind: {} for kind in RecordKind}

    def _table(self, kind: RecordKind) -> dict[str, Record]:
        return self._records[RecordKind(kind)]

    def _check_version(
        self,
        kind: RecordKind,
        record: Record,
        expected_version: int | None,
    ) -> None:
        if expected_version is not None and record["version"] != expected_version:
            raise ConcurrentModificationError(
                kind.value, record["id"], expected_version, record["version"]
            )

    async def get(self, kind: RecordKind, record_id: str) -> Record | None:
        record = self._table(kind).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def find(self, kind: RecordKind, predicate: Predicate = match_all) -> list[Record]:
        return [copy.deepcopy(r) for r in self._table(kind).values() if predicate(r)]

    async def create(self, kind: RecordKind, data: Record) -> Record:
        now = datetime.now(timezone.utc)
        record = {k: copy.deepcopy(v) for k, v in data.items() if k not in RESERVED_FIELDS}
        record.update(
            id=data.get("id") or str(uuid4()),
            version=1,
            created_at=now,
            updated_at=now,
        )
        self._table(kind)[record["id"]] = record
        logger.debug("Record created", kind=kind.value, record_id=record["id"])
        return copy.deepcopy(record)

    async def update(
        self,
        kind: RecordKind,
        record_id: str,
        patch: Record,
        expected_version: int | None = None,
    ) -> Record:
        record = self._table(kind).get(record_id)
        if record is None:
            raise RecordNotFoundError(kind.value, record_id)
        self._check_version(kind, record, expected_version)

        for key, value in patch.items():
            if key not in RESERVED_FIELDS:
                record[key] = copy.deepcopy(value)
        record["version"] += 1
        record["updated_at"] = datetime.now(timezone.utc)
        return copy.deepcopy(record)

    async def delete(
        self,
        kind: RecordKind,
        record_id: str,
        expected_version: int | None = None,
    ) -> Record:
        table = self._table(kind)
        record = table.get(record_id)
        if record is None:
            raise RecordNotFoundError(kind.value, record_id)
        self._check_version(kind, record, expected_version)
        del table[record_id]
        logger.debug("Record deleted", kind=kind.value, record_id=record_id)
        return record
