"""Shared fixtures."""

import pytest

from catalog_api.application.catalog_engine import CatalogEngine
from catalog_api.domain.commands import ImageUpload
from catalog_api.domain.exceptions import UploadFailedError
from catalog_api.infrastructure.image_storage import ImageStorage
from catalog_api.infrastructure.record_store import InMemoryRecordStore


class FakeImageStorage(ImageStorage):
    """Image storage recording uploads instead of sending them."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[tuple[str, str]] = []
        self.closed = False

    async def upload(self, images: list[ImageUpload], folder: str) -> list[str]:
        if self.fail and images:
            raise UploadFailedError("storage offline", images[0].filename)
        urls = []
        for image in images:
            self.uploads.append((folder, image.filename))
            urls.append(f"https://cdn.test/{folder}/{image.filename}")
        return urls

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def image_storage() -> FakeImageStorage:
    """Image storage that accepts every upload."""
    return FakeImageStorage()


@pytest.fixture
def engine(store: InMemoryRecordStore, image_storage: FakeImageStorage) -> CatalogEngine:
    """Catalog engine over the in-memory store."""
    return CatalogEngine(store, image_storage, max_images_per_upload=3, request_id="test")
