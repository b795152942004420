"""Image storage client.

Uploads raw image payloads to an object-storage bucket over HTTP and
returns the public URLs of the stored objects. Storage itself is an
external collaborator; this module only speaks its upload API.
"""

from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from uuid import uuid4

import httpx
import structlog

from catalog_api.domain.commands import ImageUpload
from catalog_api.domain.exceptions import UploadFailedError
from catalog_api.infrastructure.config import Settings

logger = structlog.get_logger()


class ImageStorage(ABC):
    """Upload adapter consumed by the catalog engine."""

    @abstractmethod
    async def upload(self, images: list[ImageUpload], folder: str) -> list[str]:
        """Store images and return their public URLs, in input order.

        Raises:
            UploadFailedError: If any image cannot be stored.
        """

    async def close(self) -> None:
        """Release resources held by the adapter."""


class UnconfiguredImageStorage(ImageStorage):
    """Adapter used when no bucket is configured; every upload fails."""

    async def upload(self, images: list[ImageUpload], folder: str) -> list[str]:
        if not images:
            return []
        raise UploadFailedError("image storage is not configured", images[0].filename)


class HttpImageStorage(ImageStorage):
    """HTTP client for an object-storage bucket.

    Objects are POSTed to ``{base_url}/object/{bucket}/{path}`` and served
    from ``{public_url}/{bucket}/{path}``.

    Example usage:
        storage = HttpImageStorage(
            base_url="https://storage.example.com/storage/v1",
            bucket="catalog-images",
            api_key="service-key",
        )
        urls = await storage.upload(images, folder="products")
    """

    def __init__(
        self,
        base_url: str,
        bucket: str,
        api_key: str | None = None,
        public_url: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize storage client.

        Args:
            base_url: Storage API base URL.
            bucket: Bucket name.
            api_key: Optional bearer key for the storage API.
            public_url: Base URL for public object links; defaults to
                ``{base_url}/object/public``.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.public_url = (public_url or f"{self.base_url}/object/public").rstrip("/")
        self.timeout = timeout
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpImageStorage":
        """Create a client from application settings."""
        return cls(
            base_url=settings.image_storage_url or "",
            bucket=settings.image_storage_bucket,
            api_key=settings.image_storage_api_key,
            public_url=settings.image_storage_public_url,
            timeout=settings.image_upload_timeout,
        )

    @staticmethod
    def object_path(folder: str, filename: str) -> str:
        """Build a collision-free object path for an upload."""
        name = PurePosixPath(filename).name or "image"
        return f"{folder.strip('/')}/{uuid4().hex}-{name}"

    async def upload(self, images: list[ImageUpload], folder: str) -> list[str]:
        urls: list[str] = []
        for image in images:
            path = self.object_path(folder, image.filename)
            try:
                response = await self._client.post(
                    f"/object/{self.bucket}/{path}",
                    content=image.content,
                    headers={"Content-Type": image.content_type},
                )
            except httpx.HTTPError as e:
                logger.error(
                    "Image upload request failed",
                    filename=image.filename,
                    error=str(e),
                )
                raise UploadFailedError(str(e), image.filename) from e

            if response.status_code not in (200, 201):
                logger.error(
                    "Image upload rejected",
                    filename=image.filename,
                    status_code=response.status_code,
                )
                raise UploadFailedError(
                    f"storage responded with {response.status_code}",
                    image.filename,
                )

            urls.append(f"{self.public_url}/{self.bucket}/{path}")

        logger.info("Images uploaded", folder=folder, count=len(urls))
        return urls

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def build_image_storage(settings: Settings) -> ImageStorage:
    """Select the image storage adapter for the configured environment."""
    if settings.image_storage_url:
        return HttpImageStorage.from_settings(settings)
    return UnconfiguredImageStorage()
