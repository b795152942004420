"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Record store
    store_backend: Literal["memory", "database"] = "memory"
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Image storage bucket
    image_storage_url: str | None = None
    image_storage_public_url: str | None = None
    image_storage_bucket: str = "catalog-images"
    image_storage_api_key: str | None = None
    image_upload_timeout: float = 15.0
    max_images_per_upload: int = 5

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
