"""Request-scoped dependencies shared by the routers."""

from typing import Any

from fastapi import HTTPException, Request, status
from starlette.datastructures import UploadFile

from catalog_api.application.catalog_engine import CatalogEngine
from catalog_api.application.user_service import UserService
from catalog_api.domain.commands import ImageUpload
from catalog_api.domain.entities import User
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.image_storage import ImageStorage
from catalog_api.infrastructure.record_store import RecordStore

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


# ============================================================================
# Services
# ============================================================================


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


def get_engine(request: Request) -> CatalogEngine:
    """Get catalog engine with request ID."""
    return CatalogEngine(
        get_store(request),
        get_image_storage(request),
        max_images_per_upload=settings.max_images_per_upload,
        request_id=getattr(request.state, "request_id", None),
    )


def get_user_service(request: Request) -> UserService:
    """Get user service with request ID."""
    return UserService(get_store(request), request_id=getattr(request.state, "request_id", None))


# ============================================================================
# Caller
# ============================================================================


def get_caller(request: Request) -> User | None:
    """User authenticated by the credential middleware, if any."""
    return getattr(request.state, "user", None)


def caller_is_admin(request: Request) -> bool:
    """Any authenticated caller is an admin."""
    return get_caller(request) is not None


def require_user(request: Request) -> User:
    """Reject anonymous callers.

    When credentials were sent but not accepted, the 401 carries the reason.
    """
    user = get_caller(request)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "UNAUTHORIZED",
                "message": getattr(request.state, "auth_error", None) or "Authentication required",
                "details": {},
            },
            headers={"WWW-Authenticate": "Basic"},
        )
    return user


# ============================================================================
# Request bodies
# ============================================================================


class RequestPayload:
    """Fields and uploaded files of a JSON or form request body."""

    def __init__(self, fields: dict[str, Any], files: dict[str, list[UploadFile]]) -> None:
        self.fields = fields
        self.files = files

    async def images(self, name: str) -> list[ImageUpload]:
        """Read the files uploaded under ``name``."""
        uploads = []
        for upload in self.files.get(name, []):
            content = await upload.read()
            if not content and not upload.filename:
                continue
            uploads.append(
                ImageUpload(
                    filename=upload.filename or "image",
                    content=content,
                    content_type=upload.content_type or "application/octet-stream",
                )
            )
        return uploads


def _bad_body(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error_code": "VALIDATION_ERROR", "message": message, "details": {}},
    )


async def read_payload(request: Request) -> RequestPayload:
    """Parse a JSON or form body.

    Repeated form fields become lists; file parts are collected separately.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        fields: dict[str, Any] = {}
        files: dict[str, list[UploadFile]] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                files.setdefault(key, []).append(value)
            elif key in fields:
                existing = fields[key]
                fields[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
            else:
                fields[key] = value
        return RequestPayload(fields, files)

    body = await request.body()
    if not body:
        return RequestPayload({}, {})
    try:
        data = await request.json()
    except ValueError as e:
        raise _bad_body("Request body is not valid JSON") from e
    if not isinstance(data, dict):
        raise _bad_body("Request body must be a JSON object")
    return RequestPayload(data, {})
