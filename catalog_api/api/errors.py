"""Mapping from domain error codes to HTTP responses."""

from typing import NoReturn

from fastapi import HTTPException, status

from catalog_api.application.results import OperationResult

ERROR_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "CYCLE_DETECTED": status.HTTP_400_BAD_REQUEST,
    "INVALID_IMAGE_PLACEMENT": status.HTTP_400_BAD_REQUEST,
    "UNKNOWN_CATEGORIES": status.HTTP_400_BAD_REQUEST,
    "NO_VALID_CATEGORIES": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_PHONE": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PARENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CATEGORY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NO_CHILDREN": status.HTTP_404_NOT_FOUND,
    "HAS_CHILDREN": status.HTTP_409_CONFLICT,
    "ALREADY_LINKED": status.HTTP_409_CONFLICT,
    "NOT_LINKED": status.HTTP_409_CONFLICT,
    "CONCURRENT_MODIFICATION": status.HTTP_409_CONFLICT,
    "UPLOAD_FAILED": status.HTTP_502_BAD_GATEWAY,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error_code: str | None) -> int:
    """HTTP status for an error code; unknown codes are server errors."""
    return ERROR_STATUS.get(error_code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)


def raise_for_failure(result: OperationResult) -> NoReturn:
    """Raise the HTTPException describing a failed operation result."""
    raise HTTPException(
        status_code=status_for(result.error_code),
        detail={
            "error_code": result.error_code or "INTERNAL_ERROR",
            "message": result.error or "Operation failed",
            "details": result.details,
        },
    )
