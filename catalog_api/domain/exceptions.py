"""Domain exceptions.

All domain-level errors that represent catalog rule violations.
These exceptions are raised by the category tree manager, the membership
validator and the record store when invariants are violated or invalid
operations are attempted. Each carries a machine-readable ``error_code``
that the API layer maps to an HTTP status.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised when a required field is missing, empty or malformed."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str) -> None:
        """Initialize validation error.

        Args:
            field: Name of the offending field.
            reason: Explanation of why the value is invalid.
        """
        super().__init__(
            f"Invalid {field}: {reason}",
            details={"field": field, "reason": reason},
        )


class CycleDetectedError(ValidationError):
    """Raised when a parent assignment would make a category its own ancestor."""

    error_code = "CYCLE_DETECTED"

    def __init__(self, category_id: str, parent_id: str) -> None:
        """Initialize cycle detected error.

        Args:
            category_id: Category being re-parented.
            parent_id: Requested parent.
        """
        super().__init__(
            "parent_id",
            f"Category {category_id} cannot be moved under {parent_id}, "
            "which is itself or one of its descendants",
        )
        self.details.update({"category_id": category_id, "parent_id": parent_id})


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when the entity addressed by an operation does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Category", "Product").
            entity_id: Requested identifier.
        """
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class ParentNotFoundError(DomainError):
    """Raised when a referenced parent category does not exist."""

    error_code = "PARENT_NOT_FOUND"

    def __init__(self, parent_id: str) -> None:
        super().__init__(
            f"Parent category not found: {parent_id}",
            details={"parent_id": parent_id},
        )


class CategoryNotFoundError(DomainError):
    """Raised when a category referenced from a product does not exist."""

    error_code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str) -> None:
        super().__init__(
            f"Category not found: {category_id}",
            details={"category_id": category_id},
        )


class NoChildrenError(DomainError):
    """Raised when a subcategory listing comes back empty."""

    error_code = "NO_CHILDREN"

    def __init__(self, parent_id: str) -> None:
        super().__init__(
            f"No subcategories found for category {parent_id}",
            details={"parent_id": parent_id},
        )


# ============================================================================
# Category Tree Errors
# ============================================================================


class InvalidImagePlacementError(DomainError):
    """Raised when an image is attached to a non-root category."""

    error_code = "INVALID_IMAGE_PLACEMENT"

    def __init__(self, category_id: str | None, parent_id: str) -> None:
        """Initialize invalid image placement error.

        Args:
            category_id: Category receiving the image (None on create).
            parent_id: Parent that makes the category a non-root.
        """
        super().__init__(
            "Images can only be attached to root categories",
            details={"category_id": category_id, "parent_id": parent_id},
        )


class HasChildrenError(DomainError):
    """Raised when deleting a category with children without cascade."""

    error_code = "HAS_CHILDREN"

    def __init__(self, category_id: str, subcategories_count: int) -> None:
        super().__init__(
            f"Category {category_id} has {subcategories_count} subcategories; "
            "use cascade to delete them",
            details={
                "category_id": category_id,
                "subcategories_count": subcategories_count,
            },
        )


# ============================================================================
# Membership Errors
# ============================================================================


class UnknownCategoriesError(DomainError):
    """Raised by the strict policy when some requested category ids are unknown."""

    error_code = "UNKNOWN_CATEGORIES"

    def __init__(self, provided_count: int, found_count: int, unknown_ids: list[str]) -> None:
        """Initialize unknown categories error.

        Args:
            provided_count: Number of distinct ids requested.
            found_count: Number of ids that exist.
            unknown_ids: Ids that do not exist.
        """
        super().__init__(
            f"{provided_count - found_count} of {provided_count} categories do not exist",
            details={
                "provided_count": provided_count,
                "found_count": found_count,
                "unknown_ids": unknown_ids,
            },
        )


class NoValidCategoriesError(DomainError):
    """Raised by the lenient policy when no requested category id exists."""

    error_code = "NO_VALID_CATEGORIES"

    def __init__(self, provided_count: int) -> None:
        super().__init__(
            "None of the provided categories exist",
            details={"provided_count": provided_count, "found_count": 0},
        )


class AlreadyLinkedError(DomainError):
    """Raised when linking a category that is already on the product."""

    error_code = "ALREADY_LINKED"

    def __init__(self, product_id: str, category_id: str) -> None:
        super().__init__(
            f"Product {product_id} is already in category {category_id}",
            details={"product_id": product_id, "category_id": category_id},
        )


class NotLinkedError(DomainError):
    """Raised when unlinking a category the product does not reference."""

    error_code = "NOT_LINKED"

    def __init__(self, product_id: str, category_id: str) -> None:
        super().__init__(
            f"Product {product_id} is not in category {category_id}",
            details={"product_id": product_id, "category_id": category_id},
        )


# ============================================================================
# User Errors
# ============================================================================


class UnauthenticatedError(DomainError):
    """Raised when credentials are missing, malformed or do not match."""

    error_code = "UNAUTHORIZED"

    def __init__(self, reason: str) -> None:
        super().__init__(reason, details={})


class ForbiddenError(DomainError):
    """Raised when a user acts on an account other than their own."""

    error_code = "FORBIDDEN"

    def __init__(self, reason: str) -> None:
        super().__init__(reason, details={})


class DuplicatePhoneError(DomainError):
    """Raised when a phone number is already registered to another user."""

    error_code = "DUPLICATE_PHONE"

    def __init__(self, phone: str) -> None:
        super().__init__(
            "Phone number already in use",
            details={"phone": phone},
        )


# ============================================================================
# Collaborator Errors
# ============================================================================


class UploadFailedError(DomainError):
    """Raised when the image storage collaborator rejects an upload."""

    error_code = "UPLOAD_FAILED"

    def __init__(self, reason: str, filename: str | None = None) -> None:
        super().__init__(
            f"Image upload failed: {reason}",
            details={"filename": filename, "reason": reason},
        )


class StoreUnavailableError(DomainError):
    """Raised when the record store cannot complete an operation."""

    error_code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Record store unavailable during {operation}: {reason}",
            details={"operation": operation},
        )


class RecordNotFoundError(DomainError):
    """Raised by the record store when updating or deleting a missing record."""

    error_code = "NOT_FOUND"

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(
            f"{kind} record not found: {record_id}",
            details={"entity_type": kind, "entity_id": record_id},
        )


class ConcurrentModificationError(DomainError):
    """Raised when a record changed between read and write."""

    error_code = "CONCURRENT_MODIFICATION"

    def __init__(self, kind: str, record_id: str, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"{kind} {record_id} was modified concurrently",
            details={
                "entity_type": kind,
                "entity_id": record_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
