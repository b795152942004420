"""Result types returned by application services."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from catalog_api.domain.exceptions import DomainError

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a service operation.

    Failed results carry the machine-readable ``error_code`` and the
    ``details`` of the domain error that caused them; ``value`` is None.
    """

    value: T | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: DomainError) -> "OperationResult[T]":
        return cls(
            success=False,
            error=error.message,
            error_code=error.error_code,
            details=dict(error.details),
        )
