"""User account service.

Registration, login and self-service profile management. Any
authenticated user may administer the catalog; users may only change or
delete their own account.
"""

from dataclasses import dataclass, fields
from typing import Any

import structlog

from catalog_api.application.results import OperationResult
from catalog_api.domain.commands import UNSET, is_set
from catalog_api.domain.entities import User
from catalog_api.domain.exceptions import (
    DomainError,
    DuplicatePhoneError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from catalog_api.infrastructure.credentials import CredentialVerifier
from catalog_api.infrastructure.record_store import RecordKind, RecordStore

logger = structlog.get_logger()


@dataclass
class UserRegistration:
    """Fields for registering a user."""

    name: str
    phone: str
    password: str


@dataclass
class UserPatch:
    """Partial profile update; ``UNSET`` fields are left alone."""

    name: Any = UNSET
    phone: Any = UNSET
    password: Any = UNSET

    def supplied(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if is_set(getattr(self, f.name))}


def _require_text(field_name: str, value: Any) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(field_name, "is required")
    return text


class UserService:
    """Application service for user accounts."""

    def __init__(self, store: RecordStore, request_id: str | None = None) -> None:
        self.store = store
        self.request_id = request_id
        self.verifier = CredentialVerifier(store)

    async def _phone_taken(self, phone: str, exclude_id: str | None = None) -> bool:
        matches = await self.store.find(
            RecordKind.USER,
            lambda r: r.get("phone") == phone and r["id"] != exclude_id,
        )
        return bool(matches)

    async def _require_user(self, user_id: str) -> User:
        record = await self.store.get(RecordKind.USER, user_id)
        if record is None:
            raise NotFoundError("User", user_id)
        return User.from_record(record)

    async def register(self, registration: UserRegistration) -> OperationResult[User]:
        """Create an account.

        Name, phone and password are required; a phone number can only be
        registered once.
        """
        try:
            name = _require_text("name", registration.name)
            phone = _require_text("phone", registration.phone)
            password = _require_text("password", registration.password)

            if await self._phone_taken(phone):
                raise DuplicatePhoneError(phone)

            record = await self.store.create(
                RecordKind.USER,
                {"name": name, "phone": phone, "password": password},
            )
            user = User.from_record(record)
            logger.info("User registered", user_id=user.id, request_id=self.request_id)
            return OperationResult(value=user)

        except DomainError as e:
            logger.warning(
                "User registration failed",
                error_code=e.error_code,
                error=e.message,
                request_id=self.request_id,
            )
            return OperationResult.failure(e)

    async def login(self, authorization: str | None) -> OperationResult[User]:
        """Resolve a Basic authorization header to the user it names."""
        try:
            user = await self.verifier.authenticate(authorization)
            logger.info("User logged in", user_id=user.id, request_id=self.request_id)
            return OperationResult(value=user)
        except DomainError as e:
            return OperationResult.failure(e)

    async def list_users(self) -> OperationResult[list[User]]:
        """All registered users."""
        try:
            records = await self.store.find(RecordKind.USER)
            return OperationResult(value=[User.from_record(r) for r in records])
        except DomainError as e:
            return OperationResult.failure(e)

    async def get_user(self, user_id: str) -> OperationResult[User]:
        """A single user by id."""
        try:
            return OperationResult(value=await self._require_user(user_id))
        except DomainError as e:
            return OperationResult.failure(e)

    async def update_user(self, caller: User, user_id: str, patch: UserPatch) -> OperationResult[User]:
        """Update the caller's own profile.

        Raises nothing; failures come back as FORBIDDEN, NOT_FOUND,
        VALIDATION_ERROR or DUPLICATE_PHONE results.
        """
        try:
            if caller.id != user_id:
                raise ForbiddenError("Users may only update their own profile")
            current = await self._require_user(user_id)

            changes = patch.supplied()
            for key in list(changes):
                changes[key] = _require_text(key, changes[key])

            if "phone" in changes and changes["phone"] != current.phone:
                if await self._phone_taken(changes["phone"], exclude_id=user_id):
                    raise DuplicatePhoneError(changes["phone"])

            if not changes:
                return OperationResult(value=current)

            record = await self.store.update(
                RecordKind.USER,
                user_id,
                changes,
                expected_version=current.version,
            )
            logger.info(
                "User updated",
                user_id=user_id,
                fields=sorted(changes),
                request_id=self.request_id,
            )
            return OperationResult(value=User.from_record(record))

        except DomainError as e:
            logger.warning(
                "User update failed",
                user_id=user_id,
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return OperationResult.failure(e)

    async def delete_user(self, caller: User, user_id: str) -> OperationResult[User]:
        """Delete the caller's own account."""
        try:
            if caller.id != user_id:
                raise ForbiddenError("Users may only delete their own account")
            current = await self._require_user(user_id)
            await self.store.delete(RecordKind.USER, user_id, expected_version=current.version)
            logger.info("User deleted", user_id=user_id, request_id=self.request_id)
            return OperationResult(value=current)

        except DomainError as e:
            logger.warning(
                "User deletion failed",
                user_id=user_id,
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return OperationResult.failure(e)
