"""Tests for the user service."""

import pytest

from catalog_api.application.user_service import UserPatch, UserRegistration, UserService
from catalog_api.domain.entities import User
from catalog_api.infrastructure.credentials import encode_basic_auth
from catalog_api.infrastructure.record_store import InMemoryRecordStore

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(store: InMemoryRecordStore) -> UserService:
    """User service over an empty store."""
    return UserService(store, request_id="test")


async def register(service: UserService, phone: str = "5550100", password: str = "secret") -> User:
    """Register a user and return it."""
    result = await service.register(UserRegistration(name="Asha", phone=phone, password=password))
    assert result.success, result.error
    return result.value


class TestRegister:
    """Tests for registration."""

    async def test_register(self, service: UserService) -> None:
        """Should store a new user."""
        user = await register(service)
        assert user.phone == "5550100"
        assert user.version == 1

    async def test_duplicate_phone(self, service: UserService) -> None:
        """A phone number can only be registered once."""
        await register(service)
        result = await service.register(UserRegistration(name="Other", phone="5550100", password="x"))
        assert result.error_code == "DUPLICATE_PHONE"

    @pytest.mark.parametrize("field", ["name", "phone", "password"])
    async def test_required_fields(self, service: UserService, field: str) -> None:
        """Name, phone and password are required."""
        values = {"name": "Asha", "phone": "5550100", "password": "secret"}
        values[field] = "  "
        result = await service.register(UserRegistration(**values))
        assert result.error_code == "VALIDATION_ERROR"
        assert result.details["field"] == field


class TestLogin:
    """Tests for login."""

    async def test_login(self, service: UserService) -> None:
        """Valid credentials resolve to the user."""
        user = await register(service)
        result = await service.login(encode_basic_auth("5550100", "secret"))
        assert result.value.id == user.id

    async def test_wrong_password(self, service: UserService) -> None:
        """Wrong passwords are rejected."""
        await register(service)
        result = await service.login(encode_basic_auth("5550100", "wrong"))
        assert result.error_code == "UNAUTHORIZED"
        assert result.error == "Invalid password"

    async def test_missing_header(self, service: UserService) -> None:
        """A missing header is rejected."""
        result = await service.login(None)
        assert result.error_code == "UNAUTHORIZED"


class TestProfileManagement:
    """Tests for reading, updating and deleting accounts."""

    async def test_list_and_get(self, service: UserService) -> None:
        """Registered users can be listed and fetched."""
        user = await register(service)
        assert [u.id for u in (await service.list_users()).value] == [user.id]
        assert (await service.get_user(user.id)).value.name == "Asha"
        assert (await service.get_user("missing")).error_code == "NOT_FOUND"

    async def test_update_own_profile(self, service: UserService) -> None:
        """Users can change their own fields."""
        user = await register(service)
        result = await service.update_user(user, user.id, UserPatch(name="Asha K"))
        assert result.value.name == "Asha K"
        assert result.value.phone == "5550100"

    async def test_update_other_forbidden(self, service: UserService) -> None:
        """Users cannot change someone else's profile."""
        user = await register(service)
        other = await register(service, phone="5550101")
        result = await service.update_user(user, other.id, UserPatch(name="Hijacked"))
        assert result.error_code == "FORBIDDEN"

    async def test_update_to_taken_phone(self, service: UserService) -> None:
        """Users cannot take another user's phone."""
        user = await register(service)
        await register(service, phone="5550101")
        result = await service.update_user(user, user.id, UserPatch(phone="5550101"))
        assert result.error_code == "DUPLICATE_PHONE"

    async def test_keep_own_phone(self, service: UserService) -> None:
        """Re-submitting the current phone is not a duplicate."""
        user = await register(service)
        result = await service.update_user(user, user.id, UserPatch(phone="5550100"))
        assert result.success

    async def test_delete_own_account(self, service: UserService) -> None:
        """Users can delete themselves but nobody else."""
        user = await register(service)
        other = await register(service, phone="5550101")
        assert (await service.delete_user(user, other.id)).error_code == "FORBIDDEN"
        assert (await service.delete_user(user, user.id)).success
        assert (await service.get_user(user.id)).error_code == "NOT_FOUND"
