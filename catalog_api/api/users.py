"""User API endpoints.

Provides endpoints for accounts:
- POST /api/users/register - create an account
- POST /api/users/login - check Basic credentials and return the profile
- GET /api/users - list users
- GET /api/users/profile/me - the caller's profile
- GET /api/users/{id} - a user's profile
- PUT /api/users/{id} - update the caller's own profile
- DELETE /api/users/{id} - delete the caller's own account
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from catalog_api.api.dependencies import get_user_service, require_user
from catalog_api.api.errors import raise_for_failure
from catalog_api.api.schemas import (
    ErrorResponse,
    UserDeleteResponse,
    UserMessageResponse,
    UserRegisterRequest,
    UserResponse,
    UserUpdateRequest,
)
from catalog_api.application.user_service import UserPatch, UserRegistration, UserService
from catalog_api.domain.commands import UNSET
from catalog_api.domain.entities import User

router = APIRouter(prefix="/api/users", tags=["Users"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    403: {"model": ErrorResponse, "description": "Not the caller's account"},
    404: {"model": ErrorResponse, "description": "User not found"},
}


def user_to_response(user: User) -> UserResponse:
    """Convert User to UserResponse."""
    return UserResponse(**user.profile())


@router.post(
    "/register",
    response_model=UserMessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def register(
    body: UserRegisterRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserMessageResponse:
    """Register an account. Phone numbers are unique."""
    result = await service.register(
        UserRegistration(name=body.name, phone=body.phone, password=body.password)
    )
    if not result.success:
        raise_for_failure(result)
    return UserMessageResponse(
        message="User registered successfully",
        user=user_to_response(result.value),
    )


@router.post("/login", response_model=UserMessageResponse, responses=ERROR_RESPONSES)
async def login(
    request: Request,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserMessageResponse:
    """Log in with ``Authorization: Basic base64(phone:password)``."""
    result = await service.login(request.headers.get("Authorization"))
    if not result.success:
        raise_for_failure(result)
    return UserMessageResponse(message="Login successful", user=user_to_response(result.value))


@router.get("", response_model=list[UserResponse], responses=ERROR_RESPONSES)
async def list_users(
    _user: Annotated[User, Depends(require_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[UserResponse]:
    """List every user."""
    result = await service.list_users()
    if not result.success:
        raise_for_failure(result)
    return [user_to_response(u) for u in result.value]


@router.get("/profile/me", response_model=UserResponse, responses=ERROR_RESPONSES)
async def get_profile(user: Annotated[User, Depends(require_user)]) -> UserResponse:
    """The authenticated caller's profile."""
    return user_to_response(user)


@router.get("/{user_id}", response_model=UserResponse, responses=ERROR_RESPONSES)
async def get_user(
    user_id: str,
    _user: Annotated[User, Depends(require_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Get a user by id."""
    result = await service.get_user(user_id)
    if not result.success:
        raise_for_failure(result)
    return user_to_response(result.value)


@router.put("/{user_id}", response_model=UserMessageResponse, responses=ERROR_RESPONSES)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    user: Annotated[User, Depends(require_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserMessageResponse:
    """Update the caller's own profile."""
    supplied = body.model_dump(exclude_unset=True)
    patch = UserPatch(**{key: supplied.get(key, UNSET) for key in ("name", "phone", "password")})
    result = await service.update_user(user, user_id, patch)
    if not result.success:
        raise_for_failure(result)
    return UserMessageResponse(
        message="User updated successfully",
        user=user_to_response(result.value),
    )


@router.delete("/{user_id}", response_model=UserDeleteResponse, responses=ERROR_RESPONSES)
async def delete_user(
    user_id: str,
    user: Annotated[User, Depends(require_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserDeleteResponse:
    """Delete the caller's own account."""
    result = await service.delete_user(user, user_id)
    if not result.success:
        raise_for_failure(result)
    return UserDeleteResponse(message="User deleted successfully", user_id=user_id)
