"""Auth and user API controller — registration via ID token and profile management."""

from fastapi import APIRouter, Depends, Response, status

from circuit_backend.application.schemas import (
    ApiResponse,
    RegisterRequest,
    UserProfileUpdate,
    UserResponse,
)
from circuit_backend.application.services import AuthService
from circuit_backend.infrastructure.dependencies import get_auth_service
from circuit_backend.presentation.api.caller import get_current_caller

router = APIRouter(tags=["Auth"])


@router.post("/auth/register", response_model=ApiResponse[UserResponse])
async def register(
    data: RegisterRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserResponse]:
    """Register a new user from an ID token, or sign an existing one in.

    Responds 201 for a new user and 200 for an existing one.
    """
    user, created = await service.register(data.id_token, data.provider)
    if created:
        response.status_code = status.HTTP_201_CREATED
        message = "User registered successfully"
    else:
        message = "User already exists"
    return ApiResponse.ok(message, UserResponse.model_validate(user, from_attributes=True))


@router.get("/auth/me", response_model=ApiResponse[UserResponse])
async def get_me(
    caller_id: str = Depends(get_current_caller),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserResponse]:
    user = await service.get_profile(caller_id)
    return ApiResponse.ok(
        "Profile retrieved successfully", UserResponse.model_validate(user, from_attributes=True)
    )


@router.put("/auth/me", response_model=ApiResponse[UserResponse])
async def update_me(
    data: UserProfileUpdate,
    caller_id: str = Depends(get_current_caller),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserResponse]:
    user = await service.update_profile(
        caller_id, display_name=data.display_name, photo_url=data.photo_url
    )
    return ApiResponse.ok(
        "Profile updated successfully", UserResponse.model_validate(user, from_attributes=True)
    )


@router.delete("/auth/me", response_model=ApiResponse[None])
async def delete_me(
    caller_id: str = Depends(get_current_caller),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    """Delete the caller's user record. Projects and circuits are left in place."""
    await service.delete_account(caller_id)
    return ApiResponse.ok("Account deleted successfully")


@router.get("/users", response_model=ApiResponse[list[UserResponse]])
async def list_users(
    caller_id: str = Depends(get_current_caller),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[list[UserResponse]]:
    users = await service.list_users()
    return ApiResponse.ok(
        "Users retrieved successfully",
        [UserResponse.model_validate(u, from_attributes=True) for u in users],
    )
