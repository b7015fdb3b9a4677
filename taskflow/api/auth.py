"""Authentication API endpoints."""

from fastapi import APIRouter, status

from taskflow.api.deps import CurrentPrincipal, SettingsDep, StoreDep
from taskflow.models.envelope import Envelope
from taskflow.models.user import (
    AuthPayload,
    PasswordChange,
    ProfileUpdate,
    UserCreate,
    UserLogin,
    UserResponse,
)
from taskflow.services.auth import (
    authenticate_user,
    change_password,
    create_auth_payload,
    get_user,
    register_user,
    update_profile,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=Envelope[AuthPayload],
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def register_endpoint(
    store: StoreDep, settings: SettingsDep, user_data: UserCreate
) -> Envelope[AuthPayload]:
    """Register a new user account."""
    user = await register_user(store, user_data)
    return Envelope[AuthPayload](
        success=True,
        message="User registered successfully",
        data=create_auth_payload(user, settings),
    )


@router.post("/login", response_model=Envelope[AuthPayload], response_model_exclude_unset=True)
async def login_endpoint(
    store: StoreDep, settings: SettingsDep, credentials: UserLogin
) -> Envelope[AuthPayload]:
    """Sign in with email and password."""
    user = await authenticate_user(store, credentials.email, credentials.password)
    return Envelope[AuthPayload](
        success=True,
        message="Login successful",
        data=create_auth_payload(user, settings),
    )


@router.get("/me", response_model=Envelope[UserResponse], response_model_exclude_unset=True)
async def me_endpoint(store: StoreDep, principal: CurrentPrincipal) -> Envelope[UserResponse]:
    """Get the signed-in user's profile."""
    user = await get_user(store, principal.user_id)
    return Envelope[UserResponse](success=True, data=UserResponse.model_validate(user))


@router.put("/me", response_model=Envelope[UserResponse], response_model_exclude_unset=True)
async def update_me_endpoint(
    store: StoreDep, principal: CurrentPrincipal, profile: ProfileUpdate
) -> Envelope[UserResponse]:
    """Update the signed-in user's name and/or email."""
    user = await update_profile(store, principal.user_id, profile)
    return Envelope[UserResponse](
        success=True,
        message="Profile updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.put("/change-password", response_model=Envelope[None], response_model_exclude_unset=True)
async def change_password_endpoint(
    store: StoreDep, principal: CurrentPrincipal, data: PasswordChange
) -> Envelope[None]:
    """Change the signed-in user's password."""
    await change_password(store, principal.user_id, data)
    return Envelope[None](success=True, message="Password changed successfully")
