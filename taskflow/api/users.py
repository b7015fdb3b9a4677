"""Admin user directory endpoints."""

from uuid import UUID

from fastapi import APIRouter, Request

from taskflow.api.deps import AdminPrincipal, StoreDep
from taskflow.errors import NotFound
from taskflow.models.envelope import Envelope, build_pagination
from taskflow.models.user import UserResponse
from taskflow.services.auth import get_user
from taskflow.services.query import parse_page_query
from taskflow.services.users import deactivate_user, list_active_users

router = APIRouter(prefix="/api/users", tags=["Users"])


def parse_user_id(raw: str) -> UUID:
    try:
        return UUID(raw)
    except ValueError as exc:
        raise NotFound("User not found") from exc


@router.get("", response_model=Envelope[list[UserResponse]], response_model_exclude_unset=True)
async def list_users_endpoint(
    request: Request, store: StoreDep, admin: AdminPrincipal
) -> Envelope[list[UserResponse]]:
    """List active users (admin only)."""
    query = parse_page_query(request.query_params)
    users, total = await list_active_users(store, query)
    return Envelope[list[UserResponse]](
        success=True,
        count=len(users),
        total=total,
        pagination=build_pagination(query.page, query.limit, total),
        data=[UserResponse.model_validate(u) for u in users],
    )


@router.get("/{user_id}", response_model=Envelope[UserResponse], response_model_exclude_unset=True)
async def get_user_endpoint(
    user_id: str, store: StoreDep, admin: AdminPrincipal
) -> Envelope[UserResponse]:
    """Get any user, active or not (admin only)."""
    user = await get_user(store, parse_user_id(user_id))
    return Envelope[UserResponse](success=True, data=UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=Envelope[None], response_model_exclude_unset=True)
async def deactivate_user_endpoint(
    user_id: str, store: StoreDep, admin: AdminPrincipal
) -> Envelope[None]:
    """Deactivate a user instead of removing them (admin only)."""
    await deactivate_user(store, parse_user_id(user_id))
    return Envelope[None](success=True, message="User deactivated successfully")
