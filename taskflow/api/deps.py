"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskflow.config import Settings
from taskflow.db.session import Store
from taskflow.errors import Unauthenticated
from taskflow.models.user import UserRole
from taskflow.services.auth import resolve_principal
from taskflow.services.scoping import OwnedTasks, Principal, require_role
from taskflow.services.tasks import TaskRepository

# Missing credentials are reported by get_principal, not by FastAPI
security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    """Process-wide store created at startup."""
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_task_repository(request: Request) -> TaskRepository:
    return request.app.state.tasks


StoreDep = Annotated[Store, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_principal(
    store: StoreDep,
    settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    """Resolve the authenticated principal from the Bearer token."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authorized, no token")
    return await resolve_principal(store, credentials.credentials, settings)


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]


def get_admin(principal: CurrentPrincipal) -> Principal:
    return require_role(principal, UserRole.ADMIN)


AdminPrincipal = Annotated[Principal, Depends(get_admin)]


def get_owned_tasks(
    principal: CurrentPrincipal,
    repository: Annotated[TaskRepository, Depends(get_task_repository)],
) -> OwnedTasks:
    """Task operations scoped to the caller."""
    return OwnedTasks(repository, principal)


OwnedTasksDep = Annotated[OwnedTasks, Depends(get_owned_tasks)]
