"""Access scoping: bind every task operation to the authenticated principal."""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from taskflow.errors import Forbidden
from taskflow.models.task import Task, TaskCreate, TaskOwner, TaskStats, TaskUpdate
from taskflow.models.user import UserRole
from taskflow.services.query import TaskQuery

if TYPE_CHECKING:
    from taskflow.services.tasks import TaskRepository


@dataclass(frozen=True)
class Principal:
    """Who is making the request, as established by authentication."""

    user_id: UUID
    role: UserRole
    name: str
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def require_role(principal: Principal, role: UserRole) -> Principal:
    """Admins pass every role check; everyone else must match exactly.

    Raises:
        Forbidden: If the principal lacks the role
    """
    if principal.is_admin or principal.role == role:
        return principal
    raise Forbidden(f"User role {principal.role.value} is not authorized to access this route")


class OwnedTasks:
    """The task repository as seen by one principal.

    The owner id always comes from the principal, never from request data.
    Admins get no bypass here: only the owner can see or change a task.
    """

    def __init__(self, repository: "TaskRepository", principal: Principal) -> None:
        self._repository = repository
        self.principal = principal

    @property
    def owner_id(self) -> UUID:
        return self.principal.user_id

    @property
    def owner(self) -> TaskOwner:
        """Summary of the caller, who owns every task seen through here."""
        return TaskOwner(
            id=self.principal.user_id,
            name=self.principal.name,
            email=self.principal.email,
        )

    def now(self) -> datetime:
        return self._repository.now()

    async def list(self, query: TaskQuery) -> tuple[list[Task], int]:
        return await self._repository.list_tasks(self.owner_id, query)

    async def get(self, task_id: UUID) -> Task:
        return await self._repository.get_task(self.owner_id, task_id)

    async def create(self, task_data: TaskCreate) -> Task:
        return await self._repository.create_task(self.owner_id, task_data)

    async def update(self, task_id: UUID, task_data: TaskUpdate) -> Task:
        return await self._repository.update_task(self.owner_id, task_id, task_data)

    async def delete(self, task_id: UUID) -> None:
        await self._repository.delete_task(self.owner_id, task_id)

    async def stats(self) -> TaskStats:
        return await self._repository.stats(self.owner_id)
