"""Task API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Request, status

from taskflow.api.deps import OwnedTasksDep
from taskflow.errors import NotFound
from taskflow.models.envelope import Envelope, build_pagination
from taskflow.models.task import TaskCreate, TaskResponse, TaskStats, TaskUpdate
from taskflow.services.query import parse_task_query
from taskflow.services.tasks import to_response

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


def parse_task_id(raw: str) -> UUID:
    """Malformed ids are reported exactly like unknown ones."""
    try:
        return UUID(raw)
    except ValueError as exc:
        raise NotFound("Task not found") from exc


@router.get(
    "",
    response_model=Envelope[list[TaskResponse]],
    response_model_exclude_unset=True,
)
async def list_tasks_endpoint(request: Request, tasks: OwnedTasksDep) -> Envelope[list[TaskResponse]]:
    """List the caller's tasks with filters, sorting and pagination.

    Query: page, limit, status, priority, search, tag, dueBefore, dueAfter,
    sortBy, sortOrder.
    """
    query = parse_task_query(request.query_params)
    items, total = await tasks.list(query)
    now, owner = tasks.now(), tasks.owner
    return Envelope[list[TaskResponse]](
        success=True,
        count=len(items),
        total=total,
        pagination=build_pagination(query.page, query.limit, total),
        data=[to_response(task, now, owner) for task in items],
    )


@router.get(
    "/stats/overview",
    response_model=Envelope[TaskStats],
    response_model_exclude_unset=True,
)
async def task_stats_endpoint(tasks: OwnedTasksDep) -> Envelope[TaskStats]:
    """Status breakdown plus overdue and due-today counts."""
    stats = await tasks.stats()
    return Envelope[TaskStats](success=True, data=stats)


@router.get(
    "/{task_id}",
    response_model=Envelope[TaskResponse],
    response_model_exclude_unset=True,
)
async def get_task_endpoint(task_id: str, tasks: OwnedTasksDep) -> Envelope[TaskResponse]:
    """Get a specific task by ID."""
    task = await tasks.get(parse_task_id(task_id))
    return Envelope[TaskResponse](
        success=True,
        data=to_response(task, tasks.now(), tasks.owner),
    )


@router.post(
    "",
    response_model=Envelope[TaskResponse],
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_task_endpoint(task_data: TaskCreate, tasks: OwnedTasksDep) -> Envelope[TaskResponse]:
    """Create a new task for the authenticated user."""
    task = await tasks.create(task_data)
    return Envelope[TaskResponse](
        success=True,
        message="Task created successfully",
        data=to_response(task, tasks.now(), tasks.owner),
    )


@router.put(
    "/{task_id}",
    response_model=Envelope[TaskResponse],
    response_model_exclude_unset=True,
)
async def update_task_endpoint(
    task_id: str,
    task_data: TaskUpdate,
    tasks: OwnedTasksDep,
) -> Envelope[TaskResponse]:
    """Update any subset of a task's fields."""
    task = await tasks.update(parse_task_id(task_id), task_data)
    return Envelope[TaskResponse](
        success=True,
        message="Task updated successfully",
        data=to_response(task, tasks.now(), tasks.owner),
    )


@router.delete(
    "/{task_id}",
    response_model=Envelope[None],
    response_model_exclude_unset=True,
)
async def delete_task_endpoint(task_id: str, tasks: OwnedTasksDep) -> Envelope[None]:
    """Delete a task."""
    await tasks.delete(parse_task_id(task_id))
    return Envelope[None](success=True, message="Task deleted successfully")
