"""Task repository: owner-scoped queries, mutations and statistics."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_, case, exists, or_
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from taskflow.datetime_utils import day_bounds, utcnow
from taskflow.db.session import Store
from taskflow.errors import NotFound
from taskflow.models.task import (
    Priority,
    Task,
    TaskCreate,
    TaskOwner,
    TaskResponse,
    TaskStats,
    TaskStatus,
    TaskTag,
    TaskUpdate,
)
from taskflow.services.lifecycle import (
    CLOSED_STATUSES,
    apply_lifecycle_rules,
    is_overdue,
    validate_due_date,
)
from taskflow.services.query import SortField, SortOrder, TaskQuery

logger = logging.getLogger(__name__)

PRIORITY_RANK = case(
    {priority: priority.rank for priority in Priority},
    value=Task.priority,
)

SORT_COLUMNS = {
    SortField.CREATED_AT: Task.created_at,
    SortField.UPDATED_AT: Task.updated_at,
    SortField.DUE_DATE: Task.due_date,
    SortField.TITLE: Task.title,
    SortField.PRIORITY: PRIORITY_RANK,
}


def build_task_filters(owner_id: UUID, query: TaskQuery) -> list[ColumnElement[bool]]:
    """Predicate conjunction for a listing, always starting with the owner."""
    filters: list[ColumnElement[bool]] = [Task.owner_id == owner_id]

    if query.status is not None:
        filters.append(Task.status == query.status)
    if query.priority is not None:
        filters.append(Task.priority == query.priority)
    if query.tag is not None:
        # Exact membership
        filters.append(
            exists().where(TaskTag.task_id == Task.id, TaskTag.name == query.tag)
        )
    if query.due_before is not None:
        filters.append(Task.due_date <= query.due_before)
    if query.due_after is not None:
        filters.append(Task.due_date >= query.due_after)
    if query.search is not None:
        term = query.search
        filters.append(
            or_(
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
                exists().where(
                    TaskTag.task_id == Task.id,
                    TaskTag.name.icontains(term, autoescape=True),
                ),
            )
        )
    return filters


def build_task_ordering(query: TaskQuery) -> list[Any]:
    """ORDER BY clauses; ties fall back to creation order, then id."""
    column = SORT_COLUMNS[query.sort_by]
    descending = query.sort_order == SortOrder.DESC
    ordering: list[Any] = []

    if query.sort_by == SortField.DUE_DATE:
        # Missing due dates sort as the smallest value on every backend
        has_due = Task.due_date.is_not(None)
        ordering.append(has_due.desc() if descending else has_due.asc())

    ordering.append(column.desc() if descending else column.asc())
    ordering.extend([Task.created_at.asc(), Task.id.asc()])
    return ordering


def to_response(task: Task, now: datetime, owner: TaskOwner) -> TaskResponse:
    """Serialize a task, deriving ``isOverdue`` against ``now``."""
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        tags=task.tags,
        owner_id=task.owner_id,
        owner=owner,
        completed_at=task.completed_at,
        created_at=task.created_at,
        updated_at=task.updated_at,
        is_overdue=is_overdue(task.due_date, task.status, now),
    )


class TaskRepository:
    """Reads and writes tasks, always on behalf of one owner.

    Every operation takes the owner id first and never returns or touches
    another owner's task: a task id that exists under a different owner
    raises ``NotFound`` exactly like an unknown id.
    """

    def __init__(self, store: Store, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    async def _get_owned(self, session: AsyncSession, owner_id: UUID, task_id: UUID) -> Task:
        task = (
            await session.exec(
                select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
            )
        ).first()
        if task is None:
            raise NotFound("Task not found")
        return task

    async def list_tasks(self, owner_id: UUID, query: TaskQuery) -> tuple[list[Task], int]:
        """Get one page of matching tasks and the total match count.

        Returns (tasks, total_count).
        """
        filters = build_task_filters(owner_id, query)
        statement = (
            select(Task)
            .where(*filters)
            .order_by(*build_task_ordering(query))
            .offset(query.offset)
            .limit(query.limit)
        )
        count_statement = select(func.count()).select_from(Task).where(*filters)

        async with self._store.session() as session:
            total = (await session.exec(count_statement)).one()
            tasks = list((await session.exec(statement)).all())

        return tasks, total

    async def get_task(self, owner_id: UUID, task_id: UUID) -> Task:
        """Get a specific task owned by the user."""
        async with self._store.session() as session:
            return await self._get_owned(session, owner_id, task_id)

    async def create_task(self, owner_id: UUID, task_data: TaskCreate) -> Task:
        """Create a new task for the specified owner.

        Raises:
            ValidationError: If the due date is not in the future
        """
        now = self.now()
        validate_due_date(task_data.due_date, now, creating=True)

        fields = task_data.model_dump(exclude={"tags"})
        state = apply_lifecycle_rules(None, fields, now)
        task = Task(owner_id=owner_id, created_at=now, updated_at=now, **state)
        task.set_tags(task_data.tags)

        async with self._store.session() as session:
            session.add(task)
            await session.commit()

        logger.info(
            "Task created",
            extra={"task_id": str(task.id), "owner_id": str(owner_id)},
        )
        return task

    async def update_task(self, owner_id: UUID, task_id: UUID, task_data: TaskUpdate) -> Task:
        """Merge the provided fields into an owned task.

        Concurrent updates are last-write-wins; status and completedAt are
        always written together, so each stored state stays consistent.

        Raises:
            NotFound: If the task does not exist or belongs to someone else
        """
        now = self.now()
        changes = task_data.changes()
        tags = changes.pop("tags", None)
        validate_due_date(changes.get("due_date"), now, creating=False)

        async with self._store.session() as session:
            task = await self._get_owned(session, owner_id, task_id)

            previous = {"status": task.status, "completed_at": task.completed_at}
            state = apply_lifecycle_rules(previous, changes, now)
            for key, value in state.items():
                setattr(task, key, value)
            if "status" in changes:
                # Both columns go into the UPDATE even if this read was stale
                flag_modified(task, "status")
                flag_modified(task, "completed_at")
            if tags is not None:
                task.set_tags(tags)
            task.updated_at = now

            session.add(task)
            await session.commit()

        logger.info(
            "Task updated",
            extra={"task_id": str(task_id), "fields": sorted(task_data.model_fields_set)},
        )
        return task

    async def delete_task(self, owner_id: UUID, task_id: UUID) -> None:
        """Hard-delete an owned task.

        Raises:
            NotFound: If the task does not exist or belongs to someone else
        """
        async with self._store.session() as session:
            task = await self._get_owned(session, owner_id, task_id)
            await session.delete(task)
            await session.commit()

        logger.info("Task deleted", extra={"task_id": str(task_id)})

    async def stats(self, owner_id: UUID) -> TaskStats:
        """Status breakdown plus overdue/due-today counts.

        One grouped query; ``now`` is captured once and bound into both the
        overdue and the due-today conditions.
        """
        now = self.now()
        start_of_day, start_of_tomorrow = day_bounds(now)
        still_open = Task.status.not_in(list(CLOSED_STATUSES))

        overdue = func.sum(
            case(
                (and_(Task.due_date.is_not(None), Task.due_date < now, still_open), 1),
                else_=0,
            )
        )
        due_today = func.sum(
            case(
                (
                    and_(
                        Task.due_date >= start_of_day,
                        Task.due_date < start_of_tomorrow,
                        still_open,
                    ),
                    1,
                ),
                else_=0,
            )
        )
        statement = (
            select(Task.status, func.count(), overdue, due_today)
            .where(Task.owner_id == owner_id)
            .group_by(Task.status)
        )

        async with self._store.session() as session:
            rows = (await session.exec(statement)).all()

        counts = {status: 0 for status in TaskStatus}
        overdue_total = 0
        due_today_total = 0
        for status, count, overdue_count, due_today_count in rows:
            counts[TaskStatus(status)] = int(count)
            overdue_total += int(overdue_count or 0)
            due_today_total += int(due_today_count or 0)

        return TaskStats(
            total=sum(counts.values()),
            pending=counts[TaskStatus.PENDING],
            in_progress=counts[TaskStatus.IN_PROGRESS],
            completed=counts[TaskStatus.COMPLETED],
            cancelled=counts[TaskStatus.CANCELLED],
            overdue=overdue_total,
            due_today=due_today_total,
        )
