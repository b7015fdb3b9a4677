"""Task entity model."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any
from uuid import UUID, uuid4

from pydantic import (
    AfterValidator,
    BeforeValidator,
    Field as SchemaField,
    StringConstraints,
    ValidationInfo,
    field_validator,
)
from sqlalchemy import Column, DateTime, Index
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, Relationship, SQLModel

from taskflow.datetime_utils import utcnow
from taskflow.models.base import CamelModel, blank_to_none, normalize_timestamp


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    """Task priority, declared from lowest to highest."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return list(Priority).index(self)


def _value_enum(enum_cls: type[Enum]) -> SAEnum:
    # Persist the enum values ("in-progress"), not the member names
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda e: [m.value for m in e],
    )


class Task(SQLModel, table=True):
    """Task database model."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_owner_status", "owner_id", "status"),
        Index("ix_tasks_owner_created_at", "owner_id", "created_at"),
        Index("ix_tasks_owner_due_date", "owner_id", "due_date"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: UUID = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        sa_column=Column(_value_enum(TaskStatus), nullable=False),
    )
    priority: Priority = Field(
        default=Priority.MEDIUM,
        sa_column=Column(_value_enum(Priority), nullable=False),
    )
    # Timestamps are naive UTC throughout
    due_date: datetime | None = Field(default=None, sa_type=DateTime())
    completed_at: datetime | None = Field(default=None, sa_type=DateTime())
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())

    tag_links: list["TaskTag"] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "TaskTag.position",
            "lazy": "selectin",
        },
    )

    @property
    def tags(self) -> list[str]:
        return [link.name for link in self.tag_links]

    def set_tags(self, names: list[str]) -> None:
        """Replace the tag list, keeping the given order."""
        self.tag_links = [
            TaskTag(position=position, name=name) for position, name in enumerate(names)
        ]


class TaskTag(SQLModel, table=True):
    """One entry of a task's ordered tag list."""

    __tablename__ = "task_tags"

    id: int | None = Field(default=None, primary_key=True)
    task_id: UUID = Field(foreign_key="tasks.id", ondelete="CASCADE", index=True)
    position: int = Field(default=0)
    name: str = Field(max_length=20, index=True)

    task: Task | None = Relationship(back_populates="tag_links")


# Wire schemas

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
TagName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]
OptionalDescription = Annotated[Description | None, BeforeValidator(blank_to_none)]
OptionalDueDate = Annotated[
    datetime | None, BeforeValidator(blank_to_none), AfterValidator(normalize_timestamp)
]

DUE_DATE_IN_PAST = "Due date must be in the future"


class TaskCreate(CamelModel):
    """Schema for task creation. Unknown keys (e.g. an owner field) are ignored."""

    title: Title
    description: OptionalDescription = None
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    due_date: OptionalDueDate = None
    tags: list[TagName] = SchemaField(default_factory=list)

    @field_validator("due_date")
    @classmethod
    def _due_in_future(cls, value: datetime | None, info: ValidationInfo) -> datetime | None:
        # Validation context may carry "now" so callers can pin the clock
        if value is None:
            return value
        now = (info.context or {}).get("now") or utcnow()
        if value <= now:
            raise ValueError(DUE_DATE_IN_PAST)
        return value


class TaskUpdate(CamelModel):
    """Schema for a partial task update.

    Only the keys present in the request are applied. ``dueDate`` and
    ``description`` may be null or empty to clear them.
    """

    title: Title | None = None
    description: OptionalDescription = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    due_date: OptionalDueDate = None
    tags: list[TagName] | None = None

    @field_validator("title", "status", "priority", "tags")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the client."""
        return self.model_dump(exclude_unset=True)


class TaskOwner(CamelModel):
    """Public summary of the user a task belongs to."""

    id: UUID
    name: str
    email: str


class TaskResponse(CamelModel):
    """Task as returned to clients."""

    id: UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: Priority
    due_date: datetime | None
    tags: list[str]
    owner_id: UUID
    owner: TaskOwner
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    is_overdue: bool


class TaskStats(CamelModel):
    """Per-owner task counts for the dashboard."""

    total: int = 0
    pending: int = 0
    in_progress: int = SchemaField(default=0, alias="in-progress")
    completed: int = 0
    cancelled: int = 0
    overdue: int = 0
    due_today: int = 0
