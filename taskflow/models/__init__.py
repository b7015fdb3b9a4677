"""SQLModel entities and wire schemas for the Taskflow application."""

from taskflow.models.task import Priority, Task, TaskStatus, TaskTag
from taskflow.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Task",
    "TaskTag",
    "TaskStatus",
    "Priority",
]
