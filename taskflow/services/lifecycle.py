"""Task lifecycle rules.

Pure functions only: callers pass the current time in, so a single
operation evaluates every rule against the same ``now``.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from taskflow.errors import ValidationError
from taskflow.models.task import DUE_DATE_IN_PAST, TaskStatus

# Statuses for which a due date no longer matters
CLOSED_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


def apply_lifecycle_rules(
    previous: Mapping[str, Any] | None,
    patch: Mapping[str, Any],
    now: datetime,
) -> dict[str, Any]:
    """Merge ``patch`` over ``previous`` and re-derive ``completed_at``.

    The completion rule only fires when ``status`` is part of the patch:
    moving to completed stamps ``completed_at`` unless it is already set,
    moving anywhere else clears it. Patches that leave status alone never
    touch ``completed_at``.

    Args:
        previous: Current stored state, or None when creating
        patch: Fields being written
        now: Reference time for the stamp

    Returns:
        The new state (previous fields overlaid with the patch)
    """
    state = dict(previous or {})
    state.update(patch)
    # Clients never write the stamp directly
    if "completed_at" in patch:
        state["completed_at"] = (previous or {}).get("completed_at")

    if "status" in patch:
        if state["status"] == TaskStatus.COMPLETED:
            if state.get("completed_at") is None:
                state["completed_at"] = now
        else:
            state["completed_at"] = None
    return state


def validate_due_date(due_date: datetime | None, now: datetime, *, creating: bool) -> None:
    """Reject a due date that is not strictly in the future at creation.

    Updates are not checked against ``now``: a task whose due date has
    since passed can still be saved, and clearing the due date is always
    allowed.

    Raises:
        ValidationError: If creating with a due date at or before ``now``
    """
    if due_date is None or not creating:
        return
    if due_date <= now:
        raise ValidationError.single("dueDate", DUE_DATE_IN_PAST)


def is_overdue(due_date: datetime | None, status: TaskStatus, now: datetime) -> bool:
    return due_date is not None and due_date < now and status not in CLOSED_STATUSES
