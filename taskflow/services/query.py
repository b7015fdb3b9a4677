"""Query-parameter parsing for list endpoints.

Turns raw string parameters into a validated, typed descriptor. All
violations are reported together.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from taskflow.datetime_utils import parse_timestamp, to_naive_utc
from taskflow.errors import FieldError, ValidationError
from taskflow.models.base import CamelModel, blank_to_none
from taskflow.models.task import Priority, TaskStatus

MAX_LIMIT = 100


class SortField(str, Enum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    DUE_DATE = "dueDate"
    TITLE = "title"
    PRIORITY = "priority"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _timestamp(value: Any) -> Any:
    value = blank_to_none(value)
    if isinstance(value, str):
        return parse_timestamp(value)
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return value


def _search_text(value: Any) -> Any:
    value = blank_to_none(value)
    if isinstance(value, str):
        return value.strip()
    return value


Timestamp = Annotated[datetime | None, BeforeValidator(_timestamp)]
SearchText = Annotated[str | None, BeforeValidator(_search_text)]


class PageQuery(CamelModel):
    """Page/limit descriptor."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class TaskQuery(PageQuery):
    """Normalized filter/sort/page descriptor for task listings."""

    status: TaskStatus | None = None
    priority: Priority | None = None
    search: SearchText = None
    tag: SearchText = None
    due_before: Timestamp = None
    due_after: Timestamp = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


FIELD_MESSAGES = {
    "page": "Page must be a positive integer",
    "limit": f"Limit must be between 1 and {MAX_LIMIT}",
    "status": "Invalid status",
    "priority": "Invalid priority",
    "sortBy": "Invalid sort field",
    "sortOrder": "Sort order must be asc or desc",
    "dueBefore": "dueBefore must be a valid date",
    "dueAfter": "dueAfter must be a valid date",
}


def _wire_name(model: type[CamelModel], loc: tuple[Any, ...]) -> str:
    if not loc:
        return "query"
    name = str(loc[0])
    field = model.model_fields.get(name)
    if field is not None and field.alias:
        return field.alias
    return name


def _parse(model: type[PageQuery], params: Mapping[str, Any]) -> Any:
    try:
        return model.model_validate(dict(params))
    except PydanticValidationError as exc:
        errors: list[FieldError] = []
        seen: set[str] = set()
        for error in exc.errors():
            field = _wire_name(model, error["loc"])
            if field in seen:
                continue
            seen.add(field)
            errors.append(FieldError(field, FIELD_MESSAGES.get(field, error["msg"])))
        raise ValidationError(errors) from exc


def parse_task_query(params: Mapping[str, Any]) -> TaskQuery:
    """Validate raw list parameters into a TaskQuery.

    Unknown parameters are ignored.

    Raises:
        ValidationError: With one entry per invalid parameter
    """
    return _parse(TaskQuery, params)


def parse_page_query(params: Mapping[str, Any]) -> PageQuery:
    """Validate raw page/limit parameters."""
    return _parse(PageQuery, params)
