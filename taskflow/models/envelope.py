"""Response envelope shared by every endpoint."""

from typing import Generic, TypeVar

from taskflow.errors import FieldError
from taskflow.models.base import CamelModel

T = TypeVar("T")


class FieldErrorResponse(CamelModel):
    field: str
    message: str


class PageLink(CamelModel):
    page: int
    limit: int


class Pagination(CamelModel):
    next: PageLink | None = None
    prev: PageLink | None = None


class Envelope(CamelModel, Generic[T]):
    """``{success, data?, message?, errors?, count?, total?, pagination?}``.

    Only the keys that were set are serialized.
    """

    success: bool = True
    data: T | None = None
    message: str | None = None
    errors: list[FieldErrorResponse] | None = None
    count: int | None = None
    total: int | None = None
    pagination: Pagination | None = None


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Links to the neighbouring pages that exist."""
    pagination = Pagination()
    if (page - 1) * limit + limit < total:
        pagination.next = PageLink(page=page + 1, limit=limit)
    if page > 1:
        pagination.prev = PageLink(page=page - 1, limit=limit)
    return pagination


def error_envelope(message: str, errors: list[FieldError] | None = None) -> dict:
    """Serialized failure envelope."""
    envelope = Envelope[None](success=False, message=message)
    if errors:
        envelope.errors = [FieldErrorResponse(field=e.field, message=e.message) for e in errors]
    return envelope.model_dump(mode="json", by_alias=True, exclude_unset=True)
