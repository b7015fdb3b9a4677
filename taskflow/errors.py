"""Typed application errors.

Every failure raised below the HTTP boundary is one of these. The boundary
(`taskflow.main`) maps each type to a status code and the response envelope.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single field-level violation."""

    field: str
    message: str


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Client input is malformed. Carries every field violation found."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)])

    def __str__(self) -> str:
        details = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        return f"{self.message} ({details})" if details else self.message


class Unauthenticated(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(AppError):
    """Authenticated, but the role does not allow the operation."""

    status_code = 403
    default_message = "Not authorized to access this route"


class NotFound(AppError):
    """Record is absent or owned by someone else. The two are indistinguishable."""

    status_code = 404
    default_message = "Resource not found"


class DependencyError(AppError):
    """The entity store is unreachable or did not answer in time."""

    status_code = 503
    default_message = "Service temporarily unavailable"
