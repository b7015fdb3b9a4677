"""Shared pieces for wire schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskflow.datetime_utils import to_naive_utc


class CamelModel(BaseModel):
    """Schema whose JSON keys are camelCase; snake_case names are accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def blank_to_none(value: Any) -> Any:
    """Treat empty or whitespace-only strings as an absent value."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def normalize_timestamp(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return to_naive_utc(value)
