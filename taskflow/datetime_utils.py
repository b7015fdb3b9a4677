"""Shared helpers for timestamps.

All timestamps are stored as naive UTC datetimes.
"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC. Naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime string into naive UTC.

    Raises:
        ValueError: If the string is not a valid ISO 8601 value
    """
    text = value.strip()
    if not text:
        raise ValueError("empty timestamp")
    return to_naive_utc(datetime.fromisoformat(text))


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return [start of today, start of tomorrow) for ``now``."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
