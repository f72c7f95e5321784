"""ID generation, timestamp and batching utilities."""

import uuid
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def generate_id() -> str:
    """Generate a 20 character document ID."""
    return uuid.uuid4().hex[:20]


def format_iso(value: datetime) -> str:
    """Render a datetime as fixed-width UTC ISO 8601 with milliseconds.

    Fixed width is what makes plain string comparison of two rendered
    timestamps agree with chronological order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    """Current time as a fixed-width ISO 8601 string."""
    return format_iso(datetime.now(timezone.utc))


def to_iso_string(value: Any) -> Optional[str]:
    """Coerce a stored timestamp (string, datetime or date) to ISO 8601."""
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return format_iso(value)
    if isinstance(value, date):
        return format_iso(datetime(value.year, value.month, value.day, tzinfo=timezone.utc))
    return None


def chunk_list(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive chunks of at most ``size`` entries."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
