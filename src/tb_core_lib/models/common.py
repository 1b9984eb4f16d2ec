"""Common helpers shared across the tenancy models.

This module contains the timestamp utilities every scorer relies on:
- utc_now(): timezone-aware "now"
- ensure_utc(): normalise naive/offset datetimes to UTC
- parse_utc_timestamp(): tolerant ISO 8601 parsing
- whole_days_between(): floor day difference used by recency rules

and truncate(), which shortens issue titles quoted in user-facing messages.
"""

from datetime import datetime, timezone
from typing import Optional, Union

SECONDS_PER_DAY = 60 * 60 * 24


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_utc_timestamp(timestamp: Union[str, datetime]) -> datetime:
    """Parse UTC timestamp string into timezone-aware datetime object.

    Handles the formats the persistence layer hands back:
    - '2025-10-17T04:02:59+00:00' (timezone-aware with +00:00)
    - '2025-10-17T04:02:59Z' (Zulu time suffix)
    - '2025-10-17T04:02:59' (naive, assumed UTC)

    Args:
        timestamp: ISO 8601 string, or an existing datetime

    Returns:
        datetime: Timezone-aware datetime object in UTC
    """
    if isinstance(timestamp, datetime):
        return ensure_utc(timestamp)

    if timestamp.endswith("Z"):
        return ensure_utc(datetime.fromisoformat(timestamp[:-1]))
    return ensure_utc(datetime.fromisoformat(timestamp))


def whole_days_between(later: datetime, earlier: datetime) -> int:
    """Number of whole days from ``earlier`` to ``later`` (floored)."""
    delta = ensure_utc(later) - ensure_utc(earlier)
    return int(delta.total_seconds() // SECONDS_PER_DAY)


def latest(*values: Optional[datetime]) -> Optional[datetime]:
    """Most recent of the given timestamps, ignoring ``None``."""
    present = [ensure_utc(v) for v in values if v is not None]
    if not present:
        return None
    return max(present)


def truncate(text: str, max_length: int) -> str:
    """Shorten ``text`` to ``max_length`` characters, ending with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
