"""UTC clock and timestamp rendering.

Timestamps are stored as TIMESTAMPTZ and always rendered in UTC, whatever
session time zone the driver handed them back in.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    """ISO-8601 in UTC; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
