"""UTC helper for timestamps that may come back from storage without a timezone."""

from datetime import UTC, datetime


def naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.replace(tzinfo=None)
