"""Timezone-aware UTC helpers.

Every timestamp the engine stores or compares (execution start/finish,
received_at, created_at ordering) is an aware UTC datetime.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime read back from the database to aware UTC.

    SQLite returns naive values even for timezone columns; those are taken
    as UTC. Aware values are converted. None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_iso_utc(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from a stored action result (trailing Z allowed)."""
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
