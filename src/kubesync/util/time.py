from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """Convert tz-aware datetime to RFC3339 (UTC, with 'Z'), second precision."""
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    s = dt.astimezone(timezone.utc).isoformat(timespec="seconds")
    return s.replace("+00:00", "Z")
