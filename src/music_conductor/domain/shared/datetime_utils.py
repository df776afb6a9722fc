"""Date/time helpers.

- Always store and operate on timezone-aware UTC datetimes.
- Credentials persist expiry as ISO 8601 text.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    return datetime.now(UTC)


def expires_in(seconds: int, *, now: datetime | None = None) -> datetime:
    """Absolute expiry for a token that lives ``seconds`` from ``now``."""
    return (now or utcnow()) + timedelta(seconds=int(seconds))


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        raise ValueError("to_iso requires a timezone-aware datetime")
    return dt.astimezone(UTC).isoformat()


def from_iso(value: str) -> datetime:
    # Accepts: '...+00:00' or '...Z'
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
