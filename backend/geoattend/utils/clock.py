"""Time source for every expiry decision.

Timestamps are naive UTC, matching what the database columns store.
Call ``clock.now()`` through the module so tests can substitute it.
"""
from datetime import datetime, timezone


def now() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_millis(value: datetime) -> int:
    """Milliseconds since the epoch for a naive UTC datetime."""
    return int(value.replace(tzinfo=timezone.utc).timestamp() * 1000)
