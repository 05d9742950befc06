"""
Clock abstraction.

The engine never reads the system clock on its own; the Scheduler calls
whatever clock it was given when a caller omits `now`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default production clock (timezone-aware UTC)."""
    return datetime.now(timezone.utc)


class FixedClock:
    """Manually advanced clock for tests and simulations."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        """Move forward by timedelta keyword arguments, e.g. `advance(days=3)`."""
        self.now = self.now + timedelta(**delta)
        return self.now


def days_between(start: datetime, end: datetime) -> int:
    """
    Whole days elapsed from start to end (floored).

    Args:
        start: Earlier timestamp
        end: Later timestamp

    Returns:
        Number of complete days, 0 when less than a day has passed
    """
    return (end - start).days


def is_aware(value: datetime) -> bool:
    """True for timezone-aware datetimes."""
    return value.tzinfo is not None and value.utcoffset() is not None
