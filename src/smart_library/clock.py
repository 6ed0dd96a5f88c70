"""
Time sources for the Smart Library core.

Every elapsed-time rule (overdue detection, recency scoring, age-based
filtering) asks a ``Clock`` for "now" instead of calling ``datetime.now()``
directly, so tests can pin and advance time.
"""

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in the local timezone (naive datetimes)."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """
    A clock frozen at a given instant.

    Used by tests and demos; ``advance`` moves it forward by any
    ``timedelta`` keyword arguments.
    """

    def __init__(self, current: datetime | None = None):
        self._current = current or datetime(2024, 6, 1, 12, 0, 0)

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward, e.g. ``clock.advance(days=15)``."""
        self._current = self._current + timedelta(**kwargs)
        return self._current
