"""
Clock -- injectable time source.

Services stamp ``created_at`` on projects and ``upload_date`` on uploads and
budgets from a Clock handed to them at construction.  Nothing else in the
tracker reads wall-clock time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Abstract clock interface. ``now()`` is always timezone-aware."""

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...


class SystemClock(Clock):
    """Production clock returning the real UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Test clock: ``now()`` stays put until ``advance()`` moves it forward."""

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: int = 1) -> None:
        self._now += timedelta(seconds=seconds)
