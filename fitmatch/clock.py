"""Clock capability so "now" can be fixed in tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant that can be moved by hand."""

    def __init__(self, current: Optional[datetime] = None):
        if current is None:
            current = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._current = ensure_aware(current)

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = ensure_aware(current)

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a timedelta built from kwargs (e.g. minutes=5)."""
        self._current = self._current + timedelta(**kwargs)
        return self._current


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
