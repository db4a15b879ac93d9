"""Time sources for the timer engine.

All timestamps handled by the engine are naive UTC datetimes, matching the
``DateTime`` columns they are stored in.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FrozenClock:
    """A manually driven clock for tests and offline replays."""

    def __init__(self, start: datetime):
        self._now = _as_naive_utc(start)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = _as_naive_utc(value)

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        self._now = self._now + timedelta(seconds=seconds, **kwargs)
        return self._now


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock
