"""Pure timer-state helpers shared by the server engine and the local mirror.

A session's elapsed time is always derived from its persisted anchor
(``elapsed_at_pause`` plus the current running interval since
``start_time``), never from an incrementing counter.
"""

from __future__ import annotations

import enum
from datetime import datetime


class TimerStatus(str, enum.Enum):
    NONE = "none"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


def interval_seconds(start_time: datetime, now: datetime) -> int:
    """Whole seconds from ``start_time`` to ``now``, floored and never negative."""
    return max(0, int((now - start_time).total_seconds() // 1))


def effective_elapsed(
    elapsed_at_pause: int,
    is_running: bool,
    start_time: datetime | None,
    now: datetime,
) -> int:
    if not is_running or start_time is None:
        return int(elapsed_at_pause or 0)
    return int(elapsed_at_pause or 0) + interval_seconds(start_time, now)


def timer_status(session) -> TimerStatus:
    if session is None:
        return TimerStatus.NONE
    if session.end_time is not None:
        return TimerStatus.STOPPED
    if session.is_running:
        return TimerStatus.RUNNING
    return TimerStatus.PAUSED
