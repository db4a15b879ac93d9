from __future__ import annotations

from uuid import UUID

from pydantic import Field

from ..services.timer_state import TimerStatus
from .common import APIModel, OptionalUTCDateTime, UTCDateTime
from .task import TaskRead, TaskSummary


class StartTimerRequest(APIModel):
    task_id: UUID
    duration_limit: int | None = Field(default=None, gt=0)


class StopTimerRequest(APIModel):
    complete_task: bool = False


class TimerSessionRead(APIModel):
    id: str
    user_id: str
    task_id: str
    start_time: UTCDateTime
    is_running: bool
    elapsed_at_pause: int
    end_time: OptionalUTCDateTime = None
    total_duration: int | None = None
    duration_limit: int | None = None
    status: TimerStatus = TimerStatus.NONE
    current_elapsed: int | None = None
    task: TaskSummary | None = None


class TimerSessionDetail(TimerSessionRead):
    task: TaskRead | None = None


class TimerStats(APIModel):
    total_time: int
    session_count: int
    avg_session_duration: int
    by_category: dict[str, int]
