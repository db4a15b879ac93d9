"""ORM entity -> JSON-ready dict conversion shared by routers and pushes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ..models import Goal, Task, TimerSession, User
from ..services.timer_state import TimerStatus, effective_elapsed, timer_status
from .auth import UserRead
from .goal import GoalRead
from .task import TaskRead
from .timer import TimerSessionDetail, TimerSessionRead


def session_payload(session: TimerSession, now: datetime | None = None, *, detail: bool = False) -> dict[str, Any]:
    model = (TimerSessionDetail if detail else TimerSessionRead).model_validate(session)
    model.status = timer_status(session)
    if now is not None and model.status in (TimerStatus.RUNNING, TimerStatus.PAUSED):
        model.current_elapsed = effective_elapsed(session.elapsed_at_pause, session.is_running, session.start_time, now)
    return model.model_dump(mode="json", by_alias=True)


def serialize(entity: Any, now: datetime | None = None) -> Any:
    if entity is None:
        return None
    if isinstance(entity, TimerSession):
        return session_payload(entity, now)
    if isinstance(entity, Task):
        return TaskRead.model_validate(entity).model_dump(mode="json", by_alias=True)
    if isinstance(entity, Goal):
        return GoalRead.model_validate(entity).model_dump(mode="json", by_alias=True)
    if isinstance(entity, User):
        return UserRead.model_validate(entity).model_dump(mode="json", by_alias=True)
    if isinstance(entity, (list, tuple)):
        return [serialize(item, now) for item in entity]
    raise TypeError(f"Cannot serialize {type(entity).__name__}")
