"""Timer engine: the per-user focus session state machine.

Every transition reads the session, computes the new state from the clock and
then writes it back with a guarded ``UPDATE`` that only matches the state it
read. A concurrent request that changed the row first leaves nothing to match
and the loser gets ``NotFoundError``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import Clock, SystemClock
from ..errors import ConflictError, NotFoundError
from ..models import Task, TimerSession
from ..schemas.serializers import serialize
from . import activity_log
from . import goals as goal_service
from . import tasks as task_service
from .notifier import Notifier
from .timer_state import effective_elapsed, interval_seconds

logger = logging.getLogger(__name__)

ACTIVE_TIMER_EXISTS = "You already have an active timer. Please stop it first."
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100


class TimerEngine:
    def __init__(self, db: Session, clock: Clock | None = None, notifier: Notifier | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.notifier = notifier

    # -- queries -------------------------------------------------------

    def get_active(self, user_id: str) -> TimerSession | None:
        return (
            self.db.query(TimerSession)
            .filter(TimerSession.user_id == user_id, TimerSession.end_time.is_(None))
            .one_or_none()
        )

    def effective_elapsed(self, session: TimerSession, now: datetime | None = None) -> int:
        now = now or self.clock.now()
        return effective_elapsed(session.elapsed_at_pause, session.is_running, session.start_time, now)

    def history(self, user_id: str, task_id: str | None = None, limit: int | None = None) -> list[TimerSession]:
        limit = max(1, min(MAX_HISTORY_LIMIT, limit or DEFAULT_HISTORY_LIMIT))
        query = self.db.query(TimerSession).filter(
            TimerSession.user_id == user_id,
            TimerSession.end_time.isnot(None),
        )
        if task_id:
            query = query.filter(TimerSession.task_id == task_id)
        return query.order_by(TimerSession.start_time.desc()).limit(limit).all()

    def stats(self, user_id: str, start_date: date | None = None, end_date: date | None = None) -> dict[str, Any]:
        query = (
            self.db.query(TimerSession.total_duration, Task.category)
            .join(Task, Task.id == TimerSession.task_id)
            .filter(TimerSession.user_id == user_id, TimerSession.end_time.isnot(None))
        )
        if start_date:
            query = query.filter(TimerSession.start_time >= datetime.combine(start_date, datetime.min.time()))
        if end_date:
            query = query.filter(TimerSession.start_time <= datetime.combine(end_date, datetime.max.time()))

        total_time = 0
        session_count = 0
        by_category: dict[str, int] = {}
        for duration, category in query.all():
            duration = duration or 0
            total_time += duration
            session_count += 1
            by_category[category] = by_category.get(category, 0) + duration

        avg = (2 * total_time + session_count) // (2 * session_count) if session_count else 0
        return {
            "totalTime": total_time,
            "sessionCount": session_count,
            "avgSessionDuration": avg,
            "byCategory": by_category,
        }

    # -- transitions ---------------------------------------------------

    def start(self, user_id: str, task_id: str, duration_limit: int | None = None) -> TimerSession:
        if self.get_active(user_id):
            raise ConflictError(ACTIVE_TIMER_EXISTS)
        task_service.get_owned_task(self.db, user_id, task_id)

        session = TimerSession(
            user_id=user_id,
            task_id=task_id,
            start_time=self.clock.now(),
            is_running=True,
            elapsed_at_pause=0,
            duration_limit=duration_limit,
        )
        self.db.add(session)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # lost a race with another start for the same user
            self.db.rollback()
            logger.info("Rejected concurrent timer start for user %s", user_id)
            raise ConflictError(ACTIVE_TIMER_EXISTS) from exc
        self.db.refresh(session)

        logger.info("Timer %s started on task %s", session.id, task_id)
        activity_log.log(self.db, user_id, "timer_started", "timer", session.id, task_id=task_id)
        self._publish(user_id, "timer:updated", session)
        return session

    def pause(self, user_id: str, session_id: str) -> TimerSession:
        session = self._find_open(user_id, session_id, is_running=True)
        if not session:
            raise NotFoundError("Active timer not found")

        total = session.elapsed_at_pause + interval_seconds(session.start_time, self.clock.now())
        self._swap(session, {"is_running": False, "elapsed_at_pause": total}, "Active timer not found")
        self.db.commit()
        self.db.refresh(session)

        logger.info("Timer %s paused at %ss", session.id, total)
        activity_log.log(
            self.db,
            user_id,
            "timer_paused",
            "timer",
            session.id,
            task_id=session.task_id,
            metadata={"elapsedSeconds": total},
        )
        self._publish(user_id, "timer:updated", session)
        return session

    def resume(self, user_id: str, session_id: str) -> TimerSession:
        session = self._find_open(user_id, session_id, is_running=False)
        if not session:
            raise NotFoundError("Paused timer not found")

        self._swap(session, {"is_running": True, "start_time": self.clock.now()}, "Paused timer not found")
        self.db.commit()
        self.db.refresh(session)

        logger.info("Timer %s resumed", session.id)
        activity_log.log(self.db, user_id, "timer_resumed", "timer", session.id, task_id=session.task_id)
        self._publish(user_id, "timer:updated", session)
        return session

    def stop(self, user_id: str, session_id: str, complete_task: bool = False) -> TimerSession:
        """Close the session and book its time against the task.

        The session update, the task time increment, the optional completion
        and the goal recompute commit together or not at all.
        """
        session = self._find_open(user_id, session_id)
        if not session:
            raise NotFoundError("Timer not found")

        now = self.clock.now()
        total = self.effective_elapsed(session, now)
        task_completed = False
        goal = None
        try:
            self._swap(
                session,
                {"is_running": False, "end_time": now, "total_duration": total, "elapsed_at_pause": total},
                "Timer not found",
            )
            task_service.increment_time_spent(self.db, session.task_id, total)
            if complete_task:
                task_completed = task_service.mark_completed(self.db, session.task_id, now)
                goal_id = self.db.query(Task.goal_id).filter(Task.id == session.task_id).scalar()
                if task_completed and goal_id:
                    goal = goal_service.recompute(self.db, goal_id, now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(session)
        self.db.refresh(session.task)
        if goal is not None:
            self.db.refresh(goal)

        logger.info("Timer %s stopped after %ss (task completed: %s)", session.id, total, task_completed)
        activity_log.log(
            self.db,
            user_id,
            "timer_stopped",
            "timer",
            session.id,
            task_id=session.task_id,
            metadata={"totalDuration": total, "taskCompleted": complete_task},
        )
        if task_completed:
            activity_log.log(
                self.db,
                user_id,
                "task_completed",
                "task",
                session.task_id,
                task_id=session.task_id,
                metadata={"via": "timer", "timerId": session.id},
            )
        self._publish(user_id, "timer:updated", session)
        self._publish(user_id, "task:updated", session.task)
        if goal is not None:
            self._publish(user_id, "goal:updated", goal)
        return session

    # -- helpers -------------------------------------------------------

    def _find_open(self, user_id: str, session_id: str, is_running: bool | None = None) -> TimerSession | None:
        query = self.db.query(TimerSession).filter(
            TimerSession.id == session_id,
            TimerSession.user_id == user_id,
            TimerSession.end_time.is_(None),
        )
        if is_running is not None:
            query = query.filter(TimerSession.is_running.is_(is_running))
        return query.one_or_none()

    def _swap(self, session: TimerSession, values: dict[str, Any], missing_message: str) -> None:
        """Write ``values`` only if the row still holds the state we read."""
        result = self.db.execute(
            update(TimerSession)
            .where(
                TimerSession.id == session.id,
                TimerSession.end_time.is_(None),
                TimerSession.is_running.is_(session.is_running),
                TimerSession.start_time == session.start_time,
                TimerSession.elapsed_at_pause == session.elapsed_at_pause,
            )
            .values(updated_at=func.now(), **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.info("Timer %s changed concurrently; rejecting transition", session.id)
            raise NotFoundError(missing_message)

    def _publish(self, user_id: str, event: str, entity: Any) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.publish(user_id, event, serialize(entity, now=self.clock.now()))
        except Exception:  # push is best-effort
            logger.exception("Failed to push %s to %s", event, user_id)
