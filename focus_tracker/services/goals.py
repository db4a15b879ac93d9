from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models import Goal, Task, TaskStatus

logger = logging.getLogger(__name__)


def progress_percent(completed: int, total: int) -> int:
    """``round(100 * completed / total)`` with halves rounded up."""
    return (200 * completed + total) // (2 * total)


def recompute(db: Session, goal_id: str, now: datetime) -> Goal | None:
    """Refresh a goal's progress from its live tasks.

    Safe to call any number of times; ``completed_at`` is only stamped the first
    time the goal reaches 100%. Goals without tasks keep their stored progress.
    Does not commit.
    """
    goal = (
        db.query(Goal)
        .filter(Goal.id == goal_id, Goal.deleted_at.is_(None))
        .with_for_update()
        .one_or_none()
    )
    if not goal:
        return None

    statuses = [
        status
        for (status,) in db.query(Task.status).filter(Task.goal_id == goal_id, Task.deleted_at.is_(None))
    ]
    if not statuses:
        return goal

    completed = sum(1 for status in statuses if status == TaskStatus.COMPLETED)
    goal.progress = progress_percent(completed, len(statuses))
    goal.is_completed = goal.progress == 100
    if goal.is_completed and goal.completed_at is None:
        goal.completed_at = now
        logger.info("Goal %s completed", goal.id)
    db.flush()
    return goal


def create_goal(db: Session, user_id: str, title: str) -> Goal:
    goal = Goal(user_id=user_id, title=title, progress=0, is_completed=False)
    db.add(goal)
    db.commit()
    db.refresh(goal)
    return goal


def get_owned_goal(db: Session, user_id: str, goal_id: str) -> Goal:
    goal = (
        db.query(Goal)
        .filter(Goal.id == goal_id, Goal.user_id == user_id, Goal.deleted_at.is_(None))
        .one_or_none()
    )
    if not goal:
        raise NotFoundError("Goal not found")
    return goal
