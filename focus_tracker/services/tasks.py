"""Task accounting: the task-side effects of running timers."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models import Goal, Task, TaskPriority, TaskStatus


def get_owned_task(db: Session, user_id: str, task_id: str) -> Task:
    task = (
        db.query(Task)
        .filter(Task.id == task_id, Task.user_id == user_id, Task.deleted_at.is_(None))
        .one_or_none()
    )
    if not task:
        raise NotFoundError("Task not found")
    return task


def increment_time_spent(db: Session, task_id: str, seconds: int) -> None:
    """Add ``seconds`` to the task's cumulative time in a single SQL statement."""
    if seconds < 0:
        raise ValueError("seconds must not be negative")
    result = db.execute(
        update(Task)
        .where(Task.id == task_id)
        .values(time_spent=Task.time_spent + seconds)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError("Task not found")


def mark_completed(db: Session, task_id: str, now: datetime) -> bool:
    """Move the task to ``completed`` unless it already is.

    Returns True only when this call performed the transition. ``completed_at``
    keeps its first value if one was ever stamped.
    """
    result = db.execute(
        update(Task)
        .where(Task.id == task_id, Task.status != TaskStatus.COMPLETED)
        .values(status=TaskStatus.COMPLETED, completed_at=func.coalesce(Task.completed_at, now))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def create_task(
    db: Session,
    user_id: str,
    title: str,
    *,
    category: str | None = None,
    priority: TaskPriority | None = None,
    goal_id: str | None = None,
) -> Task:
    if goal_id:
        goal = (
            db.query(Goal)
            .filter(Goal.id == goal_id, Goal.user_id == user_id, Goal.deleted_at.is_(None))
            .one_or_none()
        )
        if not goal:
            raise NotFoundError("Goal not found")
    task = Task(
        user_id=user_id,
        title=title,
        category=category or "general",
        priority=priority or TaskPriority.MEDIUM,
        status=TaskStatus.PLANNED,
        time_spent=0,
        goal_id=goal_id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def list_tasks(db: Session, user_id: str) -> list[Task]:
    return (
        db.query(Task)
        .filter(Task.user_id == user_id, Task.deleted_at.is_(None))
        .order_by(Task.created_at.desc(), Task.title.asc())
        .all()
    )


def soft_delete_task(db: Session, user_id: str, task_id: str, now: datetime) -> Task:
    task = get_owned_task(db, user_id, task_id)
    task.deleted_at = now
    db.commit()
    return task
