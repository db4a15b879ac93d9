"""Minimal task and goal endpoints backing the timer."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..clock import Clock, get_clock
from ..db import get_db
from ..models import User
from ..responses import success
from ..schemas.goal import GoalCreate
from ..schemas.serializers import serialize
from ..schemas.task import TaskCreate
from ..security import get_current_user
from ..services import goals as goal_service
from ..services import tasks as task_service

router = APIRouter(tags=["tasks"])


@router.post("/tasks")
async def create_task(
    payload: TaskCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = task_service.create_task(
        db,
        user.id,
        payload.title,
        category=payload.category,
        priority=payload.priority,
        goal_id=str(payload.goal_id) if payload.goal_id else None,
    )
    return success(serialize(task), status_code=201)


@router.get("/tasks")
async def list_tasks(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(serialize(task_service.list_tasks(db, user.id)))


@router.get("/tasks/{task_id}")
async def get_task(task_id: UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(serialize(task_service.get_owned_task(db, user.id, str(task_id))))


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    task_service.soft_delete_task(db, user.id, str(task_id), clock.now())
    return success(None, message="Task deleted successfully")


@router.post("/goals")
async def create_goal(
    payload: GoalCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = goal_service.create_goal(db, user.id, payload.title.strip())
    return success(serialize(goal), status_code=201)


@router.get("/goals/{goal_id}")
async def get_goal(goal_id: UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(serialize(goal_service.get_owned_goal(db, user.id, str(goal_id))))
