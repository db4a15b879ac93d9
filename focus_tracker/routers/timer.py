from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..clock import Clock, get_clock
from ..db import get_db
from ..models import User
from ..responses import success
from ..schemas.serializers import session_payload
from ..schemas.timer import StartTimerRequest, StopTimerRequest, TimerStats
from ..security import get_current_user
from ..services.notifier import Notifier, get_notifier
from ..services.timer import DEFAULT_HISTORY_LIMIT, TimerEngine

router = APIRouter(tags=["timer"])


def get_engine(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: Notifier = Depends(get_notifier),
) -> TimerEngine:
    return TimerEngine(db, clock, notifier)


@router.post("/start")
async def start_timer(
    payload: StartTimerRequest,
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    session = engine.start(user.id, str(payload.task_id), payload.duration_limit)
    return success(session_payload(session, engine.clock.now()), status_code=201)


@router.get("/active")
async def get_active_timer(
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    session = engine.get_active(user.id)
    if not session:
        return success(None)
    return success(session_payload(session, engine.clock.now(), detail=True))


@router.post("/pause/{timer_id}")
@router.post("/{timer_id}/pause")
async def pause_timer(
    timer_id: UUID,
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    session = engine.pause(user.id, str(timer_id))
    return success(session_payload(session, engine.clock.now()))


@router.post("/resume/{timer_id}")
@router.post("/{timer_id}/resume")
async def resume_timer(
    timer_id: UUID,
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    session = engine.resume(user.id, str(timer_id))
    return success(session_payload(session, engine.clock.now()))


@router.post("/stop/{timer_id}")
@router.post("/{timer_id}/stop")
async def stop_timer(
    timer_id: UUID,
    payload: StopTimerRequest | None = Body(default=None),
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    complete_task = payload.complete_task if payload else False
    session = engine.stop(user.id, str(timer_id), complete_task)
    return success(session_payload(session, detail=True))


@router.get("/history")
async def timer_history(
    task_id: UUID | None = Query(default=None, alias="taskId"),
    limit: int = Query(default=DEFAULT_HISTORY_LIMIT),
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    sessions = engine.history(user.id, str(task_id) if task_id else None, limit)
    return success([session_payload(session) for session in sessions])


@router.get("/stats")
async def timer_stats(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    user: User = Depends(get_current_user),
    engine: TimerEngine = Depends(get_engine),
):
    stats = TimerStats.model_validate(engine.stats(user.id, start_date, end_date))
    return success(stats.model_dump(mode="json", by_alias=True))
