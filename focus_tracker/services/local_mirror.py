"""Disk-backed copy of a user's timer for clients running without the server.

The mirror runs the same transitions and elapsed formula as the server engine.
Whichever side is the server-of-record wins: ``reconcile`` simply adopts the
payload returned by ``GET /timer/active``.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..clock import Clock, SystemClock
from ..errors import ConflictError, NotFoundError
from ..schemas.common import to_iso
from .timer_state import TimerStatus, effective_elapsed, interval_seconds

logger = logging.getLogger(__name__)


@dataclass
class MirrorSession:
    id: str
    task_id: str
    start_time: datetime
    is_running: bool = True
    elapsed_at_pause: int = 0
    duration_limit: int | None = None
    end_time: datetime | None = None
    total_duration: int | None = None


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class LocalTimerMirror:
    def __init__(self, path: Path, clock: Clock | None = None):
        self.path = Path(path)
        self.clock = clock or SystemClock()
        self.session: MirrorSession | None = None
        self.load()

    @property
    def status(self) -> TimerStatus:
        if self.session is None:
            return TimerStatus.NONE
        if self.session.end_time is not None:
            return TimerStatus.STOPPED
        return TimerStatus.RUNNING if self.session.is_running else TimerStatus.PAUSED

    def effective_elapsed(self) -> int:
        if self.session is None:
            return 0
        return effective_elapsed(
            self.session.elapsed_at_pause, self.session.is_running, self.session.start_time, self.clock.now()
        )

    def start(self, task_id: str, duration_limit: int | None = None, session_id: str | None = None) -> MirrorSession:
        if self.status in (TimerStatus.RUNNING, TimerStatus.PAUSED):
            raise ConflictError("You already have an active timer. Please stop it first.")
        self.session = MirrorSession(
            id=session_id or str(uuid.uuid4()),
            task_id=task_id,
            start_time=self.clock.now(),
            duration_limit=duration_limit,
        )
        self.save()
        return self.session

    def pause(self) -> MirrorSession:
        if self.status is not TimerStatus.RUNNING:
            raise NotFoundError("Active timer not found")
        session = self.session
        session.elapsed_at_pause += interval_seconds(session.start_time, self.clock.now())
        session.is_running = False
        self.save()
        return session

    def resume(self) -> MirrorSession:
        if self.status is not TimerStatus.PAUSED:
            raise NotFoundError("Paused timer not found")
        self.session.start_time = self.clock.now()
        self.session.is_running = True
        self.save()
        return self.session

    def stop(self) -> MirrorSession:
        if self.status not in (TimerStatus.RUNNING, TimerStatus.PAUSED):
            raise NotFoundError("Timer not found")
        session = self.session
        now = self.clock.now()
        total = effective_elapsed(session.elapsed_at_pause, session.is_running, session.start_time, now)
        session.elapsed_at_pause = total
        session.total_duration = total
        session.is_running = False
        session.end_time = now
        self.save()
        return session

    def reconcile(self, server_payload: dict[str, Any] | None) -> MirrorSession | None:
        """Replace local state with the server's view of the active timer."""
        if not server_payload or server_payload.get("endTime"):
            if self.session is not None and self.status is not TimerStatus.STOPPED:
                logger.info("Server has no active timer; dropping local session %s", self.session.id)
            self.session = None
        else:
            self.session = MirrorSession(
                id=server_payload["id"],
                task_id=server_payload["taskId"],
                start_time=_parse_time(server_payload["startTime"]),
                is_running=bool(server_payload["isRunning"]),
                elapsed_at_pause=int(server_payload.get("elapsedAtPause") or 0),
                duration_limit=server_payload.get("durationLimit"),
            )
        self.save()
        return self.session

    # -- persistence ---------------------------------------------------

    def load(self) -> None:
        if not self.path.exists():
            self.session = None
            return
        with self.path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        stored = raw.get("session")
        if not stored:
            self.session = None
            return
        stored["start_time"] = _parse_time(stored["start_time"])
        stored["end_time"] = _parse_time(stored.get("end_time"))
        self.session = MirrorSession(**stored)

    def save(self) -> None:
        payload = None
        if self.session is not None:
            payload = asdict(self.session)
            payload["start_time"] = to_iso(self.session.start_time)
            payload["end_time"] = to_iso(self.session.end_time)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump({"session": payload}, f, indent=2)
        tmp_path.replace(self.path)
