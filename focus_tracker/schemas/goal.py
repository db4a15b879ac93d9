from __future__ import annotations

from pydantic import Field

from .common import APIModel, OptionalUTCDateTime


class GoalRead(APIModel):
    id: str
    title: str
    progress: int
    is_completed: bool
    completed_at: OptionalUTCDateTime = None


class GoalCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=200)
