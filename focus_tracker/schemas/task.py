from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from ..models import TaskPriority, TaskStatus
from .common import APIModel, OptionalUTCDateTime


class TaskSummary(APIModel):
    id: str
    title: str
    category: str
    priority: TaskPriority


class TaskRead(TaskSummary):
    status: TaskStatus
    time_spent: int
    goal_id: str | None = None
    completed_at: OptionalUTCDateTime = None
    created_at: OptionalUTCDateTime = None


class TaskCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: str | None = Field(default=None, max_length=60)
    priority: TaskPriority | None = None
    goal_id: UUID | None = None

    @field_validator("title")
    @classmethod
    def title_strip(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title is required")
        return cleaned
