# =============================================================================
# core/models/task.py - Task Schemas
# =============================================================================
# Tasks can carry an optional email/push reminder:
# - reminder_enabled + reminder_at schedule it
# - reminder_sent_at is set by the reminder sweep so it fires once
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class TaskCreate(BaseModel):
    """
    Schema for creating a task.

    Example:
        {
            "title": "Send invoice",
            "due_date": "2024-01-20",
            "reminder_enabled": true,
            "reminder_at": "2024-01-20T08:00:00Z"
        }
    """
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    due_date: str | None = Field(default=None, description="ISO date or datetime")
    reminder_enabled: bool = False
    reminder_at: datetime | None = None

    @model_validator(mode="after")
    def reminder_needs_time(self) -> "TaskCreate":
        if self.reminder_enabled and self.reminder_at is None:
            raise ValueError("reminder_at is required when reminder_enabled is true")
        return self


class TaskUpdate(BaseModel):
    """Partial update; only fields that are set are written."""
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    due_date: str | None = None
    reminder_enabled: bool | None = None
    reminder_at: datetime | None = None


class TaskResponse(BaseModel):
    id: UUID
    title: str
    description: str | None = None
    completed: bool = False
    is_completed: bool = False
    completed_at: datetime | None = None
    due_date: str | None = None
    reminder_enabled: bool = False
    reminder_at: datetime | None = None
    reminder_sent_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
