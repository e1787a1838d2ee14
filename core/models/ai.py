# =============================================================================
# core/models/ai.py - AI Feature Schemas
# =============================================================================
# Request/response contracts for the quota-gated AI endpoints:
# - chat: coach conversation with client-held history, optionally saved
# - summary: overview of recent notes and tasks
# - task-creator / note-to-tasks: structured task suggestions
# - translate: free-text translation
# - travel-plan: day-by-day itinerary
# =============================================================================

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from .profile import Plan


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class HistoryMessage(BaseModel):
    role: MessageRole
    content: str = Field(..., max_length=20000)


class AIChatRequest(BaseModel):
    """
    Example:
        {"message": "Help me plan my week", "history": []}
    """
    message: str = Field(..., min_length=1, max_length=8000)
    history: list[HistoryMessage] = Field(default_factory=list, max_length=50)
    language: str | None = Field(default=None, description="Reply language, e.g. 'el-GR'")
    thread_id: str | None = Field(default=None, description="Saved conversation to append to")
    category: str | None = Field(default=None, max_length=50)
    save_thread: bool = Field(default=False, description="Start a saved conversation when thread_id is unset")


class QuotaInfo(BaseModel):
    """Usage fields attached to every successful AI response."""
    plan: Plan
    daily_limit: int
    used_today: int


class AIChatResponse(QuotaInfo):
    ok: bool = True
    message: str
    title: str | None = Field(default=None, description="Set on the first message of a conversation")
    thread_id: str | None = Field(default=None, description="Set when the exchange was saved")


class AISummaryRequest(BaseModel):
    language: str | None = None


class AISummaryResponse(QuotaInfo):
    ok: bool = True
    summary: str


class TaskCreatorRequest(BaseModel):
    """Questionnaire answers; every field is optional."""
    gender: str | None = None
    age_range: str | None = None
    job_role: str | None = None
    work_type: str | None = None
    hobbies: str | None = None
    today_plan: str | None = None
    main_goal: str | None = None
    hours_available: str | None = None
    energy_level: int | None = Field(default=None, ge=1, le=10)
    intensity: str | None = None


class SuggestedTask(BaseModel):
    title: str
    category: str | None = None
    size: str | None = None


class TaskCreatorResponse(QuotaInfo):
    ok: bool = True
    tasks: list[SuggestedTask]


class NoteToTasksRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)


class ExtractedTask(BaseModel):
    title: str
    due_natural: str | None = None
    due_iso: str | None = None
    priority: Literal["low", "medium", "high"] | None = None


class NoteToTasksResponse(QuotaInfo):
    ok: bool = True
    tasks: list[ExtractedTask]


class TranslateRequest(BaseModel):
    text: str = Field(..., max_length=20000)
    target_lang: str = Field(..., min_length=2, max_length=40)


class TranslateResponse(QuotaInfo):
    ok: bool = True
    translation: str


class TravelPlanRequest(BaseModel):
    destination: str = Field(..., min_length=1, max_length=200)
    checkin: str
    checkout: str
    adults: int = Field(default=1, ge=1, le=20)
    children: int = Field(default=0, ge=0, le=20)
    min_budget: float | None = Field(default=None, ge=0)
    max_budget: float | None = Field(default=None, ge=0)


class TravelPlanResponse(QuotaInfo):
    ok: bool = True
    plan: str
