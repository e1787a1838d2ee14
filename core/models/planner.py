# =============================================================================
# core/models/planner.py - Daily Planning, Scores and Weekly Review Schemas
# =============================================================================
# - daily plan / morning plan / evening reflection: quota-gated AI text
# - daily scores: the user's 0-100 rating of each day
# - weekly action plan: Pro-only plan stored per week
# - weekly stats: what the weekly report and action plan are built from
# =============================================================================

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .ai import QuotaInfo


# -----------------------------------------------------------------------------
# Daily planning
# -----------------------------------------------------------------------------

class DailyPlanResponse(QuotaInfo):
    ok: bool = True
    text: str
    usage_date: str


class MorningPlanRequest(BaseModel):
    """
    At least one of the two fields must carry text.

    Example:
        {"day_description": "Dentist at 11", "priorities": ["Ship invoice export"]}
    """
    day_description: str = Field(default="", max_length=4000)
    priorities: list[str] = Field(default_factory=list)

    @field_validator("priorities")
    @classmethod
    def clean_priorities(cls, value: list[str]) -> list[str]:
        """Blank entries dropped, at most 10 kept."""
        return [p.strip() for p in value if p and p.strip()][:10]


class MorningPlanResponse(QuotaInfo):
    ok: bool = True
    plan: str
    usage_date: str


class EveningReflectionRequest(BaseModel):
    reflection: str = Field(..., max_length=8000)
    language: str | None = Field(default=None, description="Reply language, e.g. 'de'")


class EveningReflectionResponse(QuotaInfo):
    ok: bool = True
    reflection: str


# -----------------------------------------------------------------------------
# Daily scores
# -----------------------------------------------------------------------------

class ScoreSuggestionResponse(QuotaInfo):
    ok: bool = True
    score: int = Field(..., ge=0, le=100)
    reason: str


class DailyScoreCreate(BaseModel):
    """One rating per user per day; saving again overwrites it."""
    score: int = Field(..., ge=0, le=100)
    note: str | None = Field(default=None, max_length=4000)
    score_date: date | None = Field(default=None, description="Defaults to today (UTC)")


class DailyScore(BaseModel):
    score_date: date
    score: int
    note: str | None = None


# -----------------------------------------------------------------------------
# Weekly review
# -----------------------------------------------------------------------------

class WeeklyStats(BaseModel):
    """
    The last 7 days (today included) of one user's activity.

    Read failures leave the affected list empty instead of failing.
    """
    start_date: str
    end_date: str
    notes: list[dict[str, Any]] = Field(default_factory=list)
    completed_tasks: list[dict[str, Any]] = Field(default_factory=list)
    open_tasks: list[dict[str, Any]] = Field(default_factory=list)
    ai_calls: int = 0
    scores: list[int] = Field(default_factory=list)
    goal: dict[str, Any] | None = None

    @property
    def time_saved_minutes(self) -> int:
        """Rough estimate: three minutes per AI call."""
        return self.ai_calls * 3

    @property
    def avg_score(self) -> int | None:
        if not self.scores:
            return None
        return round(sum(self.scores) / len(self.scores))


class WeeklyActionPlanRequest(BaseModel):
    week_start: date | None = Field(default=None, description="Defaults to 6 days ago")


class WeeklyActionPlan(BaseModel):
    id: str | None = None
    week_start: str
    plan_text: str
    created_at: datetime | None = None


class WeeklyActionPlanResponse(BaseModel):
    ok: bool = True
    week_start: str
    start_date: str
    end_date: str
    plan: WeeklyActionPlan


class WeeklyReport(BaseModel):
    id: str | None = None
    report_date: str
    summary: str
    created_at: datetime | None = None
