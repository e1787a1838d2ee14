# =============================================================================
# core/models/community.py - Reviews, Feedback, Changelog and Travel Schemas
# =============================================================================
# Small user-submitted records that are written once and read by admins or
# shown publicly.
# =============================================================================

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


# -----------------------------------------------------------------------------
# Reviews
# -----------------------------------------------------------------------------

class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Star rating 1-5")
    comment: str | None = Field(default=None, max_length=2000)
    source: str | None = Field(default=None, max_length=50)


class ReviewResponse(BaseModel):
    id: UUID
    user_id: UUID | None = None
    rating: int
    comment: str | None = None
    source: str | None = None
    created_at: datetime | None = None


# -----------------------------------------------------------------------------
# Feedback
# -----------------------------------------------------------------------------

class FeedbackCreate(BaseModel):
    """
    Example:
        {"message": "Dark mode please!", "source": "settings"}
    """
    message: str = Field(..., min_length=1, max_length=5000)
    email: str | None = Field(default=None, max_length=320)
    source: str | None = Field(default=None, max_length=50)


# -----------------------------------------------------------------------------
# Changelog
# -----------------------------------------------------------------------------

class ChangelogCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    version: str | None = Field(default=None, max_length=20)


# -----------------------------------------------------------------------------
# Travel
# -----------------------------------------------------------------------------

class TravelClickCreate(BaseModel):
    """
    An affiliate link click (hotel/flight search) from the travel planner.

    click_type and provider are required; the rest is context.
    """
    click_type: str = Field(..., min_length=1, max_length=50)
    provider: str = Field(..., min_length=1, max_length=50)
    destination: str | None = None
    from_city: str | None = None
    checkin: str | None = None
    checkout: str | None = None
    adults: int | None = Field(default=None, ge=0)
    children: int | None = Field(default=None, ge=0)
    meta: dict[str, Any] | None = None


# -----------------------------------------------------------------------------
# Weekly Goals
# -----------------------------------------------------------------------------

class WeeklyGoalRequest(BaseModel):
    goal_text: str = Field(..., min_length=1, max_length=1000)
    refine: bool = Field(default=False, description="Let AI rewrite the goal")


class WeeklyGoal(BaseModel):
    id: UUID
    goal_text: str
    week_start: str
    completed: bool = False
