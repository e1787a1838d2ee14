# =============================================================================
# core/models/profile.py - Profile, Plan and AI Usage Schemas
# =============================================================================
# A profile row exists per auth user and carries:
# - plan: subscription tier gating the AI quota
# - ai_tone / focus_area: personalization for AI summaries
# - stripe_customer_id: link to Stripe for the billing portal and webhooks
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class Plan(str, Enum):
    """
    Subscription tier.

    - free: default for every new user
    - pro: monthly or yearly subscription
    - founder: lifetime/early-supporter tier, same limits as pro
    """
    FREE = "free"
    PRO = "pro"
    FOUNDER = "founder"

    @classmethod
    def parse(cls, value: str | None) -> "Plan":
        """Missing or unknown plan strings count as free."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.FREE

    @property
    def is_paid(self) -> bool:
        return self is not Plan.FREE


class Profile(BaseModel):
    """Profile row as returned to clients."""
    id: UUID
    email: str | None = None
    plan: Plan = Plan.FREE
    is_admin: bool = False
    ai_tone: str | None = None
    focus_area: str | None = None
    stripe_customer_id: str | None = None
    created_at: datetime | None = None


class UsageSummary(BaseModel):
    """
    Today's AI usage for one user.

    Example:
        {"plan": "free", "daily_limit": 5, "used_today": 2, "remaining": 3}
    """
    plan: Plan
    daily_limit: int = Field(..., ge=0)
    used_today: int = Field(..., ge=0)
    remaining: int = Field(..., ge=0)


class AdminUserUpdate(BaseModel):
    """Fields an admin may change on a profile."""
    plan: Plan | None = None
    is_admin: bool | None = None
