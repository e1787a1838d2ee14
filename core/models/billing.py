# =============================================================================
# core/models/billing.py - Stripe Billing Schemas
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class Currency(str, Enum):
    EUR = "eur"
    USD = "usd"
    GBP = "gbp"


class BillingPlan(str, Enum):
    """Purchasable plans (price ids are configured per currency)."""
    PRO = "pro"
    YEARLY = "yearly"
    FOUNDER = "founder"


class CheckoutRequest(BaseModel):
    """
    Example:
        {"plan": "yearly", "currency": "usd"}

    Unknown plans fall back to pro; currency must be eur, usd or gbp.
    """
    plan: str | None = None
    currency: str = "eur"


class RedirectResponse(BaseModel):
    ok: bool = True
    url: str


class PlanPrice(BaseModel):
    plan: BillingPlan
    available: bool


class PricingResponse(BaseModel):
    currency: Currency
    plans: list[PlanPrice]


class RevenueSummary(BaseModel):
    """
    Monthly recurring revenue per currency (yearly prices divided by 12).

    Example:
        {"active_subscriptions": 12, "mrr_by_currency": {"eur": 96.0, "usd": 24.0}}
    """
    active_subscriptions: int = 0
    mrr_by_currency: dict[str, float] = Field(default_factory=dict)
