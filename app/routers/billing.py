# =============================================================================
# app/routers/billing.py - Stripe Billing Endpoints
# =============================================================================
# Checkout and portal hand back a Stripe-hosted URL the browser redirects
# to. Plan changes only ever happen through the signed webhook.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from app.auth import AuthUser, get_current_user
from core.models import CheckoutRequest, PricingResponse, RedirectResponse
from core.services import BillingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pricing", response_model=PricingResponse)
async def pricing(currency: Optional[str] = None):
    """Price IDs for each plan in the requested (or default) currency."""
    return BillingService.pricing(currency)


@router.post("/checkout", response_model=RedirectResponse)
def create_checkout(request: CheckoutRequest, user: AuthUser = Depends(get_current_user)):
    url = BillingService.create_checkout(user, request.plan, request.currency)
    return RedirectResponse(url=url)


@router.post("/portal", response_model=RedirectResponse)
def create_portal(user: AuthUser = Depends(get_current_user)):
    """Billing portal for the user's Stripe customer (404 when none)."""
    return RedirectResponse(url=BillingService.create_portal(user))


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
):
    """
    Stripe webhook receiver.

    The raw body is needed for signature verification, so it is read
    directly instead of being parsed into a model.
    """
    payload = await request.body()
    event = BillingService.construct_event(payload, stripe_signature)
    BillingService.handle_event(event)
    return {"received": True}
