# =============================================================================
# app/routers/push.py - Web Push Subscription Endpoints
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.exceptions import ConfigurationError
from core.models import PushSubscribeRequest, PushUnsubscribeRequest
from core.services import PushService
from lib.push_client import PushPayload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/public-key")
async def public_key():
    """VAPID public key the browser needs for pushManager.subscribe()."""
    return {"ok": True, "public_key": settings.VAPID_PUBLIC_KEY or None}


@router.post("/subscribe")
def subscribe(request: PushSubscribeRequest, user: AuthUser = Depends(get_current_user)):
    """Save the browser subscription; a user keeps one, the latest wins."""
    PushService.subscribe(user.id, request)
    return {"ok": True}


@router.post("/unsubscribe")
def unsubscribe(
    request: PushUnsubscribeRequest | None = None,
    user: AuthUser = Depends(get_current_user),
):
    endpoint = request.endpoint if request else None
    PushService.unsubscribe(user.id, endpoint)
    return {"ok": True}


@router.post("/test")
def send_test(user: AuthUser = Depends(get_current_user)):
    """Send a test notification to the caller's devices."""
    if not settings.push_enabled:
        raise ConfigurationError("Push notifications are not configured on the server.", "VAPID_PRIVATE_KEY")
    delivered = PushService.send_to_user(
        user.id,
        PushPayload(title="AI Productivity Hub", body="Push notifications are working.", tag="test"),
    )
    return {"ok": delivered > 0, "delivered": delivered}
