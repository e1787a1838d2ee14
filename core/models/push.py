# =============================================================================
# core/models/push.py - Web Push Subscription Schemas
# =============================================================================

from pydantic import BaseModel, Field


class PushKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscribeRequest(BaseModel):
    """
    The browser's PushSubscription.toJSON() output.

    Example:
        {"endpoint": "https://fcm.googleapis.com/...", "keys": {"p256dh": "...", "auth": "..."}}
    """
    endpoint: str = Field(..., min_length=1)
    keys: PushKeys


class PushUnsubscribeRequest(BaseModel):
    endpoint: str | None = None
