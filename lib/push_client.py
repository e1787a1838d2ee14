# =============================================================================
# lib/push_client.py - Web Push (VAPID) Delivery
# =============================================================================
# Thin wrapper around pywebpush that sends one notification to one browser
# subscription and reports whether the subscription has expired.
#
# Usage:
#   from lib.push_client import send_push, PushPayload
#   result = send_push(row, PushPayload(title="Reminder", body="Call Anna"))
# =============================================================================

import json
import logging
from dataclasses import dataclass, asdict
from typing import Any

from pywebpush import webpush, WebPushException

from app.config import settings

logger = logging.getLogger(__name__)

# Push services answer 404/410 when the browser subscription is gone
EXPIRED_STATUS_CODES = {404, 410}


@dataclass
class PushPayload:
    """JSON body delivered to the service worker."""
    title: str
    body: str
    url: str = "/"
    tag: str | None = None

    def to_json(self) -> str:
        return json.dumps({k: v for k, v in asdict(self).items() if v is not None})


@dataclass
class PushResult:
    ok: bool
    expired: bool = False
    error: str | None = None


def subscription_info(row: dict[str, Any]) -> dict[str, Any]:
    """
    Build the pywebpush subscription dict from a push_subscriptions row.

    Rows store endpoint/p256dh/auth as columns; older rows may only have the
    raw browser JSON in `subscription`.
    """
    raw = row.get("subscription") or {}
    keys = raw.get("keys") or {}
    return {
        "endpoint": row.get("endpoint") or raw.get("endpoint"),
        "keys": {
            "p256dh": row.get("p256dh") or keys.get("p256dh"),
            "auth": row.get("auth") or keys.get("auth"),
        },
    }


def send_push(row: dict[str, Any], payload: PushPayload) -> PushResult:
    """
    Send one notification.

    Never raises: failures are logged and returned as PushResult(ok=False).
    """
    if not settings.push_enabled:
        logger.warning("Web push skipped: VAPID keys are not configured")
        return PushResult(ok=False, error="push not configured")

    info = subscription_info(row)
    if not info["endpoint"]:
        return PushResult(ok=False, error="subscription has no endpoint")

    try:
        webpush(
            subscription_info=info,
            data=payload.to_json(),
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_claims={"sub": settings.VAPID_SUBJECT},
        )
        return PushResult(ok=True)

    except WebPushException as e:
        status = getattr(getattr(e, "response", None), "status_code", None)
        expired = status in EXPIRED_STATUS_CODES
        logger.warning(f"Web push failed (status={status}, expired={expired}): {e}")
        return PushResult(ok=False, expired=expired, error=str(e))

    except Exception as e:
        # Network errors from requests, bad VAPID keys, malformed rows
        logger.error(f"Web push to {info['endpoint'][:60]} failed: {e}")
        return PushResult(ok=False, error=str(e))
