# =============================================================================
# app/routers/notifications.py - Notification Settings
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from core.models import NotificationSettings, NotificationSettingsUpdate
from core.services import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/settings", response_model=NotificationSettings)
def get_settings(user: AuthUser = Depends(get_current_user)):
    """Saved settings, or the defaults for users who never saved any."""
    return NotificationService.get_settings(user.id)


@router.put("/settings", response_model=NotificationSettings)
def update_settings(request: NotificationSettingsUpdate, user: AuthUser = Depends(get_current_user)):
    """
    Partial update.

    Times accept "HH:MM" or "HH:MM:SS" and are stored as "HH:MM:SS";
    the timezone must be an IANA name.
    """
    return NotificationService.update_settings(user.id, request)
