# =============================================================================
# core/models/notification.py - Scheduled Nudge Settings
# =============================================================================
# One user_notification_settings row per user. Times are local "HH:MM[:SS]"
# strings in the row's IANA timezone.
# =============================================================================

import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def _check_time(value: str | None) -> str | None:
    if value is None:
        return None
    if not _TIME_RE.match(value):
        raise ValueError("time must be HH:MM or HH:MM:SS")
    return value if len(value) == 8 else f"{value}:00"


class NotificationSettings(BaseModel):
    """
    Defaults mirror what a new user gets before saving anything.

    Example:
        {"daily_success_time": "09:00:00", "timezone": "Europe/Berlin", ...}
    """
    daily_success_enabled: bool = True
    daily_success_time: str = "09:00:00"
    evening_reflection_enabled: bool = True
    evening_reflection_time: str = "21:30:00"
    task_reminders_enabled: bool = True
    weekly_report_enabled: bool = True
    timezone: str = "Europe/Athens"


class NotificationSettingsUpdate(BaseModel):
    """Partial update; unset fields keep their stored value."""
    daily_success_enabled: bool | None = None
    daily_success_time: str | None = None
    evening_reflection_enabled: bool | None = None
    evening_reflection_time: str | None = None
    task_reminders_enabled: bool | None = None
    weekly_report_enabled: bool | None = None
    timezone: str | None = Field(default=None, max_length=64)

    @field_validator("daily_success_time", "evening_reflection_time")
    @classmethod
    def normalize_time(cls, value: str | None) -> str | None:
        return _check_time(value)

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {value}")
        return value
