# =============================================================================
# core/services/notification_service.py - Scheduled Check-in Nudges
# =============================================================================
# Per-user settings live in user_notification_settings. The sweep runs every
# minute (celery beat, or GET /cron/notifications) and sends each enabled
# nudge whose local HH:MM equals the current minute in the row's timezone.
# Task reminders share the daily success time. force=True ignores the clock.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import settings
from app.exceptions import DatabaseError
from core.models.notification import NotificationSettings, NotificationSettingsUpdate
from lib.email_client import nudge_email, send_email
from lib.supabase_client import SupabaseClient, SupabaseClientError, response_data
from lib.utils import normalize_uuid, utc_now

logger = logging.getLogger(__name__)

SETTINGS_COLUMNS = (
    "user_id, daily_success_enabled, daily_success_time, evening_reflection_enabled, "
    "evening_reflection_time, task_reminders_enabled, weekly_report_enabled, timezone"
)


def local_hhmm(tz_name: str | None, now: datetime | None = None) -> str:
    """Current "HH:MM" in the timezone; unknown names use the default zone."""
    now = now or utc_now()
    try:
        zone = ZoneInfo(tz_name or settings.NOTIFICATION_DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}; using {settings.NOTIFICATION_DEFAULT_TIMEZONE}")
        zone = ZoneInfo(settings.NOTIFICATION_DEFAULT_TIMEZONE)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone).strftime("%H:%M")


class NotificationService:
    """Service for notification settings and the nudge sweep."""

    @staticmethod
    def get_settings(user_id: UUID | str) -> NotificationSettings:
        """The stored settings, or the defaults when the user never saved any."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("user_notification_settings")
                .select(SETTINGS_COLUMNS)
                .eq("user_id", normalize_uuid(user_id))
                .maybe_single()
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load notification settings", error=str(e))

        row = response_data(response)
        if not row:
            return NotificationSettings()
        # Null columns fall back to defaults
        return NotificationSettings(**{k: v for k, v in row.items() if v is not None and k != "user_id"})

    @staticmethod
    def update_settings(user_id: UUID | str, update: NotificationSettingsUpdate) -> NotificationSettings:
        uid = normalize_uuid(user_id)
        merged = NotificationService.get_settings(uid).model_copy(
            update=update.model_dump(exclude_none=True)
        )

        client = SupabaseClient.get_client()
        try:
            client.table("user_notification_settings").upsert(
                {"user_id": uid, **merged.model_dump(), "updated_at": utc_now().isoformat()},
                on_conflict="user_id",
            ).execute()
        except Exception as e:
            logger.error(f"Saving notification settings for {uid} failed: {e}")
            raise DatabaseError("Failed to save notification settings", error=str(e))

        logger.info(f"Notification settings updated for {uid}")
        return merged

    @staticmethod
    def due_nudges(row: dict[str, Any], now: datetime | None = None, force: bool = False) -> list[str]:
        """Nudge kinds to send for one settings row at this minute."""
        current = local_hhmm(row.get("timezone"), now)
        daily_time = (row.get("daily_success_time") or "09:00:00")[:5]
        evening_time = (row.get("evening_reflection_time") or "21:30:00")[:5]

        kinds = []
        if row.get("daily_success_enabled") and (force or current == daily_time):
            kinds.append("daily_success")
        if row.get("evening_reflection_enabled") and (force or current == evening_time):
            kinds.append("evening_reflection")
        if row.get("task_reminders_enabled") and (force or current == daily_time):
            kinds.append("task_reminders")
        return kinds

    @staticmethod
    def run(force: bool = False, now: datetime | None = None) -> dict[str, int]:
        """
        One pass over all settings rows.

        Returns:
            {"processed": <settings rows>, "sent": <emails accepted>}
        """
        client = SupabaseClient.get_client()
        try:
            rows = SupabaseClient.fetch_all(
                lambda: client.table("user_notification_settings").select(SETTINGS_COLUMNS).order("user_id"),
                "notification settings",
            )
            if not rows:
                return {"processed": 0, "sent": 0}
            profiles = SupabaseClient.fetch_all(
                lambda: client.table("profiles").select("id, email").order("id"),
                "profile emails",
            )
        except SupabaseClientError as e:
            logger.error(f"Notification sweep could not load its data: {e}")
            raise DatabaseError("Failed to load notification settings", error=str(e))

        emails = {p["id"]: p.get("email") for p in profiles}
        now = now or utc_now()
        sent = 0

        for row in rows:
            email = emails.get(row.get("user_id"))
            if not email:
                continue
            for kind in NotificationService.due_nudges(row, now, force):
                try:
                    subject, text = nudge_email(kind)
                    if send_email(email, subject, text, unsubscribe=True):
                        sent += 1
                        logger.info(f"Sent {kind} nudge to {row['user_id']}")
                except Exception as e:
                    logger.error(f"{kind} nudge for {row.get('user_id')} failed: {e}")

        return {"processed": len(rows), "sent": sent}
