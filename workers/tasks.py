# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background work that is too slow or too periodic for a request:
#
# Tasks:
# - sync_missing_translations: Fill missing UI translation keys via the LLM
# - send_due_reminders: Email + push due task reminders (beat, every 5 min)
# - send_daily_digests: Daily digest email (beat, once a day)
# - send_weekly_reports: Weekly report email (beat, Mondays)
# - send_scheduled_notifications: Check-in nudges (beat, every minute)
# =============================================================================

import logging
from typing import Any

from celery import shared_task, current_task

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling via GET /jobs/{task_id}.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task and current_task.request.id:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100) if total else 100,
                "message": message,
            }
        )


# =============================================================================
# Translation Sync Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.sync_missing_translations")
def sync_missing_translations(
    self,
    source_lang: str | None = None,
    target_langs: list[str] | None = None,
) -> dict[str, Any]:
    """
    Translate every UI key missing from the target languages.

    Args:
        source_lang: Language to translate from (default from settings)
        target_langs: Languages to fill (default: all supported)

    Returns:
        The SyncReport as a dict plus total_translated
    """
    from core.services.translation_service import TranslationService

    logger.info(f"Translation sync started: source={source_lang or 'default'}, targets={target_langs or 'all'}")

    def progress(index: int, total: int, language_code: str) -> None:
        update_progress(index, total, f"Translating {language_code}...")

    report = TranslationService.sync_missing(source_lang, target_langs, progress=progress)
    result = report.model_dump()
    result["total_translated"] = report.total_translated
    return result


# =============================================================================
# Reminder Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.send_due_reminders")
def send_due_reminders(self, limit: int | None = None) -> dict[str, int]:
    """
    Send one batch of due task reminders.

    Returns:
        {"processed": int, "sent": int}
    """
    from core.services.reminder_service import ReminderService

    return ReminderService.send_due_reminders(limit)


# =============================================================================
# Digest, Report and Nudge Tasks
# =============================================================================

@shared_task(bind=True, name="workers.tasks.send_daily_digests")
def send_daily_digests(self) -> dict[str, int]:
    """
    Email the daily digest to every opted-in user.

    Returns:
        {"processed": int, "attempted": int, "sent": int}
    """
    from core.services.digest_service import DigestService

    return DigestService.send_daily_digests()


@shared_task(bind=True, name="workers.tasks.send_weekly_reports")
def send_weekly_reports(self) -> dict[str, int]:
    """Build, store and email the weekly report for opted-in paid users."""
    from core.services.digest_service import WeeklyReportService

    return WeeklyReportService.send_weekly_reports()


@shared_task(bind=True, name="workers.tasks.send_scheduled_notifications")
def send_scheduled_notifications(self, force: bool = False) -> dict[str, int]:
    from core.services.notification_service import NotificationService

    return NotificationService.run(force=force)
