# =============================================================================
# core/services/reminder_service.py - Task Reminder Sweep
# =============================================================================
# Finds tasks whose reminder is due and not yet sent, emails and pushes the
# owner, then stamps reminder_sent_at so each reminder fires once.
#
# Runs from the Celery beat schedule and from GET /cron/reminders.
# =============================================================================

import logging
from typing import Any

from app.config import settings
from lib.email_client import send_email, task_reminder_email
from lib.push_client import PushPayload
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now
from core.services.push_service import PushService

logger = logging.getLogger(__name__)


class ReminderService:
    """Service for sending due task reminders."""

    @staticmethod
    def fetch_due(limit: int | None = None) -> list[dict[str, Any]]:
        """Due, unsent reminders, oldest first."""
        client = SupabaseClient.get_client()
        response = (
            client.table("tasks")
            .select("id, user_id, title, due_date, reminder_at")
            .eq("reminder_enabled", True)
            .is_("reminder_sent_at", "null")
            .lte("reminder_at", utc_now().isoformat())
            .order("reminder_at")
            .limit(limit or settings.REMINDER_BATCH_LIMIT)
            .execute()
        )
        return response.data or []

    @staticmethod
    def send_one(task: dict[str, Any]) -> bool:
        """
        Deliver one reminder and mark it sent.

        Returns:
            True when at least one channel delivered
        """
        user_id = task["user_id"]
        title = task.get("title") or "Your task"

        email = SupabaseClient.fetch_user_email(user_id)
        if not email:
            logger.warning(f"No email for user {user_id}; skipping reminder {task['id']}")
            return False

        subject, text, html_body = task_reminder_email(title, task.get("due_date"))
        emailed = send_email(email, subject, text, html_body)
        pushed = PushService.send_to_user(
            user_id,
            PushPayload(title="Task reminder", body=title, url="/tasks", tag=f"task-{task['id']}"),
        )

        client = SupabaseClient.get_client()
        client.table("tasks").update({"reminder_sent_at": utc_now().isoformat()}).eq("id", task["id"]).execute()
        return emailed or pushed > 0

    @staticmethod
    def send_due_reminders(limit: int | None = None) -> dict[str, int]:
        """
        Process one batch of due reminders.

        Returns:
            {"processed": <tasks looked at>, "sent": <tasks delivered>}
        """
        tasks = ReminderService.fetch_due(limit)
        sent = 0
        for task in tasks:
            try:
                if ReminderService.send_one(task):
                    sent += 1
            except Exception as e:
                logger.error(f"Reminder for task {task.get('id')} failed: {e}")

        logger.info(f"Reminder sweep: {len(tasks)} processed, {sent} sent")
        return {"processed": len(tasks), "sent": sent}
