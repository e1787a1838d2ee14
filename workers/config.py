# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings for the Celery workers and the beat scheduler that drives the
# periodic email sweeps (reminders, digest, weekly report, nudges).
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    # Redis carries both the task messages and the job status polled by
    # GET /jobs/{task_id}
    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    # A worker dying mid-sync hands the job to another worker
    task_acks_late = True

    # Only prefetch one task at a time
    # A long translation sync must not hold short sweeps hostage
    worker_prefetch_multiplier = 1

    # Job status stays pollable for 1 hour
    result_expires = 3600

    # A full translation sync covers ~25 languages of LLM calls (30 minutes)
    task_time_limit = 1800

    # Soft limit one minute earlier, so the task can log where it stopped
    task_soft_time_limit = 1740

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    # Task arguments are language codes and limits; JSON covers them
    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "ai_tasks": {
            "exchange": "ai_tasks",
            "routing_key": "ai_tasks",
        },
    }

    # Tasks that call the LLM per language or per user get their own queue,
    # so reminders and nudges are never stuck behind them
    task_routes = {
        "workers.tasks.sync_missing_translations": {"queue": "ai_tasks"},
        "workers.tasks.send_weekly_reports": {"queue": "ai_tasks"},
    }

    # Reminders, the digest and nudges
    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    # Manual retries (self.retry) wait a minute, at most 3 times.
    # Sweeps never retry themselves: the next beat tick picks up what's left.
    task_annotations = {
        "*": {
            "max_retries": 3,
            "default_retry_delay": 60,
        }
    }

    # -------------------------------------------------------------------------
    # Beat Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        # Due task reminders, in batches of REMINDER_BATCH_LIMIT
        "send-due-reminders": {
            "task": "workers.tasks.send_due_reminders",
            "schedule": 300.0,
        },
        # Once a day for everyone with daily_digest_enabled
        "send-daily-digests": {
            "task": "workers.tasks.send_daily_digests",
            "schedule": crontab(hour=settings.DAILY_DIGEST_HOUR, minute=0),
        },
        # Monday mornings, paid plans only
        "send-weekly-reports": {
            "task": "workers.tasks.send_weekly_reports",
            "schedule": crontab(hour=settings.WEEKLY_REPORT_HOUR, minute=0, day_of_week="mon"),
        },
        # Nudges match each user's local HH:MM, so this must run every minute
        "send-scheduled-notifications": {
            "task": "workers.tasks.send_scheduled_notifications",
            "schedule": 60.0,
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    # Send task events for monitoring (Flower, etc.)
    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    # Beat hours above are UTC; nudges do their own timezone conversion
    timezone = "UTC"
    enable_utc = True
