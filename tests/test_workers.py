# =============================================================================
# tests/test_workers.py - Celery Task Tests
# =============================================================================
# Tasks are called directly (no broker); services are patched.
#
# Run with: pytest tests/test_workers.py -v
# =============================================================================

from unittest.mock import patch

from core.models import LanguageSyncResult, SyncReport
from workers.tasks import send_due_reminders, sync_missing_translations, update_progress


def test_update_progress_outside_worker_is_noop():
    update_progress(1, 2, "Translating de...")


def test_sync_task_returns_report_with_total():
    report = SyncReport(source_lang="en", total_source_keys=3, languages=[
        LanguageSyncResult(language_code="de", missing=2, translated=2),
    ])
    with patch("core.services.translation_service.TranslationService.sync_missing", return_value=report) as sync:
        result = sync_missing_translations("en", ["de"])

    assert result["total_translated"] == 2
    assert result["languages"][0]["language_code"] == "de"
    assert sync.call_args.args == ("en", ["de"])


def test_reminder_task_delegates():
    with patch("core.services.reminder_service.ReminderService.send_due_reminders",
               return_value={"processed": 2, "sent": 1}) as sweep:
        assert send_due_reminders(limit=10) == {"processed": 2, "sent": 1}
    sweep.assert_called_once_with(10)


def test_digest_and_report_tasks_delegate():
    from workers.tasks import send_daily_digests, send_weekly_reports

    with patch("core.services.digest_service.DigestService.send_daily_digests",
               return_value={"processed": 3, "attempted": 2, "sent": 2}):
        assert send_daily_digests()["sent"] == 2
    with patch("core.services.digest_service.WeeklyReportService.send_weekly_reports",
               return_value={"processed": 1, "sent": 1}):
        assert send_weekly_reports() == {"processed": 1, "sent": 1}


def test_notification_task_passes_force():
    from workers.tasks import send_scheduled_notifications

    with patch("core.services.notification_service.NotificationService.run",
               return_value={"processed": 4, "sent": 0}) as run:
        send_scheduled_notifications(force=True)
    run.assert_called_once_with(force=True)


class TestBeatSchedule:
    def test_every_scheduled_task_is_registered(self):
        import workers.tasks  # noqa: F401
        from workers.celery_app import celery_app
        from workers.config import CeleryConfig

        for entry in CeleryConfig.beat_schedule.values():
            assert entry["task"] in celery_app.tasks

    def test_sweep_cadence(self):
        from celery.schedules import crontab

        from app.config import settings
        from workers.config import CeleryConfig

        schedule = CeleryConfig.beat_schedule
        assert schedule["send-due-reminders"]["schedule"] == 300.0
        assert schedule["send-scheduled-notifications"]["schedule"] == 60.0
        assert schedule["send-daily-digests"]["schedule"] == crontab(
            hour=settings.DAILY_DIGEST_HOUR, minute=0
        )
        assert schedule["send-weekly-reports"]["schedule"] == crontab(
            hour=settings.WEEKLY_REPORT_HOUR, minute=0, day_of_week="mon"
        )

    def test_weekly_reports_run_on_ai_queue(self):
        from workers.config import CeleryConfig

        assert CeleryConfig.task_routes["workers.tasks.send_weekly_reports"] == {"queue": "ai_tasks"}
