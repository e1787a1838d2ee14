# =============================================================================
# tests/test_digests.py - Digest, Weekly Report and Nudge Sweep Tests
# =============================================================================
# Supabase is the in-memory FakeSupabase; email and the LLM are patched.
#
# Run with: pytest tests/test_digests.py -v
# =============================================================================

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import DatabaseError
from core.models import NotificationSettingsUpdate, WeeklyStats
from core.services import (
    DigestService,
    NotificationService,
    PlannerService,
    WeeklyReportService,
)
from core.services.digest_service import REFLECTION_FALLBACK
from core.services.notification_service import local_hhmm
from llm.client import LLMError

NOW = datetime(2024, 5, 3, 12, 0, tzinfo=timezone.utc)
PROFILE = {"id": "u1", "email": "u1@example.com", "ai_tone": "direct", "focus_area": "writing"}


def _tasks_by_section(query):
    """Due-today reads use gte(); overdue reads only lt()."""
    if query.called("gte"):
        return [{"id": "t1", "title": "Send invoice", "due_date": "2024-05-03T15:00:00+00:00"}]
    return [{"id": "t2", "title": "Renew passport", "due_date": "2024-04-20T09:00:00+00:00"}]


class TestDailyDigest:

    def test_day_bounds(self):
        assert DigestService.day_bounds(NOW) == (
            "2024-05-03T00:00:00+00:00",
            "2024-05-04T00:00:00+00:00",
        )

    def test_sends_due_and_overdue_sections(self, fake_db):
        fake_db.on("profiles", [PROFILE])
        fake_db.on("tasks", _tasks_by_section)

        with patch("core.services.digest_service.send_email", return_value=True) as send_email:
            result = DigestService.send_daily_digests(NOW)

        assert result == {"processed": 1, "attempted": 1, "sent": 1}
        to, subject, text = send_email.call_args.args[:3]
        assert to == "u1@example.com"
        assert subject == "Your Daily AI Productivity Digest"
        assert "- Send invoice (due 2024-05-03)" in text
        assert "- Renew passport (was due 2024-04-20)" in text
        assert "- Tone: direct" in text
        assert send_email.call_args.kwargs["unsubscribe"] is True

    def test_task_queries_are_open_and_capped(self, fake_db):
        fake_db.on("profiles", [PROFILE])

        with patch("core.services.digest_service.send_email", return_value=True):
            DigestService.send_daily_digests(NOW)

        due_today, overdue = fake_db.queries("tasks")
        assert due_today.filters() == {"user_id": "u1", "completed": False}
        assert due_today.args_of("gte") == ("due_date", "2024-05-03T00:00:00+00:00")
        assert due_today.args_of("lt") == ("due_date", "2024-05-04T00:00:00+00:00")
        assert overdue.args_of("lt") == ("due_date", "2024-05-03T00:00:00+00:00")
        assert due_today.args_of("limit") == (10,)

    def test_empty_day_gets_encouragement(self, fake_db):
        fake_db.on("profiles", [PROFILE])

        with patch("core.services.digest_service.send_email", return_value=True) as send_email:
            DigestService.send_daily_digests(NOW)

        assert "No tasks due today or overdue" in send_email.call_args.args[2]

    def test_subscribers_without_email_are_skipped(self, fake_db):
        fake_db.on("profiles", [PROFILE, {"id": "u2", "email": None}])

        with patch("core.services.digest_service.send_email", return_value=False):
            result = DigestService.send_daily_digests(NOW)

        assert result == {"processed": 2, "attempted": 1, "sent": 0}
        assert fake_db.queries("profiles")[0].filters() == {"daily_digest_enabled": True}

    def test_one_failure_does_not_stop_the_sweep(self, fake_db):
        fake_db.on("profiles", [PROFILE, {**PROFILE, "id": "u2", "email": "u2@example.com"}])

        with patch("core.services.digest_service.send_email", side_effect=[RuntimeError("boom"), True]):
            result = DigestService.send_daily_digests(NOW)

        assert result["sent"] == 1

    def test_unreadable_profiles_fail_the_run(self, fake_db):
        fake_db.on("profiles", RuntimeError("connection reset"))

        with pytest.raises(DatabaseError):
            DigestService.send_daily_digests(NOW)


class TestWeeklyReport:

    STATS = WeeklyStats(
        start_date="2024-04-27",
        end_date="2024-05-03",
        notes=[{"title": "Launch plan"}, {"content": "x" * 100}],
        completed_tasks=[{"id": "t1"}, {"id": "t2"}],
        ai_calls=5,
        scores=[60, 80],
        goal={"goal_text": "Ship the beta", "completed": True},
    )

    def test_wins_block(self):
        block = WeeklyReportService.wins_block(self.STATS)

        assert "- Tasks completed: 2" in block
        assert "- Estimated time saved: 15 minutes" in block
        assert "- Avg productivity score: 70/100" in block
        assert "Score trend this week: 60 -> 80" in block

    def test_goal_line(self):
        assert WeeklyReportService.goal_line(self.STATS) == 'Weekly goal: "Ship the beta" (marked as completed)'
        empty = WeeklyStats(start_date="2024-04-27", end_date="2024-05-03")
        assert WeeklyReportService.goal_line(empty) == "No explicit weekly goal was set."

    def test_note_label_falls_back_to_content(self):
        assert WeeklyReportService.note_label({"title": "Launch plan"}) == "Launch plan"
        assert WeeklyReportService.note_label({"content": "x" * 100}) == "x" * 80 + "..."
        assert WeeklyReportService.note_label({}) == "(untitled note)"

    def test_reflection_failure_uses_fixed_line(self):
        llm = MagicMock()
        llm.complete_text.side_effect = LLMError("timeout")
        with patch("core.services.digest_service.get_llm_client", return_value=llm):
            assert WeeklyReportService.reflection(self.STATS) == REFLECTION_FALLBACK

    def test_sweep_stores_and_emails(self, fake_db):
        fake_db.on("profiles", [{"id": "u1", "email": "u1@example.com", "plan": "pro", "language": "de"}])
        llm = MagicMock()
        llm.complete_text.return_value = "A focused week.\n\nFocus for next week:\n- Rest"

        with patch.object(PlannerService, "weekly_stats", return_value=self.STATS), \
                patch("core.services.digest_service.get_llm_client", return_value=llm), \
                patch("core.services.digest_service.send_email", return_value=True) as send_email:
            result = WeeklyReportService.send_weekly_reports()

        assert result == {"processed": 1, "sent": 1}
        profiles_query = fake_db.queries("profiles")[0]
        assert profiles_query.filters() == {"weekly_report_enabled": True}
        assert profiles_query.args_of("in_") == ("plan", ["pro", "founder"])

        stored = fake_db.writes("weekly_reports", "insert")[0]
        assert stored["user_id"] == "u1"
        assert "A focused week." in stored["summary"]
        assert "- Launch plan" in stored["summary"]
        assert send_email.call_args.args[1] == "Your Weekly AI Productivity Report"
        assert "Reply in German" in llm.complete_text.call_args.args[0][0]["content"]

    def test_store_failure_still_emails(self, fake_db):
        fake_db.on("profiles", [{"id": "u1", "email": "u1@example.com", "plan": "founder"}])
        fake_db.on("weekly_reports", RuntimeError("insert failed"))
        llm = MagicMock()
        llm.complete_text.return_value = "Good week."

        with patch.object(PlannerService, "weekly_stats", return_value=self.STATS), \
                patch("core.services.digest_service.get_llm_client", return_value=llm), \
                patch("core.services.digest_service.send_email", return_value=True):
            assert WeeklyReportService.send_weekly_reports()["sent"] == 1

    def test_list_reports_newest_first(self, fake_db, user_id):
        fake_db.on("weekly_reports", [{"id": "r1", "report_date": "2024-05-06", "summary": "..."}])

        reports = WeeklyReportService.list_reports(user_id, limit=5)

        assert reports[0]["id"] == "r1"
        query = fake_db.queries("weekly_reports")[0]
        assert query.args_of("order") == ("report_date",)
        assert query.kwargs_of("order") == {"desc": True}
        assert query.args_of("limit") == (5,)


class TestNotificationSettings:

    def test_defaults_when_never_saved(self, fake_db, user_id):
        fake_db.on("user_notification_settings", None)

        current = NotificationService.get_settings(user_id)

        assert current.daily_success_time == "09:00:00"
        assert current.timezone == "Europe/Athens"

    def test_stored_nulls_fall_back_to_defaults(self, fake_db, user_id):
        fake_db.on("user_notification_settings", {
            "user_id": str(user_id),
            "daily_success_enabled": False,
            "daily_success_time": None,
            "timezone": "Europe/Berlin",
        })

        current = NotificationService.get_settings(user_id)

        assert current.daily_success_enabled is False
        assert current.daily_success_time == "09:00:00"
        assert current.timezone == "Europe/Berlin"

    def test_update_merges_and_upserts(self, fake_db, user_id):
        fake_db.on("user_notification_settings", None)

        saved = NotificationService.update_settings(
            user_id, NotificationSettingsUpdate(evening_reflection_time="22:15")
        )

        assert saved.evening_reflection_time == "22:15:00"
        assert saved.daily_success_time == "09:00:00"
        upsert = [q for q in fake_db.queries("user_notification_settings") if q.called("upsert")][0]
        assert upsert.args_of("upsert")[0]["evening_reflection_time"] == "22:15:00"
        assert upsert.kwargs_of("upsert") == {"on_conflict": "user_id"}

    def test_update_validates_time_and_timezone(self):
        with pytest.raises(ValueError):
            NotificationSettingsUpdate(daily_success_time="25:00")
        with pytest.raises(ValueError):
            NotificationSettingsUpdate(timezone="Mars/Olympus_Mons")


class TestNudgeSweep:

    ROW = {
        "user_id": "u1",
        "daily_success_enabled": True,
        "daily_success_time": "09:00:00",
        "evening_reflection_enabled": True,
        "evening_reflection_time": "21:30:00",
        "task_reminders_enabled": True,
        "weekly_report_enabled": True,
        "timezone": "Europe/Athens",
    }
    # 07:00 UTC is 09:00 in Athens (UTC+2 in winter)
    MORNING = datetime(2024, 1, 15, 7, 0, tzinfo=timezone.utc)

    def test_local_time(self):
        assert local_hhmm("Europe/Athens", self.MORNING) == "09:00"
        assert local_hhmm("America/New_York", self.MORNING) == "02:00"

    def test_unknown_timezone_uses_default(self):
        assert local_hhmm("Nowhere/Special", self.MORNING) == "09:00"
        assert local_hhmm(None, self.MORNING) == "09:00"

    def test_morning_sends_daily_success_and_tasks(self):
        assert NotificationService.due_nudges(self.ROW, self.MORNING) == ["daily_success", "task_reminders"]

    def test_other_minutes_send_nothing(self):
        later = datetime(2024, 1, 15, 7, 1, tzinfo=timezone.utc)
        assert NotificationService.due_nudges(self.ROW, later) == []

    def test_force_sends_every_enabled_kind(self):
        row = {**self.ROW, "task_reminders_enabled": False}
        assert NotificationService.due_nudges(row, self.MORNING, force=True) == [
            "daily_success",
            "evening_reflection",
        ]

    def test_run_sends_to_profile_email(self, fake_db):
        fake_db.on("user_notification_settings", [self.ROW, {**self.ROW, "user_id": "u2"}])
        fake_db.on("profiles", [{"id": "u1", "email": "u1@example.com"}])

        with patch("core.services.notification_service.send_email", return_value=True) as send_email:
            result = NotificationService.run(now=self.MORNING)

        assert result == {"processed": 2, "sent": 2}
        subjects = [call.args[1] for call in send_email.call_args_list]
        assert subjects == ["Daily Success - quick check-in", "Tasks for today"]
        assert all(call.args[0] == "u1@example.com" for call in send_email.call_args_list)

    def test_run_without_settings_reads_no_profiles(self, fake_db):
        assert NotificationService.run(now=self.MORNING) == {"processed": 0, "sent": 0}
        assert fake_db.queries("profiles") == []
