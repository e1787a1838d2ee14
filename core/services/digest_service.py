# =============================================================================
# core/services/digest_service.py - Daily Digest and Weekly Report Emails
# =============================================================================
# Two sweeps over opted-in profiles, run from the Celery beat schedule and
# from GET /cron/daily and GET /cron/weekly:
#
#   daily digest   profiles.daily_digest_enabled; open tasks due today and
#                  overdue tasks, at most 10 of each
#   weekly report  profiles.weekly_report_enabled on a paid plan; last 7 days
#                  of activity, an AI reflection, stored in weekly_reports
#
# Like the reminder sweep, one user's failure is logged and the sweep moves
# on; only failing to load the profile list fails the whole run.
# =============================================================================

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseError
from core.models.planner import WeeklyStats
from core.services.planner_service import PlannerService
from lib.email_client import APP_NAME, daily_digest_email, send_email, weekly_report_email
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now
from llm import prompts
from llm.client import LLMError, get_llm_client
from llm.language import language_name

logger = logging.getLogger(__name__)

DIGEST_SECTION_LIMIT = 10
TOP_NOTES = 3
NOTE_LABEL_LENGTH = 80
REPORT_LIST_LIMIT = 12
REFLECTION_FALLBACK = "Here's your weekly reflection and focus suggestions."


def _load_profiles(build_query, what: str) -> list[dict[str, Any]]:
    try:
        return SupabaseClient.fetch_all(build_query, what)
    except SupabaseClientError as e:
        logger.error(f"Could not load {what}: {e}")
        raise DatabaseError(f"Failed to load {what}", error=str(e))


class DigestService:
    """Service for the daily digest email."""

    @staticmethod
    def day_bounds(now: datetime | None = None) -> tuple[str, str]:
        """Start of today and of tomorrow (UTC) as ISO timestamps."""
        now = now or utc_now()
        start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
        return start.isoformat(), (start + timedelta(days=1)).isoformat()

    @staticmethod
    def _open_tasks(user_id: str, build) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            query = (
                client.table("tasks")
                .select("id, title, due_date")
                .eq("user_id", user_id)
                .eq("completed", False)
            )
            return build(query).order("due_date").limit(DIGEST_SECTION_LIMIT).execute().data or []
        except Exception as e:
            logger.error(f"Digest: could not read tasks for {user_id}: {e}")
            return []

    @staticmethod
    def build_body(
        profile: dict[str, Any],
        due_today: list[dict[str, Any]],
        overdue: list[dict[str, Any]],
        today: str,
    ) -> str:
        """Plain-text digest body."""
        lines = [
            "Hi there,",
            "",
            f"Here's your daily {APP_NAME} digest for {today}:",
            "",
            f"- Tone: {profile.get('ai_tone') or 'friendly'}",
            f"- Focus area: {profile.get('focus_area') or 'your most important work'}",
            "",
        ]
        if due_today:
            lines.append("Today's tasks (not completed):")
            for task in due_today:
                due = (task.get("due_date") or "")[:10] or today
                lines.append(f"- {task.get('title') or '(untitled task)'} (due {due})")
            lines.append("")
        if overdue:
            lines.append("Overdue tasks (still open):")
            for task in overdue:
                due = (task.get("due_date") or "")[:10] or "unknown date"
                lines.append(f"- {task.get('title') or '(untitled task)'} (was due {due})")
            lines.append("")
        if not due_today and not overdue:
            lines += [
                "No tasks due today or overdue. Great moment to plan your next priorities on the Tasks page.",
                "",
            ]
        lines += [
            "Tomorrow, you might try:",
            "- Planning your top 3 priorities before you start.",
            "- One deep-work block (60-90 minutes) with no notifications.",
            "- Writing one quick note about what you finished.",
        ]
        return "\n".join(lines)

    @staticmethod
    def send_daily_digests(now: datetime | None = None) -> dict[str, int]:
        """
        Email every opted-in user their digest.

        Returns:
            {"processed": <profiles loaded>, "attempted": <with an email>, "sent": <accepted>}
        """
        client = SupabaseClient.get_client()
        profiles = _load_profiles(
            lambda: (
                client.table("profiles")
                .select("id, email, ai_tone, focus_area")
                .eq("daily_digest_enabled", True)
                .order("id")
            ),
            "digest subscribers",
        )

        now = now or utc_now()
        today = now.date().isoformat()
        start_of_today, start_of_tomorrow = DigestService.day_bounds(now)
        attempted = 0
        sent = 0

        for profile in profiles:
            email = profile.get("email")
            if not email:
                continue
            attempted += 1
            try:
                uid = profile["id"]
                due_today = DigestService._open_tasks(
                    uid, lambda q: q.gte("due_date", start_of_today).lt("due_date", start_of_tomorrow)
                )
                overdue = DigestService._open_tasks(uid, lambda q: q.lt("due_date", start_of_today))
                subject, text, html_body = daily_digest_email(
                    DigestService.build_body(profile, due_today, overdue, today)
                )
                if send_email(email, subject, text, html_body, unsubscribe=True):
                    sent += 1
            except Exception as e:
                logger.error(f"Daily digest for {profile.get('id')} failed: {e}")

        logger.info(f"Daily digest: {len(profiles)} profiles, {attempted} attempted, {sent} sent")
        return {"processed": len(profiles), "attempted": attempted, "sent": sent}


class WeeklyReportService:
    """Service for the weekly report email and its stored history."""

    @staticmethod
    def note_label(note: dict[str, Any]) -> str:
        """Title, else the first 80 characters of the content."""
        if note.get("title"):
            return note["title"]
        content = note.get("content") or ""
        if not content:
            return "(untitled note)"
        return content[:NOTE_LABEL_LENGTH] + ("..." if len(content) > NOTE_LABEL_LENGTH else "")

    @staticmethod
    def wins_block(stats: WeeklyStats) -> str:
        avg = f"{stats.avg_score}/100" if stats.avg_score is not None else "-/100"
        if stats.scores:
            trend = "Score trend this week: " + " -> ".join(str(s) for s in stats.scores)
        else:
            trend = "No scores recorded this week."
        return "\n".join([
            "Your AI Wins This Week:",
            f"- Tasks completed: {len(stats.completed_tasks)}",
            f"- Notes created: {len(stats.notes)}",
            f"- AI calls used: {stats.ai_calls}",
            f"- Estimated time saved: {stats.time_saved_minutes} minutes",
            f"- Avg productivity score: {avg}",
            trend,
        ])

    @staticmethod
    def goal_line(stats: WeeklyStats) -> str:
        goal = stats.goal or {}
        if not goal.get("goal_text"):
            return "No explicit weekly goal was set."
        done = " (marked as completed)" if goal.get("completed") else ""
        return f'Weekly goal: "{goal["goal_text"]}"{done}'

    @staticmethod
    def reflection(stats: WeeklyStats, language: str = "English") -> str:
        """The model's reflection and focus list; a fixed line on failure."""
        messages = prompts.build_weekly_reflection_messages(
            WeeklyReportService.wins_block(stats),
            WeeklyReportService.goal_line(stats),
            [WeeklyReportService.note_label(n) for n in stats.notes[:TOP_NOTES]],
            language=language,
        )
        try:
            text = get_llm_client().complete_text(messages, max_tokens=400)
        except LLMError as e:
            logger.error(f"Weekly reflection failed: {e}")
            return REFLECTION_FALLBACK
        return text or REFLECTION_FALLBACK

    @staticmethod
    def build_body(stats: WeeklyStats, reflection: str) -> str:
        top_notes = stats.notes[:TOP_NOTES]
        if top_notes:
            notes_block = "Top notes of the week:\n" + "\n".join(
                f"- {WeeklyReportService.note_label(n)}" for n in top_notes
            )
        else:
            notes_block = (
                "Top notes of the week:\n- No notes captured this week. "
                "Try jotting down quick thoughts, ideas, or decisions next week."
            )
        return "\n\n".join([
            "Hi there,",
            f"Here's your weekly {APP_NAME} report for the last 7 days:",
            reflection,
            WeeklyReportService.goal_line(stats),
            WeeklyReportService.wins_block(stats),
            notes_block,
            "You can see your live stats and history in the Weekly Reports section.",
            "Keep going. Small consistent wins add up.",
        ])

    @staticmethod
    def send_one(profile: dict[str, Any], today: str) -> bool:
        """Build, store and email one user's report."""
        uid = profile["id"]
        stats = PlannerService.weekly_stats(uid)
        language = language_name(profile.get("language") or "en")
        body = WeeklyReportService.build_body(stats, WeeklyReportService.reflection(stats, language))

        client = SupabaseClient.get_client()
        try:
            client.table("weekly_reports").insert({
                "user_id": uid,
                "report_date": today,
                "summary": body,
            }).execute()
        except Exception as e:
            logger.error(f"Could not store weekly report for {uid}: {e}")

        subject, text, html_body = weekly_report_email(body)
        return send_email(profile["email"], subject, text, html_body, unsubscribe=True)

    @staticmethod
    def send_weekly_reports() -> dict[str, int]:
        """
        Email every opted-in paid user their weekly report.

        Returns:
            {"processed": <profiles loaded>, "sent": <accepted>}
        """
        client = SupabaseClient.get_client()
        profiles = _load_profiles(
            lambda: (
                client.table("profiles")
                .select("id, email, plan, language")
                .eq("weekly_report_enabled", True)
                .in_("plan", ["pro", "founder"])
                .order("id")
            ),
            "weekly report subscribers",
        )

        today = utc_now().date().isoformat()
        sent = 0
        for profile in profiles:
            if not profile.get("email"):
                continue
            try:
                if WeeklyReportService.send_one(profile, today):
                    sent += 1
            except Exception as e:
                logger.error(f"Weekly report for {profile.get('id')} failed: {e}")

        logger.info(f"Weekly reports: {len(profiles)} processed, {sent} sent")
        return {"processed": len(profiles), "sent": sent}

    @staticmethod
    def list_reports(user_id: UUID | str, limit: int = REPORT_LIST_LIMIT) -> list[dict[str, Any]]:
        """The user's stored reports, newest first."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("weekly_reports")
                .select("id, report_date, summary, created_at")
                .eq("user_id", normalize_uuid(user_id))
                .order("report_date", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load weekly reports.", error=str(e))
        return response.data or []
