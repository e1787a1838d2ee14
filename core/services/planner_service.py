# =============================================================================
# core/services/planner_service.py - Daily Planning and Weekly Review
# =============================================================================
# Quota-gated (one AI call each, through AIService._with_quota):
#   - daily_plan: today's plan from the user's open tasks
#   - morning_plan: today's plan from the morning check-in
#   - evening_reflection: wins / improvements / adjustments
#   - suggest_score: a 0-100 rating of the day with a reason
#
# Not counted against the quota:
#   - weekly_action_plan: Pro-only, stored once per week_start
#   - save_score / recent_scores: the daily_scores table
#
# weekly_stats() gathers the last 7 days of activity for the action plan and
# the weekly report email.
# =============================================================================

import logging
from datetime import date
from typing import Any
from uuid import UUID

from app.exceptions import BadRequestError, DatabaseError, ForbiddenError
from core.models.planner import (
    DailyPlanResponse,
    DailyScoreCreate,
    EveningReflectionRequest,
    EveningReflectionResponse,
    MorningPlanRequest,
    MorningPlanResponse,
    ScoreSuggestionResponse,
    WeeklyActionPlan,
    WeeklyActionPlanResponse,
    WeeklyStats,
)
from core.services.ai_service import AIService
from core.services.usage_service import UsageService
from lib.supabase_client import SupabaseClient, SupabaseClientError, response_data
from lib.utils import days_ago, normalize_uuid, utc_today
from llm import prompts
from llm.client import LLMError, get_llm_client
from llm.language import language_name

logger = logging.getLogger(__name__)

PLANNER_TASK_LIMIT = 30
SCORE_NOTES_LIMIT = 10
SCORE_HISTORY_DAYS = 30
DEFAULT_SCORE = 70
DEFAULT_SCORE_REASON = "AI suggested this score based on your tasks and notes for today."
ACTION_PLAN_TASK_LIMIT = 40
ACTION_PLAN_SAMPLE_SIZE = 5
ACTION_PLAN_COLUMNS = "id, week_start, plan_text, created_at"
ACTION_PLAN_FALLBACK = "AI was not able to generate a plan right now. Please try again later."


def clamp_score(value: Any) -> int:
    """Numbers are clamped to 0-100; anything else gives the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_SCORE
    return int(round(max(0, min(100, value))))


class PlannerService:
    """Service for daily plans, day scores and the weekly action plan."""

    @staticmethod
    def _profile(user_id: UUID | str) -> dict[str, Any]:
        """Tone, focus and UI language; a failed lookup personalizes nothing."""
        try:
            return SupabaseClient.fetch_profile(user_id, columns="ai_tone, focus_area, ui_language") or {}
        except SupabaseClientError as e:
            logger.warning(f"Planner: profile lookup failed for {user_id}: {e}")
            return {}

    @staticmethod
    def _select(table: str, build, user_id: str) -> list[dict[str, Any]]:
        """
        Run a read for context; failures are logged and give no rows.

        `build` receives the table builder already filtered by user_id.
        """
        client = SupabaseClient.get_client()
        try:
            return build(client.table(table).select("*").eq("user_id", user_id)).execute().data or []
        except Exception as e:
            logger.warning(f"Planner: could not read {table} for {user_id}: {e}")
            return []

    # -------------------------------------------------------------------------
    # Daily plans
    # -------------------------------------------------------------------------

    @staticmethod
    def daily_plan(user_id: UUID | str) -> DailyPlanResponse:
        uid = normalize_uuid(user_id)
        today = utc_today()
        profile = PlannerService._profile(uid)

        def call() -> str:
            tasks = PlannerService._select(
                "tasks",
                lambda q: q.order("due_date").limit(PLANNER_TASK_LIMIT),
                uid,
            )
            messages = prompts.build_daily_plan_messages(
                [t for t in tasks if not t.get("completed")],
                today,
                language=language_name(profile.get("ui_language") or "en"),
                ai_tone=profile.get("ai_tone"),
                focus_area=profile.get("focus_area"),
            )
            text = get_llm_client().complete_text(messages, temperature=0.6, max_tokens=420)
            if not text:
                raise LLMError("Empty AI response")
            return text

        text, quota = AIService._with_quota(uid, call)
        return DailyPlanResponse(text=text, usage_date=today, **quota.model_dump())

    @staticmethod
    def morning_plan(user_id: UUID | str, request: MorningPlanRequest) -> MorningPlanResponse:
        day_description = request.day_description.strip()
        if not day_description and not request.priorities:
            raise BadRequestError("Missing input.", suggestion="Describe your day or list a priority")

        uid = normalize_uuid(user_id)
        today = utc_today()
        profile = PlannerService._profile(uid)
        messages = prompts.build_morning_plan_messages(
            today,
            day_description,
            request.priorities,
            language=language_name(profile.get("ui_language") or "en"),
            ai_tone=profile.get("ai_tone"),
            focus_area=profile.get("focus_area"),
        )

        def call() -> str:
            text = get_llm_client().complete_text(messages, temperature=0.6, max_tokens=450)
            if not text:
                raise LLMError("Empty AI response")
            return text

        plan, quota = AIService._with_quota(uid, call)
        return MorningPlanResponse(plan=plan, usage_date=today, **quota.model_dump())

    @staticmethod
    def evening_reflection(user_id: UUID | str, request: EveningReflectionRequest) -> EveningReflectionResponse:
        reflection = request.reflection.strip()
        if not reflection:
            raise BadRequestError("Missing reflection.")

        prompt = prompts.build_evening_reflection_prompt(reflection, language_name(request.language or "en"))
        text, quota = AIService._with_quota(
            user_id,
            lambda: get_llm_client().complete_text(
                [{"role": "user", "content": prompt}],
                temperature=0.5,
                max_tokens=500,
            ),
        )
        return EveningReflectionResponse(
            reflection=text or "No reflection generated.",
            **quota.model_dump(),
        )

    # -------------------------------------------------------------------------
    # Day scores
    # -------------------------------------------------------------------------

    @staticmethod
    def suggest_score(user_id: UUID | str) -> ScoreSuggestionResponse:
        """
        Suggest a 0-100 score for today.

        A reply without a usable score falls back to 70 and a generic reason.
        """
        uid = normalize_uuid(user_id)
        today = utc_today()

        def call() -> dict[str, Any]:
            tasks = PlannerService._select("tasks", lambda q: q.gte("created_at", today), uid)
            notes = PlannerService._select(
                "notes",
                lambda q: q.order("created_at", desc=True).limit(SCORE_NOTES_LIMIT),
                uid,
            )
            return get_llm_client().complete_json(
                [
                    {"role": "system", "content": "You are a helpful productivity coach."},
                    {"role": "user", "content": prompts.build_score_prompt(tasks, notes)},
                ],
                temperature=0.4,
            )

        data, quota = AIService._with_quota(uid, call)
        reason = data.get("reason")
        return ScoreSuggestionResponse(
            score=clamp_score(data.get("score")),
            reason=reason.strip() if isinstance(reason, str) and reason.strip() else DEFAULT_SCORE_REASON,
            **quota.model_dump(),
        )

    @staticmethod
    def save_score(user_id: UUID | str, score: DailyScoreCreate) -> dict[str, Any]:
        """Upsert the score for a day (today by default)."""
        row = {
            "user_id": normalize_uuid(user_id),
            "score_date": (score.score_date.isoformat() if score.score_date else utc_today()),
            "score": score.score,
            "note": (score.note or "").strip() or None,
        }
        client = SupabaseClient.get_client()
        try:
            response = client.table("daily_scores").upsert(row, on_conflict="user_id,score_date").execute()
        except Exception as e:
            logger.error(f"Failed to save daily score for {user_id}: {e}")
            raise DatabaseError("Failed to save your daily score.", error=str(e))
        rows = response.data or []
        return rows[0] if rows else row

    @staticmethod
    def recent_scores(user_id: UUID | str, days: int = SCORE_HISTORY_DAYS) -> list[dict[str, Any]]:
        """Scores of the last `days` days, oldest first."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("daily_scores")
                .select("score_date, score, note")
                .eq("user_id", normalize_uuid(user_id))
                .gte("score_date", days_ago(days))
                .order("score_date")
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load daily scores.", error=str(e))
        return response.data or []

    # -------------------------------------------------------------------------
    # Weekly review
    # -------------------------------------------------------------------------

    @staticmethod
    def weekly_stats(user_id: UUID | str, today: date | None = None) -> WeeklyStats:
        """
        The last 7 days (today included) of notes, tasks, AI calls, scores
        and the latest weekly goal.
        """
        uid = normalize_uuid(user_id)
        start_date = days_ago(6, today)
        end_date = (today.isoformat() if today else utc_today())
        since = f"{start_date}T00:00:00Z"

        notes = PlannerService._select(
            "notes",
            lambda q: q.gte("created_at", since).order("created_at", desc=True).limit(ACTION_PLAN_TASK_LIMIT),
            uid,
        )
        completed = PlannerService._select(
            "tasks",
            lambda q: q.eq("completed", True).gte("created_at", since).order("created_at", desc=True),
            uid,
        )
        open_tasks = PlannerService._select(
            "tasks",
            lambda q: q.eq("completed", False).order("created_at").limit(ACTION_PLAN_TASK_LIMIT),
            uid,
        )
        usage = PlannerService._select(
            "ai_usage",
            lambda q: q.gte("usage_date", start_date).lte("usage_date", end_date).order("usage_date"),
            uid,
        )
        scores = PlannerService._select(
            "daily_scores",
            lambda q: q.gte("score_date", start_date).lte("score_date", end_date).order("score_date"),
            uid,
        )
        goals = PlannerService._select(
            "weekly_goals",
            lambda q: q.order("week_start", desc=True).limit(1),
            uid,
        )

        return WeeklyStats(
            start_date=start_date,
            end_date=end_date,
            notes=notes,
            completed_tasks=completed,
            open_tasks=open_tasks,
            ai_calls=sum(int(row.get("count") or 0) for row in usage),
            scores=[int(row.get("score") or 0) for row in scores],
            goal=goals[0] if goals else None,
        )

    @staticmethod
    def _action_plan_text(stats: WeeklyStats) -> str:
        """The model's plan, or a fixed apology when it fails."""
        goal = None
        if stats.goal:
            goal = {
                "text": stats.goal.get("goal_text"),
                "completed": stats.goal.get("completed"),
                "week_start": stats.goal.get("week_start"),
            }
        payload = prompts.build_weekly_action_plan_payload(
            stats.start_date,
            stats.end_date,
            goal,
            {
                "completedTasksCount": len(stats.completed_tasks),
                "openTasksCount": len(stats.open_tasks),
                "notesCount": len(stats.notes),
                "aiCalls": stats.ai_calls,
                "timeSavedMinutes": stats.time_saved_minutes,
                "avgScore": stats.avg_score,
            },
            {
                "completedTasks": [
                    {"title": t.get("title"), "description": t.get("description")}
                    for t in stats.completed_tasks[:ACTION_PLAN_SAMPLE_SIZE]
                ],
                "openTasks": [
                    {"title": t.get("title"), "description": t.get("description")}
                    for t in stats.open_tasks[:ACTION_PLAN_SAMPLE_SIZE]
                ],
                "notes": [
                    {"title": n.get("title"), "content": (n.get("content") or "")[:160]}
                    for n in stats.notes[:ACTION_PLAN_SAMPLE_SIZE]
                ],
            },
        )
        try:
            text = get_llm_client().complete_text(
                [
                    {"role": "system", "content": prompts.WEEKLY_ACTION_PLAN_SYSTEM_PROMPT},
                    {"role": "user", "content": payload},
                ],
                max_tokens=600,
            )
        except LLMError as e:
            logger.error(f"Weekly action plan generation failed: {e}")
            return ACTION_PLAN_FALLBACK
        return text or "Your weekly action plan could not be generated. Please try again later."

    @staticmethod
    def weekly_action_plan(user_id: UUID | str, week_start: date | None = None) -> WeeklyActionPlanResponse:
        """
        Generate and store the action plan for a week.

        One row per (user_id, week_start); generating again replaces the text.

        Raises:
            ForbiddenError: Free plan
        """
        uid = normalize_uuid(user_id)
        if not UsageService.get_plan(uid).is_paid:
            raise ForbiddenError("Weekly action plans are a Pro feature. Upgrade to Pro to use this.")

        stats = PlannerService.weekly_stats(uid)
        week = week_start.isoformat() if week_start else stats.start_date
        plan_text = PlannerService._action_plan_text(stats)

        saved: dict[str, Any] = {"week_start": week, "plan_text": plan_text}
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("weekly_action_plans")
                .upsert(
                    {"user_id": uid, "week_start": week, "plan_text": plan_text},
                    on_conflict="user_id,week_start",
                )
                .execute()
            )
            rows = response.data or []
            if rows:
                saved = rows[0]
        except Exception as e:
            logger.error(f"Could not store weekly action plan for {uid}: {e}")

        logger.info(f"Weekly action plan for {uid}, week {week}")
        return WeeklyActionPlanResponse(
            week_start=week,
            start_date=stats.start_date,
            end_date=stats.end_date,
            plan=WeeklyActionPlan(
                id=saved.get("id"),
                week_start=saved.get("week_start") or week,
                plan_text=saved.get("plan_text") or plan_text,
                created_at=saved.get("created_at"),
            ),
        )

    @staticmethod
    def latest_action_plan(user_id: UUID | str) -> dict[str, Any] | None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("weekly_action_plans")
                .select(ACTION_PLAN_COLUMNS)
                .eq("user_id", normalize_uuid(user_id))
                .order("week_start", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load weekly action plan.", error=str(e))
        rows = response_data(response) or []
        return rows[0] if rows else None
