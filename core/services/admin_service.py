# =============================================================================
# core/services/admin_service.py - Admin Dashboards
# =============================================================================
# Global metrics, user search and per-user stats for the admin pages.
# Runs with the service-role client, so callers must be admin-checked.
# =============================================================================

import logging
from typing import Any

from app.exceptions import DatabaseError, NotFoundError
from core.models.profile import AdminUserUpdate
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import days_ago, looks_like_uuid, utc_today

logger = logging.getLogger(__name__)

USER_LIST_LIMIT = 200
WEEK_WINDOW_DAYS = 6  # today plus the six days before
DETAIL_WINDOW_DAYS = 29


def _sum_counts(rows: list[dict[str, Any]]) -> int:
    return sum(int(row.get("count") or 0) for row in rows)


class AdminService:
    """Service for admin-only reads and writes."""

    @staticmethod
    def metrics() -> dict[str, int]:
        """
        Dashboard numbers.

        dau/wau count distinct users with AI usage today / in the last 7 days.
        """
        client = SupabaseClient.get_client()
        today = utc_today()
        since = days_ago(WEEK_WINDOW_DAYS)

        try:
            today_rows = SupabaseClient.fetch_all(
                lambda: client.table("ai_usage").select("count, user_id")
                .eq("usage_date", today).order("user_id"),
                "today's AI usage",
            )
            week_rows = SupabaseClient.fetch_all(
                lambda: client.table("ai_usage").select("count, user_id")
                .gte("usage_date", since).lte("usage_date", today)
                .order("usage_date").order("user_id"),
                "weekly AI usage",
            )

            return {
                "total_users": SupabaseClient.count_rows("profiles"),
                "pro_users": SupabaseClient.count_rows("profiles", eq={"plan": "pro"}),
                "founder_users": SupabaseClient.count_rows("profiles", eq={"plan": "founder"}),
                "total_notes": SupabaseClient.count_rows("notes"),
                "total_tasks": SupabaseClient.count_rows("tasks"),
                "ai_calls_today": _sum_counts(today_rows),
                "ai_calls_7_days": _sum_counts(week_rows),
                "dau": len({row.get("user_id") for row in today_rows}),
                "wau": len({row.get("user_id") for row in week_rows}),
                "notes_7d": SupabaseClient.count_rows("notes", gte={"created_at": since}),
                "tasks_7d": SupabaseClient.count_rows("tasks", gte={"created_at": since}),
            }
        except Exception as e:
            logger.exception(f"Failed to compute admin metrics: {e}")
            raise DatabaseError("Failed to compute metrics", error=str(e))

    @staticmethod
    def list_users(q: str | None = None, plan: str | None = None) -> dict[str, Any]:
        """
        Search profiles.

        `q` matches an exact id when it looks like a UUID, otherwise an email
        substring (case-insensitive).
        """
        client = SupabaseClient.get_client()
        query = (
            client.table("profiles")
            .select("id, email, plan, is_admin, created_at", count="exact")
        )
        term = (q or "").strip()
        if term:
            if looks_like_uuid(term):
                query = query.eq("id", term)
            else:
                query = query.ilike("email", f"%{term}%")
        if plan and plan != "all":
            query = query.eq("plan", plan)

        try:
            response = query.order("created_at", desc=True).limit(USER_LIST_LIMIT).execute()
        except Exception as e:
            raise DatabaseError("Failed to load users", error=str(e))

        users = response.data or []
        total = response.count if response.count is not None else len(users)
        return {"users": users, "total": total}

    @staticmethod
    def user_detail(user_id: str) -> dict[str, Any]:
        profile = SupabaseClient.fetch_profile(user_id)
        if not profile:
            raise NotFoundError("User", user_id)

        client = SupabaseClient.get_client()
        try:
            usage_rows = (
                client.table("ai_usage").select("usage_date, count").eq("user_id", user_id)
                .gte("usage_date", days_ago(DETAIL_WINDOW_DAYS)).execute()
            ).data or []
            stats = {
                "notes": SupabaseClient.count_rows("notes", eq={"user_id": user_id}),
                "tasks": SupabaseClient.count_rows("tasks", eq={"user_id": user_id}),
                "trips": SupabaseClient.count_rows("travel_plans", eq={"user_id": user_id}),
                "ai_calls_30d": _sum_counts(usage_rows),
                "last_ai_date": max((row["usage_date"] for row in usage_rows), default=None),
            }
        except Exception as e:
            raise DatabaseError("Failed to load user stats", error=str(e))

        return {"profile": profile, "stats": stats}

    @staticmethod
    def update_user(user_id: str, update: AdminUserUpdate) -> dict[str, Any]:
        updates = update.model_dump(mode="json", exclude_none=True)
        if not updates:
            return AdminService.user_detail(user_id)["profile"]
        try:
            rows = SupabaseClient.update_profile(user_id, updates)
        except SupabaseClientError as e:
            raise DatabaseError("Failed to update user", error=str(e))
        if not rows:
            raise NotFoundError("User", user_id)
        logger.info(f"Admin updated user {user_id}: {updates}")
        return rows[0]
