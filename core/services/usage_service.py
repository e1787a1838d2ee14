# =============================================================================
# core/services/usage_service.py - AI Usage Quota
# =============================================================================
# Per-user, per-UTC-day counter of AI calls stored in ai_usage.
#
# Flow for every AI endpoint:
#   1. check_quota()  - read plan + today's count, raise 429 when exhausted
#   2. call the model
#   3. record_usage() - only after the call succeeded
#
# check and record are separate round trips, so two concurrent requests from
# the same user can both pass step 1. The increment itself is atomic
# (increment_ai_usage RPC), so the count never loses calls; at most a user
# overshoots the limit by the number of requests in flight.
# =============================================================================

import logging
from uuid import UUID

from app.config import settings
from app.exceptions import QuotaExceededError, UsageCheckError
from core.models.profile import Plan, UsageSummary
from lib.supabase_client import (
    SupabaseClient,
    SupabaseClientError,
    is_no_rows_error,
    response_data,
)
from lib.utils import normalize_uuid, utc_today

logger = logging.getLogger(__name__)


class UsageService:
    """
    Service for the daily AI quota.

    All methods are static; state lives in the ai_usage table.
    """

    @staticmethod
    def daily_limit_for(plan: Plan) -> int:
        """free -> FREE_DAILY_AI_LIMIT, pro/founder -> PRO_DAILY_AI_LIMIT."""
        if plan.is_paid:
            return settings.PRO_DAILY_AI_LIMIT
        return settings.FREE_DAILY_AI_LIMIT

    @staticmethod
    def get_plan(user_id: UUID | str) -> Plan:
        """
        The user's plan.

        A missing profile or a failed lookup counts as free, so a broken
        profiles table degrades to the smallest quota instead of blocking.
        """
        try:
            profile = SupabaseClient.fetch_profile(user_id, columns="plan")
        except SupabaseClientError as e:
            logger.warning(f"Could not read plan for {user_id}, assuming free: {e}")
            return Plan.FREE
        return Plan.parse((profile or {}).get("plan"))

    @staticmethod
    def get_usage_count(user_id: UUID | str, usage_date: str | None = None) -> int:
        """
        Today's call count (0 when there is no row yet).

        Raises:
            UsageCheckError: If the table can't be read
        """
        client = SupabaseClient.get_client()
        usage_date = usage_date or utc_today()

        try:
            response = (
                client.table("ai_usage")
                .select("id, count")
                .eq("user_id", normalize_uuid(user_id))
                .eq("usage_date", usage_date)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            if is_no_rows_error(e):
                return 0
            logger.error(f"Failed to read ai_usage for {user_id}: {e}")
            raise UsageCheckError(str(e))

        row = response_data(response) or {}
        return int(row.get("count") or 0)

    @staticmethod
    def get_usage(user_id: UUID | str) -> UsageSummary:
        """Plan, limit and today's count for a user."""
        plan = UsageService.get_plan(user_id)
        limit = UsageService.daily_limit_for(plan)
        used = UsageService.get_usage_count(user_id)
        return UsageSummary(
            plan=plan,
            daily_limit=limit,
            used_today=used,
            remaining=max(limit - used, 0),
        )

    @staticmethod
    def check_quota(user_id: UUID | str) -> UsageSummary:
        """
        Ensure the user may make one more AI call today.

        Returns:
            The usage summary before this call

        Raises:
            QuotaExceededError: 429 when used_today >= daily_limit
            UsageCheckError: 500 when the counter can't be read
        """
        usage = UsageService.get_usage(user_id)
        if usage.used_today >= usage.daily_limit:
            logger.info(f"AI quota exhausted for {user_id} ({usage.used_today}/{usage.daily_limit}, {usage.plan.value})")
            raise QuotaExceededError(plan=usage.plan.value, daily_limit=usage.daily_limit)
        return usage

    @staticmethod
    def record_usage(user_id: UUID | str, inc: int = 1) -> None:
        """
        Add `inc` calls to today's counter.

        Uses the increment_ai_usage RPC (insert-or-increment in one statement).
        If the RPC is unavailable, falls back to read-then-write. Failures are
        logged and swallowed: the AI answer was already produced.
        """
        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            client.rpc("increment_ai_usage", {"p_user_id": user_id_str, "p_inc": inc}).execute()
            logger.debug(f"Recorded {inc} AI call(s) for {user_id_str}")
            return
        except Exception as e:
            logger.warning(f"increment_ai_usage RPC failed for {user_id_str}, falling back: {e}")

        today = utc_today()
        try:
            current = UsageService.get_usage_count(user_id_str, today)
            client.table("ai_usage").upsert(
                {"user_id": user_id_str, "usage_date": today, "count": current + inc},
                on_conflict="user_id,usage_date",
            ).execute()
        except Exception as e:
            logger.error(f"Failed to record AI usage for {user_id_str}: {e}")
