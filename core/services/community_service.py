# =============================================================================
# core/services/community_service.py - Reviews, Feedback, Changelog, Travel, Goals
# =============================================================================
# Small write-once records:
# - app_reviews: star ratings shown publicly, one check per user
# - feedback: free-text messages read by admins
# - changelog_entries: release notes written by admins
# - travel_clicks: affiliate link analytics
# - weekly_goals: one goal per user per week (Monday start)
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseError, NotFoundError
from core.models.community import (
    ChangelogCreate,
    FeedbackCreate,
    ReviewCreate,
    TravelClickCreate,
)
from lib.supabase_client import SupabaseClient, response_data
from lib.utils import normalize_uuid, week_start

logger = logging.getLogger(__name__)

PUBLIC_REVIEW_LIMIT = 50


def _insert(table: str, data: dict[str, Any], what: str) -> dict[str, Any]:
    client = SupabaseClient.get_client()
    data = {k: v for k, v in data.items() if v is not None}
    try:
        response = client.table(table).insert(data).execute()
    except Exception as e:
        logger.error(f"Failed to save {what}: {e}")
        raise DatabaseError(f"Failed to save {what}", error=str(e))
    rows = response.data or []
    return rows[0] if rows else data


class ReviewService:
    """Service for app reviews."""

    @staticmethod
    def create_review(user_id: UUID | str, review: ReviewCreate) -> dict[str, Any]:
        row = _insert("app_reviews", {"user_id": normalize_uuid(user_id), **review.model_dump()}, "review")
        logger.info(f"Review {review.rating}/5 from {user_id}")
        return row

    @staticmethod
    def list_reviews(limit: int | None = PUBLIC_REVIEW_LIMIT) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        query = (
            client.table("app_reviews")
            .select("id, user_id, rating, comment, source, created_at")
            .order("created_at", desc=True)
        )
        if limit:
            query = query.limit(limit)
        try:
            return query.execute().data or []
        except Exception as e:
            raise DatabaseError("Failed to load reviews", error=str(e))

    @staticmethod
    def has_reviewed(user_id: UUID | str) -> bool:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("app_reviews")
                .select("id")
                .eq("user_id", normalize_uuid(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to check reviews", error=str(e))
        return bool(response.data)

    @staticmethod
    def delete_review(review_id: str) -> None:
        client = SupabaseClient.get_client()
        try:
            response = client.table("app_reviews").delete().eq("id", review_id).execute()
        except Exception as e:
            raise DatabaseError("Failed to delete review", error=str(e))
        if not response.data:
            raise NotFoundError("Review", review_id)
        logger.info(f"Deleted review {review_id}")

    @staticmethod
    def stats(reviews: list[dict[str, Any]]) -> dict[str, Any]:
        """Count, average and per-star breakdown."""
        total = len(reviews)
        by_rating = {str(star): 0 for star in range(1, 6)}
        for review in reviews:
            key = str(review.get("rating"))
            if key in by_rating:
                by_rating[key] += 1
        average = round(sum(int(r.get("rating") or 0) for r in reviews) / total, 2) if total else 0
        return {"total": total, "average": average, "by_rating": by_rating}


class FeedbackService:
    """Service for user feedback messages."""

    @staticmethod
    def submit(user_id: UUID | str | None, feedback: FeedbackCreate) -> dict[str, Any]:
        row = _insert(
            "feedback",
            {"user_id": normalize_uuid(user_id) if user_id else None, **feedback.model_dump()},
            "feedback",
        )
        logger.info(f"Feedback submitted by {user_id or 'anonymous'} ({feedback.source or 'app'})")
        return row

    @staticmethod
    def list_feedback(limit: int = 500) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            return (
                client.table("feedback").select("*").order("created_at", desc=True).limit(limit).execute()
            ).data or []
        except Exception as e:
            raise DatabaseError("Failed to load feedback", error=str(e))


class ChangelogService:
    """Service for release notes."""

    @staticmethod
    def add_entry(entry: ChangelogCreate) -> dict[str, Any]:
        return _insert("changelog_entries", entry.model_dump(), "changelog entry")

    @staticmethod
    def list_entries(limit: int = 100) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            return (
                client.table("changelog_entries")
                .select("id, title, description, version, created_at")
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            ).data or []
        except Exception as e:
            raise DatabaseError("Failed to load changelog", error=str(e))


class TravelService:
    """Service for travel affiliate analytics."""

    @staticmethod
    def log_click(user_id: UUID | str | None, click: TravelClickCreate) -> None:
        _insert(
            "travel_clicks",
            {"user_id": normalize_uuid(user_id) if user_id else None, **click.model_dump()},
            "travel click",
        )


class GoalService:
    """Service for weekly goals."""

    @staticmethod
    def save_goal(user_id: UUID | str, goal_text: str) -> dict[str, Any]:
        """Upsert this week's goal (week starts Monday, UTC)."""
        client = SupabaseClient.get_client()
        row = {
            "user_id": normalize_uuid(user_id),
            "week_start": week_start(),
            "goal_text": goal_text,
            "completed": False,
        }
        try:
            response = client.table("weekly_goals").upsert(row, on_conflict="user_id,week_start").execute()
        except Exception as e:
            logger.error(f"Failed to save weekly goal for {user_id}: {e}")
            raise DatabaseError("Failed to save weekly goal.", error=str(e))
        rows = response.data or []
        return rows[0] if rows else row

    @staticmethod
    def latest_goal(user_id: UUID | str) -> dict[str, Any] | None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("weekly_goals")
                .select("id, goal_text, week_start, completed")
                .eq("user_id", normalize_uuid(user_id))
                .order("week_start", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load weekly goal.", error=str(e))
        rows = response_data(response) or []
        return rows[0] if rows else None
