# =============================================================================
# tests/test_community_service.py - Flags, Reviews, Goals and Admin Tests
# =============================================================================
# Run with: pytest tests/test_community_service.py -v
# =============================================================================

import pytest

from app.exceptions import DatabaseError, NotFoundError
from core.models import AdminUserUpdate, FeedbackCreate, ReviewCreate
from core.services.admin_service import AdminService
from core.services.community_service import FeedbackService, GoalService, ReviewService
from core.services.flag_service import FlagService, flag_key
from lib.supabase_client import PAGE_SIZE
from lib.utils import week_start
from tests.conftest import FakeResponse


class TestFlags:

    def test_flag_key_prefix_added_once(self):
        assert flag_key("travel") == "feature.travel"
        assert flag_key("feature.travel") == "feature.travel"

    def test_no_row_is_enabled(self, fake_db):
        fake_db.on("ui_translations", Exception("PGRST116: no rows"))
        assert FlagService.is_enabled("travel") is True

    @pytest.mark.parametrize("text,expected", [("false", False), (" FALSE ", False), ("true", True), ("", True)])
    def test_only_false_disables(self, fake_db, text, expected):
        fake_db.on("ui_translations", {"text": text})
        assert FlagService.is_enabled("travel") is expected

    def test_read_failure_is_database_error(self, fake_db):
        fake_db.on("ui_translations", Exception("timeout"))
        with pytest.raises(DatabaseError):
            FlagService.is_enabled("travel")

    def test_set_flag_writes_system_row(self, fake_db):
        flag = FlagService.set_flag("travel", False)

        assert flag.enabled is False
        rows = fake_db.writes("ui_translations", "upsert")[0]
        assert len(rows) == 1
        assert {k: rows[0][k] for k in ("key", "language_code", "text")} == {
            "key": "feature.travel", "language_code": "system", "text": "false",
        }


class TestReviews:

    def test_stats(self):
        stats = ReviewService.stats([{"rating": 5}, {"rating": 4}, {"rating": 4}])
        assert stats["total"] == 3
        assert stats["average"] == 4.33
        assert stats["by_rating"] == {"1": 0, "2": 0, "3": 0, "4": 2, "5": 1}

    def test_stats_empty(self):
        assert ReviewService.stats([])["average"] == 0

    def test_create_review_tags_user(self, fake_db, user_id):
        ReviewService.create_review(user_id, ReviewCreate(rating=5, comment="Great"))
        row = fake_db.writes("app_reviews", "insert")[0]
        assert row == {"user_id": str(user_id), "rating": 5, "comment": "Great"}

    def test_delete_missing_review_is_404(self, fake_db):
        fake_db.on("app_reviews", [])
        with pytest.raises(NotFoundError):
            ReviewService.delete_review("r-1")

    def test_has_reviewed(self, fake_db, user_id):
        fake_db.on("app_reviews", [{"id": "r-1"}])
        assert ReviewService.has_reviewed(user_id) is True

    def test_feedback_insert_failure(self, fake_db):
        fake_db.on("feedback", Exception("insert failed"))
        with pytest.raises(DatabaseError):
            FeedbackService.submit(None, FeedbackCreate(message="hi"))


class TestGoals:

    def test_save_goal_upserts_current_week(self, fake_db, user_id):
        GoalService.save_goal(user_id, "Ship the beta")

        query = fake_db.queries("weekly_goals")[0]
        row = query.args_of("upsert")[0]
        assert row["week_start"] == week_start()
        assert row["goal_text"] == "Ship the beta"
        assert query.kwargs_of("upsert") == {"on_conflict": "user_id,week_start"}

    def test_latest_goal_none(self, fake_db, user_id):
        fake_db.on("weekly_goals", [])
        assert GoalService.latest_goal(user_id) is None


class TestAdminService:

    def test_metrics_page_past_the_row_cap(self, fake_db):
        week = [{"count": 2, "user_id": f"u{i}"} for i in range(PAGE_SIZE + 10)]

        def usage(query):
            if query.called("gte"):
                start, end = query.args_of("range")
                return week[start:end + 1]
            return [{"count": 3, "user_id": "u1"}, {"count": 1, "user_id": "u2"}]

        fake_db.on("ai_usage", usage)

        metrics = AdminService.metrics()

        assert metrics["ai_calls_7_days"] == 2 * (PAGE_SIZE + 10)
        assert metrics["wau"] == PAGE_SIZE + 10
        assert metrics["ai_calls_today"] == 4
        assert metrics["dau"] == 2

    def test_search_by_uuid_matches_id(self, fake_db):
        fake_db.on("profiles", FakeResponse(data=[{"id": "x"}], count=1))

        result = AdminService.list_users("550e8400-e29b-41d4-a716-446655440000", "pro")

        query = fake_db.queries("profiles")[0]
        assert query.filters() == {"id": "550e8400-e29b-41d4-a716-446655440000", "plan": "pro"}
        assert not query.called("ilike")
        assert result == {"users": [{"id": "x"}], "total": 1}

    def test_search_by_text_matches_email(self, fake_db):
        AdminService.list_users("bob", "all")

        query = fake_db.queries("profiles")[0]
        assert query.args_of("ilike") == ("email", "%bob%")
        assert query.filters() == {}

    def test_update_unknown_user_is_404(self, fake_db):
        fake_db.on("profiles", [])
        with pytest.raises(NotFoundError):
            AdminService.update_user("u-1", AdminUserUpdate(plan="pro"))

    def test_update_writes_plan_value(self, fake_db):
        fake_db.on("profiles", [{"id": "u-1", "plan": "founder"}])

        profile = AdminService.update_user("u-1", AdminUserUpdate(plan="founder"))

        assert profile["plan"] == "founder"
        assert fake_db.writes("profiles", "update")[0] == {"plan": "founder"}
