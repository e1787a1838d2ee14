# =============================================================================
# tests/test_utils.py - Shared Utility Tests
# =============================================================================
# Run with: pytest tests/test_utils.py -v
# =============================================================================

from datetime import date
from uuid import UUID

import pytest

from lib.utils import ApplicationError, days_ago, looks_like_uuid, normalize_uuid, week_start


class TestUUIDHelpers:

    def test_normalize_uuid(self):
        value = UUID("550e8400-e29b-41d4-a716-446655440000")
        assert normalize_uuid(value) == "550e8400-e29b-41d4-a716-446655440000"
        assert normalize_uuid("already-a-string") == "already-a-string"

    @pytest.mark.parametrize("value,expected", [
        ("550e8400-e29b-41d4-a716-446655440000", True),
        (" 550E8400-E29B-41D4-A716-446655440000 ", True),
        ("bob@example.com", False),
        ("550e8400", False),
    ])
    def test_looks_like_uuid(self, value, expected):
        assert looks_like_uuid(value) is expected


class TestDates:

    def test_days_ago_crosses_month(self):
        assert days_ago(6, today=date(2024, 3, 3)) == "2024-02-26"

    @pytest.mark.parametrize("day,expected", [
        (date(2024, 1, 15), "2024-01-15"),  # Monday
        (date(2024, 1, 18), "2024-01-15"),
        (date(2024, 1, 21), "2024-01-15"),  # Sunday
    ])
    def test_week_starts_monday(self, day, expected):
        assert week_start(day) == expected


class TestApplicationError:

    def test_str_includes_code_and_suggestion(self):
        error = ApplicationError("Push failed", code="PUSH_FAILED", suggestion="Resubscribe.")
        assert str(error) == "[PUSH_FAILED] Push failed Suggestion: Resubscribe."

    def test_details_default_to_empty(self):
        assert ApplicationError("x").details == {}
