# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application: id/date helpers and the
# base error class for integration wrappers.
# =============================================================================

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID


_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        user_id = normalize_uuid(uuid_obj)  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def looks_like_uuid(value: str) -> bool:
    """True when the string has the canonical 8-4-4-4-12 UUID shape."""
    return bool(_UUID_RE.match(value.strip()))


# =============================================================================
# Date Utilities
# =============================================================================
# All day boundaries are UTC.

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> str:
    """Today's UTC date as YYYY-MM-DD (the key of ai_usage rows)."""
    return utc_now().date().isoformat()


def days_ago(days: int, today: date | None = None) -> str:
    """The UTC date `days` before today, as YYYY-MM-DD."""
    base = today or utc_now().date()
    return (base - timedelta(days=days)).isoformat()


def week_start(today: date | None = None) -> str:
    """
    Monday of the current week as YYYY-MM-DD.

    Example:
        week_start(date(2024, 1, 18))  # Thursday -> "2024-01-15"
    """
    base = today or utc_now().date()
    return (base - timedelta(days=base.weekday())).isoformat()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for integration wrappers (LLM, Stripe, push, email).

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result
