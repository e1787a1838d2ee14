# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides helpers for the lookups shared by many services:
# - User profiles (plan, preferences, Stripe customer)
# - User email via the Auth admin API
# - Row counts for dashboards
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

logger = logging.getLogger(__name__)

# PostgREST error code for ".single()" queries that matched zero rows
NO_ROWS_CODE = "PGRST116"

# PostgREST returns at most this many rows per request
PAGE_SIZE = 1000


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages: what failed and how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
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


def is_no_rows_error(error: Exception) -> bool:
    """True when a PostgREST error only means "no matching row"."""
    return NO_ROWS_CODE in str(error)


def response_data(response: Any) -> Any:
    """
    Data from an executed query, tolerating maybe_single() returning None.

    Newer postgrest clients return None instead of a response object when
    maybe_single() finds nothing.
    """
    if response is None:
        return None
    return response.data


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        client = SupabaseClient.get_client()
        rows = client.table("notes").select("*").eq("user_id", uid).execute().data
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Every query must therefore filter by user_id itself.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(
        cls,
        user_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a user's profile row.

        Args:
            user_id: The user UUID (same as auth.users.id)
            columns: PostgREST column list

        Returns:
            Profile dict, or None if the user has no profile yet

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .select(columns)
                .eq("id", user_id_str)
                .maybe_single()
                .execute()
            )
            return response_data(response)

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                suggestion="Check that the profiles table exists and is accessible",
                details={"user_id": user_id_str}
            )

    @classmethod
    def update_profile(
        cls,
        user_id: str | UUID,
        updates: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update a profile by id.

        Returns:
            Updated rows (empty if the profile doesn't exist)
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .update(updates)
                .eq("id", user_id_str)
                .execute()
            )
            logger.debug(f"Updated profile {user_id_str}: {list(updates)}")
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update profile: {e}",
                code="UPDATE_PROFILE_FAILED",
                details={"user_id": user_id_str, "fields": list(updates)}
            )

    @classmethod
    def update_profiles_where(
        cls,
        column: str,
        value: str,
        updates: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update every profile whose `column` equals `value`."""
        client = cls.get_client()

        try:
            response = (
                client.table("profiles")
                .update(updates)
                .eq(column, value)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update profiles by {column}: {e}",
                code="UPDATE_PROFILE_FAILED",
                details={column: value, "fields": list(updates)}
            )

    # -------------------------------------------------------------------------
    # Auth Admin
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user_email(cls, user_id: str | UUID) -> str | None:
        """
        Look up a user's email through the Auth admin API.

        Returns:
            The email, or None if the user doesn't exist or has no email
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = client.auth.admin.get_user_by_id(user_id_str)
        except Exception as e:
            logger.warning(f"Auth admin lookup failed for {user_id_str}: {e}")
            return None

        user = getattr(response, "user", None)
        return getattr(user, "email", None) if user else None

    # -------------------------------------------------------------------------
    # Paging
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_all(cls, build_query: Callable[[], Any], what: str) -> list[dict[str, Any]]:
        """
        Every row of a query, paging past the 1000-row API cap.

        `build_query` must return a fresh, ordered builder each call; a
        .range() is added per page.

        Example:
            rows = SupabaseClient.fetch_all(
                lambda: client.table("notes").select("*").eq("user_id", uid).order("created_at"),
                "notes",
            )

        Raises:
            SupabaseClientError: If a page can't be read
        """
        rows: list[dict[str, Any]] = []
        start = 0

        while True:
            try:
                page = build_query().range(start, start + PAGE_SIZE - 1).execute().data or []
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to fetch {what}: {e}",
                    code="FETCH_PAGE_FAILED",
                    details={"offset": start},
                )

            rows.extend(page)
            if len(page) < PAGE_SIZE:
                return rows
            start += PAGE_SIZE

    # -------------------------------------------------------------------------
    # Counting
    # -------------------------------------------------------------------------

    @classmethod
    def count_rows(
        cls,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
    ) -> int:
        """
        Exact row count for a table with optional equality / lower-bound filters.

        Example:
            SupabaseClient.count_rows("profiles", eq={"plan": "pro"})
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id", count="exact", head=True)
            for column, value in (eq or {}).items():
                query = query.eq(column, value)
            for column, value in (gte or {}).items():
                query = query.gte(column, value)
            response = query.execute()
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table}
            )
