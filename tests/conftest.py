# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - A chainable in-memory stand-in for the Supabase query builder
# - Auth overrides for FastAPI TestClient
# =============================================================================

import os
from typing import Any, Callable
from unittest.mock import patch
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")
os.environ.setdefault("ADMIN_EMAIL", "owner@example.com")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

import pytest

USER_ID = UUID("11111111-2222-3333-4444-555555555555")


# =============================================================================
# Fake Supabase
# =============================================================================

class FakeResponse:
    """What .execute() returns: data plus an optional exact count."""

    def __init__(self, data: Any = None, count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """
    Records every builder call and answers execute() from FakeSupabase.

    Any builder method (select, eq, upsert, range, ...) is accepted and
    returns the query itself, like postgrest's fluent API.
    """

    def __init__(self, db: "FakeSupabase", target: str):
        self.db = db
        self.target = target
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str) -> Callable[..., "FakeQuery"]:
        if name.startswith("__"):
            raise AttributeError(name)

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    def execute(self):
        self.db.executed.append(self)
        return self.db.answer(self)

    # Inspection helpers -----------------------------------------------------

    def called(self, name: str) -> bool:
        return any(call[0] == name for call in self.calls)

    def args_of(self, name: str) -> tuple:
        for call_name, args, _ in self.calls:
            if call_name == name:
                return args
        raise AssertionError(f"{name}() was not called on {self.target}")

    def kwargs_of(self, name: str) -> dict:
        for call_name, _, kwargs in self.calls:
            if call_name == name:
                return kwargs
        raise AssertionError(f"{name}() was not called on {self.target}")

    def filters(self) -> dict[str, Any]:
        """eq() filters as {column: value}."""
        return {args[0]: args[1] for name, args, _ in self.calls if name == "eq"}


class FakeSupabase:
    """
    In-memory Supabase client.

    Configure answers per table (or "rpc:<name>") with `on(target, result)`.
    A result can be a FakeResponse, a list/dict (wrapped as data), an
    Exception (raised), a callable taking the query, or None (maybe_single
    with no row). Several results queue up and the last one repeats.
    """

    def __init__(self):
        self.results: dict[str, list[Any]] = {}
        self.executed: list[FakeQuery] = []

    def on(self, target: str, *results: Any) -> "FakeSupabase":
        self.results[target] = list(results)
        return self

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict | None = None) -> FakeQuery:
        query = FakeQuery(self, f"rpc:{name}")
        query.calls.append(("rpc", (name, params), {}))
        return query

    def answer(self, query: FakeQuery) -> Any:
        queued = self.results.get(query.target)
        if not queued:
            return FakeResponse(data=[])
        result = queued.pop(0) if len(queued) > 1 else queued[0]
        if callable(result) and not isinstance(result, FakeResponse):
            result = result(query)
        if isinstance(result, Exception):
            raise result
        if result is None or isinstance(result, FakeResponse):
            return result
        return FakeResponse(data=result)

    def queries(self, target: str) -> list[FakeQuery]:
        """Executed queries for a table, in order."""
        return [q for q in self.executed if q.target == target]

    def writes(self, target: str, method: str) -> list[Any]:
        """First positional argument of every insert/update/upsert call."""
        return [q.args_of(method)[0] for q in self.queries(target) if q.called(method)]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Patch SupabaseClient.get_client to return a FakeSupabase."""
    from lib.supabase_client import SupabaseClient

    db = FakeSupabase()
    with patch.object(SupabaseClient, "get_client", return_value=db):
        yield db


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def auth_user():
    from app.auth.models import AuthUser
    return AuthUser(id=USER_ID, email="user@example.com")


@pytest.fixture
def client(auth_user):
    """TestClient with get_current_user overridden to `auth_user`."""
    from fastapi.testclient import TestClient

    from app.auth import get_current_user
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: auth_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client():
    """TestClient without auth overrides."""
    from fastapi.testclient import TestClient

    from app.main import app

    app.dependency_overrides.clear()
    with TestClient(app) as test_client:
        yield test_client
