# =============================================================================
# tests/test_chat_threads.py - Saved Chat Thread Tests
# =============================================================================
# Run with: pytest tests/test_chat_threads.py -v
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import BadRequestError, DatabaseError, NotFoundError
from core.models import AIChatRequest, Plan, UsageSummary
from core.services import AIService, ChatThreadService
from core.services.chat_thread_service import default_title

THREAD = {"id": "th1", "title": "Planning my week", "category": None}


class TestDefaultTitle:

    def test_first_line_only(self):
        assert default_title("  Plan my week\nand also the weekend") == "Plan my week"

    def test_long_message_is_cut(self):
        assert default_title("x" * 200) == "x" * 80

    def test_blank_message(self):
        assert default_title("   ") == "New conversation"


class TestThreadManagement:

    def test_list_is_scoped_and_recent_first(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", [THREAD])

        threads = ChatThreadService.list_threads(user_id, limit=20)

        assert threads == [THREAD]
        query = fake_db.queries("ai_chat_threads")[0]
        assert query.filters() == {"user_id": str(user_id)}
        assert query.args_of("order") == ("updated_at",)
        assert query.args_of("limit") == (20,)

    def test_messages_of_someone_elses_thread_are_not_found(self, fake_db, user_id):
        with pytest.raises(NotFoundError) as exc_info:
            ChatThreadService.get_messages(user_id, "th1")

        assert exc_info.value.code == "CHAT_THREAD_NOT_FOUND"
        assert fake_db.queries("ai_chat_messages") == []

    def test_messages_oldest_first(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", [{"id": "th1"}])
        fake_db.on("ai_chat_messages", [{"id": "m1", "role": "user", "content": "hi"}])

        messages = ChatThreadService.get_messages(user_id, "th1")

        assert messages[0]["content"] == "hi"
        query = fake_db.queries("ai_chat_messages")[0]
        assert query.filters() == {"thread_id": "th1", "user_id": str(user_id)}
        assert query.args_of("order") == ("created_at",)

    def test_rename_trims_and_cuts(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", [THREAD])

        ChatThreadService.rename_thread(user_id, "th1", "  " + "t" * 150)

        update = fake_db.writes("ai_chat_threads", "update")[0]
        assert update["title"] == "t" * 100
        assert "updated_at" in update

    def test_rename_to_blank_is_bad_request(self, fake_db, user_id):
        with pytest.raises(BadRequestError):
            ChatThreadService.rename_thread(user_id, "th1", "   ")
        assert fake_db.queries("ai_chat_threads") == []

    def test_rename_unknown_thread(self, fake_db, user_id):
        with pytest.raises(NotFoundError):
            ChatThreadService.rename_thread(user_id, "th1", "New title")

    def test_delete_removes_messages_then_thread(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", [THREAD])

        ChatThreadService.delete_thread(user_id, "th1")

        targets = [q.target for q in fake_db.executed]
        assert targets == ["ai_chat_messages", "ai_chat_threads"]
        assert fake_db.queries("ai_chat_threads")[0].filters() == {"id": "th1", "user_id": str(user_id)}

    def test_delete_failure_is_database_error(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", RuntimeError("fk violation"))

        with pytest.raises(DatabaseError):
            ChatThreadService.delete_thread(user_id, "th1")


class TestSaveExchange:

    def test_new_thread_gets_title_and_two_messages(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", [{"id": "th9"}])

        thread_id = ChatThreadService.save_exchange(
            user_id, "Plan my week", "Start with Monday.", title="Week plan", category="work"
        )

        assert thread_id == "th9"
        created = fake_db.writes("ai_chat_threads", "insert")[0]
        assert created == {"user_id": str(user_id), "title": "Week plan", "category": "work"}
        messages = fake_db.writes("ai_chat_messages", "insert")[0]
        assert [m["role"] for m in messages] == ["user", "assistant"]
        assert all(m["thread_id"] == "th9" for m in messages)

    def test_existing_thread_is_touched_not_created(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", [THREAD])

        assert ChatThreadService.save_exchange(user_id, "hi", "hello", thread_id="th1") == "th1"
        assert fake_db.writes("ai_chat_threads", "insert") == []
        assert "updated_at" in fake_db.writes("ai_chat_threads", "update")[0]

    def test_foreign_thread_is_not_written(self, fake_db, user_id):
        assert ChatThreadService.save_exchange(user_id, "hi", "hello", thread_id="th-other") is None
        assert fake_db.queries("ai_chat_messages") == []

    def test_store_failure_returns_none(self, fake_db, user_id):
        fake_db.on("ai_chat_threads", RuntimeError("down"))

        assert ChatThreadService.save_exchange(user_id, "hi", "hello") is None


class TestChatPersistence:

    @pytest.fixture
    def llm(self):
        mock = MagicMock()
        mock.fast_model = "fast-model"
        with patch("core.services.ai_service.get_llm_client", return_value=mock):
            yield mock

    @pytest.fixture
    def quota(self):
        with patch("core.services.ai_service.UsageService") as service:
            service.check_quota.return_value = UsageSummary(
                plan=Plan.PRO, daily_limit=50, used_today=1, remaining=49
            )
            yield service

    def test_unsaved_chat_touches_no_tables(self, fake_db, llm, quota, user_id):
        llm.complete_text.side_effect = ["Reply", "Title"]

        response = AIService.chat(user_id, AIChatRequest(message="hi"))

        assert response.thread_id is None
        assert fake_db.executed == []

    def test_save_thread_uses_generated_title(self, fake_db, llm, quota, user_id):
        fake_db.on("ai_chat_threads", [{"id": "th5"}])
        llm.complete_text.side_effect = ["Reply", "Morning routine"]

        response = AIService.chat(user_id, AIChatRequest(message="Help my mornings", save_thread=True))

        assert response.thread_id == "th5"
        assert fake_db.writes("ai_chat_threads", "insert")[0]["title"] == "Morning routine"

    def test_failed_save_still_answers(self, fake_db, llm, quota, user_id):
        fake_db.on("ai_chat_threads", RuntimeError("down"))
        llm.complete_text.side_effect = ["Reply", "Title"]

        response = AIService.chat(user_id, AIChatRequest(message="hi", save_thread=True))

        assert response.message == "Reply"
        assert response.thread_id is None
        quota.record_usage.assert_called_once()
