# =============================================================================
# tests/test_ai_service.py - Quota-Gated AI Feature Tests
# =============================================================================
# The quota service and LLM client are mocked so each test controls exactly
# what the user has left and what the model answers.
#
# Run with: pytest tests/test_ai_service.py -v
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import AIServiceError, QuotaExceededError
from core.models import (
    AIChatRequest,
    NoteToTasksRequest,
    Plan,
    TaskCreatorRequest,
    TranslateRequest,
    UsageSummary,
)
from core.services.ai_service import (
    AIService,
    clean_title,
    normalize_extracted_tasks,
    normalize_suggested_tasks,
)
from llm.client import LLMError


def usage(used: int, limit: int = 5, plan: Plan = Plan.FREE) -> UsageSummary:
    return UsageSummary(plan=plan, daily_limit=limit, used_today=used, remaining=max(limit - used, 0))


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.fast_model = "fast-model"
    with patch("core.services.ai_service.get_llm_client", return_value=mock):
        yield mock


@pytest.fixture
def quota():
    """UsageService with 2 of 5 calls used."""
    with patch("core.services.ai_service.UsageService") as service:
        service.check_quota.return_value = usage(2)
        service.get_usage.return_value = usage(2)
        yield service


class TestNormalizers:

    def test_clean_title_strips_quotes(self):
        assert clean_title('"Weekly planning"', "fallback") == "Weekly planning"
        assert clean_title('  ""  ', "fallback") == "fallback"

    def test_suggested_tasks_need_a_title(self):
        tasks = normalize_suggested_tasks([
            {"title": "Walk 20 min", "category": "health", "size": "small"},
            {"title": "   "},
            "not a dict",
            {"category": "work"},
        ])
        assert [t.title for t in tasks] == ["Walk 20 min"]

    def test_extracted_tasks_drop_unknown_priority(self):
        tasks = normalize_extracted_tasks([
            {"title": "Call bank", "priority": "urgent", "due_natural": "Friday"},
            {"title": "Email Sam", "priority": "high"},
        ])
        assert tasks[0].priority is None
        assert tasks[0].due_natural == "Friday"
        assert tasks[1].priority == "high"

    def test_non_list_is_empty(self):
        assert normalize_suggested_tasks({"tasks": "x"}) == []


class TestQuotaBracket:

    def test_success_records_one_call(self, llm, quota, user_id):
        llm.complete_text.return_value = "Start with the hardest task."

        response = AIService.chat(user_id, AIChatRequest(message="Plan my day", history=[
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]))

        assert response.message == "Start with the hardest task."
        assert response.used_today == 3
        assert response.daily_limit == 5
        assert response.title is None
        quota.record_usage.assert_called_once_with(user_id)

    def test_quota_exhausted_never_calls_model(self, llm, quota, user_id):
        quota.check_quota.side_effect = QuotaExceededError(plan="free", daily_limit=5)

        with pytest.raises(QuotaExceededError):
            AIService.chat(user_id, AIChatRequest(message="hi"))

        llm.complete_text.assert_not_called()
        quota.record_usage.assert_not_called()

    def test_model_failure_does_not_spend_quota(self, llm, quota, user_id):
        llm.complete_text.side_effect = LLMError("timeout")

        with pytest.raises(AIServiceError) as exc_info:
            AIService.chat(user_id, AIChatRequest(message="hi"))

        assert exc_info.value.status_code == 500
        quota.record_usage.assert_not_called()

    def test_rate_limit_maps_to_429(self, llm, quota, user_id):
        llm.complete_text.side_effect = LLMError("slow down", rate_limited=True)

        with pytest.raises(AIServiceError) as exc_info:
            AIService.chat(user_id, AIChatRequest(message="hi"))

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == "AI_RATE_LIMITED"


class TestFeatures:

    def test_first_chat_message_gets_a_title(self, llm, quota, user_id):
        llm.complete_text.side_effect = ["Sure, let's plan.", '"Planning my week"']

        response = AIService.chat(user_id, AIChatRequest(message="Help me plan my week"))

        assert response.title == "Planning my week"
        quota.record_usage.assert_called_once()

    def test_title_failure_falls_back_to_message(self, llm, quota, user_id):
        llm.complete_text.side_effect = ["Reply", LLMError("down")]

        response = AIService.chat(user_id, AIChatRequest(message="Help me plan my week"))

        assert response.title == "Help me plan my week"

    def test_task_creator_parses_json(self, llm, quota, user_id):
        llm.complete_json.return_value = {"tasks": [{"title": "Deep work 90 min", "size": "large"}]}

        response = AIService.task_creator(user_id, TaskCreatorRequest(energy_level=7, main_goal="Ship v2"))

        assert [t.title for t in response.tasks] == ["Deep work 90 min"]
        prompt = llm.complete_json.call_args.args[0][-1]["content"]
        assert "Ship v2" in prompt

    def test_note_to_tasks(self, llm, quota, user_id):
        llm.complete_json.return_value = {"tasks": [{"title": "Call bank", "due_iso": "2024-05-03"}]}

        response = AIService.note_to_tasks(user_id, NoteToTasksRequest(content="call bank friday"))

        assert response.tasks[0].due_iso == "2024-05-03"

    def test_blank_translation_is_free(self, llm, quota, user_id):
        response = AIService.translate(user_id, TranslateRequest(text="   ", target_lang="de"))

        assert response.translation == ""
        assert response.used_today == 2
        llm.complete_text.assert_not_called()
        quota.check_quota.assert_not_called()

    def test_translate(self, llm, quota, user_id):
        llm.complete_text.return_value = "Hallo Welt"

        response = AIService.translate(user_id, TranslateRequest(text="Hello world", target_lang="German"))

        assert response.translation == "Hallo Welt"
        assert llm.complete_text.call_args.kwargs["model"] == "fast-model"

    def test_refine_goal_keeps_text_on_failure(self, llm):
        llm.complete_text.side_effect = LLMError("down")
        assert AIService.refine_goal("run 3 times") == "run 3 times"
