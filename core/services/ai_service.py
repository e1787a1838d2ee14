# =============================================================================
# core/services/ai_service.py - Quota-Gated AI Features
# =============================================================================
# Each public method:
#   1. checks the user's daily quota (429 when exhausted)
#   2. builds the prompt and calls the model
#   3. records one call only after the model answered
#   4. returns the result together with the updated usage numbers
# =============================================================================

import logging
from typing import Any, Callable, TypeVar
from uuid import UUID

from app.exceptions import AIServiceError, BadRequestError
from core.models.ai import (
    AIChatRequest,
    AIChatResponse,
    AISummaryRequest,
    AISummaryResponse,
    ExtractedTask,
    NoteToTasksRequest,
    NoteToTasksResponse,
    QuotaInfo,
    SuggestedTask,
    TaskCreatorRequest,
    TaskCreatorResponse,
    TranslateRequest,
    TranslateResponse,
    TravelPlanRequest,
    TravelPlanResponse,
)
from core.services.chat_thread_service import ChatThreadService
from core.services.usage_service import UsageService
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid
from llm.client import LLMError, get_llm_client
from llm.language import language_instruction
from llm import prompts

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUMMARY_CONTEXT_LIMIT = 20
TITLE_FALLBACK_LENGTH = 60
PRIORITIES = {"low", "medium", "high"}


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def clean_title(raw: str, fallback: str) -> str:
    """Strip wrapping quotes from a generated title."""
    cleaned = raw.strip().strip("\"'“”").strip()
    return cleaned or fallback


def normalize_suggested_tasks(items: Any) -> list[SuggestedTask]:
    """Keep entries with a non-empty string title."""
    if not isinstance(items, list):
        return []
    result = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = _str_or_none(item.get("title"))
        if title:
            result.append(SuggestedTask(
                title=title,
                category=_str_or_none(item.get("category")),
                size=_str_or_none(item.get("size")),
            ))
    return result


def normalize_extracted_tasks(items: Any) -> list[ExtractedTask]:
    """Keep titled entries; unknown priorities become None."""
    if not isinstance(items, list):
        return []
    result = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = _str_or_none(item.get("title"))
        if not title:
            continue
        priority = item.get("priority")
        result.append(ExtractedTask(
            title=title,
            due_natural=_str_or_none(item.get("due_natural")),
            due_iso=_str_or_none(item.get("due_iso")),
            priority=priority if priority in PRIORITIES else None,
        ))
    return result


class AIService:
    """
    Service for every quota-gated AI endpoint.
    """

    @staticmethod
    def _with_quota(user_id: UUID | str, call: Callable[[], T]) -> tuple[T, QuotaInfo]:
        """
        Run `call` inside the quota check/record bracket.

        Raises:
            QuotaExceededError: Before calling the model
            AIServiceError: If the model call fails (usage not recorded)
        """
        usage = UsageService.check_quota(user_id)
        try:
            result = call()
        except LLMError as e:
            logger.error(f"AI call failed for {user_id}: {e}")
            if e.rate_limited:
                raise AIServiceError(
                    "AI is being rate-limited. Please try again in a few seconds.",
                    rate_limited=True,
                )
            raise AIServiceError("AI service temporarily unavailable.")

        UsageService.record_usage(user_id)
        return result, QuotaInfo(
            plan=usage.plan,
            daily_limit=usage.daily_limit,
            used_today=usage.used_today + 1,
        )

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_title(message: str) -> str:
        """Short conversation title; falls back to the message start."""
        fallback = message.strip()[:TITLE_FALLBACK_LENGTH] or "New conversation"
        llm = get_llm_client()
        try:
            raw = llm.complete_text(
                [
                    {"role": "system", "content": prompts.TITLE_SYSTEM_PROMPT},
                    {"role": "user", "content": message},
                ],
                model=llm.fast_model,
                temperature=0.2,
                max_tokens=20,
            )
        except LLMError as e:
            logger.warning(f"Title generation failed, using fallback: {e}")
            return fallback
        return clean_title(raw, fallback)

    @staticmethod
    def chat(user_id: UUID | str, request: AIChatRequest) -> AIChatResponse:
        message = request.message.strip()
        if not message:
            raise BadRequestError("Missing message")

        system = prompts.COACH_SYSTEM_PROMPT
        if request.language:
            system += "\n" + language_instruction(request.language)
        messages = [{"role": "system", "content": system}]
        messages += [{"role": m.role.value, "content": m.content} for m in request.history]
        messages.append({"role": "user", "content": message})

        llm = get_llm_client()
        reply, quota = AIService._with_quota(
            user_id,
            lambda: llm.complete_text(messages, model=llm.fast_model, temperature=0.6, max_tokens=600),
        )

        title = AIService.generate_title(message) if not request.history else None

        thread_id = None
        if request.thread_id or request.save_thread:
            thread_id = ChatThreadService.save_exchange(
                user_id,
                message,
                reply,
                thread_id=request.thread_id,
                title=title,
                category=request.category,
            )
        return AIChatResponse(message=reply, title=title, thread_id=thread_id, **quota.model_dump())

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    @staticmethod
    def _recent_context(user_id: UUID | str) -> tuple[list[dict], list[dict]]:
        """Last 20 notes and tasks; read failures give empty context."""
        client = SupabaseClient.get_client()
        uid = normalize_uuid(user_id)
        notes: list[dict] = []
        tasks: list[dict] = []
        try:
            notes = (
                client.table("notes").select("content").eq("user_id", uid)
                .order("created_at", desc=True).limit(SUMMARY_CONTEXT_LIMIT).execute()
            ).data or []
        except Exception as e:
            logger.warning(f"Summary: could not load notes for {uid}: {e}")
        try:
            tasks = (
                client.table("tasks").select("title, description").eq("user_id", uid)
                .order("created_at", desc=True).limit(SUMMARY_CONTEXT_LIMIT).execute()
            ).data or []
        except Exception as e:
            logger.warning(f"Summary: could not load tasks for {uid}: {e}")
        return notes, tasks

    @staticmethod
    def summary(user_id: UUID | str, request: AISummaryRequest) -> AISummaryResponse:
        try:
            profile = SupabaseClient.fetch_profile(user_id, columns="ai_tone, focus_area") or {}
        except SupabaseClientError as e:
            logger.warning(f"Summary: profile lookup failed for {user_id}: {e}")
            profile = {}

        def call() -> str:
            notes, tasks = AIService._recent_context(user_id)
            messages = prompts.build_summary_messages(
                notes,
                tasks,
                ai_tone=profile.get("ai_tone"),
                focus_area=profile.get("focus_area"),
                language_line=language_instruction(request.language) if request.language else None,
            )
            return get_llm_client().complete_text(messages, temperature=0.5, max_tokens=350)

        summary, quota = AIService._with_quota(user_id, call)
        return AISummaryResponse(summary=summary, **quota.model_dump())

    # -------------------------------------------------------------------------
    # Task suggestions
    # -------------------------------------------------------------------------

    @staticmethod
    def task_creator(user_id: UUID | str, request: TaskCreatorRequest) -> TaskCreatorResponse:
        messages = [
            {"role": "system", "content": prompts.STRICT_JSON_SYSTEM_PROMPT},
            {"role": "user", "content": prompts.build_task_creator_prompt(request.model_dump())},
        ]
        data, quota = AIService._with_quota(
            user_id,
            lambda: get_llm_client().complete_json(messages, temperature=0.6),
        )
        return TaskCreatorResponse(tasks=normalize_suggested_tasks(data.get("tasks")), **quota.model_dump())

    @staticmethod
    def note_to_tasks(user_id: UUID | str, request: NoteToTasksRequest) -> NoteToTasksResponse:
        content = request.content.strip()
        if not content:
            raise BadRequestError("Missing note content.")
        messages = [
            {"role": "system", "content": "You output STRICT JSON only. No markdown. No extra text."},
            {"role": "user", "content": prompts.build_note_to_tasks_prompt(content)},
        ]
        data, quota = AIService._with_quota(
            user_id,
            lambda: get_llm_client().complete_json(messages, temperature=0.2),
        )
        return NoteToTasksResponse(tasks=normalize_extracted_tasks(data.get("tasks")), **quota.model_dump())

    # -------------------------------------------------------------------------
    # Translation / Travel
    # -------------------------------------------------------------------------

    @staticmethod
    def translate(user_id: UUID | str, request: TranslateRequest) -> TranslateResponse:
        """
        Translate free text. Blank text returns "" without using quota.
        """
        text = request.text.strip()
        if not text:
            usage = UsageService.get_usage(user_id)
            return TranslateResponse(
                translation="",
                plan=usage.plan,
                daily_limit=usage.daily_limit,
                used_today=usage.used_today,
            )

        messages = [
            {"role": "system", "content": prompts.TRANSLATE_SYSTEM_PROMPT},
            {"role": "user", "content": f"Target language: {request.target_lang.strip()}\n\nText:\n{text}"},
        ]
        llm = get_llm_client()
        translation, quota = AIService._with_quota(
            user_id,
            lambda: llm.complete_text(messages, model=llm.fast_model, temperature=0.3, max_tokens=4096),
        )
        return TranslateResponse(translation=translation, **quota.model_dump())

    @staticmethod
    def travel_plan(user_id: UUID | str, request: TravelPlanRequest) -> TravelPlanResponse:
        messages = [
            {"role": "system", "content": prompts.TRAVEL_SYSTEM_PROMPT},
            {"role": "user", "content": prompts.build_travel_prompt(
                request.destination,
                request.checkin,
                request.checkout,
                adults=request.adults,
                children=request.children,
                min_budget=request.min_budget,
                max_budget=request.max_budget,
            )},
        ]
        plan, quota = AIService._with_quota(
            user_id,
            lambda: get_llm_client().complete_text(messages, max_tokens=600),
        )
        return TravelPlanResponse(plan=plan, **quota.model_dump())

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    @staticmethod
    def refine_goal(goal_text: str) -> str:
        """Rewrite a weekly goal; the original text is kept on any failure."""
        try:
            refined = get_llm_client().complete_text(
                [
                    {"role": "system", "content": prompts.GOAL_SYSTEM_PROMPT},
                    {"role": "user", "content": prompts.build_goal_refine_prompt(goal_text)},
                ],
                max_tokens=80,
            )
        except LLMError as e:
            logger.warning(f"Goal refinement failed, keeping original: {e}")
            return goal_text
        return refined or goal_text
