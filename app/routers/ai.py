# =============================================================================
# app/routers/ai.py - AI Assistant Endpoints
# =============================================================================
# Every POST here spends one call of the daily quota, and only when the
# model actually answered. Exhausted quota answers 429 with plan and limit.
# The weekly action plan is the exception: Pro-only, outside the quota.
# Saved chat threads are managed under /threads.
#
# Handlers are plain `def` so the blocking OpenAI/Supabase calls run in the
# threadpool.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.models import (
    AIChatRequest,
    AIChatResponse,
    AISummaryRequest,
    AISummaryResponse,
    DailyPlanResponse,
    NoteToTasksRequest,
    NoteToTasksResponse,
    TaskCreatorRequest,
    TaskCreatorResponse,
    TranslateRequest,
    TranslateResponse,
    TravelPlanRequest,
    TravelPlanResponse,
    ThreadRenameRequest,
    UsageSummary,
    WeeklyActionPlanRequest,
    WeeklyActionPlanResponse,
)
from core.services import AIService, ChatThreadService, PlannerService, UsageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/usage", response_model=UsageSummary)
def get_usage(user: AuthUser = Depends(get_current_user)):
    """Today's AI calls, the plan's limit and what is left."""
    return UsageService.get_usage(user.id)


@router.post("/chat", response_model=AIChatResponse)
def chat(request: AIChatRequest, user: AuthUser = Depends(get_current_user)):
    """
    Coach conversation.

    The client keeps the history and sends it back each turn. The first
    message of a conversation (empty history) also returns a short title.
    """
    return AIService.chat(user.id, request)


@router.post("/summary", response_model=AISummaryResponse)
def summary(
    request: AISummaryRequest | None = None,
    user: AuthUser = Depends(get_current_user),
):
    return AIService.summary(user.id, request or AISummaryRequest())


@router.post("/task-creator", response_model=TaskCreatorResponse)
def task_creator(request: TaskCreatorRequest, user: AuthUser = Depends(get_current_user)):
    return AIService.task_creator(user.id, request)


@router.post("/note-to-tasks", response_model=NoteToTasksResponse)
def note_to_tasks(request: NoteToTasksRequest, user: AuthUser = Depends(get_current_user)):
    return AIService.note_to_tasks(user.id, request)


@router.post("/translate", response_model=TranslateResponse)
def translate(request: TranslateRequest, user: AuthUser = Depends(get_current_user)):
    return AIService.translate(user.id, request)


@router.post("/travel-plan", response_model=TravelPlanResponse)
def travel_plan(request: TravelPlanRequest, user: AuthUser = Depends(get_current_user)):
    return AIService.travel_plan(user.id, request)


@router.post("/daily-plan", response_model=DailyPlanResponse)
def daily_plan(user: AuthUser = Depends(get_current_user)):
    """Today's plan from the caller's open tasks, tone and focus area."""
    return PlannerService.daily_plan(user.id)


# =============================================================================
# Weekly Action Plan
# =============================================================================

@router.post("/weekly-action-plan", response_model=WeeklyActionPlanResponse)
def create_weekly_action_plan(
    request: WeeklyActionPlanRequest | None = None,
    user: AuthUser = Depends(get_current_user),
):
    """Generate (or regenerate) the plan for a week. Pro and founder only."""
    return PlannerService.weekly_action_plan(user.id, (request or WeeklyActionPlanRequest()).week_start)


@router.get("/weekly-action-plan")
def get_weekly_action_plan(user: AuthUser = Depends(get_current_user)):
    return {"ok": True, "plan": PlannerService.latest_action_plan(user.id)}


# =============================================================================
# Saved Chat Threads
# =============================================================================

@router.get("/threads")
def list_threads(
    limit: int = Query(default=50, ge=1, le=100),
    user: AuthUser = Depends(get_current_user),
):
    return {"ok": True, "threads": ChatThreadService.list_threads(user.id, limit)}


@router.get("/threads/{thread_id}/messages")
def get_thread_messages(thread_id: str, user: AuthUser = Depends(get_current_user)):
    return {"ok": True, "messages": ChatThreadService.get_messages(user.id, thread_id)}


@router.patch("/threads/{thread_id}")
def rename_thread(
    thread_id: str,
    request: ThreadRenameRequest,
    user: AuthUser = Depends(get_current_user),
):
    return {"ok": True, "thread": ChatThreadService.rename_thread(user.id, thread_id, request.title)}


@router.delete("/threads/{thread_id}")
def delete_thread(thread_id: str, user: AuthUser = Depends(get_current_user)):
    """Delete a thread and all of its messages."""
    ChatThreadService.delete_thread(user.id, thread_id)
    return {"ok": True}
