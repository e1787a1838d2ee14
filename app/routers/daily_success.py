# =============================================================================
# app/routers/daily_success.py - Daily Success Endpoints
# =============================================================================
# Morning plan, evening reflection and the 0-100 day score. The AI calls
# spend quota like every other AI endpoint; saving and listing scores don't.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.models import (
    DailyScoreCreate,
    EveningReflectionRequest,
    EveningReflectionResponse,
    MorningPlanRequest,
    MorningPlanResponse,
    ScoreSuggestionResponse,
)
from core.services import PlannerService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/morning", response_model=MorningPlanResponse)
def morning_plan(request: MorningPlanRequest, user: AuthUser = Depends(get_current_user)):
    """Plan the day from a free-text description and up to 10 priorities."""
    return PlannerService.morning_plan(user.id, request)


@router.post("/evening", response_model=EveningReflectionResponse)
def evening_reflection(request: EveningReflectionRequest, user: AuthUser = Depends(get_current_user)):
    return PlannerService.evening_reflection(user.id, request)


@router.post("/score/suggest", response_model=ScoreSuggestionResponse)
def suggest_score(user: AuthUser = Depends(get_current_user)):
    """Score suggestion from today's tasks and notes."""
    return PlannerService.suggest_score(user.id)


@router.post("/score")
def save_score(request: DailyScoreCreate, user: AuthUser = Depends(get_current_user)):
    return {"ok": True, "score": PlannerService.save_score(user.id, request)}


@router.get("/scores")
def list_scores(
    days: int = Query(default=30, ge=1, le=365),
    user: AuthUser = Depends(get_current_user),
):
    return {"ok": True, "scores": PlannerService.recent_scores(user.id, days)}
