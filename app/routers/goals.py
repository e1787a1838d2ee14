# =============================================================================
# app/routers/goals.py - Weekly Goal Endpoints
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from core.models import WeeklyGoalRequest
from core.services import AIService, GoalService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/weekly-goal")
def get_weekly_goal(user: AuthUser = Depends(get_current_user)):
    """The most recent goal, or null."""
    return {"ok": True, "goal": GoalService.latest_goal(user.id)}


@router.post("/weekly-goal")
def save_weekly_goal(request: WeeklyGoalRequest, user: AuthUser = Depends(get_current_user)):
    """
    Set this week's goal.

    With refine=true the text is rewritten by the model first; refinement
    does not count against the AI quota and keeps the text on failure.
    """
    goal_text = request.goal_text.strip()
    if request.refine:
        goal_text = AIService.refine_goal(goal_text)
    return {"ok": True, "goal": GoalService.save_goal(user.id, goal_text)}
