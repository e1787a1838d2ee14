# =============================================================================
# app/routers/community.py - Reviews, Feedback, Changelog & Travel Clicks
# =============================================================================
# Public reads plus small user submissions. Feedback and travel clicks also
# accept anonymous callers.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user, get_current_user_optional
from core.models import FeedbackCreate, ReviewCreate, TravelClickCreate
from core.services import ChangelogService, FeedbackService, ReviewService, TravelService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Reviews
# =============================================================================

@router.get("/reviews")
def list_reviews():
    """Latest public reviews with rating stats."""
    reviews = ReviewService.list_reviews()
    return {"ok": True, "reviews": reviews, "stats": ReviewService.stats(reviews)}


@router.post("/reviews", status_code=201)
def create_review(review: ReviewCreate, user: AuthUser = Depends(get_current_user)):
    return {"ok": True, "review": ReviewService.create_review(user.id, review)}


@router.get("/reviews/check")
def check_review(user: AuthUser = Depends(get_current_user)):
    """Whether the caller already left a review (the UI hides the prompt)."""
    return {"ok": True, "has_reviewed": ReviewService.has_reviewed(user.id)}


# =============================================================================
# Feedback / Changelog / Travel
# =============================================================================

@router.post("/feedback", status_code=201)
def submit_feedback(
    feedback: FeedbackCreate,
    user: Optional[AuthUser] = Depends(get_current_user_optional),
):
    FeedbackService.submit(user.id if user else None, feedback)
    return {"ok": True}


@router.get("/changelog")
def list_changelog():
    return {"ok": True, "entries": ChangelogService.list_entries()}


@router.post("/travel/click")
def log_travel_click(
    click: TravelClickCreate,
    user: Optional[AuthUser] = Depends(get_current_user_optional),
):
    TravelService.log_click(user.id if user else None, click)
    return {"ok": True}
