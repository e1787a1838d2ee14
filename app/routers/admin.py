# =============================================================================
# app/routers/admin.py - Admin Endpoints
# =============================================================================
# Two kinds of guard:
# - require_admin_user: browser admin pages (JWT + ADMIN_EMAIL / is_admin)
# - require_admin_key:  tooling and scripts (X-Admin-Key header)
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from app.auth import AuthUser, require_admin_key, require_admin_user
from app.config import settings
from app.exceptions import BadRequestError, ConfigurationError, JobQueueError
from core.models import (
    AdminUserUpdate,
    ChangelogCreate,
    FeatureFlagUpdate,
    FullSyncRequest,
    MissingKeysReport,
    RevenueSummary,
    SeedResult,
    SyncMissingRequest,
)
from core.services import (
    AdminService,
    BillingService,
    ChangelogService,
    FeedbackService,
    FlagService,
    ReviewService,
    TranslationService,
)
from lib.email_client import delivery_check_email, send_email

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Dashboards (admin user)
# =============================================================================

@router.get("/metrics")
def metrics(admin: AuthUser = Depends(require_admin_user)):
    return {"ok": True, **AdminService.metrics()}


@router.get("/revenue", response_model=RevenueSummary)
def revenue(admin: AuthUser = Depends(require_admin_user)):
    """Active subscriptions and monthly recurring revenue per currency."""
    return BillingService.revenue()


@router.post("/changelog", status_code=201)
def add_changelog_entry(entry: ChangelogCreate, admin: AuthUser = Depends(require_admin_user)):
    return {"ok": True, "entry": ChangelogService.add_entry(entry)}


@router.delete("/reviews/{review_id}")
def delete_review(review_id: str, admin: AuthUser = Depends(require_admin_user)):
    ReviewService.delete_review(review_id)
    return {"ok": True}


@router.post("/test-email")
def send_test_email(admin: AuthUser = Depends(require_admin_user)):
    """Send a delivery check to ADMIN_EMAIL (or the caller)."""
    if not settings.email_enabled:
        raise ConfigurationError("Email is not configured on the server.", "RESEND_API_KEY")
    to = settings.ADMIN_EMAIL or admin.email
    if not to:
        raise BadRequestError("No address to send the test email to")
    subject, text = delivery_check_email()
    return {"ok": send_email(to, subject, text), "to": to}


# =============================================================================
# Users, Reviews, Feedback (admin key)
# =============================================================================

@router.get("/users", dependencies=[Depends(require_admin_key)])
def list_users(q: Optional[str] = None, plan: Optional[str] = None):
    """Search by email substring or exact user id, optionally by plan."""
    return {"ok": True, **AdminService.list_users(q, plan)}


@router.get("/users/{user_id}", dependencies=[Depends(require_admin_key)])
def get_user(user_id: str):
    return {"ok": True, **AdminService.user_detail(user_id)}


@router.patch("/users/{user_id}", dependencies=[Depends(require_admin_key)])
def update_user(user_id: str, update: AdminUserUpdate):
    return {"ok": True, "profile": AdminService.update_user(user_id, update)}


@router.get("/reviews", dependencies=[Depends(require_admin_key)])
def list_all_reviews():
    reviews = ReviewService.list_reviews(limit=None)
    return {"ok": True, "reviews": reviews, "stats": ReviewService.stats(reviews)}


@router.get("/feedback", dependencies=[Depends(require_admin_key)])
def list_feedback():
    return {"ok": True, "feedback": FeedbackService.list_feedback()}


# =============================================================================
# Feature Flags (admin key)
# =============================================================================

@router.get("/flags", dependencies=[Depends(require_admin_key)])
def read_flags(flag: Optional[str] = None):
    """One flag with ?flag=name, otherwise every flag that was set."""
    if flag:
        return {"ok": True, **FlagService.get_flag(flag).model_dump()}
    return {"ok": True, "flags": [f.model_dump() for f in FlagService.list_flags()]}


@router.post("/flags", dependencies=[Depends(require_admin_key)])
def set_flag(update: FeatureFlagUpdate):
    return {"ok": True, **FlagService.set_flag(update.flag, update.enabled).model_dump()}


# =============================================================================
# Translations (admin key)
# =============================================================================

@router.post("/translations/seed-en", response_model=SeedResult, dependencies=[Depends(require_admin_key)])
def seed_english(language_code: str = "en"):
    """Write the built-in English strings; changed texts are overwritten."""
    return TranslationService.seed_english(language_code)


@router.post("/translations/sync", dependencies=[Depends(require_admin_key)])
def sync_full_language(request: FullSyncRequest):
    """Translate the whole base string set into one language in a single call."""
    return TranslationService.sync_full_language(request.language_code)


@router.post("/translations/sync-missing", dependencies=[Depends(require_admin_key)])
def sync_missing(request: SyncMissingRequest | None = None):
    """
    Queue a missing-key sync on the worker.

    Poll GET /api/v1/jobs/{task_id} for progress and the report.
    """
    from workers.tasks import sync_missing_translations

    request = request or SyncMissingRequest()
    try:
        result = sync_missing_translations.delay(request.source_lang, request.target_langs)
    except Exception as e:
        logger.error(f"Failed to queue translation sync: {e}")
        raise JobQueueError("Failed to queue translation sync", error=str(e))

    logger.info(f"Queued translation sync {result.id}")
    return {"ok": True, "task_id": result.id, "status": "PENDING"}


@router.get(
    "/translations/missing/{lang}",
    response_model=MissingKeysReport,
    dependencies=[Depends(require_admin_key)],
)
def missing_keys(lang: str, source_lang: Optional[str] = None):
    return TranslationService.missing_report(lang, source_lang)
