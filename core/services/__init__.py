# =============================================================================
# core/services/ - Business Logic Services
# =============================================================================
# One service class per domain, sitting between the API routes and the
# integrations in lib/ and llm/:
# - usage_service.py: Daily AI quota
# - ai_service.py: Quota-gated AI features
# - translation_service.py / flag_service.py: UI translations and feature flags
# - billing_service.py: Stripe checkout, portal, webhooks, revenue
# - push_service.py / reminder_service.py: Notifications
# - note_service.py: Notes, tasks and Markdown export
# - community_service.py: Reviews, feedback, changelog, travel clicks, goals
# - admin_service.py: Admin dashboards
# - chat_thread_service.py: Saved AI chat threads
# - planner_service.py: Daily plans, Daily Success, scores, weekly action plan
# - digest_service.py / notification_service.py: Digest, weekly report, nudges
# =============================================================================

from core.services.usage_service import UsageService
from core.services.ai_service import AIService
from core.services.translation_service import TranslationService
from core.services.flag_service import FlagService
from core.services.billing_service import BillingService
from core.services.push_service import PushService
from core.services.reminder_service import ReminderService
from core.services.note_service import NoteService, TaskService
from core.services.community_service import (
    ChangelogService,
    FeedbackService,
    GoalService,
    ReviewService,
    TravelService,
)
from core.services.admin_service import AdminService
from core.services.chat_thread_service import ChatThreadService
from core.services.planner_service import PlannerService
from core.services.digest_service import DigestService, WeeklyReportService
from core.services.notification_service import NotificationService

__all__ = [
    "UsageService",
    "AIService",
    "TranslationService",
    "FlagService",
    "BillingService",
    "PushService",
    "ReminderService",
    "NoteService",
    "TaskService",
    "ChangelogService",
    "FeedbackService",
    "GoalService",
    "ReviewService",
    "TravelService",
    "AdminService",
    "ChatThreadService",
    "PlannerService",
    "DigestService",
    "WeeklyReportService",
    "NotificationService",
]
