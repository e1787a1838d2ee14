# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - profile.py: Plan enum, profile rows and AI usage summary
# - note.py / task.py: Notes and tasks CRUD schemas
# - ai.py: AI endpoint requests and responses
# - translation.py: UI translation sync requests and reports
# - billing.py: Stripe checkout schemas
# - push.py: Web push subscription schemas
# - community.py: Reviews, feedback, changelog, travel clicks, weekly goals
# - chat.py: Saved AI chat threads
# - planner.py: Daily plans, Daily Success, scores, weekly stats and reports
# - notification.py: Scheduled nudge settings
#
# These models define the "contract" between API and clients.
# =============================================================================

from .profile import AdminUserUpdate, Plan, Profile, UsageSummary
from .note import NoteCreate, NoteResponse, NoteUpdate
from .task import TaskCreate, TaskResponse, TaskUpdate
from .ai import (
    AIChatRequest,
    AIChatResponse,
    AISummaryRequest,
    AISummaryResponse,
    ExtractedTask,
    HistoryMessage,
    MessageRole,
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
from .translation import (
    FeatureFlag,
    FeatureFlagUpdate,
    FullSyncRequest,
    FullSyncResult,
    LanguageSyncResult,
    MissingKeysReport,
    SeedResult,
    SyncMissingRequest,
    SyncReport,
)
from .billing import (
    BillingPlan,
    CheckoutRequest,
    Currency,
    PlanPrice,
    PricingResponse,
    RedirectResponse,
    RevenueSummary,
)
from .push import PushKeys, PushSubscribeRequest, PushUnsubscribeRequest
from .community import (
    ChangelogCreate,
    FeedbackCreate,
    ReviewCreate,
    ReviewResponse,
    TravelClickCreate,
    WeeklyGoal,
    WeeklyGoalRequest,
)
from .chat import ChatMessage, ChatThread, ThreadRenameRequest
from .planner import (
    DailyPlanResponse,
    DailyScore,
    DailyScoreCreate,
    EveningReflectionRequest,
    EveningReflectionResponse,
    MorningPlanRequest,
    MorningPlanResponse,
    ScoreSuggestionResponse,
    WeeklyActionPlan,
    WeeklyActionPlanRequest,
    WeeklyActionPlanResponse,
    WeeklyReport,
    WeeklyStats,
)
from .notification import NotificationSettings, NotificationSettingsUpdate

__all__ = [
    # Profile
    "AdminUserUpdate",
    "Plan",
    "Profile",
    "UsageSummary",
    # Notes / Tasks
    "NoteCreate",
    "NoteResponse",
    "NoteUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    # AI
    "AIChatRequest",
    "AIChatResponse",
    "AISummaryRequest",
    "AISummaryResponse",
    "ExtractedTask",
    "HistoryMessage",
    "MessageRole",
    "NoteToTasksRequest",
    "NoteToTasksResponse",
    "QuotaInfo",
    "SuggestedTask",
    "TaskCreatorRequest",
    "TaskCreatorResponse",
    "TranslateRequest",
    "TranslateResponse",
    "TravelPlanRequest",
    "TravelPlanResponse",
    # Translations
    "FeatureFlag",
    "FeatureFlagUpdate",
    "FullSyncRequest",
    "FullSyncResult",
    "LanguageSyncResult",
    "MissingKeysReport",
    "SeedResult",
    "SyncMissingRequest",
    "SyncReport",
    # Billing
    "BillingPlan",
    "CheckoutRequest",
    "Currency",
    "PlanPrice",
    "PricingResponse",
    "RedirectResponse",
    "RevenueSummary",
    # Push
    "PushKeys",
    "PushSubscribeRequest",
    "PushUnsubscribeRequest",
    # Community
    "ChangelogCreate",
    "FeedbackCreate",
    "ReviewCreate",
    "ReviewResponse",
    "TravelClickCreate",
    "WeeklyGoal",
    "WeeklyGoalRequest",
    # Chat threads
    "ChatMessage",
    "ChatThread",
    "ThreadRenameRequest",
    # Planner
    "DailyPlanResponse",
    "DailyScore",
    "DailyScoreCreate",
    "EveningReflectionRequest",
    "EveningReflectionResponse",
    "MorningPlanRequest",
    "MorningPlanResponse",
    "ScoreSuggestionResponse",
    "WeeklyActionPlan",
    "WeeklyActionPlanRequest",
    "WeeklyActionPlanResponse",
    "WeeklyReport",
    "WeeklyStats",
    # Notifications
    "NotificationSettings",
    "NotificationSettingsUpdate",
]
