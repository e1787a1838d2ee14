# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - notes.py: Notes, tasks and Markdown export
# - ai.py: Quota-gated AI assistant endpoints
# - goals.py: Weekly goal
# - daily_success.py: Morning plan, evening reflection, day scores
# - reports.py: Weekly report history
# - notifications.py: Nudge settings
# - billing.py: Stripe checkout, portal, pricing and webhook
# - push.py: Web push subscriptions
# - community.py: Reviews, feedback, changelog and travel clicks
# - translations.py: Public UI strings and feature flags
# - admin.py: Admin dashboards and tooling
# - jobs.py: Background job status
# - cron.py: Scheduled endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import notes
from . import ai
from . import goals
from . import daily_success
from . import reports
from . import notifications
from . import billing
from . import push
from . import community
from . import translations
from . import admin
from . import jobs
from . import cron

__all__ = [
    "health",
    "notes",
    "ai",
    "goals",
    "daily_success",
    "reports",
    "notifications",
    "billing",
    "push",
    "community",
    "translations",
    "admin",
    "jobs",
    "cron",
]
