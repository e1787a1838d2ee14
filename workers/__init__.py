# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Celery configuration and task definitions for slow or scheduled work.
#
# Components:
# - celery_app.py: Celery application and lifecycle logging
# - tasks.py: Task definitions (translation sync, reminder sweep)
# - config.py: Worker settings and beat schedule
#
# Usage:
#   # Start worker + beat
#   python scripts/start_worker.py
#
#   # Submit task (from API)
#   from workers.tasks import sync_missing_translations
#   result = sync_missing_translations.delay("en", ["de"])
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
