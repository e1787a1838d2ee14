# =============================================================================
# app/routers/reports.py - Weekly Report History
# =============================================================================
# Reports are written by the Monday sweep (celery beat or /cron/weekly);
# users only read them here.
# =============================================================================

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.services import WeeklyReportService

router = APIRouter()


@router.get("/weekly")
def list_weekly_reports(
    limit: int = Query(default=12, ge=1, le=52),
    user: AuthUser = Depends(get_current_user),
):
    """Stored weekly reports, newest first."""
    return {"ok": True, "reports": WeeklyReportService.list_reports(user.id, limit)}
