# =============================================================================
# app/routers/cron.py - Scheduled Endpoints
# =============================================================================
# For hosts that trigger schedules over HTTP instead of running celery beat.
# Each endpoint calls the same sweep as its beat entry:
#   /reminders       every few minutes
#   /daily           daily digest email
#   /weekly          weekly report email (Mondays)
#   /notifications   scheduled nudges, every minute; ?force=1 ignores the clock
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.auth import verify_cron
from core.services import (
    DigestService,
    NotificationService,
    ReminderService,
    WeeklyReportService,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_cron)])


@router.get("/reminders")
def send_reminders(limit: Optional[int] = Query(default=None, ge=1, le=500)):
    """Send due task reminders (email + push) and mark them sent."""
    result = ReminderService.send_due_reminders(limit)
    logger.info(f"Cron reminders: {result}")
    return {"ok": True, **result}


@router.get("/daily")
def send_daily_digests():
    result = DigestService.send_daily_digests()
    logger.info(f"Cron daily digest: {result}")
    return {"ok": True, **result}


@router.get("/weekly")
def send_weekly_reports():
    """Weekly report email to opted-in Pro and founder users."""
    result = WeeklyReportService.send_weekly_reports()
    logger.info(f"Cron weekly reports: {result}")
    return {"ok": True, **result}


@router.get("/notifications")
def send_notifications(force: bool = Query(default=False)):
    result = NotificationService.run(force=force)
    return {"ok": True, **result}
