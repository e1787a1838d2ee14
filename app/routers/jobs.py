# =============================================================================
# app/routers/jobs.py - Background Job Status Endpoints
# =============================================================================
# Status and cancellation for Celery jobs queued by the admin endpoints.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from app.auth import require_admin_key
from app.exceptions import JobQueueError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin_key)])

JobId = Annotated[str, Path(description="Celery task ID")]

_STATE_MESSAGES = {
    "PENDING": "Waiting in queue...",
    "STARTED": "Starting...",
}


class JobStatusResponse(BaseModel):
    """Response model for job status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


@router.get("/{task_id}", response_model=JobStatusResponse)
def get_job_status(task_id: JobId):
    """
    Current state of a job.

    PROGRESS carries percent and message; SUCCESS carries the result;
    FAILURE carries the error.
    """
    from workers.celery_app import celery_app

    try:
        result = celery_app.AsyncResult(task_id)
        state = result.status
        info = result.info
    except Exception as e:
        logger.error(f"Error getting job status: {e}")
        raise JobQueueError("Failed to get job status", error=str(e))

    response = JobStatusResponse(task_id=task_id, status=state)

    if state == "PROGRESS":
        info = info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Processing...")
    elif state == "SUCCESS":
        response.result = result.result if isinstance(result.result, dict) else {"value": result.result}
        response.progress = 100
        response.message = "Complete"
    elif state == "FAILURE":
        response.error = str(info) if info else "Unknown error"
        response.message = "Failed"
    elif state in _STATE_MESSAGES:
        response.progress = 0
        response.message = _STATE_MESSAGES[state]

    return response


@router.delete("/{task_id}")
def cancel_job(task_id: JobId):
    """Revoke a job that hasn't finished yet."""
    from workers.celery_app import celery_app

    try:
        result = celery_app.AsyncResult(task_id)
        if result.status in ("SUCCESS", "FAILURE"):
            return {
                "task_id": task_id,
                "message": f"Job already {result.status.lower()}, cannot cancel",
                "cancelled": False,
            }
        result.revoke(terminate=True)
    except Exception as e:
        logger.error(f"Error cancelling job {task_id}: {e}")
        raise JobQueueError("Failed to cancel job", error=str(e))

    logger.info(f"Cancelled job {task_id}")
    return {"task_id": task_id, "message": "Job cancelled", "cancelled": True}
