# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness and readiness checks for the hosting platform.
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.utils import utc_now

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    database: str
    ai: str
    billing: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status for load balancers and monitoring."""
    return HealthResponse(
        status="healthy",
        timestamp=utc_now().isoformat(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check():
    """
    Readiness check endpoint.

    Reads the profiles table. AI and billing are reported as configured or
    not; they are never called from here.
    """
    from lib.supabase_client import SupabaseClient

    checks = ChecksResponse(
        database="unknown",
        ai="configured" if settings.OPENAI_API_KEY else "missing",
        billing="configured" if settings.stripe_enabled else "disabled",
    )

    try:
        client = SupabaseClient.get_client()
        client.table("profiles").select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        checks.database = f"unhealthy: {str(e)[:50]}"

    return ReadinessResponse(
        status="ready" if checks.database == "healthy" else "degraded",
        checks=checks,
        timestamp=utc_now().isoformat(),
    )


@router.get("/health/live")
async def liveness_check():
    """Whether the process is alive."""
    return {"status": "alive", "timestamp": utc_now().isoformat()}
