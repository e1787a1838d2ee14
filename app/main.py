# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the AI Productivity Hub API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.exceptions import (
    AppError,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    admin,
    ai,
    billing,
    community,
    cron,
    daily_success,
    goals,
    health,
    jobs,
    notes,
    notifications,
    push,
    reports,
    translations,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup and shutdown."""
    logger.info(f"Starting AI Productivity Hub API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(
        f"Integrations: stripe={settings.stripe_enabled}, "
        f"push={settings.push_enabled}, email={settings.email_enabled}"
    )

    yield

    logger.info("Shutting down AI Productivity Hub API")


# Create FastAPI application
app = FastAPI(
    title="AI Productivity Hub API",
    description="""
## AI Productivity Hub

Notes, tasks and an AI coach with a daily per-plan quota.

### Plans

| Plan | AI calls per day |
|------|------------------|
| **free** | FREE_DAILY_AI_LIMIT (default 5) |
| **pro / founder** | PRO_DAILY_AI_LIMIT (default 50) |

Upgrades go through Stripe Checkout; the webhook updates the plan.
Errors always look like `{"ok": false, "error": "...", "code": "..."}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Who the bearer token belongs to"},
        {"name": "Notes", "description": "Notes, tasks and Markdown export"},
        {"name": "AI", "description": "Quota-gated AI assistant"},
        {"name": "Goals", "description": "Weekly goal"},
        {"name": "Billing", "description": "Stripe checkout, portal and webhook"},
        {"name": "Push", "description": "Web push subscriptions"},
        {"name": "Community", "description": "Reviews, feedback, changelog, travel clicks"},
        {"name": "Translations", "description": "UI strings and feature flags"},
        {"name": "Admin", "description": "Admin dashboards and tooling"},
        {"name": "Jobs", "description": "Background job progress"},
        {"name": "Cron", "description": "Scheduled endpoints"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(notes.router, prefix=API_PREFIX, tags=["Notes"])
app.include_router(ai.router, prefix=f"{API_PREFIX}/ai", tags=["AI"])
app.include_router(goals.router, prefix=API_PREFIX, tags=["Goals"])
app.include_router(daily_success.router, prefix=f"{API_PREFIX}/daily-success", tags=["Daily Success"])
app.include_router(reports.router, prefix=f"{API_PREFIX}/reports", tags=["Reports"])
app.include_router(notifications.router, prefix=f"{API_PREFIX}/notifications", tags=["Notifications"])
app.include_router(billing.router, prefix=f"{API_PREFIX}/billing", tags=["Billing"])
app.include_router(push.router, prefix=f"{API_PREFIX}/push", tags=["Push"])
app.include_router(community.router, prefix=API_PREFIX, tags=["Community"])
app.include_router(translations.router, prefix=API_PREFIX, tags=["Translations"])
app.include_router(admin.router, prefix=f"{API_PREFIX}/admin", tags=["Admin"])
app.include_router(jobs.router, prefix=f"{API_PREFIX}/jobs", tags=["Jobs"])
app.include_router(cron.router, prefix=f"{API_PREFIX}/cron", tags=["Cron"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "AI Productivity Hub API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
