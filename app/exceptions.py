# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every error leaves the API with the same body:
#   {"ok": false, "error": "<message>", "code": "<CODE>", "suggestion": "..."}
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class AppError(Exception):
    """
    Base exception for the AI Productivity Hub API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {
            "ok": False,
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request / Auth Exceptions
# =============================================================================

class BadRequestError(AppError):
    """Raised when the request body or parameters are unusable."""

    def __init__(self, message: str, suggestion: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class UnauthorizedError(AppError):
    """Raised when credentials are missing or wrong."""

    def __init__(self, message: str = "Unauthorized", suggestion: str | None = None):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion=suggestion,
        )


class ForbiddenError(AppError):
    """Raised when an authenticated caller lacks permission."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            suggestion="This action requires an admin account",
        )


class NotFoundError(AppError):
    """Raised when a row doesn't exist or isn't owned by the caller."""

    def __init__(self, resource: str, resource_id: str | None = None):
        details = {"id": resource_id} if resource_id else None
        super().__init__(
            message=f"{resource} not found",
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            details=details,
        )


class ConfigurationError(AppError):
    """Raised when a server-side integration isn't configured."""

    def __init__(self, message: str, setting: str):
        super().__init__(
            message=message,
            code="NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Set {setting} in the server environment",
            details={"setting": setting},
        )


# =============================================================================
# AI Exceptions
# =============================================================================

QUOTA_EXCEEDED_MESSAGE = (
    "You've reached today's AI limit for your plan. "
    "Try again tomorrow or upgrade to Pro for higher limits."
)


class QuotaExceededError(AppError):
    """Raised when a user has used all AI calls for today."""

    def __init__(self, plan: str, daily_limit: int):
        super().__init__(
            message=QUOTA_EXCEEDED_MESSAGE,
            code="AI_QUOTA_EXCEEDED",
            status_code=429,
            suggestion="Upgrade to Pro or wait until tomorrow (UTC)",
        )
        self.plan = plan
        self.daily_limit = daily_limit

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["plan"] = self.plan
        result["daily_limit"] = self.daily_limit
        return result


class UsageCheckError(AppError):
    """Raised when today's usage counter can't be read."""

    def __init__(self, error: str):
        super().__init__(
            message="Could not check your AI usage. Please try again later.",
            code="USAGE_CHECK_FAILED",
            status_code=500,
            details={"error": error},
        )


class AIServiceError(AppError):
    """Raised when the language model call fails or returns garbage."""

    def __init__(self, message: str, rate_limited: bool = False):
        super().__init__(
            message=message,
            code="AI_RATE_LIMITED" if rate_limited else "AI_FAILED",
            status_code=429 if rate_limited else 500,
            suggestion="Try again in a few seconds" if rate_limited else None,
        )


# =============================================================================
# Integration Exceptions
# =============================================================================

class DatabaseError(AppError):
    """Raised when a Supabase query fails."""

    def __init__(self, message: str, error: str | None = None):
        super().__init__(
            message=message,
            code="DATABASE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error} if error else None,
        )


class JobQueueError(AppError):
    """Raised when the Celery broker can't be reached."""

    def __init__(self, message: str, error: str | None = None):
        super().__init__(
            message=message,
            code="JOB_QUEUE_UNAVAILABLE",
            status_code=500,
            suggestion="Check that Redis (REDIS_URL) and the Celery worker are running",
            details={"error": error} if error else None,
        )


class PaymentError(AppError):
    """Raised when a Stripe call fails."""

    def __init__(self, message: str, status_code: int = 500, error: str | None = None):
        super().__init__(
            message=message,
            code="PAYMENT_ERROR",
            status_code=status_code,
            details={"error": error} if error else None,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def app_exception_handler(
    request: Request,
    exc: AppError
) -> JSONResponse:
    """Convert AppError to JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTPException (raised by auth dependencies) in the API error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": str(exc.detail), "code": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Lists each failing field so clients can fix the request.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", []) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "ok": False,
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        }
    )
