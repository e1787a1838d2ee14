# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# JWT-based user authentication (Supabase Auth) plus admin and cron guards.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    require_admin_key,
    require_admin_user,
    verify_cron,
)
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "require_admin_key",
    "require_admin_user",
    "verify_cron",
    "AuthUser",
    "UserResponse",
]
