# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup/login happen client-side with Supabase Auth. These routes return
# who the token belongs to.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
    """
    try:
        profile = SupabaseClient.fetch_profile(
            user.id, columns="id, email, plan, is_admin, ai_tone, focus_area, created_at"
        )
        if profile:
            return UserResponse(**{**profile, "email": profile.get("email") or user.email,
                                   "plan": profile.get("plan") or "free",
                                   "is_admin": bool(profile.get("is_admin"))})
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch user profile: {e}")

    # Profile trigger may not have run yet
    return UserResponse(id=user.id, email=user.email)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
