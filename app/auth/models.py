# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class UserResponse(BaseModel):
    """
    Current user with profile data.

    Falls back to token data when the profile row doesn't exist yet.
    """
    id: UUID
    email: Optional[str] = None
    plan: str = "free"
    is_admin: bool = False
    ai_tone: Optional[str] = None
    focus_area: Optional[str] = None
    created_at: Optional[datetime] = None
