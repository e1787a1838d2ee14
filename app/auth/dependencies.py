# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for the four kinds of callers:
#
# - Users: Supabase JWT (ES256 via JWKS, or HS256 when SUPABASE_JWT_SECRET is set)
# - Admin tools: X-Admin-Key header equal to ADMIN_KEY
# - Admin users: a signed-in user whose email is ADMIN_EMAIL or is_admin=true
# - Cron jobs: Bearer CRON_SECRET or ?cron_key=CRON_SECRET
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import secrets
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import ConfigurationError, ForbiddenError, UnauthorizedError
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour
JWKS_ALGORITHMS = ("ES256", "RS256")


def _get_jwks_url() -> str:
    """JWKS endpoint of the Supabase project."""
    return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        response = httpx.get(_get_jwks_url(), timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug("Fetched JWKS from Supabase")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys beat no keys
        return _jwks_cache or {"keys": []}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _hs256_key() -> tuple[str, str]:
    """The legacy shared secret; refused when it is not configured."""
    if not settings.SUPABASE_JWT_SECRET:
        logger.warning("HS256 token rejected: SUPABASE_JWT_SECRET is not configured")
        raise _unauthorized("Invalid token: unsupported signing algorithm")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        HTTPException: 401 when no trusted key matches the token header
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        raise _unauthorized("Invalid token: malformed header")

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return _hs256_key()

    if alg in JWKS_ALGORITHMS and kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"No JWKS key for alg={alg}, kid={kid}")
    raise _unauthorized("Invalid token: unknown signing key")


def decode_user_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its user.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    Raises:
        HTTPException: 401 if token is missing, invalid or expired
    """
    return decode_user_token(credentials.credentials)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    Optionally get the current user from JWT token.

    Returns None if no token (or an invalid one) is provided. Used by
    endpoints that accept anonymous callers (feedback, travel clicks).
    """
    if credentials is None:
        return None

    try:
        return decode_user_token(credentials.credentials)
    except HTTPException:
        return None


# =============================================================================
# Admin & Cron
# =============================================================================

async def require_admin_key(
    x_admin_key: Optional[str] = Header(default=None, alias="X-Admin-Key"),
) -> None:
    """
    Guard for admin tooling endpoints.

    Raises:
        UnauthorizedError: ADMIN_KEY unset, header missing or wrong
    """
    if not settings.ADMIN_KEY or not x_admin_key:
        raise UnauthorizedError(suggestion="Send the X-Admin-Key header")
    if not secrets.compare_digest(x_admin_key, settings.ADMIN_KEY):
        logger.warning("Rejected request with wrong admin key")
        raise UnauthorizedError()


async def require_admin_user(
    user: AuthUser = Depends(get_current_user),
) -> AuthUser:
    """
    Guard for admin pages used from the browser.

    The owner is matched by ADMIN_EMAIL; other admins by profiles.is_admin.

    Raises:
        ForbiddenError: Authenticated but not an admin
    """
    if settings.ADMIN_EMAIL and user.email and user.email.lower() == settings.ADMIN_EMAIL.lower():
        return user

    try:
        profile = SupabaseClient.fetch_profile(user.id, columns="is_admin") or {}
    except SupabaseClientError as e:
        logger.warning(f"Admin check failed for {user.id}: {e}")
        profile = {}

    if profile.get("is_admin"):
        return user
    raise ForbiddenError()


async def verify_cron(
    authorization: Optional[str] = Header(default=None),
    cron_key: Optional[str] = Query(default=None),
) -> None:
    """
    Guard for scheduled endpoints.

    Skipped in development. Outside development CRON_SECRET must be set.

    Raises:
        ConfigurationError: CRON_SECRET unset outside development
        UnauthorizedError: Secret missing or wrong
    """
    if settings.is_development:
        return
    if not settings.CRON_SECRET:
        raise ConfigurationError("Cron secret is not configured on the server.", "CRON_SECRET")

    provided = cron_key
    if authorization and authorization.lower().startswith("bearer "):
        provided = authorization[len("bearer "):].strip()

    if not provided or not secrets.compare_digest(provided, settings.CRON_SECRET):
        raise UnauthorizedError()
