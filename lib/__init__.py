# =============================================================================
# lib/ - Integration Wrappers
# =============================================================================
# This package contains thin wrappers around external services:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - push_client.py: Web Push (VAPID) delivery via pywebpush
# - email_client.py: Transactional email via the Resend HTTP API
# - utils.py: Shared utilities (dates, UUIDs, base error class)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "normalize_uuid",
]
