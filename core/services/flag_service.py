# =============================================================================
# core/services/flag_service.py - Feature Flags
# =============================================================================
# Flags live in ui_translations under language_code "system" with keys
# "feature.<name>" and text "true"/"false". A flag with no row is enabled;
# only the literal text "false" disables it.
# =============================================================================

import logging

from app.exceptions import DatabaseError
from core.models.translation import FeatureFlag
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_no_rows_error, response_data
from core.services.translation_service import TranslationService

logger = logging.getLogger(__name__)

SYSTEM_LANGUAGE = "system"
FLAG_PREFIX = "feature."


def flag_key(name: str) -> str:
    return name if name.startswith(FLAG_PREFIX) else f"{FLAG_PREFIX}{name}"


class FlagService:
    """Read and write feature flags."""

    @staticmethod
    def is_enabled(name: str) -> bool:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("ui_translations")
                .select("text")
                .eq("language_code", SYSTEM_LANGUAGE)
                .eq("key", flag_key(name))
                .maybe_single()
                .execute()
            )
        except Exception as e:
            if is_no_rows_error(e):
                return True
            raise DatabaseError("Failed to read feature flag", error=str(e))

        row = response_data(response)
        if not row:
            return True
        return (row.get("text") or "").strip().lower() != "false"

    @staticmethod
    def get_flag(name: str) -> FeatureFlag:
        return FeatureFlag(flag=name, enabled=FlagService.is_enabled(name))

    @staticmethod
    def set_flag(name: str, enabled: bool) -> FeatureFlag:
        try:
            TranslationService.upsert_rows([{
                "key": flag_key(name),
                "language_code": SYSTEM_LANGUAGE,
                "text": "true" if enabled else "false",
            }])
        except SupabaseClientError as e:
            raise DatabaseError("Failed to save feature flag", error=str(e))
        logger.info(f"Feature flag {name} set to {enabled}")
        return FeatureFlag(flag=name, enabled=enabled)

    @staticmethod
    def list_flags() -> list[FeatureFlag]:
        try:
            rows = TranslationService.fetch_all_keys(SYSTEM_LANGUAGE)
        except SupabaseClientError as e:
            raise DatabaseError("Failed to load feature flags", error=str(e))
        return [
            FeatureFlag(flag=key[len(FLAG_PREFIX):], enabled=text.strip().lower() != "false")
            for key, text in sorted(rows.items())
            if key.startswith(FLAG_PREFIX)
        ]
