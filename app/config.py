# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Optional integrations (Stripe, Web Push, Resend) are switched off when their
# keys are missing; see the *_enabled properties below.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify user tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for AI features"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4.1-mini",
        description="Model for summaries, task extraction and travel plans"
    )

    OPENAI_FAST_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Cheaper model for chat, titles and translations"
    )

    # -------------------------------------------------------------------------
    # AI Quota
    # -------------------------------------------------------------------------

    FREE_DAILY_AI_LIMIT: int = Field(
        default=5,
        ge=0,
        description="Daily AI calls allowed on the free plan"
    )

    PRO_DAILY_AI_LIMIT: int = Field(
        default=50,
        ge=0,
        description="Daily AI calls allowed on the pro and founder plans"
    )

    # -------------------------------------------------------------------------
    # UI Translations
    # -------------------------------------------------------------------------

    TRANSLATION_BATCH_SIZE: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Number of keys sent to the LLM per translation request"
    )

    TRANSLATION_SOURCE_LANG: str = Field(
        default="en",
        description="Language whose keys are the source of truth"
    )

    # -------------------------------------------------------------------------
    # Stripe
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(default="", description="Stripe secret API key")
    STRIPE_WEBHOOK_SECRET: str = Field(default="", description="Webhook signing secret")
    STRIPE_PORTAL_CONFIGURATION_ID: str = Field(
        default="",
        description="Optional Billing Portal configuration id"
    )

    # Price ids per plan and currency
    STRIPE_PRICE_PRO_EUR: str = ""
    STRIPE_PRICE_PRO_USD: str = ""
    STRIPE_PRICE_PRO_GBP: str = ""
    STRIPE_PRICE_YEARLY_EUR: str = ""
    STRIPE_PRICE_YEARLY_USD: str = ""
    STRIPE_PRICE_YEARLY_GBP: str = ""
    STRIPE_PRICE_FOUNDER_EUR: str = ""
    STRIPE_PRICE_FOUNDER_USD: str = ""
    STRIPE_PRICE_FOUNDER_GBP: str = ""

    # -------------------------------------------------------------------------
    # Web Push (VAPID)
    # -------------------------------------------------------------------------

    VAPID_PUBLIC_KEY: str = ""
    VAPID_PRIVATE_KEY: str = ""
    VAPID_SUBJECT: str = Field(
        default="mailto:support@aiprod.app",
        description="Contact URI sent with push requests"
    )

    # -------------------------------------------------------------------------
    # Email (Resend)
    # -------------------------------------------------------------------------

    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = Field(
        default="AI Productivity Hub <assistant@aiprod.app>",
        description="Sender; a bare address is wrapped with the app name"
    )

    # -------------------------------------------------------------------------
    # Admin & Cron
    # -------------------------------------------------------------------------

    ADMIN_KEY: str = Field(default="", description="Shared secret for X-Admin-Key")
    ADMIN_EMAIL: str = Field(default="", description="Email of the owner account")
    CRON_SECRET: str = Field(default="", description="Secret for scheduled endpoints")

    REMINDER_BATCH_LIMIT: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Max reminders processed per sweep"
    )

    DAILY_DIGEST_HOUR: int = Field(
        default=7,
        ge=0,
        le=23,
        description="UTC hour the daily digest email goes out (celery beat)"
    )
    WEEKLY_REPORT_HOUR: int = Field(
        default=8,
        ge=0,
        le=23,
        description="UTC hour on Mondays the weekly report goes out (celery beat)"
    )
    NOTIFICATION_DEFAULT_TIMEZONE: str = Field(
        default="Europe/Athens",
        description="Timezone for notification settings rows without one"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0", description="Host to bind the API server to")

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    SITE_URL: str = Field(
        default="http://localhost:3000",
        description="Public frontend URL used in redirects and emails"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://aiprod.app" -> ["http://localhost:3000", "https://aiprod.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def site_url(self) -> str:
        """SITE_URL without a trailing slash."""
        return self.SITE_URL.rstrip("/")

    @property
    def stripe_enabled(self) -> bool:
        return bool(self.STRIPE_SECRET_KEY)

    @property
    def push_enabled(self) -> bool:
        return bool(self.VAPID_PUBLIC_KEY and self.VAPID_PRIVATE_KEY)

    @property
    def email_enabled(self) -> bool:
        return bool(self.RESEND_API_KEY)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
