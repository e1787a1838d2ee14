# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the AI Productivity Hub API:
# - conftest.py: Environment defaults and the in-memory Supabase fake
# - test_usage_service.py / test_ai_service.py: Quota and AI features
# - test_translation_service.py: UI translation sync
# - test_billing_service.py: Stripe checkout, webhooks and revenue
# - test_api.py: Routing, auth guards and the error body shape
#
# Run tests with: pytest
# =============================================================================
