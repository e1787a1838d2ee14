# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the API:
# - models/: Pydantic schemas for requests, responses and rows
# - services/: One service class per domain (quota, AI, translations, ...)
# - ui_strings.py: Base English UI strings
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable and reusable from workers and scripts.
# =============================================================================
