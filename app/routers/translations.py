# =============================================================================
# app/routers/translations.py - Public UI Strings & Feature Flags
# =============================================================================

from fastapi import APIRouter

from core.models import FeatureFlag
from core.services import FlagService, TranslationService

router = APIRouter()


@router.get("/translations/{lang}")
def get_translations(lang: str):
    """All UI strings of a language as {key: text}."""
    return TranslationService.get_translations(lang)


@router.get("/flags/{flag}", response_model=FeatureFlag)
def get_flag(flag: str):
    """A feature flag. Flags that were never set read as enabled."""
    return FlagService.get_flag(flag)
