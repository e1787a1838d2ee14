# =============================================================================
# core/models/translation.py - UI Translation Schemas
# =============================================================================
# ui_translations rows are (key, language_code, text). These models describe
# the admin sync requests and the reports they return.
# =============================================================================

from pydantic import BaseModel, Field


class LanguageSyncResult(BaseModel):
    """
    Outcome of syncing one target language.

    - missing: keys present in the source language but not the target
    - translated: rows upserted (fallback rows included)
    - fallback_batches: batches where the source text was kept
    - failed_batches: batches whose upsert failed and were skipped
    """
    language_code: str
    missing: int = 0
    translated: int = 0
    fallback_batches: int = 0
    failed_batches: int = 0


class SyncReport(BaseModel):
    source_lang: str
    total_source_keys: int
    languages: list[LanguageSyncResult] = Field(default_factory=list)

    @property
    def total_translated(self) -> int:
        return sum(lang.translated for lang in self.languages)


class SyncMissingRequest(BaseModel):
    """
    Example:
        {"source_lang": "en", "target_langs": ["de", "fr"]}
    """
    source_lang: str | None = None
    target_langs: list[str] | None = Field(
        default=None,
        description="Defaults to every supported language"
    )


class FullSyncRequest(BaseModel):
    language_code: str = Field(..., min_length=2, max_length=10)


class FullSyncResult(BaseModel):
    ok: bool = True
    language_code: str
    inserted_or_updated: int


class SeedResult(BaseModel):
    ok: bool = True
    inserted: int
    updated: int
    total_keys: int


class MissingKeysReport(BaseModel):
    language_code: str
    source_lang: str
    missing: list[str]
    empty: list[str]


class FeatureFlag(BaseModel):
    flag: str
    enabled: bool


class FeatureFlagUpdate(BaseModel):
    flag: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-zA-Z0-9_.-]+$")
    enabled: bool
