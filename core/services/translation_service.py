# =============================================================================
# core/services/translation_service.py - UI Translation Sync
# =============================================================================
# Keeps ui_translations complete across languages.
#
# Missing-key sync (the batch job):
#   1. Page through every key of the source language (1000 rows per page)
#   2. For each target language, diff against its keys
#   3. Translate missing keys in fixed-size batches via the LLM
#      ({"translations": [...]} with one entry per input)
#   4. Upsert each batch on (key, language_code)
#
# Every failure is contained to its batch: an LLM failure or count mismatch
# keeps the source text for that batch, an upsert failure skips it. Nothing
# is retried; rerunning the sync picks up whatever is still missing.
# =============================================================================

import logging
from typing import Any, Callable

from app.config import settings
from app.exceptions import AIServiceError, BadRequestError, DatabaseError
from core.models.translation import (
    FullSyncResult,
    LanguageSyncResult,
    MissingKeysReport,
    SeedResult,
    SyncReport,
)
from core.ui_strings import UI_STRINGS
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now
from llm.client import LLMError, get_llm_client
from llm.language import (
    SUPPORTED_TARGET_LANGUAGES,
    is_supported_target,
    language_name,
    normalize_lang,
)
from llm.prompts import build_batch_translation_messages, build_full_language_messages

logger = logging.getLogger(__name__)

TABLE = "ui_translations"

# progress(language_index, language_count, language_code)
ProgressCallback = Callable[[int, int, str], None]


def chunked(items: list[Any], size: int) -> list[list[Any]]:
    """Split a list into consecutive chunks of at most `size` items."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class TranslationService:
    """
    Service for reading and syncing UI translations.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def fetch_all_keys(language_code: str) -> dict[str, str]:
        """
        Every {key: text} for a language, paging past the 1000-row API cap.

        Raises:
            SupabaseClientError: If a page can't be read
        """
        client = SupabaseClient.get_client()
        rows = SupabaseClient.fetch_all(
            lambda: client.table(TABLE).select("key, text").eq("language_code", language_code).order("key"),
            f"'{language_code}' translations",
        )
        result = {row["key"]: row.get("text") or "" for row in rows}
        logger.debug(f"Fetched {len(result)} keys for '{language_code}'")
        return result

    @staticmethod
    def get_translations(language_code: str) -> dict[str, str]:
        """Public {key: text} map for a language code (case-insensitive)."""
        lang = language_code.strip().lower()
        if not lang:
            raise BadRequestError("Missing language code")
        try:
            return TranslationService.fetch_all_keys(lang)
        except SupabaseClientError as e:
            raise DatabaseError("Failed to load translations", error=str(e))

    @staticmethod
    def find_missing(source: dict[str, str], target: dict[str, str]) -> list[str]:
        """Keys present in source but absent from target, sorted."""
        return sorted(key for key in source if key not in target)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @staticmethod
    def upsert_rows(rows: list[dict[str, Any]]) -> None:
        """
        Upsert rows keyed by (key, language_code).

        Raises:
            SupabaseClientError: If the upsert fails
        """
        if not rows:
            return
        client = SupabaseClient.get_client()
        stamp = utc_now().isoformat()
        payload = [{**row, "updated_at": stamp} for row in rows]

        try:
            client.table(TABLE).upsert(payload, on_conflict="key,language_code").execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert translations: {e}",
                code="UPSERT_TRANSLATIONS_FAILED",
                details={"rows": len(rows)},
            )

    # -------------------------------------------------------------------------
    # Batch translation
    # -------------------------------------------------------------------------

    @staticmethod
    def translate_batch(
        texts: list[str],
        source_lang: str,
        target_lang: str,
    ) -> tuple[list[str], bool]:
        """
        Translate a batch of UI strings.

        Returns:
            (translations, used_fallback). On any LLM failure, bad JSON or a
            count mismatch the original texts are returned with used_fallback=True.
        """
        if not texts:
            return [], False

        messages = build_batch_translation_messages(
            texts,
            source_name=language_name(source_lang),
            target_name=language_name(target_lang),
        )
        llm = get_llm_client()

        try:
            data = llm.complete_json(messages, model=llm.fast_model, temperature=0.2)
        except LLMError as e:
            logger.warning(f"Batch translation to '{target_lang}' failed, keeping source text: {e}")
            return list(texts), True

        translations = data.get("translations")
        if (
            not isinstance(translations, list)
            or len(translations) != len(texts)
            or not all(isinstance(t, str) for t in translations)
        ):
            got = len(translations) if isinstance(translations, list) else type(translations).__name__
            logger.warning(f"Batch translation to '{target_lang}' returned {got} items for {len(texts)} inputs, keeping source text")
            return list(texts), True

        # Blank answers keep the source string
        return [t.strip() or src for t, src in zip(translations, texts)], False

    @staticmethod
    def sync_language(
        target_lang: str,
        source: dict[str, str],
        source_lang: str,
        batch_size: int | None = None,
    ) -> LanguageSyncResult:
        """
        Translate and upsert every key of `source` missing in `target_lang`.

        Raises:
            SupabaseClientError: If the target language's keys can't be read
        """
        batch_size = batch_size or settings.TRANSLATION_BATCH_SIZE
        existing = TranslationService.fetch_all_keys(target_lang)
        missing = TranslationService.find_missing(source, existing)
        result = LanguageSyncResult(language_code=target_lang, missing=len(missing))

        if not missing:
            logger.info(f"[{target_lang}] nothing to translate")
            return result

        logger.info(f"[{target_lang}] {len(missing)} missing keys, {len(chunked(missing, batch_size))} batches")

        for index, keys in enumerate(chunked(missing, batch_size), start=1):
            texts = [source[key] for key in keys]
            translations, used_fallback = TranslationService.translate_batch(texts, source_lang, target_lang)
            if used_fallback:
                result.fallback_batches += 1

            rows = [
                {"key": key, "language_code": target_lang, "text": text}
                for key, text in zip(keys, translations)
            ]
            try:
                TranslationService.upsert_rows(rows)
                result.translated += len(rows)
            except SupabaseClientError as e:
                result.failed_batches += 1
                logger.error(f"[{target_lang}] batch {index} skipped: {e}")

        logger.info(
            f"[{target_lang}] done: {result.translated}/{result.missing} written, "
            f"{result.fallback_batches} fallback, {result.failed_batches} failed"
        )
        return result

    @staticmethod
    def sync_missing(
        source_lang: str | None = None,
        target_langs: list[str] | None = None,
        progress: ProgressCallback | None = None,
    ) -> SyncReport:
        """
        Run the missing-key sync across languages.

        Args:
            source_lang: Language to translate from (default TRANSLATION_SOURCE_LANG)
            target_langs: Languages to fill (default: all supported)
            progress: Called before each language starts

        Raises:
            DatabaseError: If the source language can't be read
        """
        source_lang = normalize_lang(source_lang or settings.TRANSLATION_SOURCE_LANG)
        targets = [normalize_lang(code) for code in (target_langs or SUPPORTED_TARGET_LANGUAGES)]
        targets = [code for code in dict.fromkeys(targets) if code != source_lang]

        try:
            source = TranslationService.fetch_all_keys(source_lang)
        except SupabaseClientError as e:
            raise DatabaseError(f"Could not read '{source_lang}' translations", error=str(e))

        report = SyncReport(source_lang=source_lang, total_source_keys=len(source))
        if not source:
            logger.warning(f"No '{source_lang}' keys found; nothing to sync")
            return report

        for index, target in enumerate(targets):
            if progress:
                progress(index, len(targets), target)
            try:
                report.languages.append(
                    TranslationService.sync_language(target, source, source_lang)
                )
            except SupabaseClientError as e:
                logger.error(f"[{target}] skipped, could not read existing keys: {e}")
                report.languages.append(LanguageSyncResult(language_code=target, failed_batches=1))

        logger.info(f"Translation sync finished: {report.total_translated} rows across {len(targets)} languages")
        return report

    # -------------------------------------------------------------------------
    # English seeding and full-language sync
    # -------------------------------------------------------------------------

    @staticmethod
    def seed_english(language_code: str = "en", base: dict[str, str] | None = None) -> SeedResult:
        """
        Write the bundled English strings into ui_translations.

        New keys are inserted; existing keys whose text differs are updated.

        Raises:
            BadRequestError: If language_code isn't "en"
            DatabaseError: If reading or writing fails
        """
        if normalize_lang(language_code) != "en":
            raise BadRequestError(
                "Only English can be seeded from the base strings",
                suggestion="Use the translation sync for other languages",
            )
        base = base if base is not None else UI_STRINGS

        try:
            existing = TranslationService.fetch_all_keys("en")
            inserted = [k for k in base if k not in existing]
            updated = [k for k in base if k in existing and existing[k] != base[k]]
            rows = [
                {"key": key, "language_code": "en", "text": base[key]}
                for key in inserted + updated
            ]
            TranslationService.upsert_rows(rows)
        except SupabaseClientError as e:
            raise DatabaseError("Failed to seed English translations", error=str(e))

        logger.info(f"Seeded English: {len(inserted)} inserted, {len(updated)} updated")
        return SeedResult(inserted=len(inserted), updated=len(updated), total_keys=len(base))

    @staticmethod
    def sync_full_language(language_code: str) -> FullSyncResult:
        """
        Translate the whole English map for one language in a single call.

        Keys the model drops or blanks fall back to English. When the English
        rows are empty or unreadable, the bundled UI_STRINGS are the base.

        Raises:
            BadRequestError: Unsupported language or no English base at all
            AIServiceError: If the model fails or returns invalid JSON
            DatabaseError: If reading or writing fails
        """
        lang = normalize_lang(language_code)
        if not is_supported_target(lang):
            raise BadRequestError(
                f"Unsupported language: {language_code}",
                details={"supported": list(SUPPORTED_TARGET_LANGUAGES)},
            )

        try:
            base = TranslationService.fetch_all_keys("en")
        except SupabaseClientError as e:
            logger.warning(f"English rows unreadable, using bundled UI strings: {e}")
            base = {}
        if not base:
            base = dict(UI_STRINGS)
        if not base:
            raise BadRequestError(
                "No English base strings found",
                suggestion="Seed English first with POST /admin/translations/seed-en",
            )

        llm = get_llm_client()
        try:
            translated = llm.complete_json(
                build_full_language_messages(base, language_name(lang)),
                model=llm.fast_model,
                temperature=0.2,
            )
        except LLMError as e:
            raise AIServiceError(f"AI translation failed: {e.message}", rate_limited=e.rate_limited)

        rows = []
        for key, english in base.items():
            value = translated.get(key)
            text = value.strip() if isinstance(value, str) and value.strip() else english
            rows.append({"key": key, "language_code": lang, "text": text})

        try:
            TranslationService.upsert_rows(rows)
        except SupabaseClientError as e:
            raise DatabaseError("Failed to save translations", error=str(e))

        logger.info(f"Full sync for '{lang}': {len(rows)} rows")
        return FullSyncResult(language_code=lang, inserted_or_updated=len(rows))

    @staticmethod
    def missing_report(language_code: str, source_lang: str | None = None) -> MissingKeysReport:
        """Keys missing in a language and keys present with empty text."""
        lang = normalize_lang(language_code)
        source_lang = normalize_lang(source_lang or settings.TRANSLATION_SOURCE_LANG)
        try:
            source = TranslationService.fetch_all_keys(source_lang)
            target = TranslationService.fetch_all_keys(lang)
        except SupabaseClientError as e:
            raise DatabaseError("Failed to load translations", error=str(e))

        return MissingKeysReport(
            language_code=lang,
            source_lang=source_lang,
            missing=TranslationService.find_missing(source, target),
            empty=sorted(key for key, text in target.items() if key in source and not text.strip()),
        )
