# =============================================================================
# tests/test_translation_service.py - UI Translation Sync Tests
# =============================================================================
# Covers paging, missing-key diffing, batch fallbacks and per-batch failure
# isolation. The LLM is a MagicMock; Supabase is the in-memory fake.
#
# Run with: pytest tests/test_translation_service.py -v
# =============================================================================

import json
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import AIServiceError, BadRequestError, DatabaseError
from core.services.translation_service import TranslationService, chunked
from lib.supabase_client import PAGE_SIZE
from llm.client import LLMError


def translations_table(data: dict[str, dict[str, str]], fail_upserts: int = 0):
    """
    Answer ui_translations queries from {language: {key: text}}.

    Upserts are applied to `data`; the first `fail_upserts` of them raise.
    """
    state = {"failures_left": fail_upserts}

    def answer(query):
        if query.called("upsert"):
            if state["failures_left"] > 0:
                state["failures_left"] -= 1
                return Exception("upsert timeout")
            for row in query.args_of("upsert")[0]:
                data.setdefault(row["language_code"], {})[row["key"]] = row["text"]
            return []
        lang = query.filters()["language_code"]
        rows = [{"key": k, "text": v} for k, v in sorted(data.get(lang, {}).items())]
        start, end = query.args_of("range")
        return rows[start:end + 1]

    return answer


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.fast_model = "fast-model"
    with patch("core.services.translation_service.get_llm_client", return_value=mock):
        yield mock


def echo_upper(messages, **kwargs):
    """Fake model: uppercases every text it is given."""
    texts = json.loads(messages[-1]["content"])["texts"]
    return {"translations": [t.upper() for t in texts]}


class TestHelpers:

    def test_chunked(self):
        assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
        assert chunked([], 20) == []

    def test_find_missing_is_sorted_source_minus_target(self):
        source = {"b": "B", "a": "A", "c": "C"}
        target = {"b": "Bee", "z": "extra"}
        assert TranslationService.find_missing(source, target) == ["a", "c"]


class TestFetchAllKeys:

    def test_pages_past_the_api_cap(self, fake_db):
        data = {"en": {f"key.{i:05d}": f"text {i}" for i in range(PAGE_SIZE + 5)}}
        fake_db.on("ui_translations", translations_table(data))

        keys = TranslationService.fetch_all_keys("en")

        assert len(keys) == PAGE_SIZE + 5
        ranges = [q.args_of("range") for q in fake_db.queries("ui_translations")]
        assert ranges == [(0, PAGE_SIZE - 1), (PAGE_SIZE, 2 * PAGE_SIZE - 1)]

    def test_public_read_lowercases_code(self, fake_db):
        fake_db.on("ui_translations", translations_table({"de": {"nav.home": "Start"}}))
        assert TranslationService.get_translations("DE") == {"nav.home": "Start"}

    def test_read_failure_is_database_error(self, fake_db):
        fake_db.on("ui_translations", Exception("boom"))
        with pytest.raises(DatabaseError):
            TranslationService.get_translations("de")


class TestTranslateBatch:

    def test_returns_model_translations(self, llm):
        llm.complete_json.side_effect = echo_upper

        result, fallback = TranslationService.translate_batch(["save", "cancel"], "en", "de")

        assert result == ["SAVE", "CANCEL"]
        assert fallback is False
        assert llm.complete_json.call_args.kwargs["model"] == "fast-model"

    def test_llm_error_keeps_source_text(self, llm):
        llm.complete_json.side_effect = LLMError("down")

        result, fallback = TranslationService.translate_batch(["save"], "en", "de")

        assert result == ["save"]
        assert fallback is True

    def test_count_mismatch_keeps_source_text(self, llm):
        llm.complete_json.return_value = {"translations": ["only one"]}

        result, fallback = TranslationService.translate_batch(["a", "b"], "en", "de")

        assert result == ["a", "b"]
        assert fallback is True

    def test_blank_item_falls_back_per_item(self, llm):
        llm.complete_json.return_value = {"translations": ["Speichern", "  "]}

        result, fallback = TranslationService.translate_batch(["Save", "Cancel"], "en", "de")

        assert result == ["Speichern", "Cancel"]
        assert fallback is False


class TestSyncMissing:

    def test_fills_only_missing_keys_in_batches(self, fake_db, llm):
        data = {
            "en": {f"k{i:02d}": f"text {i}" for i in range(45)},
            "de": {"k00": "schon da"},
        }
        fake_db.on("ui_translations", translations_table(data))
        llm.complete_json.side_effect = echo_upper

        report = TranslationService.sync_missing("en", ["de"])

        result = report.languages[0]
        assert result.missing == 44
        assert result.translated == 44
        assert llm.complete_json.call_count == 3  # 20 + 20 + 4
        assert data["de"]["k00"] == "schon da"
        assert data["de"]["k01"] == "TEXT 1"
        assert report.total_translated == 44

    def test_failed_upsert_skips_only_that_batch(self, fake_db, llm):
        data = {"en": {f"k{i:02d}": "x" for i in range(25)}, "fr": {}}
        fake_db.on("ui_translations", translations_table(data, fail_upserts=1))
        llm.complete_json.side_effect = echo_upper

        result = TranslationService.sync_missing("en", ["fr"]).languages[0]

        assert result.failed_batches == 1
        assert result.translated == 5
        assert len(data["fr"]) == 5

    def test_targets_are_deduped_and_exclude_source(self, fake_db, llm):
        data = {"en": {"a": "A"}}
        fake_db.on("ui_translations", translations_table(data))
        llm.complete_json.side_effect = echo_upper
        seen = []

        report = TranslationService.sync_missing(
            "en", ["de", "DE-at", "en", "fr"],
            progress=lambda i, total, code: seen.append((i, total, code)),
        )

        assert [r.language_code for r in report.languages] == ["de", "fr"]
        assert seen == [(0, 2, "de"), (1, 2, "fr")]

    def test_rerun_is_a_no_op(self, fake_db, llm):
        data = {"en": {"a": "A", "b": "B"}, "de": {}}
        fake_db.on("ui_translations", translations_table(data))
        llm.complete_json.side_effect = echo_upper

        TranslationService.sync_missing("en", ["de"])
        second = TranslationService.sync_missing("en", ["de"]).languages[0]

        assert second.missing == 0
        assert llm.complete_json.call_count == 1

    def test_unreadable_source_raises(self, fake_db, llm):
        fake_db.on("ui_translations", Exception("boom"))
        with pytest.raises(DatabaseError):
            TranslationService.sync_missing("en", ["de"])


class TestSeedAndFullSync:

    def test_seed_counts_inserted_and_changed(self, fake_db):
        data = {"en": {"a": "A", "b": "old"}}
        fake_db.on("ui_translations", translations_table(data))

        result = TranslationService.seed_english("en", base={"a": "A", "b": "new", "c": "C"})

        assert (result.inserted, result.updated, result.total_keys) == (1, 1, 3)
        assert data["en"] == {"a": "A", "b": "new", "c": "C"}

    def test_seed_rejects_other_languages(self):
        with pytest.raises(BadRequestError):
            TranslationService.seed_english("de")

    def test_full_sync_falls_back_to_english_for_dropped_keys(self, fake_db, llm):
        data = {"en": {"a": "Hello", "b": "Bye"}}
        fake_db.on("ui_translations", translations_table(data))
        llm.complete_json.return_value = {"a": "Hallo", "b": ""}

        result = TranslationService.sync_full_language("de")

        assert result.inserted_or_updated == 2
        assert data["de"] == {"a": "Hallo", "b": "Bye"}

    def test_full_sync_uses_bundled_strings_when_english_is_empty(self, fake_db, llm):
        data = {}
        fake_db.on("ui_translations", translations_table(data))
        llm.complete_json.return_value = {}

        with patch("core.services.translation_service.UI_STRINGS", {"nav.home": "Home"}):
            result = TranslationService.sync_full_language("de")

        assert result.inserted_or_updated == 1
        assert data["de"] == {"nav.home": "Home"}

    def test_full_sync_uses_bundled_strings_when_english_is_unreadable(self, fake_db, llm):
        saved = []

        def answer(query):
            if query.called("upsert"):
                saved.extend(query.args_of("upsert")[0])
                return []
            return Exception("statement timeout")

        fake_db.on("ui_translations", answer)
        llm.complete_json.return_value = {"nav.home": "Startseite"}

        with patch("core.services.translation_service.UI_STRINGS", {"nav.home": "Home"}):
            result = TranslationService.sync_full_language("de")

        assert result.inserted_or_updated == 1
        assert saved == [{"key": "nav.home", "language_code": "de", "text": "Startseite"}]

    def test_full_sync_without_any_base_is_bad_request(self, fake_db, llm):
        fake_db.on("ui_translations", translations_table({}))

        with patch("core.services.translation_service.UI_STRINGS", {}):
            with pytest.raises(BadRequestError):
                TranslationService.sync_full_language("de")

        llm.complete_json.assert_not_called()

    def test_full_sync_rejects_unsupported_language(self):
        with pytest.raises(BadRequestError):
            TranslationService.sync_full_language("xx")

    def test_full_sync_model_failure_is_ai_error(self, fake_db, llm):
        fake_db.on("ui_translations", translations_table({"en": {"a": "A"}}))
        llm.complete_json.side_effect = LLMError("down")

        with pytest.raises(AIServiceError):
            TranslationService.sync_full_language("de")

    def test_missing_report(self, fake_db):
        data = {"en": {"a": "A", "b": "B", "c": "C"}, "de": {"a": "", "b": "Bee"}}
        fake_db.on("ui_translations", translations_table(data))

        report = TranslationService.missing_report("de", "en")

        assert report.missing == ["c"]
        assert report.empty == ["a"]


class TestTranslateScript:

    def test_progress_lines_count_from_one(self, capsys):
        from scripts.translate_missing_keys import main
        from core.models.translation import LanguageSyncResult, SyncReport

        def fake_sync(source, languages, progress=None):
            for index, code in enumerate(languages):
                progress(index, len(languages), code)
            return SyncReport(
                source_lang="en",
                total_source_keys=2,
                languages=[LanguageSyncResult(language_code=code, missing=2, translated=2) for code in languages],
            )

        with patch("sys.argv", ["translate_missing_keys.py", "de", "fr"]), \
                patch("scripts.translate_missing_keys.TranslationService.sync_missing", side_effect=fake_sync):
            assert main() == 0

        out = capsys.readouterr().out
        assert "[1/2] de..." in out
        assert "[2/2] fr..." in out
        assert "[0/2]" not in out
