#!/usr/bin/env python3
# =============================================================================
# scripts/translate_missing_keys.py - Fill Missing UI Translations
# =============================================================================
# Runs the missing-key sync in the foreground (no Celery needed) and prints
# a per-language report.
#
# Usage:
#   python scripts/translate_missing_keys.py              # all languages
#   python scripts/translate_missing_keys.py de fr el     # selected
#   python scripts/translate_missing_keys.py --source en de
# =============================================================================

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.exceptions import AppError
from core.services.translation_service import TranslationService


def main() -> int:
    parser = argparse.ArgumentParser(description="Translate UI keys missing from target languages")
    parser.add_argument("languages", nargs="*", help="Target language codes (default: all supported)")
    parser.add_argument("--source", default=None, help="Source language (default: TRANSLATION_SOURCE_LANG)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    def progress(index: int, total: int, language_code: str) -> None:
        print(f"[{index + 1}/{total}] {language_code}...")

    try:
        report = TranslationService.sync_missing(args.source, args.languages or None, progress=progress)
    except AppError as e:
        print(f"ERROR: {e.message}")
        return 1

    print()
    print("=" * 60)
    print(f"Source: {report.source_lang} ({report.total_source_keys} keys)")
    print("=" * 60)
    for result in report.languages:
        line = f"{result.language_code:>4}: {result.translated}/{result.missing} written"
        if result.fallback_batches:
            line += f", {result.fallback_batches} batch(es) kept source text"
        if result.failed_batches:
            line += f", {result.failed_batches} batch(es) FAILED"
        print(line)
    print()
    print(f"Total translated: {report.total_translated}")

    failed = any(r.failed_batches for r in report.languages)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
