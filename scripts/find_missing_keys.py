#!/usr/bin/env python3
# =============================================================================
# scripts/find_missing_keys.py - Report Missing UI Translations
# =============================================================================
# Usage:
#   python scripts/find_missing_keys.py de
#   python scripts/find_missing_keys.py de --show 50
# =============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.exceptions import AppError
from core.services.translation_service import TranslationService


def main() -> int:
    parser = argparse.ArgumentParser(description="List UI keys missing or empty in a language")
    parser.add_argument("language", help="Language code to check, e.g. de")
    parser.add_argument("--source", default=None, help="Source language (default: TRANSLATION_SOURCE_LANG)")
    parser.add_argument("--show", type=int, default=20, help="How many example keys to print")
    args = parser.parse_args()

    try:
        report = TranslationService.missing_report(args.language, args.source)
    except AppError as e:
        print(f"ERROR: {e.message}")
        return 1

    print(f"{report.language_code} vs {report.source_lang}")
    print(f"  missing: {len(report.missing)}")
    for key in report.missing[:args.show]:
        print(f"    - {key}")
    print(f"  empty:   {len(report.empty)}")
    for key in report.empty[:args.show]:
        print(f"    - {key}")

    return 0 if not report.missing and not report.empty else 2


if __name__ == "__main__":
    sys.exit(main())
