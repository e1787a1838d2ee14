# =============================================================================
# llm/language.py - Language Codes and Names
# =============================================================================
# Language helpers for prompts and the UI translation sync.
# =============================================================================

DEFAULT_LANGUAGE = "en"

# Human-readable names the model understands
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "el": "Greek",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch (Netherlands)",
    "pl": "Polish",
    "tr": "Turkish",
    "ro": "Romanian",
    "hu": "Hungarian",
    "cs": "Czech",
    "sk": "Slovak",
    "bg": "Bulgarian",
    "sr": "Serbian",
    "hr": "Croatian",
    "sl": "Slovenian",
    "sv": "Swedish",
    "da": "Danish",
    "fi": "Finnish",
    "no": "Norwegian",
    "nb": "Norwegian (Bokmål)",
    "ru": "Russian",
    "uk": "Ukrainian",
    "ar": "Arabic (Modern Standard)",
    "he": "Hebrew",
    "zh": "Chinese (Simplified)",
    "ja": "Japanese",
    "ko": "Korean",
    "id": "Indonesian",
    "hi": "Hindi",
}

# Languages the UI ships translations for (English is the source)
SUPPORTED_TARGET_LANGUAGES: tuple[str, ...] = (
    "de", "es", "fr", "it", "pt", "el", "tr", "ru", "ro", "ar", "he", "zh", "ja",
    "id", "sr", "bg", "hu", "pl", "cs", "da", "sv", "nb", "nl", "hi", "ko",
)


def normalize_lang(code: str | None) -> str:
    """
    Reduce a browser/db language tag to its base code.

    Examples:
        normalize_lang("el-GR")  # "el"
        normalize_lang(None)     # "en"
    """
    if not code or not code.strip():
        return DEFAULT_LANGUAGE
    return code.strip().lower().split("-")[0]


def language_name(code: str) -> str:
    """Name of a language for prompts; unknown codes fall back to English."""
    return LANGUAGE_NAMES.get(normalize_lang(code), "English")


def is_supported_target(code: str) -> bool:
    return normalize_lang(code) in SUPPORTED_TARGET_LANGUAGES


def language_instruction(code: str | None) -> str:
    """System-prompt line pinning the reply language."""
    name = language_name(normalize_lang(code))
    return (
        f"Respond ONLY in {name}.\n"
        "Do NOT use any other language.\n"
        "If the user writes in another language, switch to that language."
    )
