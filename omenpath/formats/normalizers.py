"""
Shared normalization tables for dialect field transforms.

Conditions and languages are normalized to the display names used by the
export format. Unknown values pass through unchanged so that downstream
validation can report them instead of silently guessing.
"""

import re

DEFAULT_CONDITION = "Near Mint"

CONDITIONS: dict[str, str] = {
    "mint": "Mint",
    "m": "Mint",
    "near mint": "Near Mint",
    "near_mint": "Near Mint",
    "nm": "Near Mint",
    "nm-m": "Near Mint",
    "nm/m": "Near Mint",
    "excellent": "Near Mint",
    "lightly played": "Lightly Played",
    "light played": "Lightly Played",
    "light_played": "Lightly Played",
    "slightly played": "Lightly Played",
    "lp": "Lightly Played",
    "sp": "Lightly Played",
    "good": "Lightly Played",
    "good (lightly played)": "Lightly Played",
    "moderately played": "Moderately Played",
    "mp": "Moderately Played",
    "played": "Moderately Played",
    "heavily played": "Heavily Played",
    "heavy played": "Heavily Played",
    "hp": "Heavily Played",
    "poor": "Damaged",
    "damaged": "Damaged",
    "dmg": "Damaged",
    "d": "Damaged",
}

# Scryfall language code -> accepted spellings (lowercase)
LANGUAGE_ALIASES: dict[str, tuple[str, ...]] = {
    "en": ("en", "english", "eng"),
    "es": ("es", "sp", "spanish", "español", "espanol"),
    "fr": ("fr", "french", "français", "francais"),
    "de": ("de", "german", "deutsch"),
    "it": ("it", "italian", "italiano"),
    "pt": ("pt", "portuguese", "português", "portugues"),
    "ja": ("ja", "jp", "japanese", "日本語", "nihongo"),
    "ko": ("ko", "kr", "korean", "한국어", "hangukeo"),
    "ru": ("ru", "russian", "русский", "russkiy"),
    "zhs": (
        "zhs",
        "cs",
        "zh-cn",
        "zh_cn",
        "chinese simplified",
        "simplified chinese",
        "简体中文",
        "jianti",
    ),
    "zht": (
        "zht",
        "ct",
        "zh-tw",
        "zh_tw",
        "chinese traditional",
        "traditional chinese",
        "繁體中文",
        "fanti",
    ),
    "he": ("he", "hebrew", "עברית", "ivrit"),
    "la": ("la", "latin"),
    "grc": ("grc", "ancient greek", "greek", "ελληνικά"),
    "ar": ("ar", "arabic", "العربية"),
    "sa": ("sa", "sanskrit", "संस्कृत"),
    "ph": ("ph", "phyrexian"),
    "qya": ("qya", "quenya"),
}

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "ko": "Korean",
    "ru": "Russian",
    "zhs": "Chinese Simplified",
    "zht": "Chinese Traditional",
    "he": "Hebrew",
    "la": "Latin",
    "grc": "Ancient Greek",
    "ar": "Arabic",
    "sa": "Sanskrit",
    "ph": "Phyrexian",
    "qya": "Quenya",
}

_ALIAS_TO_CODE: dict[str, str] = {
    alias: code for code, aliases in LANGUAGE_ALIASES.items() for alias in aliases
}

FOIL_VALUES = frozenset({"foil", "true", "yes", "y", "1", "f", "premium", "x"})
ETCHED_VALUES = frozenset(
    {"etched", "etched foil", "foil etched", "etchedfoil", "f-etch", "etched_foil"}
)
TRUE_VALUES = frozenset({"true", "yes", "y", "1", "x"})

# "12/205" style collector numbers
_COLLECTOR_FRACTION = re.compile(r"^\s*([^/\s]+)\s*/\s*\d+\s*$")


def normalize_condition(value: str) -> str:
    """Map a vendor condition string to a display name (empty -> Near Mint)."""
    cleaned = value.strip()
    if not cleaned:
        return DEFAULT_CONDITION
    return CONDITIONS.get(cleaned.lower(), cleaned)


def language_code(value: str) -> str | None:
    """Scryfall language code for a language name or alias, if recognized."""
    cleaned = value.strip().lower()
    if not cleaned:
        return None
    return _ALIAS_TO_CODE.get(cleaned)


def is_language_recognized(value: str) -> bool:
    """Empty values count as recognized (nothing to validate)."""
    return not value.strip() or language_code(value) is not None


def normalize_language(value: str) -> str:
    """Map a language code or alias to its display name; unknown values pass through."""
    cleaned = value.strip()
    if not cleaned:
        return ""
    code = language_code(cleaned)
    if code is None:
        return cleaned
    return LANGUAGE_NAMES[code]


def language_display_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code)


def languages_match(requested: str, scryfall_lang: str) -> bool:
    """
    Compare a source language with a Scryfall language code.

    Missing values on either side are not a mismatch.
    """
    if not requested.strip() or not scryfall_lang.strip():
        return True
    requested_code = language_code(requested)
    actual_code = language_code(scryfall_lang) or scryfall_lang.strip().lower()
    if requested_code is None:
        return requested.strip().lower() == scryfall_lang.strip().lower()
    return requested_code == actual_code


def normalize_finish(value: str) -> str:
    """Canonicalize a finish string to "", "foil" or "etched"."""
    cleaned = value.strip().lower()
    if cleaned in ETCHED_VALUES:
        return "etched"
    if cleaned in FOIL_VALUES:
        return "foil"
    return ""


def normalize_flag(value: str) -> str:
    """Canonicalize a boolean-ish column to "true" or ""."""
    return "true" if value.strip().lower() in TRUE_VALUES else ""


def clean_collector_number(value: str) -> str:
    """Strip whitespace and a "/set size" suffix ("12/205" -> "12")."""
    cleaned = value.strip()
    match = _COLLECTOR_FRACTION.match(cleaned)
    if match:
        return match.group(1)
    return cleaned


def parse_int(value: str) -> int | None:
    """Parse an integer column, tolerating "3.0" and thousands separators."""
    cleaned = value.strip().replace(",", "")
    if not cleaned:
        return None
    try:
        return int(cleaned)
    except ValueError:
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
