"""Text cleanup shared by the symbol and timeframe resolvers."""

from __future__ import annotations

import re
import unicodedata

# Arabic-Indic (U+0660..) and extended Persian (U+06F0..) digits.
_DIGITS = str.maketrans(
    "٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹",
    "01234567890123456789",
)
_LETTER_FOLDS = str.maketrans(
    {
        "أ": "ا",
        "إ": "ا",
        "آ": "ا",
        "ٱ": "ا",
        "ة": "ه",
        "ى": "ي",
    }
)
# Harakat, superscript alef and tatweel.
_DIACRITICS_RE = re.compile(r"[\u064B-\u065F\u0670\u0640]")
_PUNCTUATION_RE = re.compile(r"[^\w\s/]")
_WHITESPACE_RE = re.compile(r"\s+")

_ARTICLE_PREFIXES = ("وال", "بال", "كال", "فال", "عال", "لل", "ال")
_PROCLITICS = "وبلكف"


def normalize_digits(text: str) -> str:
    """Map Arabic-Indic digits to ASCII."""
    return text.translate(_DIGITS)


def normalize_text(text: str | None) -> str:
    """Fold user text into the lower-case, single-spaced form used for matching."""
    value = unicodedata.normalize("NFKC", text or "")
    value = normalize_digits(value)
    value = _DIACRITICS_RE.sub("", value)
    value = value.translate(_LETTER_FOLDS)
    value = _PUNCTUATION_RE.sub(" ", value.replace("_", " "))
    value = _WHITESPACE_RE.sub(" ", value).strip()
    return value.lower()


def tokenize(text: str) -> list[str]:
    return [token for token in text.split(" ") if token]


def destem(token: str) -> str:
    """Strip the definite article and single-letter proclitics from an Arabic token."""
    for prefix in _ARTICLE_PREFIXES:
        if token.startswith(prefix) and len(token) - len(prefix) >= 2:
            return token[len(prefix) :]
    if len(token) >= 4 and token[0] in _PROCLITICS:
        return token[1:]
    return token
