"""
Numeral and Magnitude Normalization

Turns counters as they appear on rendered pages ("2.3K", "2,300",
"٢٫٨ ألف", "1.2M followers") into integers.

Usage:
    from feedscrape_core.numerals import normalize_count

    normalize_count("1.5k")      # 1500
    normalize_count("٢٫٨ ألف")   # 2800
    normalize_count("n/a")       # None
"""

import logging
import math
import re
from functools import lru_cache
from typing import Optional, Pattern, Tuple

from .locales import LocaleTables, get_locale_tables, whole_word

logger = logging.getLogger(__name__)

MAGNITUDE_FACTORS = {
    "thousand": 1_000,
    "million": 1_000_000,
    "billion": 1_000_000_000,
}

# Grouping separator: sits between a digit and exactly three digits
_GROUPING_RE = re.compile(r"(?<=\d)[,\u00a0\u202f](?=\d{3}(?!\d))")
_DECIMAL_COMMA_RE = re.compile(r"(?<=\d),(?=\d)")


def normalize_digits(text: Optional[str], tables: Optional[LocaleTables] = None) -> str:
    """Map alternate-script digits to Latin digits, leaving everything else as-is."""
    tables = tables or get_locale_tables()
    mapping = tables.digit_map
    return "".join(mapping.get(ch, ch) for ch in str(text or ""))


def normalize_separators(text: str, tables: Optional[LocaleTables] = None) -> str:
    """Resolve localized decimal/grouping separators to a plain `1234.5` form."""
    tables = tables or get_locale_tables()
    for sep in tables.separators.get("decimal", []):
        text = text.replace(sep, ".")
    for sep in tables.separators.get("grouping", []):
        text = text.replace(sep, "")
    text = _GROUPING_RE.sub("", text)
    return _DECIMAL_COMMA_RE.sub(".", text)


@lru_cache(maxsize=8)
def _magnitude_patterns(tables: LocaleTables) -> Tuple[Pattern, Tuple[Tuple[str, Pattern], ...]]:
    suffixes = tables.alternation("magnitude_suffixes").lower()
    # Suffix directly after the number, not the start of a longer word ("5 min")
    token = re.compile(rf"(\d+(?:\.\d+)?)(?:\s*({suffixes})(?![^\W\d_]))?", re.IGNORECASE)
    words = tuple(
        (key, re.compile(whole_word(tables.alternation("magnitude_words", [key])), re.IGNORECASE))
        for key in MAGNITUDE_FACTORS
    )
    return token, words


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_count(raw, tables: Optional[LocaleTables] = None) -> Optional[int]:
    """
    Parse a textual count into an integer.

    Args:
        raw: Text such as "2.3K", "1,204", "١٢ ألف", "3 comments"
        tables: Locale tables (defaults to the configured ones)

    Returns:
        Integer count, or None when nothing parsable was found
    """
    if raw is None:
        return None
    tables = tables or get_locale_tables()
    s = normalize_separators(normalize_digits(str(raw), tables), tables).strip().lower()
    if not s:
        return None

    token_re, word_patterns = _magnitude_patterns(tables)
    m = token_re.search(s)
    if not m:
        digits_only = re.sub(r"[^0-9]", "", s)
        if not digits_only:
            return None
        return int(digits_only)

    factor = 1
    suffix = m.group(2)
    if suffix:
        key = tables.lookup("magnitude_suffixes", suffix)
        factor = MAGNITUDE_FACTORS.get(key, 1)
    else:
        for key, pattern in word_patterns:
            if pattern.search(s):
                factor = MAGNITUDE_FACTORS[key]
                break

    try:
        value = float(m.group(1)) * factor
    except ValueError:
        return None
    if not math.isfinite(value):
        logger.debug(f"Non-finite count for {raw!r}")
        return None
    return _round_half_up(value)


def number_pattern(tables: LocaleTables, allow_space: bool = True) -> str:
    """Regex source for one number in any configured digit script, with an optional k/m/b suffix."""
    digit = tables.digit_class
    separators = "".join(re.escape(s) for s in tables.forms("separators")) + ",."
    suffixes = tables.alternation("magnitude_suffixes")
    gap = r"\s*" if allow_space else ""
    return rf"{digit}(?:[{digit[1:-1]}{separators}]*{digit})?(?:{gap}(?:{suffixes})(?![^\W\d_]))?"


def first_number(text: Optional[str], tables: Optional[LocaleTables] = None) -> Optional[str]:
    """
    First numeric substring (with an optional magnitude suffix or word) in a text.

    Digits of any configured script are accepted; the substring is returned
    as it appears in the source.
    """
    if not text:
        return None
    tables = tables or get_locale_tables()
    words = tables.alternation("magnitude_words")
    pattern = rf"(?:{number_pattern(tables)})(?:\s*(?:{words})(?!\w))?"
    m = re.search(pattern, text, re.IGNORECASE)
    return m.group(0) if m else None


__all__ = [
    "MAGNITUDE_FACTORS",
    "normalize_digits",
    "normalize_separators",
    "normalize_count",
    "number_pattern",
    "first_number",
]
