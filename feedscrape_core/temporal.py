"""
Temporal Normalization

Converts the date expressions found next to feed items into ISO-8601 UTC
timestamps:

- strict ISO values:   "2024-01-10T09:00:00Z"     -> "2024-01-10T09:00:00Z"
                       "2024-01-10T09:00:00.000Z" -> "2024-01-10T09:00:00Z"
- relative values:     "3h", "١٨ س", "2 days"      -> now minus the amount
- absolute values:     "14 سبتمبر الساعة 6:00 م"    -> 14 Sep (current year) 18:00
                       "3 March 2023 at 9:15 am"

Absolute values usually carry no year; the year of `now` is assumed unless
`assume_current_year=False`, in which case such values are not parsed.
Nothing in this module raises on bad input: unparsable values give None.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Pattern

from .locales import LocaleTables, get_locale_tables
from .numerals import normalize_digits

logger = logging.getLogger(__name__)

ISO_PATTERN = (
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?"
)

_UNIT_DELTAS = {
    "minute": lambda n: timedelta(minutes=n),
    "hour": lambda n: timedelta(hours=n),
    "day": lambda n: timedelta(days=n),
}


@dataclass(frozen=True)
class TemporalPatterns:
    """Compiled date patterns for one set of locale tables."""
    iso: Pattern
    relative: Pattern
    absolute: Pattern


@lru_cache(maxsize=8)
def temporal_patterns(tables: LocaleTables) -> TemporalPatterns:
    d = tables.digit_class
    units = tables.alternation("relative_units")
    months = tables.alternation("months")
    at = tables.alternation("at_markers")
    periods = tables.alternation("period_markers")
    relative = re.compile(
        rf"(?<![\d.,])(?P<amount>{d}+)\s*(?P<unit>{units})(?![^\W\d_])",
        re.IGNORECASE,
    )
    absolute = re.compile(
        rf"(?P<day>{d}{{1,2}})\s+(?P<month>{months})(?!\w)"
        rf"(?:\s+(?P<year>{d}{{4}}))?,?\s+(?:{at})\s+"
        rf"(?P<hour>{d}{{1,2}}):(?P<minute>{d}{{2}})"
        rf"(?:\s*(?P<period>{periods})(?![^\W\d_]))?",
        re.IGNORECASE,
    )
    return TemporalPatterns(
        iso=re.compile(ISO_PATTERN, re.IGNORECASE),
        relative=relative,
        absolute=absolute,
    )


def to_iso(dt: datetime) -> str:
    """
    Canonical ISO-8601 form in UTC with a `Z` suffix.

    Seconds are always present; milliseconds only when non-zero, so
    "2024-01-10T09:00:00.000Z" and "2024-01-10T09:00:00Z" share the canonical
    form "2024-01-10T09:00:00Z". Values already in canonical form come back
    unchanged.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    timespec = "milliseconds" if dt.microsecond // 1000 else "seconds"
    return dt.isoformat(timespec=timespec).replace("+00:00", "Z")


def parse_iso(value: str) -> Optional[datetime]:
    """Parse a strict ISO date-time; naive values are taken as UTC."""
    text = (value or "").strip().upper()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = re.sub(r"([+-]\d{2})(\d{2})$", r"\1:\2", text)
    # Older interpreters only accept 3 or 6 fractional digits
    text = re.sub(r"\.(\d{1,6})", lambda m: "." + m.group(1).ljust(6, "0"), text)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _aware(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _shift_back(now: datetime, unit: str, amount: int) -> Optional[datetime]:
    try:
        if unit == "year":
            year = now.year - amount
            try:
                return now.replace(year=year)
            except ValueError:
                # 29 February in a non-leap year
                return now.replace(year=year, day=28)
        delta = _UNIT_DELTAS.get(unit)
        if delta is None:
            return None
        return now - delta(amount)
    except (OverflowError, ValueError):
        return None


def normalize_date(
    raw: Optional[str],
    now: Optional[datetime] = None,
    assume_current_year: bool = True,
    tables: Optional[LocaleTables] = None,
) -> Optional[str]:
    """
    Normalize a date expression to an ISO-8601 UTC string.

    Args:
        raw: Expression such as "2024-01-10T09:00:00Z", "3h", "14 سبتمبر الساعة 6:00 م"
        now: Reference time for relative values and for the assumed year;
            absolute wall-clock values are read in its timezone
        assume_current_year: Use now.year when an absolute value has no year
        tables: Locale tables (defaults to the configured ones)

    Returns:
        ISO string, or None when the value cannot be parsed
    """
    if not raw:
        return None
    tables = tables or get_locale_tables()
    patterns = temporal_patterns(tables)
    s = normalize_digits(str(raw), tables).strip()
    now = _aware(now)

    m = patterns.iso.search(s)
    if m:
        dt = parse_iso(m.group(0))
        return to_iso(dt) if dt else None

    m = patterns.relative.search(s)
    if m:
        unit = tables.lookup("relative_units", m.group("unit"))
        shifted = _shift_back(now, unit, int(m.group("amount")))
        return to_iso(shifted) if shifted else None

    m = patterns.absolute.search(s)
    if m:
        return _absolute_to_iso(m, now, assume_current_year, tables)

    return None


def _absolute_to_iso(m, now: datetime, assume_current_year: bool, tables: LocaleTables) -> Optional[str]:
    month_key = tables.lookup("months", re.sub(r"\s+", " ", m.group("month")))
    if month_key is None:
        return None
    assumed_year = not m.group("year")
    if not assumed_year:
        year = int(m.group("year"))
    elif assume_current_year:
        year = now.year
    else:
        logger.debug(f"Absolute date without year skipped: {m.group(0)!r}")
        return None

    hour = int(m.group("hour"))
    period = tables.lookup("period_markers", m.group("period")) if m.group("period") else None
    if period:
        hour = hour % 12
        if period == "pm":
            hour += 12
    try:
        dt = datetime(year, int(month_key), int(m.group("day")), hour, int(m.group("minute")), tzinfo=now.tzinfo)
    except ValueError:
        return None
    if assumed_year and dt > now:
        # Year boundary: a December item read in January lands in the wrong year
        logger.warning(f"Date {m.group(0)!r} with assumed year {year} is later than now ({to_iso(now)})")
    return to_iso(dt)


def find_temporal_expression(text: Optional[str], tables: Optional[LocaleTables] = None) -> Optional[str]:
    """
    Left-most relative or absolute date expression in a text, unnormalized.

    When both kinds start at the same position the absolute one wins.
    """
    if not text:
        return None
    tables = tables or get_locale_tables()
    patterns = temporal_patterns(tables)
    found = [m for m in (patterns.absolute.search(text), patterns.relative.search(text)) if m]
    if not found:
        return None
    best = min(found, key=lambda m: m.start())
    return best.group(0).strip()


__all__ = [
    "ISO_PATTERN",
    "TemporalPatterns",
    "temporal_patterns",
    "to_iso",
    "parse_iso",
    "normalize_date",
    "find_temporal_expression",
]
