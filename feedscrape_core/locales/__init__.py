"""
Locale Tables - Localized vocabularies in YAML format

Every table maps a canonical key to the surface forms accepted for it, e.g.:
```yaml
magnitude_words:
  thousand: ["ألف", "الف"]
months:
  "9": ["سبتمبر", "أيلول", "september"]
```

The bundled `default.yaml` covers Arabic and English. An extra file (see
`FEEDSCRAPE_LOCALE_FILE`) is merged on top of it, so new locales never
touch extraction code.
"""

import logging
import re
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LOCALE_FILE = Path(__file__).with_name("default.yaml")


class LocaleError(ValueError):
    """Locale file is missing or malformed"""
    pass


@dataclass(eq=False)
class LocaleTables:
    """Parsed locale tables: canonical key -> list of surface forms."""

    digits: Dict[str, List[str]] = field(default_factory=dict)
    separators: Dict[str, List[str]] = field(default_factory=dict)
    magnitude_suffixes: Dict[str, List[str]] = field(default_factory=dict)
    magnitude_words: Dict[str, List[str]] = field(default_factory=dict)
    relative_units: Dict[str, List[str]] = field(default_factory=dict)
    months: Dict[str, List[str]] = field(default_factory=dict)
    at_markers: Dict[str, List[str]] = field(default_factory=dict)
    period_markers: Dict[str, List[str]] = field(default_factory=dict)
    expand_labels: Dict[str, List[str]] = field(default_factory=dict)
    action_labels: Dict[str, List[str]] = field(default_factory=dict)
    metric_synonyms: Dict[str, List[str]] = field(default_factory=dict)
    total_interactions: Dict[str, List[str]] = field(default_factory=dict)
    profile_words: Dict[str, List[str]] = field(default_factory=dict)

    def merge(self, other: Dict[str, Dict[str, List[str]]]) -> None:
        """Merge raw YAML tables into these tables (surface forms are appended)."""
        known = {f.name for f in fields(self)}
        for table_name, table in (other or {}).items():
            if table_name not in known:
                raise LocaleError(f"Unknown locale table: {table_name}")
            if not isinstance(table, dict):
                raise LocaleError(f"Locale table {table_name} must be a mapping")
            target = getattr(self, table_name)
            for key, forms in table.items():
                if isinstance(forms, str):
                    forms = [forms]
                if not isinstance(forms, list):
                    raise LocaleError(f"{table_name}.{key} must be a list of strings")
                bucket = target.setdefault(str(key), [])
                for form in forms:
                    form = str(form)
                    if form and form not in bucket:
                        bucket.append(form)

    def forms(self, table: str, keys: Optional[Iterable[str]] = None) -> List[str]:
        """All surface forms of a table (optionally restricted to some keys)."""
        data = getattr(self, table)
        wanted = list(keys) if keys is not None else list(data.keys())
        out: List[str] = []
        for key in wanted:
            out.extend(data.get(key, []))
        return out

    def lookup(self, table: str, surface: str) -> Optional[str]:
        """Canonical key for a surface form (case-insensitive)."""
        needle = (surface or "").strip().lower()
        for key, forms in getattr(self, table).items():
            if any(needle == f.lower() for f in forms):
                return key
        return None

    def alternation(self, table: str, keys: Optional[Iterable[str]] = None) -> str:
        """Regex alternation of surface forms, longest first."""
        return alternation(self.forms(table, keys))

    @property
    def digit_map(self) -> Dict[str, str]:
        return {surface: latin for latin, forms in self.digits.items() for surface in forms}

    @property
    def digit_class(self) -> str:
        """Character class matching Latin digits and every alternate digit."""
        extra = "".join(re.escape(ch) for ch in self.digit_map)
        return f"[0-9{extra}]"


def alternation(forms: Iterable[str]) -> str:
    ordered = sorted({f for f in forms if f}, key=len, reverse=True)
    if not ordered:
        # Matches nothing
        return "(?!)"
    return "|".join(re.escape(f) for f in ordered)


def whole_word(pattern: str) -> str:
    """Wrap an alternation so it only matches as a standalone word."""
    return rf"(?<!\w)(?:{pattern})(?!\w)"


def _read_yaml(path: Path) -> Dict[str, Dict[str, List[str]]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise LocaleError(f"Locale file not found: {path}")
    except yaml.YAMLError as e:
        raise LocaleError(f"Invalid YAML in locale file {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise LocaleError(f"Locale file {path} must contain a mapping of tables")
    return data


def load_locale_tables(extra_path: Optional[str] = None) -> LocaleTables:
    """
    Load the bundled tables and merge an optional extra locale file.

    Args:
        extra_path: Path to a YAML file with additional surface forms

    Returns:
        LocaleTables instance
    """
    tables = LocaleTables()
    tables.merge(_read_yaml(DEFAULT_LOCALE_FILE))
    if extra_path:
        tables.merge(_read_yaml(Path(extra_path)))
        logger.debug(f"Merged locale file {extra_path}")
    return tables


@lru_cache(maxsize=8)
def _cached_tables(extra_path: Optional[str]) -> LocaleTables:
    return load_locale_tables(extra_path)


def get_locale_tables() -> LocaleTables:
    """Tables for the configured locale file (cached)."""
    from feedscrape_core.config import config
    return _cached_tables(config.locale_file)


__all__ = [
    "LocaleError",
    "LocaleTables",
    "alternation",
    "whole_word",
    "load_locale_tables",
    "get_locale_tables",
    "DEFAULT_LOCALE_FILE",
]
