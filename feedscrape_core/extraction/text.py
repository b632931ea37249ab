import re
from functools import lru_cache
from typing import Optional, Pattern, Tuple

from feedscrape_core.content_item import ContentItem
from feedscrape_core.locales import LocaleTables, get_locale_tables, whole_word

_WHITESPACE_RE = re.compile(r"\s+")
_ZERO_WIDTH_RE = re.compile(r"[\u200b\u200c\u200d\u2060\ufeff]")


@lru_cache(maxsize=8)
def _text_patterns(tables: LocaleTables) -> Tuple[Pattern, Pattern]:
    expand = re.compile(tables.alternation("expand_labels"), re.IGNORECASE)
    action_bar = re.compile(whole_word(tables.alternation("action_labels")), re.IGNORECASE)
    return expand, action_bar


def sanitize_text(s: Optional[str]) -> str:
    """Drop zero-width characters and collapse whitespace."""
    return _WHITESPACE_RE.sub(" ", _ZERO_WIDTH_RE.sub("", s or "")).strip()


def clean_text(raw: Optional[str], tables: Optional[LocaleTables] = None) -> str:
    """
    Primary text of an item without UI noise.

    "Expand" affordances ("See more", "عرض المزيد") are removed and everything
    from the first action-bar label ("Like", "تعليق", ...) onwards is cut off.
    An empty result means the item has no content of its own.
    """
    if not raw:
        return ""
    tables = tables or get_locale_tables()
    expand, action_bar = _text_patterns(tables)
    text = expand.sub(" ", str(raw))
    m = action_bar.search(text)
    if m:
        text = text[:m.start()]
    return sanitize_text(text)


def extract_text(item: ContentItem, tables: Optional[LocaleTables] = None) -> str:
    return clean_text(item.text(), tables)
