"""
Date expression of one feed item.

Strategies, tried in order:
1. structured time element: its machine-readable `datetime` attribute
2. first permalink-like link (role="link"): relative or absolute pattern in its text
3. leading window of the item text (first N characters): same patterns

The matched substring is returned as written; normalization happens later.
"""

from functools import partial
from typing import Optional

from feedscrape_core.content_item import ContentItem, find_first, tag_of
from feedscrape_core.locales import LocaleTables, get_locale_tables
from feedscrape_core.temporal import find_temporal_expression

from .strategies import StrategyChain

DEFAULT_LEADING_WINDOW = 300


def from_time_element(item: ContentItem) -> Optional[str]:
    node = find_first(item, lambda n: "datetime" in n.attributes())
    if node is not None:
        value = (node.attributes().get("datetime") or "").strip()
        if value:
            return value
    node = find_first(item, lambda n: tag_of(n) == "time")
    if node is not None:
        value = (node.text() or "").strip()
        return value or None
    return None


def _is_permalink(node: ContentItem) -> bool:
    tag = tag_of(node)
    return node.attributes().get("role") == "link" and tag in ("", "a")


def from_permalink(item: ContentItem, tables: LocaleTables) -> Optional[str]:
    node = find_first(item, _is_permalink)
    if node is None:
        return None
    return find_temporal_expression(node.text(), tables)


def from_leading_text(item: ContentItem, tables: LocaleTables, window: int = DEFAULT_LEADING_WINDOW) -> Optional[str]:
    return find_temporal_expression((item.text() or "")[:window], tables)


def temporal_chain(tables: Optional[LocaleTables] = None, window: int = DEFAULT_LEADING_WINDOW) -> StrategyChain:
    tables = tables or get_locale_tables()
    return StrategyChain(
        "temporal",
        [
            ("time_element", from_time_element),
            ("permalink", partial(from_permalink, tables=tables)),
            ("leading_text", partial(from_leading_text, tables=tables, window=window)),
        ],
    )


def extract_temporal_expression(
    item: ContentItem,
    tables: Optional[LocaleTables] = None,
    window: int = DEFAULT_LEADING_WINDOW,
) -> Optional[str]:
    """Raw date expression of an item, or None."""
    return temporal_chain(tables, window)(item)
