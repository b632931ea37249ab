"""
Engagement counters (reactions / comments / shares) of one feed item.

Strategies, tried in order:
1. "All reactions: 571 571 2 8" summary label followed by a run of numbers
2. accessible labels (aria-label) naming the metric, e.g. "12 comments"
3. short visible fragments holding a digit and a metric word
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache, partial
from typing import Dict, Optional, Pattern

from feedscrape_core.config import METRICS
from feedscrape_core.content_item import ContentItem, iter_descendants
from feedscrape_core.locales import LocaleTables, get_locale_tables
from feedscrape_core.numerals import first_number, normalize_count, number_pattern

from .strategies import StrategyChain

logger = logging.getLogger(__name__)

# Position of each metric in a 4-number summary: reactions, emoji count, comments, shares
_SUMMARY_POSITIONS = {"reactions": 0, "comments": 2, "shares": 3}


@dataclass(frozen=True)
class EngagementPatterns:
    summary: Pattern
    number: Pattern
    digit: Pattern
    synonyms: Dict[str, Pattern]


@lru_cache(maxsize=8)
def engagement_patterns(tables: LocaleTables) -> EngagementPatterns:
    d = tables.digit_class
    number = number_pattern(tables, allow_space=False)
    label = tables.alternation("total_interactions")
    summary = re.compile(
        rf"(?:{label})\s*[:：]?\s*(?P<run>{number}(?:\s+{number})*)",
        re.IGNORECASE,
    )
    return EngagementPatterns(
        summary=summary,
        number=re.compile(number, re.IGNORECASE),
        digit=re.compile(d),
        synonyms={
            metric: re.compile(tables.alternation("metric_synonyms", [metric]), re.IGNORECASE)
            for metric in METRICS
        },
    )


def from_summary_label(item: ContentItem, metric: str, tables: LocaleTables) -> Optional[int]:
    patterns = engagement_patterns(tables)
    m = patterns.summary.search(item.text() or "")
    if not m:
        return None
    values = [normalize_count(tok, tables) for tok in patterns.number.findall(m.group("run"))]
    values = [v for v in values if v is not None]
    if len(values) >= 4:
        return values[_SUMMARY_POSITIONS[metric]]
    if len(values) >= 2:
        return {"reactions": values[0], "comments": values[1], "shares": 0}[metric]
    if len(values) == 1 and metric == "reactions":
        return values[0]
    return None


def from_accessible_labels(item: ContentItem, metric: str, tables: LocaleTables) -> Optional[int]:
    synonyms = engagement_patterns(tables).synonyms[metric]
    for node in iter_descendants(item, include_self=True):
        label = node.attributes().get("aria-label")
        if not label or not synonyms.search(label):
            continue
        value = normalize_count(first_number(label, tables), tables)
        if value is not None:
            return value
    return None


def from_text_fragments(item: ContentItem, metric: str, tables: LocaleTables) -> Optional[int]:
    patterns = engagement_patterns(tables)
    synonyms = patterns.synonyms[metric]
    for node in iter_descendants(item):
        # Leaves only: containers repeat the text of everything below them
        if node.children():
            continue
        fragment = node.text() or ""
        if not patterns.digit.search(fragment) or not synonyms.search(fragment):
            continue
        value = normalize_count(first_number(fragment, tables), tables)
        if value is not None:
            return value
    return None


def engagement_chain(metric: str, tables: Optional[LocaleTables] = None) -> StrategyChain:
    if metric not in METRICS:
        raise ValueError(f"Unknown metric {metric!r}, expected one of {METRICS}")
    tables = tables or get_locale_tables()
    return StrategyChain(
        f"engagement:{metric}",
        [
            ("summary_label", partial(from_summary_label, metric=metric, tables=tables)),
            ("accessible_label", partial(from_accessible_labels, metric=metric, tables=tables)),
            ("text_fragment", partial(from_text_fragments, metric=metric, tables=tables)),
        ],
    )


def extract_engagement(item: ContentItem, metric: str = "reactions", tables: Optional[LocaleTables] = None) -> Optional[int]:
    """Counter for one metric, or None when no strategy finds it."""
    return engagement_chain(metric, tables)(item)


def extract_all_metrics(item: ContentItem, tables: Optional[LocaleTables] = None) -> Dict[str, Optional[int]]:
    return {metric: extract_engagement(item, metric, tables) for metric in METRICS}
