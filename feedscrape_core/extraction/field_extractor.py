import logging
from datetime import datetime
from typing import Iterable, List, Optional

from feedscrape_core.config import METRICS
from feedscrape_core.content_item import ContentItem
from feedscrape_core.locales import LocaleTables, get_locale_tables
from feedscrape_core.records import ExtractedRecord
from feedscrape_core.temporal import normalize_date

from .engagement import engagement_chain
from .text import extract_text
from .timestamps import DEFAULT_LEADING_WINDOW, temporal_chain

logger = logging.getLogger(__name__)


class FieldExtractor:
    """
    Turns content items into records.

    Text, engagement and date are extracted independently; an item whose
    cleaned text is empty yields no record.
    """

    def __init__(
        self,
        metric: str = "reactions",
        tables: Optional[LocaleTables] = None,
        leading_window: int = DEFAULT_LEADING_WINDOW,
    ):
        if metric not in METRICS:
            raise ValueError(f"Unknown metric {metric!r}, expected one of {METRICS}")
        self.metric = metric
        self.tables = tables or get_locale_tables()
        self.engagement = {m: engagement_chain(m, self.tables) for m in METRICS}
        self.temporal = temporal_chain(self.tables, leading_window)

    def extract(self, item: ContentItem) -> Optional[ExtractedRecord]:
        text = extract_text(item, self.tables)
        metrics = {m: chain(item) for m, chain in self.engagement.items()}
        raw_date = self.temporal(item)
        if not text:
            logger.debug("Item dropped: no text after cleaning")
            return None
        return ExtractedRecord(
            text=text,
            engagement_count=metrics[self.metric],
            raw_temporal_expression=raw_date,
            metrics=metrics,
        )

    def extract_all(self, items: Iterable[ContentItem]) -> List[ExtractedRecord]:
        records = []
        for item in items:
            record = self.extract(item)
            if record is not None:
                records.append(record)
        return records


def attach_timestamps(
    records: Iterable[ExtractedRecord],
    now: Optional[datetime] = None,
    assume_current_year: bool = True,
    tables: Optional[LocaleTables] = None,
) -> List[ExtractedRecord]:
    """Fill `normalized_timestamp` from each record's raw date expression."""
    out = []
    for record in records:
        normalized = None
        if record.raw_temporal_expression:
            normalized = normalize_date(
                record.raw_temporal_expression,
                now=now,
                assume_current_year=assume_current_year,
                tables=tables,
            )
        out.append(record.with_timestamp(normalized))
    return out
