"""
Deduplication of extracted records.

The canonical key is the cleaned text itself; matching is exact. The first
occurrence wins and first-seen order is kept, so an item rendered twice while
scrolling (e.g. a reshare) collapses into one record.
"""

import logging
from typing import Iterable, List, Optional, Set

from .records import ExtractedRecord

logger = logging.getLogger(__name__)


class DedupSet:
    """Canonical keys seen during one run."""

    def __init__(self):
        self._keys: Set[str] = set()

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: str) -> bool:
        return key in self._keys

    def add(self, key: str) -> bool:
        """Register a key; False when it was already present."""
        if key in self._keys:
            return False
        self._keys.add(key)
        return True


def canonical_key(record: ExtractedRecord) -> str:
    return record.text


def dedupe_records(records: Iterable[ExtractedRecord], limit: Optional[int] = None) -> List[ExtractedRecord]:
    """
    Drop records whose canonical key was already seen.

    Args:
        records: Records in first-seen order
        limit: Keep at most this many records

    Returns:
        Unique records, first-seen order
    """
    seen = DedupSet()
    unique: List[ExtractedRecord] = []
    dropped = 0
    for record in records:
        if limit is not None and len(unique) >= limit:
            break
        if seen.add(canonical_key(record)):
            unique.append(record)
        else:
            dropped += 1
    if dropped:
        logger.debug(f"Dropped {dropped} duplicate record(s)")
    return unique


__all__ = ["DedupSet", "canonical_key", "dedupe_records"]
