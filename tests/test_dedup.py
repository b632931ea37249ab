"""
Tests for record deduplication
"""

from feedscrape_core.dedup import DedupSet, canonical_key, dedupe_records
from feedscrape_core.records import ExtractedRecord


def _records(*texts):
    return [ExtractedRecord(text=t, engagement_count=i) for i, t in enumerate(texts)]


class TestDedupeRecords:
    """First occurrence wins, first-seen order"""

    def test_two_of_three(self):
        records = _records("A", "B", "A")
        unique = dedupe_records(records)
        assert [r.text for r in unique] == ["A", "B"]
        # the first "A" is the one kept
        assert unique[0].engagement_count == 0

    def test_limit(self):
        unique = dedupe_records(_records("A", "A", "B", "C", "D"), limit=2)
        assert [r.text for r in unique] == ["A", "B"]

    def test_exact_match_only(self):
        unique = dedupe_records(_records("Hello", "hello", "Hello!"))
        assert len(unique) == 3

    def test_empty(self):
        assert dedupe_records([]) == []


class TestDedupSet:

    def test_add(self):
        seen = DedupSet()
        assert seen.add("x") is True
        assert seen.add("x") is False
        assert "x" in seen
        assert len(seen) == 1

    def test_canonical_key(self):
        assert canonical_key(ExtractedRecord(text="abc")) == "abc"
