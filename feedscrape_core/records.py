from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class ExtractedRecord:
    """One cleaned feed item."""
    text: str
    engagement_count: Optional[int] = None
    raw_temporal_expression: Optional[str] = None
    normalized_timestamp: Optional[str] = None
    metrics: Dict[str, Optional[int]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.text:
            raise ValueError("ExtractedRecord.text must be non-empty")
        if self.normalized_timestamp and not self.raw_temporal_expression:
            raise ValueError("normalized_timestamp requires raw_temporal_expression")

    @property
    def total_engagement(self) -> int:
        return sum(v for v in self.metrics.values() if v)

    def with_timestamp(self, normalized: Optional[str]) -> "ExtractedRecord":
        return replace(self, normalized_timestamp=normalized)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "engagementCount": self.engagement_count,
            "reactions": self.metrics.get("reactions"),
            "comments": self.metrics.get("comments"),
            "shares": self.metrics.get("shares"),
            "totalEngagement": self.total_engagement,
            "date": self.raw_temporal_expression,
            "dateISO": self.normalized_timestamp,
        }


def summarize_records(records: Sequence[ExtractedRecord]) -> Dict[str, Any]:
    """
    Engagement statistics for a record list.

    Missing counters count as 0; averages are rounded to whole numbers.
    """
    n = len(records)
    totals = {
        metric: sum((r.metrics.get(metric) or 0) for r in records)
        for metric in ("reactions", "comments", "shares")
    }
    best: Optional[ExtractedRecord] = None
    for r in records:
        if best is None or r.total_engagement > best.total_engagement:
            best = r
    return {
        "total_posts": n,
        "total_reactions": totals["reactions"],
        "total_comments": totals["comments"],
        "total_shares": totals["shares"],
        "avg_reactions": round(totals["reactions"] / n) if n else 0,
        "avg_comments": round(totals["comments"] / n) if n else 0,
        "avg_shares": round(totals["shares"] / n) if n else 0,
        "best_post": best.to_dict() if best else None,
    }


@dataclass
class PageProfile:
    """Page-level counters read from the page header."""
    title: Optional[str] = None
    followers: Optional[int] = None
    likes: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "followers": self.followers, "likes": self.likes}


@dataclass
class ExtractionResult:
    """Outcome of one extraction run."""
    records: List[ExtractedRecord]
    loaded_count: int
    target: int
    target_reached: bool
    url: str = ""
    phase: str = ""
    iterations: int = 0
    scraped_at: str = ""
    profile: Optional[PageProfile] = None

    def summary(self) -> Dict[str, Any]:
        return summarize_records(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.profile.to_dict() if self.profile else None,
            "url": self.url,
            "posts": [r.to_dict() for r in self.records],
            "summary": self.summary(),
            "scrapedAt": self.scraped_at,
            "meta": {
                "postsTarget": self.target,
                "loadedArticles": self.loaded_count,
                "targetReached": self.target_reached,
                "phase": self.phase,
                "iterations": self.iterations,
            },
        }
