"""
feedscrape_core: extraction of posts from lazily loaded, localized social feeds

Usage:
    from feedscrape_core import ExtractionConfig, extract
    from feedscrape_core.browser_setup import open_page
    from feedscrape_core.page_source import PlaywrightPageSource

    async with open_page() as page:
        result = await extract(url, ExtractionConfig(target=50), PlaywrightPageSource(page))
"""
from .config import Config, ExtractionConfig, config
from .content_item import ContentItem, ElementSnapshot
from .convergence import ConvergenceController, ConvergenceOutcome, ConvergencePhase
from .dedup import DedupSet, dedupe_records
from .extraction import FieldExtractor
from .numerals import normalize_count
from .page_source import PageSource, PlaywrightPageSource
from .pipeline import extract, extract_many
from .records import ExtractedRecord, ExtractionResult, PageProfile
from .retry import NavigationError, RetryExhaustedError
from .temporal import normalize_date

__all__ = [
    # Config
    "Config",
    "ExtractionConfig",
    "config",
    # Pipeline
    "extract",
    "extract_many",
    "ExtractionResult",
    "ExtractedRecord",
    "PageProfile",
    "NavigationError",
    "RetryExhaustedError",
    # Building blocks
    "ContentItem",
    "ElementSnapshot",
    "PageSource",
    "PlaywrightPageSource",
    "ConvergenceController",
    "ConvergenceOutcome",
    "ConvergencePhase",
    "DedupSet",
    "dedupe_records",
    "FieldExtractor",
    "normalize_count",
    "normalize_date",
]
