"""
Extraction pipeline - one run from URL to records

    navigate (with retry) -> load until converged -> snapshot items
    -> extract fields -> dedupe (first seen, up to target) -> normalize dates

A run is strictly sequential: every call on the page source is awaited
before the next one. Independent runs on separate sources can run side by
side with `extract_many`.

Usage:
    async with open_page() as page:
        result = await extract(url, source=PlaywrightPageSource(page))
    print(result.target_reached, len(result.records))
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from .config import ExtractionConfig, config as global_config
from .config_logger import log_all_config_to_run_logger
from .convergence import ConvergenceController, ConvergenceState, ProgressCallback
from .dedup import dedupe_records
from .extraction import FieldExtractor, attach_timestamps
from .locales import LocaleTables, get_locale_tables
from .profile import collect_profile
from .records import ExtractionResult
from .retry import NavigationError, navigate_with_retry
from .run_logger import create_run_logger
from .temporal import to_iso

logger = logging.getLogger(__name__)


def _progress_hook(run_logger, on_progress: Optional[ProgressCallback]) -> Optional[ProgressCallback]:
    if run_logger is None:
        return on_progress

    def hook(state: ConvergenceState, count: int) -> None:
        run_logger.log_kv(
            f"reveal {state.iteration}",
            f"{count} items ({state.phase.value}, stalls={state.stall_count})",
        )
        if on_progress:
            on_progress(state, count)

    return hook


async def _run(
    source_ref: str,
    cfg: ExtractionConfig,
    source,
    now: datetime,
    run_logger,
    on_progress: Optional[ProgressCallback],
    tables: LocaleTables,
) -> ExtractionResult:
    started = time.monotonic()
    if run_logger:
        run_logger.log_heading("Configuration")
        log_all_config_to_run_logger(run_logger, cfg)
        run_logger.log_heading("Navigation")

    try:
        await navigate_with_retry(
            source,
            source_ref,
            max_attempts=cfg.navigation_attempts,
            base_delay=cfg.navigation_base_delay,
            wait_until=cfg.wait_until,
            timeout_ms=cfg.navigation_timeout_ms,
        )
    except NavigationError as e:
        if run_logger:
            run_logger.log_error(str(e))
            run_logger.finalize(False, int((time.monotonic() - started) * 1000), str(e))
        raise
    if run_logger:
        run_logger.log_text(f"Opened {source_ref}")
        run_logger.log_heading("Loading")

    controller = ConvergenceController(
        source,
        target=cfg.target,
        stall_limit=cfg.stall_limit,
        max_iterations=cfg.max_iterations,
        reveal_delay_ms=cfg.reveal_delay_ms,
        on_progress=_progress_hook(run_logger, on_progress),
    )
    outcome = await controller.run()

    items = await source.current_items()
    extractor = FieldExtractor(metric=cfg.metric, tables=tables, leading_window=cfg.leading_window)
    records = extractor.extract_all(items)
    unique = dedupe_records(records, limit=cfg.target)
    records = attach_timestamps(unique, now=now, assume_current_year=cfg.assume_current_year, tables=tables)
    logger.info(
        f"Extracted {len(records)} record(s) from {len(items)} item(s) "
        f"(target {cfg.target}, reached={outcome.target_reached})"
    )

    profile = None
    if cfg.collect_profile:
        profile = await collect_profile(
            source,
            tables,
            url=source_ref,
            followers_xpath=cfg.followers_xpath,
            likes_xpath=cfg.likes_xpath,
            min_followers=cfg.profile_min_followers,
            navigation_attempts=cfg.navigation_attempts,
            navigation_base_delay=cfg.navigation_base_delay,
            wait_until=cfg.wait_until,
            timeout_ms=cfg.navigation_timeout_ms,
        )

    result = ExtractionResult(
        records=records,
        loaded_count=outcome.loaded_count,
        target=cfg.target,
        target_reached=outcome.target_reached,
        url=source_ref,
        phase=outcome.phase.value,
        iterations=outcome.iterations,
        scraped_at=to_iso(now),
        profile=profile,
    )

    if run_logger:
        run_logger.log_heading("Outcome")
        run_logger.log_kv("phase", outcome.phase.value)
        run_logger.log_kv("loaded", outcome.loaded_count)
        run_logger.log_kv("records", len(records))
        run_logger.log_table(
            ["#", "Text", cfg.metric, "Date", "ISO"],
            [
                [i + 1, r.text, r.engagement_count, r.raw_temporal_expression, r.normalized_timestamp]
                for i, r in enumerate(records)
            ],
            title="Records",
        )
        run_logger.log_json(result.summary(), "Engagement summary")
        if profile:
            run_logger.log_json(profile.to_dict(), "Page profile")
        run_logger.finalize(True, int((time.monotonic() - started) * 1000))
    return result


async def extract(
    source_ref: str,
    config: Optional[ExtractionConfig] = None,
    source=None,
    now: Optional[datetime] = None,
    run_logger=None,
    on_progress: Optional[ProgressCallback] = None,
    tables: Optional[LocaleTables] = None,
) -> ExtractionResult:
    """
    Extract up to `config.target` unique records from the feed at `source_ref`.

    Args:
        source_ref: URL of the feed
        config: Run settings (defaults built from the environment)
        source: Page source; when omitted a headless browser page is opened
        now: Reference time for relative dates (defaults to the configured timezone's now)
        run_logger: Optional RunLogger; one is created when FEEDSCRAPE_RUN_LOG is set
        on_progress: Called after every reveal with (state, count)
        tables: Locale tables (defaults to the configured ones)

    Returns:
        ExtractionResult; falling short of the target is reported through
        `target_reached`, not raised

    Raises:
        NavigationError: the page could not be reached
    """
    cfg = config or ExtractionConfig.from_config()
    tables = tables or get_locale_tables()
    if now is None:
        now = datetime.now(ZoneInfo(global_config.timezone_id))
    if run_logger is None and global_config.run_log:
        run_logger = create_run_logger(url=source_ref, target=cfg.target)

    if source is not None:
        return await _run(source_ref, cfg, source, now, run_logger, on_progress, tables)

    from .browser_setup import open_page
    from .page_source import PlaywrightPageSource

    async with open_page(global_config) as page:
        source = PlaywrightPageSource(page, global_config.item_selector, tables)
        return await _run(source_ref, cfg, source, now, run_logger, on_progress, tables)


async def extract_many(
    jobs: Iterable[Tuple[str, object]],
    config: Optional[ExtractionConfig] = None,
    now: Optional[datetime] = None,
    return_exceptions: bool = False,
) -> List:
    """
    Run independent extractions concurrently, one per `(source_ref, source)` pair.

    Results come back in job order. With `return_exceptions=True` a failed
    run yields its exception instead of cancelling the others.
    """
    jobs: Sequence[Tuple[str, object]] = list(jobs)
    tasks = [extract(ref, config=config, source=source, now=now) for ref, source in jobs]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


__all__ = ["extract", "extract_many"]
