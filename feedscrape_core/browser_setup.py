#!/usr/bin/env python3
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from playwright.async_api import async_playwright

from .config import Config, config as default_config

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]


def context_options(cfg: Config) -> Dict:
    """Browser context arguments for a feed page."""
    return {
        "viewport": {"width": 1366, "height": 900},
        "locale": cfg.locale,
        "timezone_id": cfg.timezone_id,
        "extra_http_headers": {
            "Accept-Language": f"{cfg.locale},en;q=0.8",
        },
    }


@asynccontextmanager
async def open_page(cfg: Optional[Config] = None) -> AsyncIterator:
    """
    Launch Chromium and yield a fresh page.

    The context and browser are closed when the block exits, also on error.

    Usage:
        async with open_page() as page:
            source = PlaywrightPageSource(page)
            result = await extract(url, source=source)
    """
    cfg = cfg or default_config
    playwright = await async_playwright().start()
    browser = None
    context = None
    try:
        browser = await playwright.chromium.launch(headless=cfg.headless, args=LAUNCH_ARGS)
        context = await browser.new_context(**context_options(cfg))
        page = await context.new_page()
        logger.debug(f"Browser ready (headless={cfg.headless}, locale={cfg.locale})")
        yield page
    finally:
        if context is not None:
            await context.close()
        if browser is not None:
            await browser.close()
        await playwright.stop()
