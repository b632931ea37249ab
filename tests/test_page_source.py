"""
Tests for the Playwright page source and browser setup (mocked pages)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from feedscrape_core import browser_setup
from feedscrape_core.config import Config
from feedscrape_core.page_source import (
    BODY_JS,
    DIALOG_SELECTOR,
    XPATH_JS,
    PageLoadError,
    PageSource,
    PlaywrightPageSource,
)

pytestmark = pytest.mark.asyncio


def make_page():
    page = MagicMock()
    page.goto = AsyncMock(return_value=MagicMock(status=200))
    page.evaluate = AsyncMock(return_value=None)
    page.query_selector = AsyncMock(return_value=None)
    page.wait_for_timeout = AsyncMock()
    page.keyboard = MagicMock(press=AsyncMock())
    page.mouse = MagicMock(wheel=AsyncMock())
    locator = MagicMock(count=AsyncMock(return_value=0))
    page.get_by_role = MagicMock(return_value=locator)
    page.locator = MagicMock(return_value=MagicMock(count=AsyncMock(return_value=7)))
    return page


class TestPlaywrightPageSource:
    """PageSource operations over a mocked Playwright page"""

    @pytest.mark.asyncio
    async def test_is_a_page_source(self):
        assert isinstance(PlaywrightPageSource(make_page()), PageSource)

    @pytest.mark.asyncio
    async def test_navigate(self):
        page = make_page()
        await PlaywrightPageSource(page).navigate_to("https://example.com", wait_until="load", timeout_ms=5000)
        page.goto.assert_awaited_once_with("https://example.com", wait_until="load", timeout=5000)

    @pytest.mark.asyncio
    async def test_navigate_server_error(self):
        page = make_page()
        page.goto = AsyncMock(return_value=MagicMock(status=503))
        with pytest.raises(PageLoadError) as exc_info:
            await PlaywrightPageSource(page).navigate_to("https://example.com")
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_item_count(self):
        page = make_page()
        source = PlaywrightPageSource(page, item_selector="div.post")
        assert await source.item_count() == 7
        page.locator.assert_called_with("div.post")

    @pytest.mark.asyncio
    async def test_reveal_more_survives_input_errors(self):
        page = make_page()
        page.keyboard.press = AsyncMock(side_effect=RuntimeError("no focus"))
        await PlaywrightPageSource(page).reveal_more()
        page.evaluate.assert_awaited()
        page.mouse.wheel.assert_awaited_once_with(0, 2000)

    @pytest.mark.asyncio
    async def test_current_items(self):
        page = make_page()
        payload = [{
            "tag": "DIV",
            "text": "3h Hello",
            "attrs": {"role": "article"},
            "children": [{"tag": "a", "text": "3h", "attrs": {"role": "link"}, "children": []}],
        }]
        page.evaluate = AsyncMock(side_effect=[0, payload])
        items = await PlaywrightPageSource(page).current_items()

        assert len(items) == 1
        assert items[0].tag == "div"
        assert items[0].text() == "3h Hello"
        assert items[0].attributes() == {"role": "article"}
        assert items[0].children()[0].tag == "a"

    @pytest.mark.asyncio
    async def test_close_overlay(self):
        page = make_page()
        close_button = MagicMock(click=AsyncMock())
        page.query_selector = AsyncMock(side_effect=[MagicMock(), close_button, None])
        assert await PlaywrightPageSource(page).close_overlay() is True
        close_button.click.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_overlay_falls_back_to_escape(self):
        page = make_page()
        dialog = MagicMock()
        page.query_selector = AsyncMock(side_effect=lambda sel: dialog if sel == DIALOG_SELECTOR else None)
        assert await PlaywrightPageSource(page).close_overlay() is False
        page.keyboard.press.assert_awaited_with("Escape")

    @pytest.mark.asyncio
    async def test_title_and_header(self):
        page = make_page()
        page.evaluate = AsyncMock(side_effect=["  My Page ", RuntimeError("detached")])
        source = PlaywrightPageSource(page)
        assert await source.page_title() == "My Page"
        assert await source.header_fragments() == []


    @pytest.mark.asyncio
    async def test_body_fragments(self):
        page = make_page()
        page.evaluate = AsyncMock(return_value=["900 followers", "Photos"])
        assert await PlaywrightPageSource(page).body_fragments() == ["900 followers", "Photos"]
        page.evaluate.assert_awaited_once_with(BODY_JS)

    @pytest.mark.asyncio
    async def test_xpath_text(self):
        page = make_page()
        page.evaluate = AsyncMock(side_effect=["12K", RuntimeError("bad expression")])
        source = PlaywrightPageSource(page)
        assert await source.xpath_text("//h2/span") == "12K"
        page.evaluate.assert_awaited_with(XPATH_JS, "//h2/span")
        assert await source.xpath_text("//[") is None

    @pytest.mark.asyncio
    async def test_open_sibling_closes_page(self):
        page = make_page()
        sibling_page = make_page()
        sibling_page.close = AsyncMock()
        page.context = MagicMock(new_page=AsyncMock(return_value=sibling_page))
        source = PlaywrightPageSource(page, item_selector="div.post")

        with pytest.raises(PageLoadError):
            async with source.open_sibling() as sibling:
                assert sibling.page is sibling_page
                assert sibling.item_selector == "div.post"
                raise PageLoadError("https://example.com/about", 502)
        sibling_page.close.assert_awaited_once()


class TestOpenPage:
    """Browser lifecycle"""

    @pytest.mark.asyncio
    async def test_open_and_close(self, monkeypatch):
        page = MagicMock()
        context = MagicMock(new_page=AsyncMock(return_value=page), close=AsyncMock())
        browser = MagicMock(new_context=AsyncMock(return_value=context), close=AsyncMock())
        playwright = MagicMock(stop=AsyncMock())
        playwright.chromium.launch = AsyncMock(return_value=browser)
        starter = MagicMock(start=AsyncMock(return_value=playwright))
        monkeypatch.setattr(browser_setup, "async_playwright", lambda: starter)

        cfg = Config(headless=True, locale="ar-EG", timezone_id="UTC")
        with pytest.raises(RuntimeError):
            async with browser_setup.open_page(cfg) as opened:
                assert opened is page
                raise RuntimeError("run failed")

        playwright.chromium.launch.assert_awaited_once_with(headless=True, args=browser_setup.LAUNCH_ARGS)
        assert browser.new_context.await_args.kwargs["locale"] == "ar-EG"
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
