"""
Page Source - the browser side of an extraction run

`PageSource` is everything the pipeline needs from a page: navigate, reveal
more items, count items and hand over the rendered items. The pipeline and
the convergence loop only talk to this protocol; tests use in-memory fakes.

`PlaywrightPageSource` implements it over a Playwright `Page`:

- reveal: window scroll, then `End` key and mouse wheel as extra nudges
- before reading items: click inline "see more" expanders (never links)
  and close any post overlay a stray click may have opened
- items are read with a single `page.evaluate` that returns a JSON tree per
  item, turned into `ElementSnapshot`s
- profile helpers: header and body text fragments, XPath lookups and a
  sibling page (same context) for the page's about section
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .config import config
from .content_item import ContentItem, ElementSnapshot
from .locales import LocaleTables, get_locale_tables

logger = logging.getLogger(__name__)


@runtime_checkable
class PageSource(Protocol):
    """Collaborator driving a rendered, lazily loading feed."""

    async def navigate_to(self, url: str, wait_until: str = "networkidle", timeout_ms: int = 30000) -> None:
        ...

    async def reveal_more(self) -> None:
        ...

    async def item_count(self) -> int:
        ...

    async def current_items(self) -> Sequence[ContentItem]:
        ...


class PageLoadError(RuntimeError):
    """The server answered navigation with an error status."""

    def __init__(self, url: str, status: int):
        super().__init__(f"{url} answered with HTTP {status}")
        self.url = url
        self.status = status


# Attributes the extractors look at; everything else is dropped from snapshots
SNAPSHOT_ATTRIBUTES = ["aria-label", "role", "datetime", "tabindex", "href", "aria-level"]

SNAPSHOT_JS = """
({selector, attrs, maxNodes}) => {
  let budget = maxNodes;
  const snap = (el) => {
    budget -= 1;
    const out = {tag: el.tagName.toLowerCase(), text: (el.innerText || el.textContent || ''), attrs: {}, children: []};
    for (const name of attrs) {
      const v = el.getAttribute(name);
      if (v !== null) out.attrs[name] = v;
    }
    for (const child of el.children) {
      if (budget <= 0) break;
      out.children.push(snap(child));
    }
    return out;
  };
  return Array.from(document.querySelectorAll(selector)).map((el) => {
    budget = maxNodes;
    return snap(el);
  });
}
"""

EXPAND_JS = """
({selector, labels}) => {
  const wanted = labels.map((l) => l.toLowerCase());
  const matches = (t) => wanted.some((l) => t.toLowerCase().includes(l));
  let clicked = 0;
  for (const item of document.querySelectorAll(selector)) {
    const candidates = item.querySelectorAll('button, span[role="button"], div[role="button"], span[aria-label], div[aria-label]');
    for (const el of candidates) {
      const txt = (el.innerText || el.textContent || '').trim();
      if (!txt || !matches(txt)) continue;
      if (el.tagName === 'A' || el.closest('a')) continue;
      try { el.click(); clicked += 1; } catch (e) {}
    }
  }
  return clicked;
}
"""

HEADER_JS = """
() => {
  const root = document.querySelector('div[role="main"]') || document.body;
  if (!root) return [];
  return Array.from(root.querySelectorAll('span, div, a'))
    .map((el) => (el.textContent || '').replace(/\\s+/g, ' ').trim())
    .filter((t) => t && t.length < 200);
}
"""

BODY_JS = """
() => {
  if (!document.body) return [];
  return Array.from(document.body.querySelectorAll('*'))
    .map((el) => (el.textContent || '').replace(/\\s+/g, ' ').trim())
    .filter((t) => t && t.length < 300);
}
"""

XPATH_JS = """
(expr) => {
  const node = document.evaluate(expr, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null).singleNodeValue;
  return node ? (node.textContent || '').trim() : null;
}
"""

TITLE_JS = """
() => {
  const el = document.querySelector('h1') || document.querySelector('[role="heading"][aria-level="1"]');
  return el ? (el.innerText || el.textContent || '').trim() : '';
}
"""

DIALOG_SELECTOR = 'div[role="dialog"], [aria-modal="true"]'

OVERLAY_CLOSE_SELECTORS: List[str] = [
    'div[role="dialog"] [aria-label="Close"]',
    'div[role="dialog"] [aria-label="إغلاق"]',
    'div[role="dialog"] [data-testid="close-button"]',
    'div[role="dialog"] [role="button"][tabindex="0"]',
    'div[role="dialog"] button',
]

COOKIE_BUTTON_NAMES: List[str] = [
    "Only allow essential cookies",
    "Allow essential and optional cookies",
    "السماح بملفات تعريف الارتباط الأساسية فقط",
    "Accept",
    "I agree",
]


class PlaywrightPageSource:
    """
    `PageSource` over a Playwright page.

    Args:
        page: playwright.async_api.Page
        item_selector: CSS selector of one feed item
        tables: Locale tables (expand labels are read from them)
        max_nodes: Upper bound on snapshot nodes per item
        wheel_delta: Pixels scrolled by the mouse wheel nudge
    """

    def __init__(
        self,
        page,
        item_selector: Optional[str] = None,
        tables: Optional[LocaleTables] = None,
        max_nodes: int = 400,
        wheel_delta: int = 2000,
    ):
        self.page = page
        self.item_selector = item_selector or config.item_selector
        self.tables = tables or get_locale_tables()
        self.max_nodes = max_nodes
        self.wheel_delta = wheel_delta

    async def navigate_to(self, url: str, wait_until: str = "networkidle", timeout_ms: int = 30000) -> None:
        response = await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        status = getattr(response, "status", None)
        if isinstance(status, int) and status >= 500:
            raise PageLoadError(url, status)
        await self.dismiss_cookie_banner()

    async def reveal_more(self) -> None:
        await self.page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        # Some feeds only react to real input events
        try:
            await self.page.keyboard.press("End")
        except Exception as e:
            logger.debug(f"End key nudge failed: {e}")
        try:
            await self.page.mouse.wheel(0, self.wheel_delta)
        except Exception as e:
            logger.debug(f"Mouse wheel nudge failed: {e}")

    async def item_count(self) -> int:
        return await self.page.locator(self.item_selector).count()

    async def current_items(self) -> List[ElementSnapshot]:
        await self.expand_truncated()
        await self.close_overlay()
        payload = await self.page.evaluate(
            SNAPSHOT_JS,
            {"selector": self.item_selector, "attrs": SNAPSHOT_ATTRIBUTES, "maxNodes": self.max_nodes},
        )
        items = snapshot_payload(payload or [])
        logger.debug(f"Snapshotted {len(items)} item(s)")
        return items

    async def expand_truncated(self) -> int:
        """Click inline "see more" expanders inside items; returns the click count."""
        labels = self.tables.forms("expand_labels")
        if not labels:
            return 0
        try:
            clicked = await self.page.evaluate(EXPAND_JS, {"selector": self.item_selector, "labels": labels})
        except Exception as e:
            logger.debug(f"Expanding truncated items failed: {e}")
            return 0
        if clicked:
            logger.debug(f"Expanded {clicked} truncated item(s)")
        return int(clicked or 0)

    async def close_overlay(self) -> bool:
        """Close an open dialog if there is one; True when none remains."""
        try:
            if await self.page.query_selector(DIALOG_SELECTOR) is None:
                return True
            for sel in OVERLAY_CLOSE_SELECTORS:
                el = await self.page.query_selector(sel)
                if el is not None:
                    try:
                        await el.click()
                        await self.page.wait_for_timeout(200)
                    except Exception:
                        pass
                if await self.page.query_selector(DIALOG_SELECTOR) is None:
                    return True
            await self.page.keyboard.press("Escape")
            await self.page.wait_for_timeout(200)
            return await self.page.query_selector(DIALOG_SELECTOR) is None
        except Exception as e:
            logger.debug(f"Closing overlay failed: {e}")
            return False

    async def dismiss_cookie_banner(self) -> bool:
        for name in COOKIE_BUTTON_NAMES:
            try:
                btn = self.page.get_by_role("button", name=name)
                if await btn.count() > 0:
                    await btn.first.click(timeout=1000)
                    logger.debug(f"Dismissed cookie banner via {name!r}")
                    return True
            except Exception:
                pass
        return False

    async def page_title(self) -> Optional[str]:
        try:
            title = await self.page.evaluate(TITLE_JS)
        except Exception as e:
            logger.debug(f"Reading page title failed: {e}")
            return None
        return (title or "").strip() or None

    async def header_fragments(self) -> List[str]:
        """Short text fragments of the page header area."""
        try:
            fragments = await self.page.evaluate(HEADER_JS)
        except Exception as e:
            logger.debug(f"Reading header fragments failed: {e}")
            return []
        return [str(f) for f in (fragments or [])]

    async def body_fragments(self) -> List[str]:
        """Short text fragments of every element in the page body."""
        try:
            fragments = await self.page.evaluate(BODY_JS)
        except Exception as e:
            logger.debug(f"Reading body fragments failed: {e}")
            return []
        return [str(f) for f in (fragments or [])]

    async def xpath_text(self, expr: str) -> Optional[str]:
        """Text of the first node matching an XPath expression."""
        try:
            text = await self.page.evaluate(XPATH_JS, expr)
        except Exception as e:
            logger.warning(f"XPath extraction failed for {expr!r}: {e}")
            return None
        return text or None

    @asynccontextmanager
    async def open_sibling(self):
        """A source over a new page in the same browser context, closed on exit."""
        page = await self.page.context.new_page()
        try:
            yield PlaywrightPageSource(
                page,
                item_selector=self.item_selector,
                tables=self.tables,
                max_nodes=self.max_nodes,
                wheel_delta=self.wheel_delta,
            )
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Failed to close sibling page: {e}")


def snapshot_payload(items: Sequence[Dict[str, Any]]) -> List[ElementSnapshot]:
    """Build snapshots from an already fetched `SNAPSHOT_JS` payload."""
    return [ElementSnapshot.from_dict(d) for d in items]


__all__ = [
    "PageSource",
    "PageLoadError",
    "PlaywrightPageSource",
    "SNAPSHOT_JS",
    "snapshot_payload",
]
