"""
Shared fixtures: an in-memory page source and feed item builders.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import pytest

from feedscrape_core.content_item import ElementSnapshot, element
from feedscrape_core.locales import load_locale_tables


class FakePageSource:
    """
    Page source over a fixed list of items.

    `counts[i]` is the item count after `i` reveals (the last value repeats);
    without counts every item is rendered from the start. The first
    `nav_failures` navigations raise ConnectionError. `about` is the source
    handed out by `open_sibling`; without one opening a sibling fails.
    """

    def __init__(
        self,
        items: Sequence[ElementSnapshot],
        counts: Optional[Sequence[int]] = None,
        nav_failures: int = 0,
        header: Optional[List[str]] = None,
        title: Optional[str] = None,
        body: Optional[List[str]] = None,
        xpaths: Optional[Dict[str, str]] = None,
        about: Optional["FakePageSource"] = None,
    ):
        self.items = list(items)
        self.counts = list(counts) if counts is not None else None
        self.nav_failures = nav_failures
        self.header = header
        self.title = title
        self.body = body
        self.xpaths = dict(xpaths or {})
        self.about = about
        self.siblings_closed = 0
        self.reveals = 0
        self.navigations: List[str] = []
        self.calls: List[str] = []

    async def navigate_to(self, url, wait_until="networkidle", timeout_ms=30000):
        self.calls.append("navigate_to")
        self.navigations.append(url)
        if self.nav_failures > 0:
            self.nav_failures -= 1
            raise ConnectionError(f"cannot reach {url}")

    async def reveal_more(self):
        self.calls.append("reveal_more")
        self.reveals += 1

    async def item_count(self):
        self.calls.append("item_count")
        if self.counts is None:
            return len(self.items)
        return self.counts[min(self.reveals, len(self.counts) - 1)]

    async def current_items(self):
        self.calls.append("current_items")
        count = self.counts[min(self.reveals, len(self.counts) - 1)] if self.counts else len(self.items)
        return self.items[:count]

    async def header_fragments(self):
        return list(self.header or [])

    async def body_fragments(self):
        self.calls.append("body_fragments")
        return list(self.body or [])

    async def xpath_text(self, expr):
        self.calls.append("xpath_text")
        return self.xpaths.get(expr)

    @asynccontextmanager
    async def open_sibling(self):
        self.calls.append("open_sibling")
        if self.about is None:
            raise ConnectionError("no sibling page")
        try:
            yield self.about
        finally:
            self.siblings_closed += 1

    async def page_title(self):
        return self.title


def make_post(body: str, reactions: Optional[int] = None, date: Optional[str] = None, **extra) -> ElementSnapshot:
    """A feed item shaped like a rendered post: header link, body, action bar."""
    children = []
    if date:
        children.append(element("a", text=date, role="link", href="/posts/1"))
    children.append(element("div", text=body))
    if reactions is not None:
        children.append(element("span", text="", aria_label=f"{reactions} reactions"))
    children.append(element("div", text="Like Comment Share", role="toolbar"))
    text = " ".join(p for p in (date, body, "Like Comment Share") if p)
    return element("div", text=text, children=children, role="article", **extra)


@pytest.fixture
def tables():
    return load_locale_tables()


@pytest.fixture
def now():
    return datetime(2024, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def posts():
    return [make_post(f"Story {i}: hello world", reactions=i * 10, date=f"{i + 1}h") for i in range(12)]


@pytest.fixture
def fake_source_factory():
    return FakePageSource


@pytest.fixture
def post_factory():
    return make_post
