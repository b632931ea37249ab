"""
Page profile counters (followers, likes) read from page text fragments.

A fragment counts for a field when a number sits right next to one of the
field's words, in either order ("12K followers", "المتابعون: ١٢ ألف").
Fragments mentioning "following" are skipped: they describe whom the page
follows. The largest value seen wins, since header chips repeat in
abbreviated and full form.
"""

import logging
import re
from functools import lru_cache
from typing import Dict, Iterable, Optional, Pattern, Tuple

from .locales import LocaleTables, get_locale_tables, whole_word
from .numerals import normalize_count, number_pattern
from .records import PageProfile
from .retry import navigate_with_retry

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("followers", "likes")

# Below this many followers the about page is consulted as well
ABOUT_MIN_FOLLOWERS = 50


@lru_cache(maxsize=8)
def _profile_patterns(tables: LocaleTables) -> Tuple[Pattern, Dict[str, Pattern]]:
    magnitude_words = tables.alternation("magnitude_words")
    number = rf"(?:{number_pattern(tables)})(?:\s*(?:{magnitude_words})(?!\w))?"
    following = re.compile(whole_word(tables.alternation("profile_words", ["following"])), re.IGNORECASE)
    fields = {}
    for name in PROFILE_FIELDS:
        words = whole_word(tables.alternation("profile_words", [name]))
        fields[name] = re.compile(
            rf"(?P<before>{number})\s*{words}|{words}\s*[:：]?\s*(?P<after>{number})",
            re.IGNORECASE,
        )
    return following, fields


def extract_profile_counts(
    fragments: Iterable[str],
    tables: Optional[LocaleTables] = None,
) -> Dict[str, Optional[int]]:
    """
    Follower and like counts from header fragments.

    Returns:
        {"followers": int | None, "likes": int | None}
    """
    tables = tables or get_locale_tables()
    following, fields = _profile_patterns(tables)
    counts: Dict[str, Optional[int]] = {name: None for name in PROFILE_FIELDS}
    for fragment in fragments:
        text = " ".join(str(fragment or "").split())
        if not text or following.search(text):
            continue
        for name, pattern in fields.items():
            for m in pattern.finditer(text):
                value = normalize_count(m.group("before") or m.group("after"), tables)
                if value is not None and (counts[name] is None or value > counts[name]):
                    counts[name] = value
    return counts


def _fill_missing(counts: Dict[str, Optional[int]], found: Dict[str, Optional[int]]) -> None:
    for name in PROFILE_FIELDS:
        if counts[name] is None:
            counts[name] = found[name]


def _missing(counts: Dict[str, Optional[int]]) -> bool:
    return any(counts[name] is None for name in PROFILE_FIELDS)


async def scan_counts(source, tables: Optional[LocaleTables] = None) -> Dict[str, Optional[int]]:
    """
    Counters read from one page: header fragments first, then the whole body
    for whatever the header did not give.
    """
    counts = extract_profile_counts(await source.header_fragments(), tables)
    if _missing(counts) and hasattr(source, "body_fragments"):
        _fill_missing(counts, extract_profile_counts(await source.body_fragments(), tables))
    return counts


def about_url(url: str) -> str:
    return url.rstrip("/") + "/about"


async def collect_profile(
    source,
    tables: Optional[LocaleTables] = None,
    url: Optional[str] = None,
    followers_xpath: Optional[str] = None,
    likes_xpath: Optional[str] = None,
    min_followers: int = ABOUT_MIN_FOLLOWERS,
    navigation_attempts: int = 3,
    navigation_base_delay: float = 1.0,
    wait_until: str = "networkidle",
    timeout_ms: int = 30000,
) -> Optional[PageProfile]:
    """
    Read title and counters from a source offering `page_title()`/`header_fragments()`.

    Lookup order per counter:
        1. XPath override (`xpath_text`), when one is configured
        2. header fragments
        3. whole-body fragments (`body_fragments`)
        4. the page's about page (`open_sibling`), when `url` is given and
           followers are missing or below `min_followers`; a larger value
           found there replaces the one already read

    A failing about page is logged and the counters read so far are kept.
    """
    if not hasattr(source, "header_fragments"):
        return None
    tables = tables or get_locale_tables()
    counts: Dict[str, Optional[int]] = {name: None for name in PROFILE_FIELDS}

    overrides = {"followers": followers_xpath, "likes": likes_xpath}
    if hasattr(source, "xpath_text"):
        for name, expr in overrides.items():
            if expr:
                counts[name] = normalize_count(await source.xpath_text(expr), tables)
                logger.debug(f"Profile {name} from XPath {expr!r}: {counts[name]}")

    if _missing(counts):
        _fill_missing(counts, await scan_counts(source, tables))

    if url and hasattr(source, "open_sibling") and (not counts["followers"] or counts["followers"] < min_followers):
        target = about_url(url)
        logger.info(f"Followers {counts['followers']} below {min_followers}, trying {target}")
        try:
            async with source.open_sibling() as about:
                await navigate_with_retry(
                    about,
                    target,
                    max_attempts=navigation_attempts,
                    base_delay=navigation_base_delay,
                    wait_until=wait_until,
                    timeout_ms=timeout_ms,
                )
                extracted = await scan_counts(about, tables)
        except Exception as e:
            logger.warning(f"About page extraction failed: {e}")
        else:
            for name in PROFILE_FIELDS:
                value = extracted[name]
                if value and (not counts[name] or value > counts[name]):
                    counts[name] = value

    title = await source.page_title() if hasattr(source, "page_title") else None
    logger.info(f"Profile: title={title!r} followers={counts['followers']} likes={counts['likes']}")
    return PageProfile(title=title, followers=counts["followers"], likes=counts["likes"])


__all__ = ["PROFILE_FIELDS", "ABOUT_MIN_FOLLOWERS", "about_url", "extract_profile_counts", "scan_counts", "collect_profile"]
