#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

METRICS = ("reactions", "comments", "shares")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ["true", "1", "yes"]


@dataclass
class Config:
    """Application configuration"""
    # Convergence loop
    posts_target: int = int(os.getenv("FEEDSCRAPE_POSTS_TARGET", "100"))
    stall_limit: int = int(os.getenv("FEEDSCRAPE_STALL_LIMIT", "10"))
    max_loops: int = int(os.getenv("FEEDSCRAPE_MAX_LOOPS", "300"))
    reveal_delay_ms: int = int(os.getenv("FEEDSCRAPE_REVEAL_DELAY_MS", "2000"))

    # Navigation
    nav_attempts: int = int(os.getenv("FEEDSCRAPE_NAV_ATTEMPTS", "3"))
    nav_base_delay: float = float(os.getenv("FEEDSCRAPE_NAV_BASE_DELAY", "1.0"))
    nav_wait_until: str = os.getenv("FEEDSCRAPE_NAV_WAIT_UNTIL", "networkidle")
    nav_timeout_ms: int = int(os.getenv("FEEDSCRAPE_NAV_TIMEOUT_MS", "30000"))

    # Field extraction
    metric: str = os.getenv("FEEDSCRAPE_METRIC", "reactions").lower()
    timezone_id: str = os.getenv("FEEDSCRAPE_TIMEZONE", os.getenv("TIMEZONE", "UTC"))
    assume_current_year: bool = _env_bool("FEEDSCRAPE_ASSUME_CURRENT_YEAR", "true")
    leading_window: int = int(os.getenv("FEEDSCRAPE_LEADING_WINDOW", "300"))
    locale_file: Optional[str] = os.getenv("FEEDSCRAPE_LOCALE_FILE") or None
    collect_profile: bool = _env_bool("FEEDSCRAPE_COLLECT_PROFILE", "false")
    followers_xpath: Optional[str] = os.getenv("FEEDSCRAPE_FOLLOWERS_XPATH") or None
    likes_xpath: Optional[str] = os.getenv("FEEDSCRAPE_LIKES_XPATH") or None
    profile_min_followers: int = int(os.getenv("FEEDSCRAPE_PROFILE_MIN_FOLLOWERS", "50"))

    # Browser
    item_selector: str = os.getenv("FEEDSCRAPE_ITEM_SELECTOR", 'div[role="article"]')
    headless: bool = _env_bool("FEEDSCRAPE_HEADLESS", "true")
    locale: str = os.getenv("FEEDSCRAPE_LOCALE", os.getenv("LOCALE", "ar-EG"))

    # Logging
    log_dir: Path = Path(os.getenv("FEEDSCRAPE_LOG_DIR", "./logs"))
    run_log: bool = _env_bool("FEEDSCRAPE_RUN_LOG", "false")
    enable_debug: bool = _env_bool("FEEDSCRAPE_DEBUG", "false")


@dataclass
class ExtractionConfig:
    """Per-run settings for one extraction."""
    target: int = 100
    stall_limit: int = 10
    max_iterations: int = 300
    reveal_delay_ms: int = 2000
    metric: str = "reactions"
    navigation_attempts: int = 3
    navigation_base_delay: float = 1.0
    wait_until: str = "networkidle"
    navigation_timeout_ms: int = 30000
    assume_current_year: bool = True
    leading_window: int = 300
    collect_profile: bool = False
    followers_xpath: Optional[str] = None
    likes_xpath: Optional[str] = None
    profile_min_followers: int = 50

    def __post_init__(self):
        if self.target < 1:
            raise ValueError(f"target must be >= 1, got {self.target}")
        if self.stall_limit < 1:
            raise ValueError(f"stall_limit must be >= 1, got {self.stall_limit}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.reveal_delay_ms < 0:
            raise ValueError(f"reveal_delay_ms must be >= 0, got {self.reveal_delay_ms}")
        if self.navigation_attempts < 1:
            raise ValueError(f"navigation_attempts must be >= 1, got {self.navigation_attempts}")
        if self.metric not in METRICS:
            raise ValueError(f"metric must be one of {METRICS}, got {self.metric!r}")

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None, **overrides) -> "ExtractionConfig":
        """Build run settings from the global configuration."""
        cfg = cfg or config
        values = dict(
            target=cfg.posts_target,
            stall_limit=cfg.stall_limit,
            max_iterations=cfg.max_loops,
            reveal_delay_ms=cfg.reveal_delay_ms,
            metric=cfg.metric,
            navigation_attempts=cfg.nav_attempts,
            navigation_base_delay=cfg.nav_base_delay,
            wait_until=cfg.nav_wait_until,
            navigation_timeout_ms=cfg.nav_timeout_ms,
            assume_current_year=cfg.assume_current_year,
            leading_window=cfg.leading_window,
            collect_profile=cfg.collect_profile,
            followers_xpath=cfg.followers_xpath,
            likes_xpath=cfg.likes_xpath,
            profile_min_followers=cfg.profile_min_followers,
        )
        values.update(overrides)
        return cls(**values)


config = Config()
