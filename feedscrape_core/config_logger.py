"""
Configuration Logger - env variable names mapped to effective values

Single place that knows which `FEEDSCRAPE_*` variable feeds which `Config`
field; used to dump the configuration into a run log.
"""

from typing import Any, Dict, Optional

from .config import Config, ExtractionConfig, config


def get_all_config_variables(cfg: Optional[Config] = None) -> Dict[str, Any]:
    """
    Get all configuration variables with their env names and current values.

    Returns:
        Dict mapping env variable names to their current values
    """
    cfg = cfg or config
    return {
        # Convergence
        "FEEDSCRAPE_POSTS_TARGET": cfg.posts_target,
        "FEEDSCRAPE_STALL_LIMIT": cfg.stall_limit,
        "FEEDSCRAPE_MAX_LOOPS": cfg.max_loops,
        "FEEDSCRAPE_REVEAL_DELAY_MS": cfg.reveal_delay_ms,

        # Navigation
        "FEEDSCRAPE_NAV_ATTEMPTS": cfg.nav_attempts,
        "FEEDSCRAPE_NAV_BASE_DELAY": cfg.nav_base_delay,
        "FEEDSCRAPE_NAV_WAIT_UNTIL": cfg.nav_wait_until,
        "FEEDSCRAPE_NAV_TIMEOUT_MS": cfg.nav_timeout_ms,

        # Field extraction
        "FEEDSCRAPE_METRIC": cfg.metric,
        "FEEDSCRAPE_TIMEZONE": cfg.timezone_id,
        "FEEDSCRAPE_ASSUME_CURRENT_YEAR": cfg.assume_current_year,
        "FEEDSCRAPE_LEADING_WINDOW": cfg.leading_window,
        "FEEDSCRAPE_LOCALE_FILE": cfg.locale_file or "None",
        "FEEDSCRAPE_COLLECT_PROFILE": cfg.collect_profile,
        "FEEDSCRAPE_FOLLOWERS_XPATH": cfg.followers_xpath or "None",
        "FEEDSCRAPE_LIKES_XPATH": cfg.likes_xpath or "None",
        "FEEDSCRAPE_PROFILE_MIN_FOLLOWERS": cfg.profile_min_followers,

        # Browser
        "FEEDSCRAPE_ITEM_SELECTOR": cfg.item_selector,
        "FEEDSCRAPE_HEADLESS": cfg.headless,
        "FEEDSCRAPE_LOCALE": cfg.locale,

        # Logging
        "FEEDSCRAPE_LOG_DIR": str(cfg.log_dir),
        "FEEDSCRAPE_RUN_LOG": cfg.run_log,
        "FEEDSCRAPE_DEBUG": cfg.enable_debug,
    }


def log_all_config_to_run_logger(run_logger, run_config: Optional[ExtractionConfig] = None, cfg: Optional[Config] = None) -> None:
    """
    Log configuration to a run logger.

    Per-run settings come first when given, then every env variable in
    alphabetical order.

    Args:
        run_logger: Logger instance with a log_kv method
        run_config: Settings of the current run
        cfg: Global configuration (defaults to the module-level one)
    """
    if run_config is not None:
        for key, value in vars(run_config).items():
            run_logger.log_kv(f"run.{key}", str(value))

    config_vars = get_all_config_variables(cfg)
    for key in sorted(config_vars):
        run_logger.log_kv(key, str(config_vars[key]))
