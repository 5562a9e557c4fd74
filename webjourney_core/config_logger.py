"""
Configuration Logger - Centralized config mapping and logging

Single source of truth for the configuration variables, their
environment variable names, and a helper for logging them.
"""

import logging
from typing import Any, Dict, Optional

from .config import Config, config as default_config


def get_all_config_variables(cfg: Optional[Config] = None) -> Dict[str, Any]:
    """
    Get all configuration variables with their env names and current values.

    Returns:
        Dict mapping env variable names to their current values
    """
    cfg = cfg or default_config
    return {
        # Engine
        "WEBJOURNEY_ENTITY_CACHE": cfg.entity_cache_enabled,
        "WEBJOURNEY_LINKED_CACHE_SIZE": cfg.linked_cache_size,
        "WEBJOURNEY_DEBUG": cfg.enable_debug,

        # Browser settings
        "WEBJOURNEY_BROWSER": cfg.browser,
        "WEBJOURNEY_HEADLESS": cfg.headless,
        "WEBJOURNEY_NAVIGATION_TIMEOUT_MS": cfg.navigation_timeout_ms,
        "WEBJOURNEY_WAIT_UNTIL": cfg.wait_until,

        # Static HTML documents
        "WEBJOURNEY_FETCH_REMOTE": cfg.fetch_remote,
        "WEBJOURNEY_HTTP_TIMEOUT": cfg.http_timeout,
        "WEBJOURNEY_USER_AGENT": cfg.user_agent or "None",
    }


def log_config(logger: logging.Logger, cfg: Optional[Config] = None, level: int = logging.DEBUG) -> None:
    """Log every configuration variable as `NAME = value`."""
    for name, value in get_all_config_variables(cfg).items():
        logger.log(level, f"{name} = {value}")
