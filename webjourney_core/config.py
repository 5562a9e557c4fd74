#!/usr/bin/env python3
from dataclasses import dataclass
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ["true", "1", "yes"]


@dataclass
class Config:
    """Engine and browser configuration"""
    # Entity description cache (disable for test isolation)
    entity_cache_enabled: bool = True
    # Per-invocation cache of entities built from linked pages, 0 disables
    linked_cache_size: int = 64
    enable_debug: bool = False

    # Browser settings (Playwright adapter)
    browser: str = "chromium"
    headless: bool = True
    navigation_timeout_ms: int = 30000
    wait_until: str = "domcontentloaded"

    # Static HTML adapter
    fetch_remote: bool = True
    http_timeout: float = 30.0
    user_agent: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config from environment variables"""
        return cls(
            entity_cache_enabled=_env_bool("WEBJOURNEY_ENTITY_CACHE", "true"),
            linked_cache_size=int(os.getenv("WEBJOURNEY_LINKED_CACHE_SIZE", "64")),
            enable_debug=_env_bool("WEBJOURNEY_DEBUG", "false"),
            browser=os.getenv("WEBJOURNEY_BROWSER", "chromium").lower(),
            headless=_env_bool("WEBJOURNEY_HEADLESS", "true"),
            navigation_timeout_ms=int(os.getenv("WEBJOURNEY_NAVIGATION_TIMEOUT_MS", "30000")),
            wait_until=os.getenv("WEBJOURNEY_WAIT_UNTIL", "domcontentloaded"),
            fetch_remote=_env_bool("WEBJOURNEY_FETCH_REMOTE", "true"),
            http_timeout=float(os.getenv("WEBJOURNEY_HTTP_TIMEOUT", "30")),
            user_agent=os.getenv("WEBJOURNEY_USER_AGENT") or None,
        )

    def __post_init__(self):
        if self.linked_cache_size < 0:
            self.linked_cache_size = 0


config = Config.from_env()
