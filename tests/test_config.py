"""
Tests for environment configuration and its logging
"""

import logging

import pytest

from webjourney_core.config import Config
from webjourney_core.config_logger import get_all_config_variables, log_config
from webjourney_core.diagnostics import get_logger, set_debug

ENV_NAMES = [
    "WEBJOURNEY_ENTITY_CACHE",
    "WEBJOURNEY_LINKED_CACHE_SIZE",
    "WEBJOURNEY_DEBUG",
    "WEBJOURNEY_BROWSER",
    "WEBJOURNEY_HEADLESS",
    "WEBJOURNEY_NAVIGATION_TIMEOUT_MS",
    "WEBJOURNEY_WAIT_UNTIL",
    "WEBJOURNEY_FETCH_REMOTE",
    "WEBJOURNEY_HTTP_TIMEOUT",
    "WEBJOURNEY_USER_AGENT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigFromEnv:

    def test_defaults(self, clean_env):
        cfg = Config.from_env()

        assert cfg == Config()
        assert cfg.entity_cache_enabled is True
        assert cfg.linked_cache_size == 64
        assert cfg.browser == "chromium"
        assert cfg.user_agent is None

    def test_overrides(self, clean_env):
        clean_env.setenv("WEBJOURNEY_ENTITY_CACHE", "false")
        clean_env.setenv("WEBJOURNEY_LINKED_CACHE_SIZE", "8")
        clean_env.setenv("WEBJOURNEY_DEBUG", "1")
        clean_env.setenv("WEBJOURNEY_BROWSER", "Firefox")
        clean_env.setenv("WEBJOURNEY_HEADLESS", "no")
        clean_env.setenv("WEBJOURNEY_NAVIGATION_TIMEOUT_MS", "5000")
        clean_env.setenv("WEBJOURNEY_FETCH_REMOTE", "false")
        clean_env.setenv("WEBJOURNEY_HTTP_TIMEOUT", "2.5")
        clean_env.setenv("WEBJOURNEY_USER_AGENT", "bot/1.0")

        cfg = Config.from_env()

        assert cfg.entity_cache_enabled is False
        assert cfg.linked_cache_size == 8
        assert cfg.enable_debug is True
        assert cfg.browser == "firefox"
        assert cfg.headless is False
        assert cfg.navigation_timeout_ms == 5000
        assert cfg.fetch_remote is False
        assert cfg.http_timeout == 2.5
        assert cfg.user_agent == "bot/1.0"

    def test_negative_cache_size_disables_cache(self):
        assert Config(linked_cache_size=-5).linked_cache_size == 0


class TestConfigLogger:

    def test_all_variables_are_listed(self):
        variables = get_all_config_variables(Config(user_agent="bot/1.0"))

        assert list(variables) == ENV_NAMES
        assert variables["WEBJOURNEY_USER_AGENT"] == "bot/1.0"
        assert get_all_config_variables(Config())["WEBJOURNEY_USER_AGENT"] == "None"

    def test_log_config(self, caplog):
        logger = logging.getLogger("webjourney_core.tests.config")

        with caplog.at_level(logging.INFO, logger="webjourney_core.tests.config"):
            log_config(logger, Config(linked_cache_size=3), level=logging.INFO)

        assert "WEBJOURNEY_LINKED_CACHE_SIZE = 3" in caplog.messages
        assert len(caplog.messages) == len(ENV_NAMES)


class TestDiagnostics:

    def test_logger_is_cached_and_configured_once(self):
        first = get_logger("webjourney_core.tests.diag")
        second = get_logger("webjourney_core.tests.diag")

        assert first is second
        assert len(first.handlers) == 1

    def test_set_debug(self):
        lg = get_logger("webjourney_core.tests.debug")

        set_debug(True)
        assert lg.level == logging.DEBUG
        set_debug(False)
        assert lg.level == logging.INFO
