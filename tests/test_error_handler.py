"""
Unit tests for User-Friendly Error Handler.

Tests error mapping and formatting for the CLI.
"""

import pytest

from webjourney_core.error_handler import (
    format_error_for_logging,
    format_user_friendly_error,
    should_retry_error,
)
from webjourney_core.exceptions import (
    ElementNotFoundError,
    EntityFieldScrapeError,
    EntityInstantiationError,
    NavigationError,
    RuleDefinitionError,
    UnmappableCollectionError,
    ValueConversionError,
)


def test_missing_element():
    result = format_user_friendly_error(ElementNotFoundError("//h1"))

    assert "not found" in result["message"]
    assert result["severity"] == "error"
    assert result["can_retry"] is False
    assert "//h1" in result["technical"]


def test_subclass_mapped_before_base():
    """UnmappableCollectionError is also a RuleDefinitionError."""
    result = format_user_friendly_error(UnmappableCollectionError("items: list[Thing]"))

    assert "collection" in result["message"]
    assert result["severity"] == "critical"


def test_scrape_error_uses_root_cause_and_names_field():
    inner = EntityFieldScrapeError("Item", "stock", "Shop->items[0]->stock", ValueConversionError("bad", "x"))
    outer = EntityFieldScrapeError("Shop", "items", "Shop->items", inner)

    result = format_user_friendly_error(outer)

    assert "unexpected format" in result["message"]
    assert "field 'items' of Shop" in result["message"]
    assert "Shop->items" in result["technical"]


def test_timeout_pattern_fallback():
    result = format_user_friendly_error(TimeoutError("Page timeout exceeded"))

    assert "too long" in result["message"]
    assert result["severity"] == "warning"
    assert result["can_retry"] is True


def test_browser_not_installed():
    error = RuntimeError("Executable doesn't exist at /ms-playwright/chromium")

    result = format_user_friendly_error(error)

    assert "playwright install" in result["suggestion"]
    assert result["severity"] == "critical"


def test_unknown_error():
    result = format_user_friendly_error(RuntimeError("Some random error"))

    assert "Unexpected" in result["message"]
    assert "--debug" in result["suggestion"]
    assert result["severity"] == "error"
    assert result["technical"] == "Some random error"


def test_technical_details_override():
    result = format_user_friendly_error(RuntimeError("x"), technical_details="trace here")

    assert result["technical"] == "trace here"


@pytest.mark.parametrize("error, expected", [
    (NavigationError("down"), True),
    (ConnectionError("Connection refused"), True),
    (RuleDefinitionError("two extractions"), False),
    (EntityInstantiationError("no default"), False),
])
def test_should_retry(error, expected):
    assert should_retry_error(error) is expected


def test_mappings_are_not_mutated():
    error = EntityFieldScrapeError("Shop", "title", "Shop->title", ElementNotFoundError("//h1"))

    format_user_friendly_error(error)
    result = format_user_friendly_error(ElementNotFoundError("//h1"))

    assert "field" not in result["message"]


def test_format_error_for_logging():
    text = format_error_for_logging(NavigationError("404 for /missing"), "scrape")

    lines = text.splitlines()
    assert lines[0] == "Context: scrape"
    assert lines[1].startswith("Error: ")
    assert lines[2].startswith("Suggestion: ")
    assert lines[3] == "Technical: 404 for /missing"


def test_format_error_for_logging_without_context():
    text = format_error_for_logging(RuntimeError("boom"))

    assert text.startswith("Error: ")
    assert "Context" not in text


def test_browser_setup_message_wins_over_error_type():
    error = NavigationError("Failed to launch chromium: Executable doesn't exist at /ms-playwright/chromium")

    result = format_user_friendly_error(error)

    assert "playwright install" in result["suggestion"]
    assert result["can_retry"] is False
