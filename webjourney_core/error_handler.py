"""
User-Friendly Error Handler.

Converts extraction errors into short messages with actionable suggestions.
"""

from typing import Dict, Optional
import logging

from .exceptions import (
    DocumentError,
    ElementNotFoundError,
    EntityFieldScrapeError,
    EntityInstantiationError,
    ExtractionError,
    NavigationError,
    RuleDefinitionError,
    UnmappableCollectionError,
    ValueConversionError,
)

logger = logging.getLogger(__name__)


def format_user_friendly_error(
    error: Exception,
    context: str = "general",
    technical_details: Optional[str] = None
) -> Dict:
    """
    Convert technical error to user-friendly message.

    Scrape failures are classified by their root cause, and the failing
    field is named in the message.

    Args:
        error: The exception that occurred
        context: Context where error occurred (e.g., "scrape", "describe")
        technical_details: Additional technical information

    Returns:
        Dictionary with user-friendly error information:
        {
            "message": str,          # User-friendly message
            "suggestion": str,       # Actionable suggestion
            "technical": str,        # Technical details
            "severity": str,         # "critical", "error", "warning"
            "can_retry": bool        # Whether retry might help
        }
    """
    error_str = str(error)
    cause = error.root_cause if isinstance(error, EntityFieldScrapeError) else error

    cause_str = str(cause).lower()

    result = None
    for pattern in PRIORITY_PATTERNS:
        if pattern in cause_str:
            result = ERROR_MAPPINGS[pattern].copy()
            break

    if result is None:
        for error_type, friendly_error in ERROR_TYPE_MAPPINGS:
            if isinstance(cause, error_type):
                result = friendly_error.copy()
                break

    if result is None:
        for pattern, friendly_error in ERROR_MAPPINGS.items():
            if pattern in cause_str:
                result = friendly_error.copy()
                break

    if result is None:
        result = {
            "message": "Unexpected error while extracting the entity",
            "suggestion": "Run again with --debug and check the logs",
            "severity": "error",
            "can_retry": True
        }

    if isinstance(error, EntityFieldScrapeError):
        result["message"] = f"{result['message']} (field '{error.field_name}' of {error.entity_name})"
    result["technical"] = technical_details or error_str
    logger.debug(f"Mapped error to user-friendly: {result['message']}")
    return result


# Checked in order, subclasses first
ERROR_TYPE_MAPPINGS = [
    (UnmappableCollectionError, {
        "message": "A collection field holds a type that cannot be built",
        "suggestion": "Give the element type default values, register a factory, or add a Conversion",
        "severity": "critical",
        "can_retry": False
    }),
    (RuleDefinitionError, {
        "message": "The entity definition is invalid",
        "suggestion": "Check the directives of the reported field",
        "severity": "critical",
        "can_retry": False
    }),
    (ElementNotFoundError, {
        "message": "A required element was not found on the page",
        "suggestion": "The page layout may have changed; check the XPath or mark the field optional",
        "severity": "error",
        "can_retry": False
    }),
    (NavigationError, {
        "message": "A page could not be loaded",
        "suggestion": "Check that the URL is correct and the site is reachable",
        "severity": "error",
        "can_retry": True
    }),
    (DocumentError, {
        "message": "The page could not be read",
        "suggestion": "Check the XPath expressions of the entity definition",
        "severity": "error",
        "can_retry": False
    }),
    (ValueConversionError, {
        "message": "A value on the page has an unexpected format",
        "suggestion": "Narrow the value with a regex or use a custom Conversion",
        "severity": "error",
        "can_retry": False
    }),
    (ExtractionError, {
        "message": "A value could not be extracted",
        "suggestion": "Check the extraction directives of the reported field",
        "severity": "error",
        "can_retry": False
    }),
    (EntityInstantiationError, {
        "message": "The entity class could not be created",
        "suggestion": "Give every field a default value or register a factory",
        "severity": "critical",
        "can_retry": False
    }),
]


# Fallback message patterns for errors outside the webjourney hierarchy
ERROR_MAPPINGS = {
    "timeout": {
        "message": "The page took too long to respond",
        "suggestion": "Check the connection or raise WEBJOURNEY_NAVIGATION_TIMEOUT_MS",
        "severity": "warning",
        "can_retry": True
    },
    "connection": {
        "message": "Could not connect to the site",
        "suggestion": "Check that the URL is correct and the site is reachable",
        "severity": "error",
        "can_retry": True
    },
    "executable doesn't exist": {
        "message": "The browser is not installed",
        "suggestion": "Install it with: playwright install chromium",
        "severity": "critical",
        "can_retry": False
    },
    "permission denied": {
        "message": "Permission denied",
        "suggestion": "Check file permissions of the output and definition files",
        "severity": "error",
        "can_retry": False
    },
}


# Message patterns that win over the exception type (browser setup problems
# surface as NavigationError)
PRIORITY_PATTERNS = ("executable doesn't exist",)


def should_retry_error(error: Exception) -> bool:
    """True if a retry might help."""
    friendly = format_user_friendly_error(error)
    return friendly.get("can_retry", False)


def format_error_for_logging(error: Exception, context: str = "") -> str:
    """
    Format error for the CLI and logs.

    Args:
        error: The exception
        context: Additional context

    Returns:
        Formatted multi-line error string
    """
    friendly = format_user_friendly_error(error, context)

    lines = [
        f"Error: {friendly['message']}",
        f"Suggestion: {friendly['suggestion']}",
        f"Technical: {friendly['technical']}"
    ]

    if context:
        lines.insert(0, f"Context: {context}")

    return "\n".join(lines)
