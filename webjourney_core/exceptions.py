"""
webjourney exceptions
"""

from typing import Optional


class WebJourneyError(Exception):
    """Base exception for webjourney"""
    pass


class RuleDefinitionError(WebJourneyError):
    """Invalid combination of field directives, detected when an entity is described"""
    pass


class UnmappableCollectionError(RuleDefinitionError):
    """Collection element type cannot be built without a custom mapper"""
    pass


class DocumentError(WebJourneyError):
    """Error reading from or navigating the current document"""
    pass


class ElementNotFoundError(DocumentError):
    """A required location is missing from the document"""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"No element found for path '{path}'")


class NavigationError(DocumentError):
    """Navigation to a locator (or back) failed"""
    pass


class ExtractionError(WebJourneyError):
    """A raw value could not be extracted for a rule"""
    pass


class ValueConversionError(WebJourneyError):
    """A raw value could not be coerced to the declared type"""

    def __init__(self, message: str, value: Optional[str] = None, cause: Optional[BaseException] = None):
        self.value = value
        self.cause = cause
        super().__init__(message)


class EntityInstantiationError(WebJourneyError):
    """The entity factory could not create an instance"""
    pass


class EntityFieldScrapeError(WebJourneyError):
    """
    A required field of an entity could not be scraped.

    Carries the entity class name, the field name, the breadcrumb path
    of the field inside the top-level entity and the underlying error.
    """

    def __init__(self, entity_name: str, field_name: str, path: str, cause: BaseException):
        self.entity_name = entity_name
        self.field_name = field_name
        self.path = path
        self.cause = cause
        super().__init__(
            f"Failed to scrape field '{field_name}' of entity {entity_name} ({path}): {cause}"
        )

    @property
    def root_cause(self) -> BaseException:
        """Innermost non-scrape error, following nested entity failures"""
        cause = self.cause
        while isinstance(cause, EntityFieldScrapeError):
            cause = cause.cause
        return cause
