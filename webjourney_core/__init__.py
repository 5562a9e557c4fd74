"""
webjourney_core package: declarative entity extraction from web pages

Usage:
    from typing import Annotated
    from dataclasses import dataclass
    from webjourney_core import ExtractValue, HtmlDocument, create_entity

    @dataclass
    class Article:
        title: Annotated[str, ExtractValue("//h1")] = ""

    article = create_entity(Article, HtmlDocument("https://example.com/news/1"))
"""
from .config import Config, config
from .exceptions import (
    WebJourneyError,
    RuleDefinitionError,
    UnmappableCollectionError,
    DocumentError,
    ElementNotFoundError,
    NavigationError,
    ExtractionError,
    ValueConversionError,
    EntityInstantiationError,
    EntityFieldScrapeError,
)
from .document import DocumentAccessPort, ElementHandle, HtmlDocument, PageRouter, linked_page
from .entity import (
    ExtractValue,
    ExtractCurrentUrl,
    ExtractFromLinkedPage,
    RegexExtract,
    Constant,
    CollectionIndex,
    Conditional,
    RegexMatch,
    MappedCollection,
    Conversion,
    Transformation,
    when,
    ValueMapper,
    TransformationFunction,
    EntityDescriptions,
    EntityCreationListener,
    EntityCreator,
    create_entity,
    load_entities,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Config",
    "config",
    "EntityCreator",
    "EntityDescriptions",
    "EntityCreationListener",
    "create_entity",
    "load_entities",
    # Documents
    "DocumentAccessPort",
    "ElementHandle",
    "HtmlDocument",
    "PageRouter",
    "linked_page",
    # Directives
    "ExtractValue",
    "ExtractCurrentUrl",
    "ExtractFromLinkedPage",
    "RegexExtract",
    "Constant",
    "CollectionIndex",
    "Conditional",
    "RegexMatch",
    "MappedCollection",
    "Conversion",
    "Transformation",
    "when",
    "ValueMapper",
    "TransformationFunction",
    # Errors
    "WebJourneyError",
    "RuleDefinitionError",
    "UnmappableCollectionError",
    "DocumentError",
    "ElementNotFoundError",
    "NavigationError",
    "ExtractionError",
    "ValueConversionError",
    "EntityInstantiationError",
    "EntityFieldScrapeError",
]
