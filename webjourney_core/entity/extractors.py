"""
Extractor Library

One strategy per DirectiveKind, producing raw values from the document:
strings, None for an absent optional value, ElementHandles for nested
entities, or LinkedPage markers for entities living on another page.

Custom strategies can be registered with `@register_extractor(kind)`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type
from urllib.parse import urljoin

from ..document.port import DocumentAccessPort
from ..exceptions import ExtractionError
from .directives import DirectiveKind
from .rules import ExtractionRule, RawTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkedPage:
    """Raw value telling the converter to build an entity at `locator`"""
    locator: str


class Extractor:
    """Base extractor; collections default to a single-item list"""

    def extract(self, document: DocumentAccessPort, rule: ExtractionRule, context) -> Any:
        raise NotImplementedError

    def extract_many(self, document: DocumentAccessPort, rule: ExtractionRule, context) -> List[Any]:
        value = self.extract(document, rule, context)
        return [] if value is None else [value]


_REGISTRY: Dict[DirectiveKind, Type[Extractor]] = {}


def register_extractor(kind: DirectiveKind) -> Callable:
    """
    Decorator to register the extractor for a directive kind

    Usage:
        @register_extractor(DirectiveKind.CONSTANT)
        class ConstantExtractor(Extractor):
            ...
    """
    def decorator(extractor_class: Type[Extractor]) -> Type[Extractor]:
        if kind in _REGISTRY:
            logger.warning(
                f"Overriding extractor for {kind.value}: "
                f"{_REGISTRY[kind].__name__} -> {extractor_class.__name__}"
            )
        _REGISTRY[kind] = extractor_class
        return extractor_class

    return decorator


def get_extractor(kind: DirectiveKind) -> Optional[Type[Extractor]]:
    return _REGISTRY.get(kind)


def list_extractors() -> List[str]:
    return sorted(kind.value for kind in _REGISTRY)


def _narrow(rule: ExtractionRule, value: Optional[str]) -> Optional[str]:
    if rule.regex_group is None or not isinstance(value, str):
        return value
    return rule.regex_group.find_group_value(value)


@register_extractor(DirectiveKind.VALUE)
class ValueExtractor(Extractor):
    def extract(self, document, rule, context):
        if rule.target is RawTarget.ELEMENT:
            return document.get_element(rule.path, rule.optional)
        if rule.target is RawTarget.ATTRIBUTE:
            value = document.get_attribute(rule.path, rule.attribute, rule.optional)
            if value is None and not rule.optional:
                raise ExtractionError(f"Element at '{rule.path}' has no '{rule.attribute}' attribute")
        else:
            value = document.get_element_text(rule.path, rule.optional)
        return _narrow(rule, value)

    def extract_many(self, document, rule, context):
        if rule.target is RawTarget.ELEMENT:
            return document.get_elements(rule.path)
        if rule.target is RawTarget.ATTRIBUTE:
            values = document.get_attributes(rule.path, rule.attribute)
            if not rule.optional and None in values:
                raise ExtractionError(f"An element at '{rule.path}' has no '{rule.attribute}' attribute")
        else:
            values = document.get_element_texts(rule.path)
        return [_narrow(rule, v) for v in values]


@register_extractor(DirectiveKind.CURRENT_URL)
class CurrentUrlExtractor(Extractor):
    def extract(self, document, rule, context):
        return _narrow(rule, document.get_current_url())


@register_extractor(DirectiveKind.CONSTANT)
class ConstantExtractor(Extractor):
    def extract(self, document, rule, context):
        return rule.constant


@register_extractor(DirectiveKind.COLLECTION_INDEX)
class CollectionIndexExtractor(Extractor):
    def extract(self, document, rule, context):
        index = context.collection_index if context is not None else None
        if index is None or index < 0:
            raise ExtractionError("Collection index requested outside of a collection")
        return str(index + rule.base_index)


@register_extractor(DirectiveKind.LINKED_PAGE)
class LinkedPageExtractor(Extractor):
    """
    Reads link locators and resolves them against the current URL.

    Navigation is left to the converter, which wraps it in `linked_page`.
    """

    def _locator(self, document, rule, raw: Optional[str]) -> Optional[LinkedPage]:
        if raw is None:
            return None
        raw = raw.strip()
        if not raw:
            if rule.optional:
                return None
            raise ExtractionError(f"Empty link locator at '{rule.path}'")
        return LinkedPage(urljoin(document.get_current_url(), raw))

    def extract(self, document, rule, context):
        if rule.target is RawTarget.ATTRIBUTE:
            raw = document.get_attribute(rule.path, rule.attribute, rule.optional)
            if raw is None and not rule.optional:
                raise ExtractionError(f"Link at '{rule.path}' has no '{rule.attribute}' attribute")
        else:
            raw = document.get_element_text(rule.path, rule.optional)
        return self._locator(document, rule, raw)

    def extract_many(self, document, rule, context):
        if rule.target is RawTarget.ATTRIBUTE:
            raws = document.get_attributes(rule.path, rule.attribute)
        else:
            raws = document.get_element_texts(rule.path)
        pages = []
        for raw in raws:
            if raw is None:
                raise ExtractionError(f"Link at '{rule.path}' has no '{rule.attribute}' attribute")
            page = self._locator(document, rule, raw)
            if page is not None:
                pages.append(page)
        return pages


class ExtractorLibrary:
    """Dispatches rules to the registered extractors"""

    def __init__(self):
        self._instances: Dict[DirectiveKind, Extractor] = {}

    def _extractor(self, kind: DirectiveKind) -> Extractor:
        extractor = self._instances.get(kind)
        if extractor is None:
            extractor_class = get_extractor(kind)
            if extractor_class is None:
                raise ExtractionError(f"No extractor registered for {kind.value}")
            extractor = extractor_class()
            self._instances[kind] = extractor
        return extractor

    def extract(self, document: DocumentAccessPort, rule: ExtractionRule, context=None) -> Any:
        extractor = self._extractor(rule.kind)
        if rule.many:
            value = extractor.extract_many(document, rule, context)
            logger.debug(f"Extracted {len(value)} value(s) for {rule.describe()}")
        else:
            value = extractor.extract(document, rule, context)
            logger.debug(f"Extracted {value!r} for {rule.describe()}")
        return value


_default_library: Optional[ExtractorLibrary] = None


def default_library() -> ExtractorLibrary:
    global _default_library
    if _default_library is None:
        _default_library = ExtractorLibrary()
    return _default_library
