"""
Converter Library

Turns raw values into typed field values. Composite types recurse into
the entity creator, either under an element already in hand or on a
linked page entered through `linked_page`.
"""

import copy
import logging
from typing import Any, Callable, Optional

from ..document.navigation import linked_page
from ..document.port import ElementHandle
from ..exceptions import ExtractionError, UnmappableCollectionError, ValueConversionError
from .extractors import LinkedPage
from .mappers import apply_mapper, custom_mapper, standard_mapper
from .rules import FieldDirectives, FieldRules
from .type_info import TypeInfo

logger = logging.getLogger(__name__)


def _collect(container: type, items) -> Any:
    try:
        return container(items)
    except TypeError as e:
        raise ValueConversionError(f"Cannot collect values into a {container.__name__}: {e}", cause=e) from e


class Converter:
    def convert(self, raw: Any, document, context, creator) -> Any:
        raise NotImplementedError

    def describe(self) -> str:
        return self.__class__.__name__


class MapperConverter(Converter):
    """Single mapper call over a scalar raw value"""

    def __init__(self, mapper: Callable[[str], Any], custom: bool = False):
        self.mapper = mapper
        self.custom = custom

    def _map(self, raw):
        if self.custom:
            return apply_mapper(self.mapper, raw)
        return self.mapper(raw)

    def convert(self, raw, document, context, creator):
        return self._map(raw)

    def describe(self) -> str:
        kind = "custom" if self.custom else "standard"
        return f"{self.__class__.__name__}({kind} {getattr(self.mapper, '__name__', type(self.mapper).__name__)})"


class CollectionMapperConverter(MapperConverter):
    """Mapper call per collection item, collected into the declared container"""

    def __init__(self, mapper: Callable[[str], Any], container: type = list, custom: bool = False):
        super().__init__(mapper, custom)
        self.container = container

    def convert(self, raw, document, context, creator):
        return _collect(self.container, [self._map(item) for item in raw])


class MappedCollectionConverter(MapperConverter):
    """One custom mapper call producing the whole collection"""

    def __init__(self, mapper: Callable[[str], Any], container: type = list):
        super().__init__(mapper, custom=True)
        self.container = container

    def convert(self, raw, document, context, creator):
        value = self._map(raw)
        if value is None:
            return None
        return _collect(self.container, value)


class NestedEntityConverter(Converter):
    """Builds an entity scoped to the element resolved for the field"""

    def __init__(self, entity_type: type):
        self.entity_type = entity_type

    def _build(self, raw, document, context, creator):
        if not isinstance(raw, ElementHandle):
            raise ExtractionError(f"Expected an element for {self.entity_type.__name__}, got {type(raw).__name__}")
        return creator.build(self.entity_type, document, context, root_element=raw)

    def convert(self, raw, document, context, creator):
        return self._build(raw, document, context, creator)

    def describe(self) -> str:
        return f"{self.__class__.__name__}({self.entity_type.__name__})"


class NestedEntitiesConverter(NestedEntityConverter):
    def __init__(self, entity_type: type, container: type = list):
        super().__init__(entity_type)
        self.container = container

    def convert(self, raw, document, context, creator):
        items = []
        with context.collection():
            for element in raw:
                context.next_item()
                items.append(self._build(element, document, context, creator))
        return _collect(self.container, items)


class LinkedEntityConverter(Converter):
    """
    Builds an entity on a linked page.

    Every link is followed inside `linked_page`, so the document is
    navigated back whether or not the build succeeds. When an entity of the
    same type was already built from the URL the navigation landed on during
    this invocation, a copy of it is returned instead of reading the page
    again.
    """

    def __init__(self, entity_type: type):
        self.entity_type = entity_type

    def _build(self, raw, document, context, creator):
        if not isinstance(raw, LinkedPage):
            raise ExtractionError(f"Expected a link for {self.entity_type.__name__}, got {type(raw).__name__}")
        with linked_page(document, raw.locator) as page:
            key = (self.entity_type, page.get_current_url())
            cached = context.cached_linked(key)
            if cached is not None:
                logger.debug(f"Reusing {self.entity_type.__name__} built from {key[1]}")
                return copy.deepcopy(cached)
            instance = creator.build(self.entity_type, page, context)
        context.store_linked(key, instance)
        return instance

    def convert(self, raw, document, context, creator):
        return self._build(raw, document, context, creator)

    def describe(self) -> str:
        return f"{self.__class__.__name__}({self.entity_type.__name__})"


class LinkedEntitiesConverter(LinkedEntityConverter):
    def __init__(self, entity_type: type, container: type = list):
        super().__init__(entity_type)
        self.container = container

    def convert(self, raw, document, context, creator):
        items = []
        with context.collection():
            for page in raw:
                context.next_item()
                items.append(self._build(page, document, context, creator))
        return _collect(self.container, items)


def converter_for(
    field_name: str,
    type_info: TypeInfo,
    grouped: FieldDirectives,
    rules: FieldRules,
    is_constructible: Optional[Callable[[TypeInfo], bool]] = None,
) -> Converter:
    """
    Pick the converter of a field, first match wins:

    1. custom conversion on a collection (per item, or once when mapped)
    2. custom conversion on a scalar
    3. collection of standard values
    4. collection of entities (nested or linked)
    5. single entity (nested or linked)
    6. standard scalar
    """
    item = type_info.item
    if grouped.conversion is not None:
        mapper = custom_mapper(grouped.conversion.mapper)
        if type_info.is_collection:
            if grouped.mapped_collection:
                return MappedCollectionConverter(mapper, type_info.python_type)
            return CollectionMapperConverter(mapper, type_info.python_type, custom=True)
        return MapperConverter(mapper, custom=True)

    if type_info.is_collection:
        if item.is_standard:
            return CollectionMapperConverter(standard_mapper(item), type_info.python_type)
        if item.is_collection:
            raise UnmappableCollectionError(
                f"Field '{field_name}': nested collection {type_info.describe()} needs a Conversion"
            )
        constructible = is_constructible or TypeInfo.has_no_args_constructor
        if not constructible(item):
            raise UnmappableCollectionError(
                f"Field '{field_name}': {item.describe()} cannot be created without arguments; "
                f"register a factory or add a Conversion"
            )
        if issubclass(type_info.python_type, (set, frozenset)) and item.python_type.__hash__ is None:
            raise UnmappableCollectionError(
                f"Field '{field_name}': {item.describe()} is not hashable and cannot be held in a "
                f"{type_info.python_type.__name__}; declare a list or tuple"
            )
        if rules.has_link_extraction:
            return LinkedEntitiesConverter(item.python_type, type_info.python_type)
        return NestedEntitiesConverter(item.python_type, type_info.python_type)

    if type_info.is_composite:
        if rules.has_link_extraction:
            return LinkedEntityConverter(type_info.python_type)
        return NestedEntityConverter(type_info.python_type)

    return MapperConverter(standard_mapper(type_info))
