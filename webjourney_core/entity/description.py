"""
Entity descriptions

An EntityDescription is the precomputed plan for building one entity
class: its fields in declaration order, each with a type classification,
resolved extraction rules, a converter and an optional transformation.
Descriptions do not depend on any document and are cached per class by
EntityDescriptions.
"""

import dataclasses
import logging
import threading
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..exceptions import EntityInstantiationError, RuleDefinitionError
from .converters import Converter, converter_for
from .directives import Directive
from .rules import FieldRules, resolve_field_rules, split_directives
from .transformers import Transformer
from .type_info import TypeInfo, classify

logger = logging.getLogger(__name__)

# Class attribute holding the names used to resolve string annotations
NAMESPACE_ATTRIBUTE = "_entity_namespace_"


@dataclass(frozen=True)
class FieldDescription:
    name: str
    type_info: TypeInfo
    rules: FieldRules
    converter: Converter
    transformer: Optional[Transformer] = None

    def describe(self) -> str:
        lines = [f"{self.name}: {self.type_info.describe()} -> {self.converter.describe()}"]
        for rule in self.rules.rules:
            lines.append(f"    {rule.describe()}")
        if self.transformer is not None:
            lines.append(f"    transform {self.transformer.name}{list(self.transformer.parameters) or ''}")
        return "\n".join(lines)


@dataclass(frozen=True)
class EntityDescription:
    entity_type: type
    fields: Tuple[FieldDescription, ...]
    factory: Callable[[], Any]

    @property
    def name(self) -> str:
        return self.entity_type.__name__

    def instantiate(self) -> Any:
        try:
            return self.factory()
        except Exception as e:
            raise EntityInstantiationError(f"Cannot create {self.name}: {e}") from e

    def field(self, name: str) -> FieldDescription:
        for field_description in self.fields:
            if field_description.name == name:
                return field_description
        raise KeyError(name)

    def describe(self) -> str:
        body = "\n".join("  " + f.describe().replace("\n", "\n  ") for f in self.fields)
        return f"{self.name}\n{body}" if body else self.name


def _field_directives(annotation: Any) -> List[Directive]:
    if typing.get_origin(annotation) is not typing.Annotated:
        return []
    return [m for m in annotation.__metadata__ if isinstance(m, Directive)]


def _declared_fields(entity_type: type) -> List[Tuple[str, Any]]:
    """(name, annotation) pairs in declaration order, ClassVars excluded."""
    namespace = getattr(entity_type, NAMESPACE_ATTRIBUTE, None)
    try:
        hints = typing.get_type_hints(entity_type, localns=namespace, include_extras=True)
    except NameError as e:
        raise RuleDefinitionError(f"Cannot resolve field types of {entity_type.__name__}: {e}") from e

    if dataclasses.is_dataclass(entity_type):
        names = [f.name for f in dataclasses.fields(entity_type)]
    else:
        names = list(hints)
    declared = []
    for name in names:
        annotation = hints.get(name)
        if annotation is None or typing.get_origin(annotation) is typing.ClassVar:
            continue
        declared.append((name, annotation))
    return declared


class EntityDescriptions:
    """
    Builds and caches EntityDescriptions.

    Reads are lock free; writes take a lock. Two threads describing the
    same class for the first time may both build it, the last write wins.
    """

    def __init__(self, cache_enabled: bool = True):
        self.cache_enabled = cache_enabled
        self._cache: Dict[type, EntityDescription] = {}
        self._factories: Dict[type, Callable[[], Any]] = {}
        self._lock = threading.Lock()

    def register_factory(self, entity_type: type, factory: Callable[[], Any]) -> None:
        """Create `entity_type` instances with `factory` instead of calling the class."""
        with self._lock:
            self._factories[entity_type] = factory
            self._cache.pop(entity_type, None)

    def has_factory(self, entity_type: type) -> bool:
        return entity_type in self._factories

    def is_constructible(self, type_info: TypeInfo) -> bool:
        return self.has_factory(type_info.python_type) or type_info.has_no_args_constructor()

    def describe(self, entity_type: type) -> EntityDescription:
        if self.cache_enabled:
            cached = self._cache.get(entity_type)
            if cached is not None:
                return cached

        description = self._build(entity_type)
        if self.cache_enabled:
            with self._lock:
                self._cache[entity_type] = description
        return description

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, entity_type: type) -> bool:
        return entity_type in self._cache

    def _build(self, entity_type: type) -> EntityDescription:
        if not isinstance(entity_type, type):
            raise RuleDefinitionError(f"Entity type must be a class, got {entity_type!r}")
        logger.debug(f"Describing entity {entity_type.__name__}")

        fields = []
        for name, annotation in _declared_fields(entity_type):
            directives = _field_directives(annotation)
            if not directives:
                continue
            try:
                fields.append(self._describe_field(name, annotation, directives))
            except RuleDefinitionError as e:
                raise type(e)(f"{entity_type.__name__}: {e}") from e

        return EntityDescription(
            entity_type=entity_type,
            fields=tuple(fields),
            factory=self._factories.get(entity_type, entity_type),
        )

    def _describe_field(self, name: str, annotation: Any, directives: List[Directive]) -> FieldDescription:
        type_info = classify(annotation)
        rules = resolve_field_rules(name, directives, type_info)
        grouped = split_directives(name, directives)
        converter = converter_for(name, type_info, grouped, rules, self.is_constructible)
        transformer = None
        if grouped.transformation is not None:
            transformer = Transformer(grouped.transformation.function, grouped.transformation.parameters)
        return FieldDescription(name, type_info, rules, converter, transformer)
