"""
Type classification of declared field types
"""

import collections.abc
import datetime
import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..exceptions import RuleDefinitionError


class TypeKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    COLLECTION = "collection"
    COMPOSITE = "composite"


_STANDARD_TYPES = {
    str: TypeKind.STRING,
    int: TypeKind.INTEGER,
    float: TypeKind.FLOAT,
    bool: TypeKind.BOOLEAN,
    datetime.date: TypeKind.DATE,
}

_COLLECTION_ORIGINS = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
}

_STANDARD_KINDS = frozenset(_STANDARD_TYPES.values())


@dataclass(frozen=True)
class TypeInfo:
    """
    Classification of a field type.

    `optional` marks a declared `Optional[...]`; numeric fields that are not
    optional are primitive and map blank text to zero.
    """
    kind: TypeKind
    python_type: Any
    optional: bool = False
    element: Optional["TypeInfo"] = None

    @property
    def is_standard(self) -> bool:
        return self.kind in _STANDARD_KINDS

    @property
    def is_collection(self) -> bool:
        return self.kind is TypeKind.COLLECTION

    @property
    def is_composite(self) -> bool:
        return self.kind is TypeKind.COMPOSITE

    @property
    def is_primitive(self) -> bool:
        return self.kind in (TypeKind.INTEGER, TypeKind.FLOAT, TypeKind.BOOLEAN) and not self.optional

    @property
    def item(self) -> "TypeInfo":
        """Element type for collections, the type itself otherwise."""
        return self.element if self.element is not None else self

    def has_no_args_constructor(self) -> bool:
        if self.kind is not TypeKind.COMPOSITE or not isinstance(self.python_type, type):
            return False
        try:
            signature = inspect.signature(self.python_type)
        except (TypeError, ValueError):
            # Builtins without introspectable signatures
            return False
        return all(
            p.default is not inspect.Parameter.empty
            or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
            for p in signature.parameters.values()
        )

    def describe(self) -> str:
        if self.is_collection:
            return f"{self.python_type.__name__}[{self.element.describe()}]"
        name = getattr(self.python_type, "__name__", str(self.python_type))
        return f"Optional[{name}]" if self.optional else name


def _strip_annotated(annotation: Any) -> Any:
    while typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    return annotation


def _unwrap_optional(annotation: Any):
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            raise RuleDefinitionError(f"Unsupported union type: {annotation}")
        return args[0], True
    return annotation, False


def classify(annotation: Any) -> TypeInfo:
    """Classify a declared field type (Annotated metadata is ignored)."""
    annotation = _strip_annotated(annotation)
    annotation, optional = _unwrap_optional(annotation)
    annotation = _strip_annotated(annotation)

    if annotation in _STANDARD_TYPES:
        return TypeInfo(_STANDARD_TYPES[annotation], annotation, optional)

    origin = typing.get_origin(annotation)
    container = _COLLECTION_ORIGINS.get(origin) or _COLLECTION_ORIGINS.get(annotation)
    if container is not None:
        args = typing.get_args(annotation)
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            args = args[:1]
        if len(args) > 1 and origin is tuple:
            raise RuleDefinitionError(f"Only homogeneous tuples are supported, got {annotation}")
        element = classify(args[0]) if args else TypeInfo(TypeKind.STRING, str)
        return TypeInfo(TypeKind.COLLECTION, container, optional, element)

    if isinstance(annotation, type):
        return TypeInfo(TypeKind.COMPOSITE, annotation, optional)

    raise RuleDefinitionError(f"Unsupported field type: {annotation!r}")
