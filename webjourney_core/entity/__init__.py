"""
Entity extraction engine

Declare fields with directives, describe the class once, build instances
from any DocumentAccessPort.
"""

from .directives import (
    DirectiveKind,
    Directive,
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
)
from .type_info import TypeInfo, TypeKind, classify
from .regex import RegexGroup
from .rules import ExtractionRule, FieldRules, RawTarget, resolve_field_rules
from .extractors import Extractor, ExtractorLibrary, LinkedPage, register_extractor, list_extractors
from .mappers import ValueMapper, StringMapper, IntegerMapper, FloatMapper, BooleanMapper, DateMapper
from .transformers import TransformationFunction, register_transformation, list_transformations
from .converters import converter_for
from .description import EntityDescription, EntityDescriptions, FieldDescription
from .context import EntityCreationContext
from .listeners import EntityCreationListener, LoggingCreationListener, EntityCreationCounter
from .creator import EntityCreator, create_entity
from .yaml_loader import load_entities, parse_entities

__all__ = [
    # Directives
    "DirectiveKind",
    "Directive",
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

    # Rules and types
    "TypeInfo",
    "TypeKind",
    "classify",
    "RegexGroup",
    "ExtractionRule",
    "FieldRules",
    "RawTarget",
    "resolve_field_rules",

    # Strategies
    "Extractor",
    "ExtractorLibrary",
    "LinkedPage",
    "register_extractor",
    "list_extractors",
    "ValueMapper",
    "StringMapper",
    "IntegerMapper",
    "FloatMapper",
    "BooleanMapper",
    "DateMapper",
    "TransformationFunction",
    "register_transformation",
    "list_transformations",
    "converter_for",

    # Creation
    "EntityDescription",
    "EntityDescriptions",
    "FieldDescription",
    "EntityCreationContext",
    "EntityCreationListener",
    "LoggingCreationListener",
    "EntityCreationCounter",
    "EntityCreator",
    "create_entity",
    "load_entities",
    "parse_entities",
]
