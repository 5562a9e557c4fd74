"""
Field rule resolution

Turns the directives declared on one field into a validated, ordered list
of ExtractionRules. Always-applies fields resolve to a single rule;
conditional fields resolve to one gated rule per alternative, in declared
order, and the first whose condition holds is used.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from ..exceptions import RuleDefinitionError
from .directives import (
    Conversion,
    Directive,
    DirectiveKind,
    ExtractCurrentUrl,
    ExtractValue,
    MappedCollection,
    Transformation,
)
from .regex import RegexGroup, get_pattern
from .type_info import TypeInfo

logger = logging.getLogger(__name__)


class RawTarget(Enum):
    TEXT = "text"
    ATTRIBUTE = "attribute"
    ELEMENT = "element"


class Condition(ABC):
    @abstractmethod
    def evaluate(self, document, context, extractors=None) -> bool:
        pass

    def describe(self) -> str:
        return self.__class__.__name__


class AlwaysCondition(Condition):
    def evaluate(self, document, context, extractors=None) -> bool:
        return True

    def describe(self) -> str:
        return "always"


ALWAYS = AlwaysCondition()


class RegexCondition(Condition):
    """Holds when `pattern` is found in the value extracted by the probe rule."""

    def __init__(self, probe: "ExtractionRule", pattern: str):
        self.probe = probe
        self.pattern = get_pattern(pattern)

    def evaluate(self, document, context, extractors=None) -> bool:
        if extractors is None:
            from .extractors import default_library

            extractors = default_library()
        value = extractors.extract(document, self.probe, context)
        if value is None:
            logger.debug(f"Probe {self.probe.describe()} is absent")
            return False
        return self.pattern.search(str(value)) is not None

    def describe(self) -> str:
        return f"{self.probe.describe()} ~ /{self.pattern.pattern}/"


@dataclass(frozen=True)
class ExtractionRule:
    kind: DirectiveKind
    target: RawTarget = RawTarget.TEXT
    path: str = ""
    attribute: str = ""
    optional: bool = False
    many: bool = False
    constant: Optional[str] = None
    regex_group: Optional[RegexGroup] = field(default=None, compare=False)
    base_index: int = 0
    condition: Condition = field(default=ALWAYS, compare=False)

    @property
    def is_linked(self) -> bool:
        return self.kind is DirectiveKind.LINKED_PAGE

    @property
    def is_conditional(self) -> bool:
        return self.condition is not ALWAYS

    def describe(self) -> str:
        parts = [self.kind.value]
        if self.path:
            parts.append(self.path)
        if self.attribute:
            parts.append(f"@{self.attribute}")
        if self.constant is not None:
            parts.append(repr(self.constant))
        if self.many:
            parts.append("many")
        if self.optional:
            parts.append("optional")
        text = " ".join(parts)
        if self.is_conditional:
            text += f" if {self.condition.describe()}"
        return text


@dataclass(frozen=True)
class FieldRules:
    rules: Tuple[ExtractionRule, ...]
    has_link_extraction: bool
    is_conditional: bool

    def select(self, document, context, extractors=None) -> Optional[ExtractionRule]:
        """Rule that applies at the current document position, or None."""
        for rule in self.rules:
            if rule.condition.evaluate(document, context, extractors):
                logger.debug(f"Using rule: {rule.describe()}")
                return rule
        logger.warning(f"No extraction rule applies for {context.path}; leaving it unset")
        return None


@dataclass
class FieldDirectives:
    """Directives of one field, grouped by role"""
    extraction: List[Directive]
    conversion: Optional[Conversion] = None
    transformation: Optional[Transformation] = None
    mapped_collection: bool = False

    @property
    def is_conditional(self) -> bool:
        return any(d.kind is DirectiveKind.CONDITIONAL for d in self.extraction)


def split_directives(field_name: str, directives: Sequence[Any]) -> FieldDirectives:
    """Group a field's directives and validate their combination."""
    extraction: List[Directive] = []
    conversions: List[Conversion] = []
    transformations: List[Transformation] = []
    mapped = False
    for directive in directives:
        if not isinstance(directive, Directive):
            continue
        if isinstance(directive, Conversion):
            conversions.append(directive)
        elif isinstance(directive, Transformation):
            transformations.append(directive)
        elif isinstance(directive, MappedCollection):
            mapped = True
        else:
            extraction.append(directive)

    always = [d for d in extraction if d.always_applies]
    conditional = [d for d in extraction if d.kind is DirectiveKind.CONDITIONAL]
    if len(always) > 1:
        raise RuleDefinitionError(
            f"Field '{field_name}' has more than one extraction directive: "
            + ", ".join(type(d).__name__ for d in always)
        )
    if always and conditional:
        raise RuleDefinitionError(
            f"Field '{field_name}' mixes an always-applies directive with conditional directives"
        )
    if not always and not conditional:
        raise RuleDefinitionError(f"Field '{field_name}' has no extraction directive")
    if len(conversions) > 1:
        raise RuleDefinitionError(f"Field '{field_name}' has more than one Conversion")
    if len(transformations) > 1:
        raise RuleDefinitionError(f"Field '{field_name}' has more than one Transformation")

    return FieldDirectives(
        extraction=extraction,
        conversion=conversions[0] if conversions else None,
        transformation=transformations[0] if transformations else None,
        mapped_collection=mapped,
    )


def _probe_rule(field_name: str, probe: Any) -> "ExtractionRule":
    if isinstance(probe, ExtractCurrentUrl):
        return ExtractionRule(kind=DirectiveKind.CURRENT_URL)
    if isinstance(probe, ExtractValue):
        return ExtractionRule(
            kind=DirectiveKind.VALUE,
            target=RawTarget.ATTRIBUTE if probe.attribute else RawTarget.TEXT,
            path=probe.path,
            attribute=probe.attribute,
            optional=True,
        )
    raise RuleDefinitionError(
        f"Field '{field_name}': conditional probe must be ExtractValue or ExtractCurrentUrl, "
        f"got {type(probe).__name__}"
    )


def _rule_for(
    field_name: str,
    directive: Directive,
    type_info: TypeInfo,
    grouped: FieldDirectives,
    condition: Condition = ALWAYS,
    regex_group: Optional[RegexGroup] = None,
) -> ExtractionRule:
    item = type_info.item
    many = type_info.is_collection and not grouped.mapped_collection
    has_conversion = grouped.conversion is not None
    kind = directive.kind

    if kind is DirectiveKind.VALUE:
        if directive.attribute:
            target = RawTarget.ATTRIBUTE
        elif item.is_composite and not has_conversion:
            target = RawTarget.ELEMENT
        else:
            target = RawTarget.TEXT
        if item.is_composite and not has_conversion and target is not RawTarget.ELEMENT:
            raise RuleDefinitionError(
                f"Field '{field_name}': attribute extraction into {item.describe()} needs a Conversion"
            )
        if regex_group is not None and target is RawTarget.ELEMENT:
            raise RuleDefinitionError(
                f"Field '{field_name}': regex extraction needs a standard type or a Conversion"
            )
        return ExtractionRule(
            kind=kind,
            target=target,
            path=directive.path,
            attribute=directive.attribute,
            optional=directive.optional,
            many=many,
            regex_group=regex_group,
            condition=condition,
        )

    if kind is DirectiveKind.LINKED_PAGE:
        if not item.is_composite:
            raise RuleDefinitionError(
                f"Field '{field_name}': linked-page extraction requires an entity type, got {type_info.describe()}"
            )
        if has_conversion:
            raise RuleDefinitionError(
                f"Field '{field_name}': linked-page extraction cannot be combined with a Conversion"
            )
        return ExtractionRule(
            kind=kind,
            target=RawTarget.ATTRIBUTE if directive.attribute else RawTarget.TEXT,
            path=directive.path,
            attribute=directive.attribute,
            optional=directive.optional,
            many=many,
            condition=condition,
        )

    if item.is_composite and not has_conversion:
        raise RuleDefinitionError(
            f"Field '{field_name}': {type(directive).__name__} yields text, "
            f"an entity type {item.describe()} needs a Conversion"
        )

    if kind is DirectiveKind.CURRENT_URL:
        return ExtractionRule(kind=kind, many=many, regex_group=regex_group, condition=condition)

    if kind is DirectiveKind.REGEX:
        if not isinstance(directive.wrapped, (ExtractValue, ExtractCurrentUrl)):
            raise RuleDefinitionError(
                f"Field '{field_name}': RegexExtract can only wrap ExtractValue or ExtractCurrentUrl"
            )
        group = RegexGroup(directive.regexes, directive.group, directive.default)
        return _rule_for(field_name, directive.wrapped, type_info, grouped, condition, group)

    if kind is DirectiveKind.CONSTANT:
        return ExtractionRule(kind=kind, constant=directive.value, many=many, condition=condition)

    if kind is DirectiveKind.COLLECTION_INDEX:
        return ExtractionRule(kind=kind, base_index=directive.base, many=many, condition=condition)

    raise RuleDefinitionError(f"Field '{field_name}': unsupported directive {type(directive).__name__}")


def resolve_field_rules(field_name: str, directives: Sequence[Any], type_info: TypeInfo) -> FieldRules:
    """
    Resolve the extraction rules of one field.

    Raises:
        RuleDefinitionError: on an invalid directive combination
    """
    grouped = split_directives(field_name, directives)
    if grouped.mapped_collection:
        if not type_info.is_collection:
            raise RuleDefinitionError(f"Field '{field_name}': MappedCollection on a non-collection field")
        if grouped.conversion is None:
            raise RuleDefinitionError(f"Field '{field_name}': MappedCollection requires a Conversion")

    rules: List[ExtractionRule] = []
    if grouped.is_conditional:
        for directive in grouped.extraction:
            if not directive.alternatives:
                raise RuleDefinitionError(f"Field '{field_name}': Conditional without alternatives")
            for alternative in directive.alternatives:
                if not isinstance(alternative.then, Directive) or not alternative.then.always_applies:
                    raise RuleDefinitionError(
                        f"Field '{field_name}': conditional alternative must use an always-applies directive"
                    )
                condition = RegexCondition(_probe_rule(field_name, alternative.probe), alternative.pattern)
                rules.append(_rule_for(field_name, alternative.then, type_info, grouped, condition))
    else:
        rules.append(_rule_for(field_name, grouped.extraction[0], type_info, grouped))

    linked = [r.is_linked for r in rules]
    if any(linked) and not all(linked):
        raise RuleDefinitionError(
            f"Field '{field_name}': linked-page alternatives cannot be mixed with in-page extraction"
        )

    return FieldRules(
        rules=tuple(rules),
        has_link_extraction=any(linked),
        is_conditional=grouped.is_conditional,
    )
