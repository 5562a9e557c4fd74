"""
Field directives

Declarative tags attached to entity fields through `typing.Annotated`:

    @dataclass
    class Product:
        name: Annotated[str, ExtractValue("//h1")] = ""
        price: Annotated[float, RegexExtract(ExtractValue("//span[@class='price']"),
                                             r"(?P<value>[\\d.]+) EUR")] = 0.0
        reviews: Annotated[List[Review], ExtractFromLinkedPage("//a[@id='reviews']", "href")] = None

Each directive carries a DirectiveKind so rule resolution dispatches on an
explicit tag instead of isinstance chains.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Sequence, Tuple, Union


class DirectiveKind(Enum):
    VALUE = "value"
    CURRENT_URL = "current_url"
    LINKED_PAGE = "linked_page"
    REGEX = "regex"
    CONSTANT = "constant"
    COLLECTION_INDEX = "collection_index"
    CONDITIONAL = "conditional"
    MAPPED_COLLECTION = "mapped_collection"
    CONVERSION = "conversion"
    TRANSFORMATION = "transformation"


ALWAYS_APPLIES = frozenset({
    DirectiveKind.VALUE,
    DirectiveKind.CURRENT_URL,
    DirectiveKind.LINKED_PAGE,
    DirectiveKind.REGEX,
    DirectiveKind.CONSTANT,
    DirectiveKind.COLLECTION_INDEX,
})


class Directive:
    """Base class of all field directives"""
    kind: ClassVar[DirectiveKind]

    @property
    def always_applies(self) -> bool:
        return self.kind in ALWAYS_APPLIES


@dataclass(frozen=True)
class ExtractValue(Directive):
    """Element text (or `attribute`) at `path`"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.VALUE
    path: str
    attribute: str = ""
    optional: bool = False


@dataclass(frozen=True)
class ExtractCurrentUrl(Directive):
    kind: ClassVar[DirectiveKind] = DirectiveKind.CURRENT_URL


@dataclass(frozen=True)
class ExtractFromLinkedPage(Directive):
    """Follow the link at `path` (text or `attribute`), build the field there, come back"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.LINKED_PAGE
    path: str
    attribute: str = ""
    optional: bool = False


@dataclass(frozen=True)
class RegexExtract(Directive):
    """
    Narrow the value of `wrapped` with the named group `group` of the first
    fully matching pattern in `regexes`; `default` when none matches.
    """
    kind: ClassVar[DirectiveKind] = DirectiveKind.REGEX
    wrapped: Union[ExtractValue, ExtractCurrentUrl]
    regexes: Union[str, Sequence[str]]
    group: str = "value"
    default: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.regexes, str):
            object.__setattr__(self, "regexes", (self.regexes,))
        else:
            object.__setattr__(self, "regexes", tuple(self.regexes))


@dataclass(frozen=True)
class Constant(Directive):
    kind: ClassVar[DirectiveKind] = DirectiveKind.CONSTANT
    value: str


@dataclass(frozen=True)
class CollectionIndex(Directive):
    """Index of the enclosing collection item, offset by `base`"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.COLLECTION_INDEX
    base: int = 0


@dataclass(frozen=True)
class RegexMatch:
    """One conditional alternative: use `then` when `pattern` is found in the `probe` value"""
    probe: Union[ExtractValue, ExtractCurrentUrl]
    pattern: str
    then: Directive


@dataclass(frozen=True, init=False)
class Conditional(Directive):
    """Ordered alternatives, the first whose pattern matches its probe wins"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.CONDITIONAL
    alternatives: Tuple[RegexMatch, ...] = field(default=())

    def __init__(self, *alternatives: RegexMatch):
        object.__setattr__(self, "alternatives", tuple(alternatives))


@dataclass(frozen=True)
class MappedCollection(Directive):
    """Convert a collection field with one mapper call over a single raw value"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.MAPPED_COLLECTION


@dataclass(frozen=True)
class Conversion(Directive):
    """Custom mapper: a ValueMapper subclass or instance, or a callable str -> value"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.CONVERSION
    mapper: Any


@dataclass(frozen=True)
class Transformation(Directive):
    """Post-conversion string transform: a registered name, a TransformationFunction, or a callable"""
    kind: ClassVar[DirectiveKind] = DirectiveKind.TRANSFORMATION
    function: Any
    parameters: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "parameters", tuple(self.parameters))


def when(probe: Union[ExtractValue, ExtractCurrentUrl], pattern: str, then: Directive) -> RegexMatch:
    """Shorthand for a conditional alternative."""
    return RegexMatch(probe=probe, pattern=pattern, then=then)
