"""
Scalar value mappers

Built-in mappers for the standard field types, plus the ValueMapper base
for custom Conversion directives.
"""

import datetime
import re
from typing import Any, Callable, Optional

from ..exceptions import RuleDefinitionError, ValueConversionError
from .type_info import TypeInfo, TypeKind

_MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}
_MONTH_ABBREVIATIONS = {name[:3]: number for name, number in _MONTHS.items()}
_MONTH_ABBREVIATIONS["sept"] = 9

# e.g. "28th February 2023"
_ORDINAL_DATE = re.compile(r"(?P<day>\d{1,2})(st|nd|rd|th)\s(?P<month>\w+)\s(?P<year>\d{4})", re.IGNORECASE)

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ValueMapper:
    """
    Base class for custom conversions.

    Subclasses implement `map_value(value)` and raise ValueConversionError
    (or any exception, which gets wrapped) for values they cannot convert.
    """

    def map_value(self, value: str) -> Any:
        raise NotImplementedError

    def __call__(self, value: str) -> Any:
        return self.map_value(value)


class StringMapper(ValueMapper):
    def map_value(self, value):
        return value


class IntegerMapper(ValueMapper):
    """Blank text maps to 0 for primitive fields and None otherwise"""

    def __init__(self, primitive: bool = True):
        self.primitive = primitive

    def map_value(self, value):
        if _is_blank(value):
            return 0 if self.primitive else None
        try:
            return int(value.strip())
        except ValueError as e:
            raise ValueConversionError(f"Cannot convert '{value}' to int", value, e) from e


class FloatMapper(ValueMapper):
    """Blank text maps to 0.0 for primitive fields and None otherwise"""

    def __init__(self, primitive: bool = True):
        self.primitive = primitive

    def map_value(self, value):
        if _is_blank(value):
            return 0.0 if self.primitive else None
        try:
            return float(value.strip())
        except ValueError as e:
            raise ValueConversionError(f"Cannot convert '{value}' to float", value, e) from e


class BooleanMapper(ValueMapper):
    def map_value(self, value):
        if value is None:
            return False
        return value.strip().lower() in _TRUE_VALUES


class DateMapper(ValueMapper):
    """Ordinal dates like '1st March 2021' or '28th Feb 2023'"""

    def map_value(self, value):
        if _is_blank(value):
            return None
        match = _ORDINAL_DATE.search(value)
        if match is None:
            raise ValueConversionError(f"Unsupported date format: '{value}'", value)
        month_name = match.group("month").lower()
        month = _MONTHS.get(month_name) or _MONTH_ABBREVIATIONS.get(month_name)
        if month is None:
            raise ValueConversionError(f"Unknown month '{match.group('month')}' in '{value}'", value)
        try:
            return datetime.date(int(match.group("year")), month, int(match.group("day")))
        except ValueError as e:
            raise ValueConversionError(f"Invalid date '{value}': {e}", value, e) from e


def standard_mapper(type_info: TypeInfo) -> ValueMapper:
    """Built-in mapper for a standard field type."""
    if type_info.kind is TypeKind.STRING:
        return StringMapper()
    if type_info.kind is TypeKind.INTEGER:
        return IntegerMapper(type_info.is_primitive)
    if type_info.kind is TypeKind.FLOAT:
        return FloatMapper(type_info.is_primitive)
    if type_info.kind is TypeKind.BOOLEAN:
        return BooleanMapper()
    if type_info.kind is TypeKind.DATE:
        return DateMapper()
    raise ValueError(f"No standard mapper for {type_info.describe()}")


def custom_mapper(mapper: Any) -> Callable[[str], Any]:
    """
    Normalize the argument of a Conversion directive to a callable.

    Accepts a ValueMapper subclass (instantiated without arguments), a
    ValueMapper instance, or any callable taking the raw string.
    """
    if isinstance(mapper, type):
        if issubclass(mapper, ValueMapper):
            return mapper()
        raise RuleDefinitionError(f"Conversion class {mapper.__name__} must subclass ValueMapper")
    if callable(mapper):
        return mapper
    raise RuleDefinitionError(f"Conversion mapper must be callable, got {type(mapper).__name__}")


def apply_mapper(mapper: Callable[[str], Any], value: Optional[str]) -> Any:
    """Run a custom mapper, wrapping foreign failures in ValueConversionError."""
    if value is None:
        return None
    try:
        return mapper(value)
    except ValueConversionError:
        raise
    except Exception as e:
        raise ValueConversionError(f"Custom conversion failed for '{value}': {e}", value, e) from e
