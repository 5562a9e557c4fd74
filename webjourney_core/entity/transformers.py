"""
Transformations applied to string results after conversion
"""

import logging
from typing import Any, Callable, Dict, List, Sequence

from ..exceptions import RuleDefinitionError, ValueConversionError

logger = logging.getLogger(__name__)


class TransformationFunction:
    """Base class for custom transformations: `transform(value, parameters) -> str`"""

    def transform(self, value: str, parameters: Sequence[str]) -> str:
        raise NotImplementedError


_TRANSFORMATIONS: Dict[str, Callable[[str, Sequence[str]], str]] = {}


def register_transformation(name: str) -> Callable:
    """
    Decorator to register a named transformation

    Usage:
        @register_transformation("slug")
        def slug(value, parameters):
            return value.lower().replace(" ", "-")
    """
    def decorator(func: Callable[[str, Sequence[str]], str]) -> Callable[[str, Sequence[str]], str]:
        if name in _TRANSFORMATIONS:
            logger.warning(f"Overriding transformation '{name}'")
        _TRANSFORMATIONS[name] = func
        return func

    return decorator


def list_transformations() -> List[str]:
    return sorted(_TRANSFORMATIONS)


def _expect(name: str, parameters: Sequence[str], count: int) -> None:
    if len(parameters) != count:
        raise ValueConversionError(f"Transformation '{name}' expects {count} parameter(s), got {len(parameters)}")


@register_transformation("strip")
def _strip(value, parameters):
    return value.strip(*parameters[:1])


@register_transformation("lower")
def _lower(value, parameters):
    return value.lower()


@register_transformation("upper")
def _upper(value, parameters):
    return value.upper()


@register_transformation("replace")
def _replace(value, parameters):
    _expect("replace", parameters, 2)
    return value.replace(parameters[0], parameters[1])


@register_transformation("prefix")
def _prefix(value, parameters):
    _expect("prefix", parameters, 1)
    return parameters[0] + value


@register_transformation("suffix")
def _suffix(value, parameters):
    _expect("suffix", parameters, 1)
    return value + parameters[0]


@register_transformation("collapse_whitespace")
def _collapse_whitespace(value, parameters):
    return " ".join(value.split())


class Transformer:
    """A resolved Transformation directive"""

    def __init__(self, function: Any, parameters: Sequence[str] = ()):
        self.parameters = tuple(parameters)
        self.name = function if isinstance(function, str) else getattr(function, "__name__", type(function).__name__)
        self._func = self._resolve(function)

    @staticmethod
    def _resolve(function: Any) -> Callable[[str, Sequence[str]], str]:
        if isinstance(function, str):
            func = _TRANSFORMATIONS.get(function)
            if func is None:
                raise RuleDefinitionError(
                    f"Unknown transformation '{function}'. Available: {', '.join(list_transformations())}"
                )
            return func
        if isinstance(function, type):
            if not issubclass(function, TransformationFunction):
                raise RuleDefinitionError(f"Transformation class {function.__name__} must subclass TransformationFunction")
            return function().transform
        if isinstance(function, TransformationFunction):
            return function.transform
        if callable(function):
            return function
        raise RuleDefinitionError(f"Transformation must be a name or callable, got {type(function).__name__}")

    def apply(self, value: Any) -> Any:
        """Transform str values and str items of collections; anything else passes through."""
        if isinstance(value, str):
            return self._transform(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            items = [self._transform(v) if isinstance(v, str) else v for v in value]
            return type(value)(items)
        return value

    def _transform(self, value: str) -> str:
        try:
            return self._func(value, self.parameters)
        except ValueConversionError:
            raise
        except Exception as e:
            raise ValueConversionError(f"Transformation '{self.name}' failed for '{value}': {e}", value, e) from e
