"""
YAML entity definitions

Builds annotated dataclasses from a YAML document, so entities can be
declared without writing Python:

```yaml
entities:
  Author:
    fields:
      name: {type: str, extract: {path: "//h1"}}
  Article:
    fields:
      title: {type: str, extract: "//h1"}
      tags: {type: "list[str]", extract: {path: "//li[@class='tag']"}}
      author: {type: Author, linked: {path: "//a[@rel='author']", attribute: href}}
      year:
        type: int
        regex: {extract: {path: "//time"}, patterns: ["(?P<value>\\d{4}).*"], default: "0"}
      kind:
        type: str
        conditional:
          - {if: {current_url: true}, matches: "/news/", then: {constant: news}}
          - {if: {current_url: true}, matches: ".*", then: {constant: other}}
```

Entity names can be referenced before they are declared.
"""

import dataclasses
import datetime
import importlib
import logging
import re
import typing
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Union

import yaml

from ..exceptions import RuleDefinitionError
from .description import NAMESPACE_ATTRIBUTE
from .directives import (
    CollectionIndex,
    Conditional,
    Constant,
    Conversion,
    Directive,
    ExtractCurrentUrl,
    ExtractFromLinkedPage,
    ExtractValue,
    MappedCollection,
    RegexExtract,
    RegexMatch,
    Transformation,
)

logger = logging.getLogger(__name__)

_SCALARS = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "date": datetime.date,
}

_DEFAULTS = {str: "", int: 0, float: 0.0, bool: False}

_EXTRACTION_KEYS = ("extract", "linked", "regex", "constant", "current_url", "index")
_FIELD_KEYS = frozenset(("type", "conditional", "transform", "convert", "mapped") + _EXTRACTION_KEYS)

_GENERIC = re.compile(r"^(optional|list)\[(.+)\]$", re.IGNORECASE)


def _parse_type(entry: Any, entity_names: List[str], where: str) -> Any:
    if not isinstance(entry, str) or not entry.strip():
        raise RuleDefinitionError(f"{where}: 'type' must be a non-empty string")
    entry = entry.strip()
    if entry in _SCALARS:
        return _SCALARS[entry]
    match = _GENERIC.match(entry)
    if match:
        inner = _parse_type(match.group(2), entity_names, where)
        if match.group(1).lower() == "optional":
            return Optional[inner]
        return List[inner]
    if entry in entity_names:
        return typing.ForwardRef(entry)
    raise RuleDefinitionError(f"{where}: unknown type '{entry}'")


def _default_for(annotation: Any) -> dataclasses.Field:
    if typing.get_origin(annotation) is list:
        return dataclasses.field(default_factory=list)
    return dataclasses.field(default=_DEFAULTS.get(annotation))


def _location(entry: Any, where: str) -> Dict[str, Any]:
    """`"//h1"` or `{path, attribute, optional}`"""
    if isinstance(entry, str):
        return {"path": entry}
    if isinstance(entry, dict) and "path" in entry:
        unknown = set(entry) - {"path", "attribute", "optional"}
        if unknown:
            raise RuleDefinitionError(f"{where}: unknown keys {sorted(unknown)}")
        return {
            "path": str(entry["path"]),
            "attribute": str(entry.get("attribute", "")),
            "optional": bool(entry.get("optional", False)),
        }
    raise RuleDefinitionError(f"{where}: expected a path or a mapping with 'path'")


def _probe(entry: Any, where: str) -> Union[ExtractValue, ExtractCurrentUrl]:
    if not isinstance(entry, dict):
        raise RuleDefinitionError(f"{where}: expected 'extract' or 'current_url'")
    if entry.get("current_url"):
        return ExtractCurrentUrl()
    if "extract" in entry:
        return ExtractValue(**_location(entry["extract"], where))
    raise RuleDefinitionError(f"{where}: expected 'extract' or 'current_url'")


def _extraction_directives(entry: Dict[str, Any], where: str) -> List[Directive]:
    directives: List[Directive] = []
    if "extract" in entry:
        directives.append(ExtractValue(**_location(entry["extract"], f"{where}.extract")))
    if "linked" in entry:
        directives.append(ExtractFromLinkedPage(**_location(entry["linked"], f"{where}.linked")))
    if entry.get("current_url"):
        directives.append(ExtractCurrentUrl())
    if "constant" in entry:
        directives.append(Constant(str(entry["constant"])))
    if "index" in entry:
        index = entry["index"]
        if isinstance(index, dict):
            directives.append(CollectionIndex(int(index.get("base", 0))))
        elif index is True:
            directives.append(CollectionIndex())
        else:
            directives.append(CollectionIndex(int(index)))
    if "regex" in entry:
        regex = entry["regex"]
        if not isinstance(regex, dict) or "patterns" not in regex:
            raise RuleDefinitionError(f"{where}.regex: expected a mapping with 'patterns'")
        directives.append(RegexExtract(
            wrapped=_probe(regex, f"{where}.regex"),
            regexes=regex["patterns"],
            group=str(regex.get("group", "value")),
            default=None if regex.get("default") is None else str(regex["default"]),
        ))
    return directives


def _conditional(entry: Any, where: str) -> Conditional:
    if not isinstance(entry, list) or not entry:
        raise RuleDefinitionError(f"{where}: expected a non-empty list of alternatives")
    alternatives = []
    for i, alternative in enumerate(entry):
        at = f"{where}[{i}]"
        if not isinstance(alternative, dict) or not {"if", "matches", "then"} <= set(alternative):
            raise RuleDefinitionError(f"{at}: alternatives need 'if', 'matches' and 'then'")
        then = _extraction_directives(alternative["then"] or {}, f"{at}.then")
        if len(then) != 1:
            raise RuleDefinitionError(f"{at}.then: expected exactly one extraction")
        alternatives.append(RegexMatch(_probe(alternative["if"], f"{at}.if"), str(alternative["matches"]), then[0]))
    return Conditional(*alternatives)


def _import_object(reference: str, where: str) -> Any:
    module_name, _, attr = str(reference).partition(":")
    if not module_name or not attr:
        raise RuleDefinitionError(f"{where}: conversion must be given as 'module:attr', got '{reference}'")
    try:
        return getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise RuleDefinitionError(f"{where}: cannot import '{reference}': {e}") from e


def _field_directives(entry: Dict[str, Any], where: str) -> List[Directive]:
    directives = _extraction_directives(entry, where)
    if "conditional" in entry:
        directives.append(_conditional(entry["conditional"], f"{where}.conditional"))
    if "transform" in entry:
        transform = entry["transform"]
        if isinstance(transform, dict):
            if "name" not in transform:
                raise RuleDefinitionError(f"{where}.transform: missing 'name'")
            directives.append(Transformation(transform["name"], [str(p) for p in transform.get("parameters", [])]))
        else:
            directives.append(Transformation(str(transform)))
    if "convert" in entry:
        directives.append(Conversion(_import_object(entry["convert"], f"{where}.convert")))
    if entry.get("mapped"):
        directives.append(MappedCollection())
    return directives


def parse_entities(data: Any) -> Dict[str, type]:
    """Build entity dataclasses from already parsed YAML data."""
    if not isinstance(data, dict) or not isinstance(data.get("entities"), dict):
        raise RuleDefinitionError("Entity definitions need a top-level 'entities' mapping")
    definitions = data["entities"]
    names = list(definitions)
    namespace: Dict[str, type] = {}

    for name in names:
        definition = definitions[name] or {}
        field_entries = definition.get("fields") if isinstance(definition, dict) else None
        if not isinstance(field_entries, dict):
            raise RuleDefinitionError(f"Entity '{name}' needs a 'fields' mapping")

        fields = []
        for field_name, entry in field_entries.items():
            where = f"{name}.{field_name}"
            if not isinstance(entry, dict):
                raise RuleDefinitionError(f"{where}: expected a mapping")
            unknown = set(entry) - _FIELD_KEYS
            if unknown:
                raise RuleDefinitionError(f"{where}: unknown keys {sorted(unknown)}")
            annotation = _parse_type(entry.get("type", "str"), names, where)
            directives = _field_directives(entry, where)
            if directives:
                fields.append((field_name, Annotated[(annotation, *directives)], _default_for(annotation)))
            else:
                fields.append((field_name, annotation, _default_for(annotation)))

        try:
            entity_type = dataclasses.make_dataclass(name, fields)
        except TypeError as e:
            raise RuleDefinitionError(f"Entity '{name}': {e}") from e
        setattr(entity_type, NAMESPACE_ATTRIBUTE, namespace)
        namespace[name] = entity_type
        logger.debug(f"Defined entity {name} with {len(fields)} field(s)")

    return namespace


def _is_file(source: str) -> bool:
    if "\n" in source:
        return False
    try:
        return Path(source).is_file()
    except (OSError, ValueError):
        return False


def load_entities(source: Union[str, Path]) -> Dict[str, type]:
    """
    Load entity definitions from a YAML file path or YAML text.

    Returns:
        Entity classes by name, in declaration order

    Raises:
        RuleDefinitionError: Malformed definitions
    """
    if isinstance(source, Path) or _is_file(source):
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise RuleDefinitionError(f"Cannot read entity definitions from {source}: {e}") from e
    else:
        text = source
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RuleDefinitionError(f"Invalid YAML: {e}") from e
    return parse_entities(data)
