import re
import threading
from typing import Dict, Optional, Pattern, Sequence

from ..exceptions import RuleDefinitionError

_PATTERNS: Dict[str, Pattern] = {}
_LOCK = threading.Lock()

# `(?<name>` named groups, but not lookbehinds `(?<=` / `(?<!`
_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")


def get_pattern(pattern: str) -> Pattern:
    """Compile (and cache) a pattern, accepting `(?<name>...)` named groups."""
    compiled = _PATTERNS.get(pattern)
    if compiled is not None:
        return compiled
    try:
        compiled = re.compile(_NAMED_GROUP.sub("(?P<", pattern))
    except re.error as e:
        raise RuleDefinitionError(f"Invalid regular expression '{pattern}': {e}") from e
    with _LOCK:
        _PATTERNS[pattern] = compiled
    return compiled


class RegexGroup:
    """
    Named group lookup over an ordered set of patterns.

    Each pattern must match the whole value; the first one that yields the
    group wins, otherwise the default is returned.
    """

    def __init__(self, patterns: Sequence[str], group: str, default: Optional[str] = None):
        if not patterns:
            raise RuleDefinitionError("At least one regular expression is required")
        self.patterns = [get_pattern(p) for p in patterns]
        self.group = group
        self.default = default

    def find_group_value(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        for pattern in self.patterns:
            match = pattern.fullmatch(value)
            if match is None:
                continue
            try:
                group_value = match.group(self.group)
            except IndexError:
                # pattern without that group
                continue
            if group_value is not None:
                return group_value
        return self.default

    def __repr__(self) -> str:
        return f"RegexGroup({[p.pattern for p in self.patterns]}, group={self.group!r}, default={self.default!r})"
