from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Hashable, Iterator, List, Optional, Sequence


@dataclass
class _Breadcrumb:
    field_name: str
    index: Optional[int] = None

    def __str__(self) -> str:
        return self.field_name if self.index is None else f"{self.field_name}[{self.index}]"


class EntityCreationContext:
    """
    State of one top-level entity build.

    Tracks the breadcrumb path of the field being scraped, the index stack
    of enclosing collections, the listeners to notify, and a bounded cache
    of entities already built from linked pages.
    """

    def __init__(self, entity_name: str, listeners: Optional[Sequence[Any]] = None, linked_cache_size: int = 0):
        self.entity_name = entity_name
        self.listeners = list(listeners or [])
        self.linked_cache_size = max(0, linked_cache_size)
        self._breadcrumbs: List[_Breadcrumb] = []
        self._indices: List[int] = []
        self._linked: "OrderedDict[Hashable, Any]" = OrderedDict()

    @contextmanager
    def field(self, field_name: str) -> Iterator[None]:
        self._breadcrumbs.append(_Breadcrumb(field_name))
        try:
            yield
        finally:
            self._breadcrumbs.pop()

    @contextmanager
    def collection(self) -> Iterator[None]:
        self._indices.append(-1)
        try:
            yield
        finally:
            self._indices.pop()
            if self._breadcrumbs:
                self._breadcrumbs[-1].index = None

    def next_item(self) -> int:
        """Advance to the next item of the innermost collection."""
        if not self._indices:
            raise RuntimeError("next_item() called outside of a collection")
        self._indices[-1] += 1
        if self._breadcrumbs:
            self._breadcrumbs[-1].index = self._indices[-1]
        return self._indices[-1]

    @property
    def collection_index(self) -> Optional[int]:
        if not self._indices:
            return None
        return self._indices[-1]

    @property
    def path(self) -> str:
        return "->".join([self.entity_name] + [str(b) for b in self._breadcrumbs])

    @property
    def depth(self) -> int:
        return len(self._breadcrumbs)

    def cached_linked(self, key: Hashable) -> Optional[Any]:
        if key not in self._linked:
            return None
        self._linked.move_to_end(key)
        return self._linked[key]

    def store_linked(self, key: Hashable, instance: Any) -> None:
        if self.linked_cache_size == 0:
            return
        self._linked[key] = instance
        self._linked.move_to_end(key)
        while len(self._linked) > self.linked_cache_size:
            self._linked.popitem(last=False)
