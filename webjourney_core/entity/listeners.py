"""
Entity creation listeners

Callers pass listeners to `create_entity` for bookkeeping; they are told
when each entity build starts and finishes. A failing listener is logged
and never fails the extraction.
"""

import logging
from collections import Counter
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class EntityCreationListener:
    def entity_creation_started(self, entity_type: type) -> None:
        pass

    def entity_created(self, entity: Any) -> None:
        pass


class LoggingCreationListener(EntityCreationListener):
    """Logs every built entity"""

    def __init__(self, log: logging.Logger = None, level: int = logging.INFO):
        self.log = log or logger
        self.level = level

    def entity_creation_started(self, entity_type):
        self.log.log(self.level, f"Creating {entity_type.__name__}")

    def entity_created(self, entity):
        self.log.log(self.level, f"Created {type(entity).__name__}")


class EntityCreationCounter(EntityCreationListener):
    """Counts started and finished builds per entity class name"""

    def __init__(self):
        self.started = Counter()
        self.created = Counter()
        self.entities = []

    def entity_creation_started(self, entity_type):
        self.started[entity_type.__name__] += 1

    def entity_created(self, entity):
        self.created[type(entity).__name__] += 1
        self.entities.append(entity)

    @property
    def total(self) -> int:
        return sum(self.created.values())


def notify(listeners: Iterable[EntityCreationListener], event: str, *args) -> None:
    for listener in listeners:
        try:
            getattr(listener, event)(*args)
        except Exception as e:
            logger.warning(f"Entity creation listener {type(listener).__name__}.{event} failed: {e}")
