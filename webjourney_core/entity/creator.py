"""
Entity Creation Orchestrator

Walks an EntityDescription against a document: for every field the
applicable rule is selected, the raw value extracted, converted (possibly
recursing into nested or linked entities), transformed and assigned.

Usage:
    creator = EntityCreator()
    article = creator.create_entity(Article, HtmlDocument("https://example.com/a/1"))
"""

import logging
from typing import Any, Optional, Sequence, Union

from ..config import Config, config as default_config
from ..document.element_scope import ElementScopedDocument
from ..document.port import DocumentAccessPort, ElementHandle
from ..exceptions import EntityFieldScrapeError, RuleDefinitionError, WebJourneyError
from .context import EntityCreationContext
from .description import EntityDescription, EntityDescriptions, FieldDescription
from .extractors import ExtractorLibrary, default_library
from .listeners import EntityCreationListener, notify

logger = logging.getLogger(__name__)


class EntityCreator:
    def __init__(
        self,
        descriptions: Optional[EntityDescriptions] = None,
        extractors: Optional[ExtractorLibrary] = None,
        cfg: Optional[Config] = None,
    ):
        self.config = cfg or default_config
        self.descriptions = descriptions or EntityDescriptions(cache_enabled=self.config.entity_cache_enabled)
        self.extractors = extractors or default_library()

    def describe(self, entity: Union[type, EntityDescription]) -> EntityDescription:
        if isinstance(entity, EntityDescription):
            return entity
        return self.descriptions.describe(entity)

    def create_entity(
        self,
        entity: Union[type, EntityDescription],
        document: DocumentAccessPort,
        root_element: Optional[ElementHandle] = None,
        listeners: Optional[Sequence[EntityCreationListener]] = None,
    ) -> Any:
        """
        Build one entity from the document's current position.

        Args:
            entity: Entity class or a prebuilt EntityDescription
            document: Document to read from
            root_element: Resolve paths relative to this element
            listeners: Notified when each entity build starts and finishes

        Returns:
            The populated entity instance

        Raises:
            RuleDefinitionError: Invalid directives on the entity or a nested type
            EntityInstantiationError: The entity class could not be created
            EntityFieldScrapeError: A required field could not be scraped
        """
        description = self.describe(entity)
        context = EntityCreationContext(description.name, listeners, self.config.linked_cache_size)
        logger.debug(f"Creating {description.name} at {document.get_current_url()}")
        return self.build(description, document, context, root_element)

    def build(
        self,
        entity: Union[type, EntityDescription],
        document: DocumentAccessPort,
        context: EntityCreationContext,
        root_element: Optional[ElementHandle] = None,
    ) -> Any:
        """Build an entity within an ongoing creation (used for nested and linked entities)."""
        description = self.describe(entity)
        if root_element is not None:
            document = ElementScopedDocument(document, root_element)

        notify(context.listeners, "entity_creation_started", description.entity_type)
        instance = description.instantiate()
        for field_description in description.fields:
            with context.field(field_description.name):
                self._populate(instance, description, field_description, document, context)
        notify(context.listeners, "entity_created", instance)
        return instance

    def _populate(
        self,
        instance: Any,
        description: EntityDescription,
        field_description: FieldDescription,
        document: DocumentAccessPort,
        context: EntityCreationContext,
    ) -> None:
        try:
            rule = field_description.rules.select(document, context, self.extractors)
            if rule is None:
                return
            raw = self.extractors.extract(document, rule, context)
            if raw is None:
                logger.debug(f"{context.path} is absent, keeping default")
                return
            value = field_description.converter.convert(raw, document, context, self)
            if field_description.transformer is not None:
                value = field_description.transformer.apply(value)
        except RuleDefinitionError:
            raise
        except WebJourneyError as e:
            if not isinstance(e, EntityFieldScrapeError):
                logger.error(f"Failed to scrape {context.path}: {e}")
            raise EntityFieldScrapeError(description.name, field_description.name, context.path, e) from e

        setattr(instance, field_description.name, value)


_default_creator: Optional[EntityCreator] = None


def create_entity(
    entity: Union[type, EntityDescription],
    document: DocumentAccessPort,
    root_element: Optional[ElementHandle] = None,
    listeners: Optional[Sequence[EntityCreationListener]] = None,
) -> Any:
    """Create an entity with a process wide EntityCreator."""
    global _default_creator
    if _default_creator is None:
        _default_creator = EntityCreator()
    return _default_creator.create_entity(entity, document, root_element, listeners)
