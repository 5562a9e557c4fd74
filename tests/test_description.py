"""
Tests for entity descriptions and their cache
"""

import threading
from dataclasses import dataclass, field
from typing import Annotated, ClassVar, List

import pytest

from webjourney_core.entity import (
    EntityDescriptions,
    ExtractCurrentUrl,
    ExtractValue,
    Transformation,
)
from webjourney_core.exceptions import RuleDefinitionError


@dataclass
class Article:
    title: Annotated[str, ExtractValue("//h1"), Transformation("lower")] = ""
    notes: str = ""
    url: Annotated[str, ExtractCurrentUrl()] = ""
    tags: Annotated[List[str], ExtractValue("//li")] = field(default_factory=list)
    kind: ClassVar[str] = "article"


@dataclass
class Broken:
    title: Annotated[str, ExtractValue("//h1"), ExtractCurrentUrl()] = ""


class Plain:
    """Not a dataclass, fields come from class annotations"""
    heading: Annotated[str, ExtractValue("//h1")] = ""
    count: Annotated[int, ExtractValue("//span")] = 0


class TestEntityDescription:

    def test_fields_in_declaration_order_without_undirected(self):
        description = EntityDescriptions().describe(Article)

        assert description.name == "Article"
        assert [f.name for f in description.fields] == ["title", "url", "tags"]
        assert description.field("title").transformer.name == "lower"
        assert description.field("tags").type_info.is_collection

    def test_plain_class(self):
        description = EntityDescriptions().describe(Plain)

        assert [f.name for f in description.fields] == ["heading", "count"]
        assert isinstance(description.instantiate(), Plain)

    def test_definition_error_names_entity(self):
        with pytest.raises(RuleDefinitionError, match="Broken"):
            EntityDescriptions().describe(Broken)

    def test_not_a_class(self):
        with pytest.raises(RuleDefinitionError):
            EntityDescriptions().describe("Article")

    def test_describe_text(self):
        text = EntityDescriptions().describe(Article).describe()

        assert text.startswith("Article")
        assert "title: str" in text
        assert "transform lower" in text


class TestDescriptionCache:

    def test_cached_per_class(self):
        descriptions = EntityDescriptions(cache_enabled=True)

        first = descriptions.describe(Article)

        assert descriptions.describe(Article) is first
        assert Article in descriptions
        assert len(descriptions) == 1

    def test_cache_disabled_rebuilds(self):
        descriptions = EntityDescriptions(cache_enabled=False)

        first = descriptions.describe(Article)

        assert descriptions.describe(Article) is not first
        assert len(descriptions) == 0

    def test_clear(self):
        descriptions = EntityDescriptions()
        descriptions.describe(Article)

        descriptions.clear()

        assert Article not in descriptions

    def test_instances_do_not_share_cache(self):
        one = EntityDescriptions()
        two = EntityDescriptions()
        one.describe(Article)

        assert Article not in two

    def test_register_factory_invalidates(self):
        descriptions = EntityDescriptions()
        before = descriptions.describe(Plain)

        descriptions.register_factory(Plain, lambda: Plain())

        after = descriptions.describe(Plain)
        assert after is not before
        assert descriptions.has_factory(Plain)

    def test_concurrent_reads(self):
        descriptions = EntityDescriptions()
        results = []

        def worker():
            for _ in range(50):
                results.append(descriptions.describe(Article))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 200
        assert all([f.name for f in r.fields] == ["title", "url", "tags"] for r in results)
