"""
Tests for the entity creation context
"""

import pytest

from webjourney_core.entity.context import EntityCreationContext


class TestCreationContext:

    def test_breadcrumb_path(self):
        context = EntityCreationContext("Match")
        with context.field("innings"):
            with context.collection():
                context.next_item()
                context.next_item()
                with context.field("score"):
                    assert context.path == "Match->innings[1]->score"
                    assert context.depth == 2
            assert context.path == "Match->innings"
        assert context.path == "Match"

    def test_nested_collections_track_innermost_index(self):
        context = EntityCreationContext("Match")
        with context.field("innings"), context.collection():
            context.next_item()
            with context.field("overs"), context.collection():
                context.next_item()
                context.next_item()
                context.next_item()
                assert context.collection_index == 2
            assert context.collection_index == 0
        assert context.collection_index is None

    def test_next_item_outside_collection(self):
        with pytest.raises(RuntimeError):
            EntityCreationContext("Match").next_item()

    def test_linked_cache_is_bounded(self):
        context = EntityCreationContext("Match", linked_cache_size=2)
        context.store_linked("a", 1)
        context.store_linked("b", 2)
        context.cached_linked("a")
        context.store_linked("c", 3)

        assert context.cached_linked("a") == 1
        assert context.cached_linked("b") is None
        assert context.cached_linked("c") == 3

    def test_linked_cache_disabled(self):
        context = EntityCreationContext("Match", linked_cache_size=0)
        context.store_linked("a", 1)

        assert context.cached_linked("a") is None
