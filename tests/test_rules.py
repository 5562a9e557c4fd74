"""
Tests for field rule resolution
"""

from dataclasses import dataclass
from typing import Annotated, List

import pytest

from webjourney_core.entity import (
    CollectionIndex,
    Conditional,
    Constant,
    Conversion,
    DirectiveKind,
    ExtractCurrentUrl,
    ExtractFromLinkedPage,
    ExtractValue,
    MappedCollection,
    RawTarget,
    RegexExtract,
    Transformation,
    classify,
    resolve_field_rules,
    when,
)
from webjourney_core.entity.context import EntityCreationContext
from webjourney_core.entity.rules import ALWAYS
from webjourney_core.exceptions import RuleDefinitionError


@dataclass
class Child:
    name: Annotated[str, ExtractValue("./h2")] = ""


class TestResolution:

    def test_single_always_rule(self):
        rules = resolve_field_rules("title", [ExtractValue("//h1")], classify(str))

        assert len(rules.rules) == 1
        rule = rules.rules[0]
        assert rule.kind is DirectiveKind.VALUE
        assert rule.target is RawTarget.TEXT
        assert rule.path == "//h1"
        assert rule.condition is ALWAYS
        assert not rules.is_conditional
        assert not rules.has_link_extraction

    def test_attribute_target(self):
        rule = resolve_field_rules("link", [ExtractValue("//a", attribute="href")], classify(str)).rules[0]

        assert rule.target is RawTarget.ATTRIBUTE
        assert rule.attribute == "href"

    def test_composite_field_targets_element(self):
        rule = resolve_field_rules("child", [ExtractValue("//div")], classify(Child)).rules[0]

        assert rule.target is RawTarget.ELEMENT

    def test_collection_is_many_unless_mapped(self):
        per_item = resolve_field_rules("items", [ExtractValue("//li")], classify(List[str])).rules[0]
        mapped = resolve_field_rules(
            "items", [ExtractValue("//p"), Conversion(str.split), MappedCollection()], classify(List[str])
        ).rules[0]

        assert per_item.many is True
        assert mapped.many is False

    def test_linked_page_rule(self):
        rules = resolve_field_rules("child", [ExtractFromLinkedPage("//a", "href")], classify(Child))

        assert rules.has_link_extraction
        assert rules.rules[0].target is RawTarget.ATTRIBUTE

    def test_regex_wraps_value(self):
        rule = resolve_field_rules(
            "year", [RegexExtract(ExtractValue("//time"), r"(?P<value>\d{4})")], classify(int)
        ).rules[0]

        assert rule.kind is DirectiveKind.VALUE
        assert rule.regex_group.find_group_value("2023") == "2023"

    def test_conditional_expands_in_declared_order(self):
        rules = resolve_field_rules(
            "kind",
            [Conditional(
                when(ExtractCurrentUrl(), "/a/", Constant("a")),
                when(ExtractCurrentUrl(), "/b/", Constant("b")),
            )],
            classify(str),
        )

        assert rules.is_conditional
        assert [r.constant for r in rules.rules] == ["a", "b"]
        assert all(r.is_conditional for r in rules.rules)

    def test_directives_outside_the_set_are_ignored(self):
        rules = resolve_field_rules("title", ["some doc string", ExtractValue("//h1")], classify(str))

        assert len(rules.rules) == 1


class TestResolutionErrors:

    @pytest.mark.parametrize("directives, type_", [
        ([ExtractValue("//h1"), ExtractCurrentUrl()], str),
        ([], str),
        ([Transformation("strip")], str),
        ([ExtractValue("//h1"), Conditional(when(ExtractCurrentUrl(), ".*", Constant("x")))], str),
        ([ExtractValue("//h1"), Conversion(str), Conversion(str)], str),
        ([ExtractValue("//h1"), Transformation("strip"), Transformation("lower")], str),
        ([ExtractValue("//h1"), Conversion(str.split), MappedCollection()], str),
        ([ExtractValue("//li"), MappedCollection()], List[str]),
        ([ExtractFromLinkedPage("//a", "href")], str),
        ([RegexExtract(Constant("x"), r"(?P<value>.*)")], str),
        ([RegexExtract(ExtractValue("//h1"), r"(?P<value>[unclosed")], str),
        ([Conditional()], str),
        ([Conditional(when(Constant("x"), ".*", Constant("y")))], str),
        ([Conditional(when(ExtractCurrentUrl(), ".*", Conditional()))], str),
        ([Constant("x")], Child),
        ([ExtractValue("//a", attribute="href")], Child),
        ([CollectionIndex()], List[Child]),
    ])
    def test_invalid_combinations(self, directives, type_):
        with pytest.raises(RuleDefinitionError):
            resolve_field_rules("field", directives, classify(type_))

    def test_linked_and_in_page_alternatives_cannot_mix(self):
        with pytest.raises(RuleDefinitionError):
            resolve_field_rules(
                "child",
                [Conditional(
                    when(ExtractCurrentUrl(), "/a/", ExtractFromLinkedPage("//a", "href")),
                    when(ExtractCurrentUrl(), "/b/", ExtractValue("//div")),
                )],
                classify(Child),
            )


class TestSelection:

    def test_first_matching_alternative_wins(self, document):
        rules = resolve_field_rules(
            "kind",
            [Conditional(
                when(ExtractValue("//h1[@id='title']"), "String", Constant("first")),
                when(ExtractValue("//h1[@id='title']"), "Data", Constant("second")),
            )],
            classify(str),
        )

        rule = rules.select(document, EntityCreationContext("Test"))

        assert rule.constant == "first"

    def test_no_match_selects_nothing(self, document):
        rules = resolve_field_rules(
            "kind",
            [Conditional(when(ExtractValue("//h1[@id='title']"), "^Data", Constant("x")))],
            classify(str),
        )

        assert rules.select(document, EntityCreationContext("Test")) is None

    def test_probe_uses_search_not_full_match(self, document):
        rules = resolve_field_rules(
            "kind",
            [Conditional(when(ExtractCurrentUrl(), "example", Constant("x")))],
            classify(str),
        )

        assert rules.select(document, EntityCreationContext("Test")).constant == "x"
