"""
Tests for YAML entity definitions
"""

import dataclasses
import datetime
from dataclasses import dataclass, field
from typing import Annotated, List

import pytest

from conftest import BASE
from webjourney_core.entity import (
    Constant,
    Conditional,
    ExtractCurrentUrl,
    ExtractFromLinkedPage,
    ExtractValue,
    RegexExtract,
    load_entities,
    when,
)
from webjourney_core.exceptions import RuleDefinitionError

SHOP_YAML = """
entities:
  Shop:
    fields:
      title: {type: str, extract: "//h1[@id='title']"}
      items:
        type: "list[Item]"
        linked: {path: "//ul[@id='links']/li/a", attribute: href}
      maker: {type: Maker, linked: {path: "//a[@id='maker']", attribute: href}}
      price:
        type: float
        regex: {extract: {path: "//span[@id='price']"}, patterns: ["(?<value>[\\\\d.]+) EUR"]}
      section:
        type: str
        conditional:
          - {if: {current_url: true}, matches: "/news/", then: {constant: news}}
          - {if: {extract: "//h1[@id='title']"}, matches: "Data", then: {constant: data}}
      missing: {type: "optional[int]", extract: {path: "//h5", optional: true}}
  Item:
    fields:
      title: {type: str, extract: "//h1"}
      stock: {type: int, extract: {path: "//span[@id='stock']"}}
      url: {type: str, current_url: true}
  Maker:
    fields:
      name: {type: str, extract: "//h1", transform: upper}
      country: {type: str, extract: "//p[@class='country']", transform: {name: prefix, parameters: ["in "]}}
"""


@dataclass
class Item:
    title: Annotated[str, ExtractValue("//h1")] = ""
    stock: Annotated[int, ExtractValue("//span[@id='stock']")] = 0
    url: Annotated[str, ExtractCurrentUrl()] = ""


@dataclass
class Maker:
    name: Annotated[str, ExtractValue("//h1")] = ""
    country: Annotated[str, ExtractValue("//p[@class='country']")] = ""


@dataclass
class Shop:
    title: Annotated[str, ExtractValue("//h1[@id='title']")] = ""
    items: Annotated[List[Item], ExtractFromLinkedPage("//ul[@id='links']/li/a", attribute="href")] = field(
        default_factory=list
    )
    maker: Annotated[Maker, ExtractFromLinkedPage("//a[@id='maker']", attribute="href")] = None
    price: Annotated[float, RegexExtract(ExtractValue("//span[@id='price']"), r"(?<value>[\d.]+) EUR")] = 0.0
    section: Annotated[str, Conditional(
        when(ExtractCurrentUrl(), "/news/", Constant("news")),
        when(ExtractValue("//h1[@id='title']"), "Data", Constant("data")),
    )] = ""
    missing: Annotated[int, ExtractValue("//h5", optional=True)] = None


class TestLoadEntities:

    def test_builds_dataclasses_in_declaration_order(self):
        entities = load_entities(SHOP_YAML)

        assert list(entities) == ["Shop", "Item", "Maker"]
        assert all(dataclasses.is_dataclass(cls) for cls in entities.values())
        assert [f.name for f in dataclasses.fields(entities["Item"])] == ["title", "stock", "url"]

    def test_defaults(self):
        shop = load_entities(SHOP_YAML)["Shop"]()

        assert shop.title == ""
        assert shop.items == []
        assert shop.maker is None
        assert shop.price == 0.0
        assert shop.missing is None

    def test_matches_equivalent_dataclasses(self, creator, document):
        entities = load_entities(SHOP_YAML)

        from_yaml = creator.create_entity(entities["Shop"], document)
        from_code = creator.create_entity(Shop, document)

        expected = dataclasses.asdict(from_code)
        expected["maker"] = {"name": "ACME CORP", "country": "in Poland"}
        assert dataclasses.asdict(from_yaml) == expected
        assert from_yaml.section == "data"
        assert [item.url for item in from_yaml.items] == [f"{BASE}/items/{n}" for n in (1, 2, 3)]

    def test_conversions_by_reference(self, creator, document):
        entities = load_entities("""
entities:
  Converted:
    fields:
      length: {type: int, extract: "//h1[@id='title']", convert: "builtins:len"}
      words: {type: "list[str]", extract: "//h1[@id='title']", convert: "shlex:split", mapped: true}
      when: {type: date, extract: "//span[@id='date']"}
      position: {type: int, constant: 3}
""")

        entity = creator.create_entity(entities["Converted"], document)

        assert entity.length == 11
        assert entity.words == ["String", "Data"]
        assert entity.when == datetime.date(2023, 2, 28)
        assert entity.position == 3

    def test_collection_index(self, creator, document):
        entities = load_entities("""
entities:
  Product:
    fields:
      name: {type: str, extract: "./h2"}
      position: {type: int, index: {base: 1}}
  Catalog:
    fields:
      products: {type: "list[Product]", extract: "//div[@class='product']"}
""")

        catalog = creator.create_entity(entities["Catalog"], document)

        assert [(p.name, p.position) for p in catalog.products] == [("Kettle", 1), ("Toaster", 2)]

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "entities.yaml"
        path.write_text(SHOP_YAML, encoding="utf-8")

        assert list(load_entities(path)) == ["Shop", "Item", "Maker"]
        assert list(load_entities(str(path))) == ["Shop", "Item", "Maker"]


class TestInvalidDefinitions:

    @pytest.mark.parametrize("text", [
        "just a string",
        "entities: []",
        "entities: {A: {}}",
        "entities: {A: {fields: {x: {type: unknown, extract: '//h1'}}}}",
        "entities: {A: {fields: {x: {type: str, extract: '//h1', colour: red}}}}",
        "entities: {A: {fields: {x: {type: int, extract: '//h1', convert: 'no_such_module:thing'}}}}",
        "entities: {A: {fields: {x: {type: int, extract: '//h1', convert: 'nocolon'}}}}",
        "entities: {A: {fields: {x: {type: str, conditional: []}}}}",
        "entities: {A: {fields: {x: {type: str, conditional: [{if: {current_url: true}, then: {constant: a}}]}}}}",
        "entities: {A: {fields: {x: {type: str, regex: {extract: '//h1'}}}}}",
        "entities: {A: {fields: {x: {type: str, extract: {attribute: href}}}}}",
        "entities: {A: {fields: {x: {type: str, transform: {parameters: [a]}, extract: '//h1'}}}}",
        "entities: {A: {fields: {class: {type: str, extract: '//h1'}}}}",
        "entities: {A: {fields: {x: [unclosed",
    ])
    def test_rejected(self, text):
        with pytest.raises(RuleDefinitionError):
            load_entities(text)

    def test_invalid_combination_surfaces_when_described(self, creator, document):
        entities = load_entities("""
entities:
  A:
    fields:
      x: {type: str, extract: "//h1", constant: "c"}
""")

        with pytest.raises(RuleDefinitionError):
            creator.create_entity(entities["A"], document)
