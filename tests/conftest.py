"""
Shared fixtures: a small in-memory site served through PageRouter.
"""

import pytest

from webjourney_core.config import Config
from webjourney_core.document import HtmlDocument, PageRouter
from webjourney_core.entity import EntityCreator, EntityDescriptions

BASE = "https://shop.example.com"

HOME = """
<html><body>
  <h1 id="title">String Data</h1>
  <span id="empty"></span>
  <span id="number"> 42 </span>
  <span id="price">12.50 EUR</span>
  <span id="flag">Yes</span>
  <span id="date">28th February 2023</span>
  <p id="csv">item1,item2,item3</p>
  <ul id="items">
    <li>Item1</li>
    <li>Item2</li>
    <li>Item3</li>
  </ul>
  <div class="product" data-sku="A1">
    <h2>Kettle</h2><span class="cost">10</span>
    <ul><li class="tag">kitchen</li><li class="tag">steel</li></ul>
  </div>
  <div class="product" data-sku="B2">
    <h2>Toaster</h2><span class="cost">25</span>
    <ul><li class="tag">kitchen</li></ul>
  </div>
  <ul id="links">
    <li><a href="/items/1">first</a></li>
    <li><a href="/items/2">second</a></li>
    <li><a href="/items/3">third</a></li>
  </ul>
  <a id="maker" href="/makers/acme">Acme</a>
  <a id="broken" href="/items/broken">broken</a>
</body></html>
"""


def item_page(number: int) -> str:
    return f"""
<html><body>
  <h1>Item {number}</h1>
  <span id="stock">{number * 10}</span>
</body></html>
"""


MAKER = """
<html><body><h1>Acme Corp</h1><p class="country">Poland</p></body></html>
"""

BROKEN = "<html><body><p>no heading here</p></body></html>"


@pytest.fixture
def router():
    return (
        PageRouter()
        .route(f"{BASE}/", HOME)
        .route(f"{BASE}/items/1", item_page(1))
        .route(f"{BASE}/items/2", item_page(2))
        .route(f"{BASE}/items/3", item_page(3))
        .route(f"{BASE}/makers/acme", MAKER)
        .route(f"{BASE}/items/broken", BROKEN)
    )


@pytest.fixture
def cfg():
    return Config(entity_cache_enabled=False, linked_cache_size=0, fetch_remote=False)


@pytest.fixture
def document(router, cfg):
    return HtmlDocument(f"{BASE}/", router=router, cfg=cfg)


@pytest.fixture
def creator(cfg):
    return EntityCreator(EntityDescriptions(cache_enabled=False), cfg=cfg)
