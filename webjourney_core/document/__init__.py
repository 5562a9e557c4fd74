"""
Document access for the extraction engine
"""

from .port import DocumentAccessPort, ElementHandle
from .element_scope import ElementScopedDocument
from .navigation import linked_page
from .html_document import HtmlDocument, HtmlElement, PageRouter

__all__ = [
    'DocumentAccessPort',
    'ElementHandle',
    'ElementScopedDocument',
    'linked_page',
    'HtmlDocument',
    'HtmlElement',
    'PageRouter',
]
