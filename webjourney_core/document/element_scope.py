from typing import List, Optional

from .port import DocumentAccessPort, ElementHandle


class ElementScopedDocument(DocumentAccessPort):
    """
    Document view rooted at a pre-resolved element.

    Paths are resolved relative to the element; the current URL,
    navigation and windows belong to the wrapped document.
    """

    def __init__(self, document: DocumentAccessPort, element: ElementHandle):
        self.document = document
        self.element = element

    @property
    def base_document(self) -> DocumentAccessPort:
        return self.document.base_document

    def get_current_url(self) -> str:
        return self.document.get_current_url()

    def get_elements(self, path: str) -> List[ElementHandle]:
        return self.element.find_elements(path)

    def get_element(self, path: str, optional: bool = False) -> Optional[ElementHandle]:
        return self.element.find_element(path, optional)

    def navigate_to(self, locator: str) -> None:
        self.document.navigate_to(locator)

    def navigate_back(self) -> None:
        self.document.navigate_back()

    def open_new_window(self) -> None:
        self.document.open_new_window()

    def close_window(self) -> None:
        self.document.close_window()

    def __repr__(self) -> str:
        return f"ElementScopedDocument(<{self.element.tag}> in {self.document!r})"
