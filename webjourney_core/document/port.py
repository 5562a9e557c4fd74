"""
Document Access Port

The extraction engine reads values and navigates exclusively through
these interfaces, never through a concrete browser driver.

Implementations only need the element lookups, the current URL, navigation
and window handling; the text and attribute helpers are derived from
`get_element` / `get_elements`.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..exceptions import ElementNotFoundError


class ElementHandle(ABC):
    """A resolved element of the current document"""

    @property
    @abstractmethod
    def tag(self) -> str:
        pass

    @abstractmethod
    def get_text(self) -> str:
        pass

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def find_elements(self, path: str) -> List["ElementHandle"]:
        """Resolve `path` relative to this element."""
        pass

    def find_element(self, path: str, optional: bool = False) -> Optional["ElementHandle"]:
        elements = self.find_elements(path)
        if elements:
            return elements[0]
        if optional:
            return None
        raise ElementNotFoundError(path)


class DocumentAccessPort(ABC):
    """
    Read values from the current page and move between pages.

    Every `optional` lookup returns None for a missing target instead of
    raising ElementNotFoundError.
    """

    @property
    def base_document(self) -> "DocumentAccessPort":
        """The unscoped document that owns navigation."""
        return self

    @abstractmethod
    def get_current_url(self) -> str:
        pass

    @abstractmethod
    def get_elements(self, path: str) -> List[ElementHandle]:
        pass

    def get_element(self, path: str, optional: bool = False) -> Optional[ElementHandle]:
        elements = self.get_elements(path)
        if elements:
            return elements[0]
        if optional:
            return None
        raise ElementNotFoundError(path)

    def get_element_text(self, path: str, optional: bool = False) -> Optional[str]:
        element = self.get_element(path, optional)
        if element is None:
            return None
        return element.get_text()

    def get_element_texts(self, path: str) -> List[str]:
        return [element.get_text() for element in self.get_elements(path)]

    def get_attribute(self, path: str, attr: str, optional: bool = False) -> Optional[str]:
        element = self.get_element(path, optional)
        if element is None:
            return None
        return element.get_attribute(attr)

    def get_attributes(self, path: str, attr: str) -> List[Optional[str]]:
        return [element.get_attribute(attr) for element in self.get_elements(path)]

    @abstractmethod
    def navigate_to(self, locator: str) -> None:
        pass

    @abstractmethod
    def navigate_back(self) -> None:
        pass

    @abstractmethod
    def open_new_window(self) -> None:
        pass

    @abstractmethod
    def close_window(self) -> None:
        pass
