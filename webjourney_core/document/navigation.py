import logging
from contextlib import contextmanager
from typing import Iterator

from .port import DocumentAccessPort

logger = logging.getLogger(__name__)


@contextmanager
def linked_page(document: DocumentAccessPort, locator: str) -> Iterator[DocumentAccessPort]:
    """
    Navigate to `locator` for the duration of the block.

    Yields the unscoped document positioned on the linked page. The
    navigate-back runs on every exit path once the forward navigation
    succeeded, so a failing build never leaves the document mid-navigation.
    """
    logger.debug(f"Navigating to linked page {locator}")
    document.navigate_to(locator)
    try:
        yield document.base_document
    finally:
        logger.debug(f"Navigating back from linked page {locator}")
        document.navigate_back()
