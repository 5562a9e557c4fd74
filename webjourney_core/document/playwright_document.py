"""
Playwright backed Document Access Port (sync API)

Paths are XPath expressions evaluated with `xpath=` locators. When chained
from an element, Playwright evaluates `//...` relative to that element.

Usage:
    with PlaywrightDocument.launch(url="https://example.com/") as document:
        entity = create_entity(Article, document)
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page, sync_playwright

from ..config import Config, config as default_config
from ..diagnostics import get_logger
from ..exceptions import DocumentError, NavigationError
from .port import DocumentAccessPort, ElementHandle

logger = get_logger(__name__)

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


def _xpath(path: str) -> str:
    return f"xpath={path}"


def _resolve_all(locator: Locator) -> List[ElementHandle]:
    try:
        count = locator.count()
    except PlaywrightError as e:
        raise DocumentError(f"Failed to resolve elements: {e}") from e
    return [PlaywrightElement(locator.nth(i)) for i in range(count)]


class PlaywrightElement(ElementHandle):
    """Element of a live Playwright page"""

    def __init__(self, locator: Locator):
        self.locator = locator

    @property
    def tag(self) -> str:
        try:
            return self.locator.evaluate("e => e.tagName.toLowerCase()")
        except PlaywrightError as e:
            raise DocumentError(f"Failed to read element tag: {e}") from e

    def get_text(self) -> str:
        try:
            return self.locator.inner_text().strip()
        except PlaywrightError as e:
            raise DocumentError(f"Failed to read element text: {e}") from e

    def get_attribute(self, name: str) -> Optional[str]:
        try:
            return self.locator.get_attribute(name)
        except PlaywrightError as e:
            raise DocumentError(f"Failed to read attribute '{name}': {e}") from e

    def find_elements(self, path: str) -> List[ElementHandle]:
        return _resolve_all(self.locator.locator(_xpath(path)))


class PlaywrightDocument(DocumentAccessPort):
    """
    Document Access Port over a Playwright page.

    Windows are pages of the same browser context; the most recently
    opened one is active.
    """

    def __init__(self, page: Page, cfg: Optional[Config] = None):
        self.cfg = cfg or default_config
        self._pages: List[Page] = [page]

    @property
    def page(self) -> Page:
        return self._pages[-1]

    def get_current_url(self) -> str:
        return self.page.url

    def get_elements(self, path: str) -> List[ElementHandle]:
        return _resolve_all(self.page.locator(_xpath(path)))

    def navigate_to(self, locator: str) -> None:
        logger.debug(f"Navigating to {locator}")
        try:
            self.page.goto(
                locator,
                wait_until=self.cfg.wait_until,
                timeout=self.cfg.navigation_timeout_ms,
            )
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {locator} failed: {e}") from e

    def navigate_back(self) -> None:
        try:
            response = self.page.go_back(
                wait_until=self.cfg.wait_until,
                timeout=self.cfg.navigation_timeout_ms,
            )
        except PlaywrightError as e:
            raise NavigationError(f"Navigating back failed: {e}") from e
        logger.debug(f"Navigated back to {self.page.url} (response: {response is not None})")

    def open_new_window(self) -> None:
        try:
            self._pages.append(self.page.context.new_page())
        except PlaywrightError as e:
            raise NavigationError(f"Failed to open a new window: {e}") from e

    def close_window(self) -> None:
        if len(self._pages) == 1:
            raise NavigationError("Cannot close the last window")
        page = self._pages.pop()
        try:
            page.close()
        except PlaywrightError as e:
            raise NavigationError(f"Failed to close window: {e}") from e

    @classmethod
    @contextmanager
    def launch(cls, url: Optional[str] = None, cfg: Optional[Config] = None) -> Iterator["PlaywrightDocument"]:
        """Start a browser per configuration and yield a document on a fresh page."""
        cfg = cfg or default_config
        if cfg.browser not in SUPPORTED_BROWSERS:
            raise NavigationError(f"Unsupported browser: {cfg.browser} (use one of {', '.join(SUPPORTED_BROWSERS)})")
        with sync_playwright() as pw:
            launch_args = {"headless": bool(cfg.headless)}
            if cfg.browser == "chromium":
                launch_args["args"] = ["--no-sandbox", "--disable-dev-shm-usage"]
            try:
                browser = getattr(pw, cfg.browser).launch(**launch_args)
            except PlaywrightError as e:
                raise NavigationError(f"Failed to launch {cfg.browser}: {e}") from e
            try:
                context_args = {"user_agent": cfg.user_agent} if cfg.user_agent else {}
                try:
                    page = browser.new_context(**context_args).new_page()
                except PlaywrightError as e:
                    raise NavigationError(f"Failed to open a browser page: {e}") from e
                document = cls(page, cfg)
                if url:
                    document.navigate_to(url)
                logger.debug(f"Launched {cfg.browser} (headless={cfg.headless})")
                yield document
            finally:
                browser.close()
