"""
Static HTML document - lxml backed Document Access Port

Pages come from a PageRouter (URL -> HTML string or callable) and, when
enabled, from a plain HTTP GET or a file:// URL. Paths are XPath expressions; expressions
returning strings (`//a/@href`, `//p/text()`) are exposed as text-only
handles.

Usage:
    router = PageRouter().route("https://example.com/", "<html>...</html>")
    document = HtmlDocument("https://example.com/", router=router)
    document.get_element_text("//h1")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
from urllib.parse import urldefrag, urljoin, urlparse
from urllib.request import url2pathname

import requests
from lxml import etree, html as lxml_html

from ..config import Config, config as default_config
from ..diagnostics import get_logger
from ..exceptions import DocumentError, NavigationError
from .port import DocumentAccessPort, ElementHandle

logger = get_logger(__name__)

PageSource = Union[str, Callable[[str], str]]

BLANK_URL = "about:blank"


def _normalize_text(text: str) -> str:
    return " ".join(text.split())


def _evaluate(node, path: str) -> List[Union[etree._Element, str]]:
    try:
        result = node.xpath(path)
    except etree.XPathError as e:
        raise DocumentError(f"Invalid XPath expression '{path}': {e}") from e
    if isinstance(result, list):
        return result
    # Scalar results (count(), string(), boolean()) behave like a text node
    if isinstance(result, bool):
        return [str(result).lower()]
    if isinstance(result, float) and result.is_integer():
        return [str(int(result))]
    return [str(result)]


class HtmlElement(ElementHandle):
    """Element (or string result) of a parsed HTML page"""

    def __init__(self, node: Union[etree._Element, str]):
        self.node = node

    @property
    def tag(self) -> str:
        if isinstance(self.node, str):
            return "#text"
        return str(self.node.tag)

    def get_text(self) -> str:
        if isinstance(self.node, str):
            return _normalize_text(str(self.node))
        return _normalize_text(self.node.text_content())

    def get_attribute(self, name: str) -> Optional[str]:
        if isinstance(self.node, str):
            return None
        return self.node.get(name)

    def find_elements(self, path: str) -> List[ElementHandle]:
        if isinstance(self.node, str):
            return []
        return [HtmlElement(node) for node in _evaluate(self.node, path)]

    def __repr__(self) -> str:
        return f"HtmlElement(<{self.tag}>)"


class PageRouter:
    """
    Maps URLs to page sources.

    A source is an HTML string or a callable receiving the requested URL.
    Lookups ignore URL fragments.
    """

    def __init__(self, routes: Optional[Dict[str, PageSource]] = None):
        self._routes: Dict[str, PageSource] = {}
        for url, source in (routes or {}).items():
            self.route(url, source)

    def route(self, url: str, source: PageSource) -> "PageRouter":
        self._routes[urldefrag(url)[0]] = source
        return self

    def resolve(self, url: str) -> Optional[str]:
        source = self._routes.get(urldefrag(url)[0])
        if source is None:
            return None
        if callable(source):
            return source(url)
        return source

    def __contains__(self, url: str) -> bool:
        return urldefrag(url)[0] in self._routes

    def __len__(self) -> int:
        return len(self._routes)


@dataclass
class _Page:
    url: str
    root: etree._Element


class HtmlDocument(DocumentAccessPort):
    """
    Document Access Port over static HTML.

    Each window keeps its own history stack; `visits` records every URL
    reached through `navigate_to`, in order.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        html: Optional[str] = None,
        router: Optional[PageRouter] = None,
        session: Optional[requests.Session] = None,
        cfg: Optional[Config] = None,
    ):
        self.router = router or PageRouter()
        self.cfg = cfg or default_config
        self.session = session
        self.visits: List[str] = []
        self._windows: List[List[_Page]] = [[]]
        if html is not None:
            self._history.append(_Page(url or BLANK_URL, self._parse(html)))
        elif url:
            self._history.append(_Page(url, self._parse(self._load(url))))

    @classmethod
    def from_html(cls, html: str, url: str = BLANK_URL) -> "HtmlDocument":
        return cls(url=url, html=html)

    @property
    def _history(self) -> List[_Page]:
        return self._windows[-1]

    @property
    def history(self) -> List[str]:
        """URLs of the active window, oldest first."""
        return [page.url for page in self._history]

    @property
    def window_count(self) -> int:
        return len(self._windows)

    def _current(self) -> _Page:
        if not self._history:
            raise NavigationError("No page loaded")
        return self._history[-1]

    def _parse(self, source: str) -> etree._Element:
        if not source or not source.strip():
            source = "<html></html>"
        return lxml_html.document_fromstring(source)

    def _load(self, url: str) -> str:
        source = self.router.resolve(url)
        if source is not None:
            logger.debug(f"Serving {url} from router")
            return source
        parsed = urlparse(url)
        if parsed.scheme == "file":
            try:
                return Path(url2pathname(parsed.path)).read_text(encoding="utf-8")
            except OSError as e:
                raise NavigationError(f"Failed to read {url}: {e}") from e
        if not self.cfg.fetch_remote or parsed.scheme not in ("http", "https"):
            raise NavigationError(f"No page available for {url}")
        return self._fetch(url)

    def _fetch(self, url: str) -> str:
        headers = {}
        if self.cfg.user_agent:
            headers["User-Agent"] = self.cfg.user_agent
        getter = self.session.get if self.session is not None else requests.get
        try:
            logger.debug(f"HTTP GET {url}")
            response = getter(url, headers=headers, timeout=self.cfg.http_timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NavigationError(f"Failed to load {url}: {e}") from e
        return response.text

    def get_current_url(self) -> str:
        if not self._history:
            return BLANK_URL
        return self._current().url

    def get_elements(self, path: str) -> List[ElementHandle]:
        return [HtmlElement(node) for node in _evaluate(self._current().root, path)]

    def navigate_to(self, locator: str) -> None:
        base = self._history[-1].url if self._history else ""
        url = urljoin(base, locator) if base and base != BLANK_URL else locator
        page = _Page(url, self._parse(self._load(url)))
        self._history.append(page)
        self.visits.append(url)
        logger.debug(f"Navigated to {url}")

    def navigate_back(self) -> None:
        if len(self._history) < 2:
            raise NavigationError("No previous page to navigate back to")
        left = self._history.pop()
        logger.debug(f"Navigated back from {left.url} to {self._history[-1].url}")

    def open_new_window(self) -> None:
        self._windows.append([_Page(BLANK_URL, self._parse(""))])

    def close_window(self) -> None:
        if len(self._windows) == 1:
            raise NavigationError("Cannot close the last window")
        self._windows.pop()

    def __repr__(self) -> str:
        return f"HtmlDocument({self.get_current_url()!r})"
