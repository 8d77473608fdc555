"""
Cursor pagination over Canvas ``Link`` headers.

Canvas paginates list endpoints with RFC 5988 ``Link`` headers carrying the
``current``, ``next``, ``prev``, ``first`` and ``last`` page URLs. The next
page URL is an opaque cursor and is followed verbatim.
"""

import logging
import re
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    TypeVar,
)
from urllib.parse import parse_qs, urlparse

import httpx
from pydantic import BaseModel, ConfigDict, PrivateAttr

if TYPE_CHECKING:
    from canvas_client.http import HTTPClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

LINK_PATTERN = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')
TOTAL_COUNT_HEADER = "X-Total-Count"
RELATIONS = ("current", "next", "prev", "first", "last")


# =============================================================================
# Link header parsing
# =============================================================================


def parse_link_header(value: Optional[str]) -> Dict[str, str]:
    """
    Parse a ``Link`` header into a ``{rel: url}`` mapping.

    Entries that do not match ``<url>; rel="name"`` are ignored.
    """
    links: Dict[str, str] = {}
    if not value:
        return links
    for entry in value.split(","):
        match = LINK_PATTERN.search(entry.strip())
        if not match:
            continue
        url, rel = match.group(1).strip(), match.group(2).strip()
        if url and rel:
            links[rel] = url
    return links


def _query_int(url: str, name: str) -> Optional[int]:
    query = parse_qs(urlparse(url).query)
    values = query.get(name)
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


def extract_page_number(url: str) -> Optional[int]:
    """Return the numeric ``page`` query parameter of a URL, if any."""
    return _query_int(url, "page")


def extract_per_page(url: str) -> Optional[int]:
    """Return the numeric ``per_page`` query parameter of a URL, if any."""
    return _query_int(url, "per_page")


def _first_per_page(links: Dict[str, str]) -> Optional[int]:
    for url in links.values():
        per_page = extract_per_page(url)
        if per_page is not None:
            return per_page
    return None


# =============================================================================
# Page metadata
# =============================================================================


class PaginationResult(BaseModel, Generic[T]):
    """
    One page of results plus its navigation metadata.

    When created by an endpoint client the result remembers how to load
    other pages, so ``result.get_next()`` returns the following page with
    the same item type.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: List[T]
    current_url: Optional[str] = None
    next_url: Optional[str] = None
    prev_url: Optional[str] = None
    first_url: Optional[str] = None
    last_url: Optional[str] = None
    current_page: int = 1
    total_pages: Optional[int] = None
    per_page: Optional[int] = None
    total_count: Optional[int] = None

    _fetcher: Optional[Callable[[str], "PaginationResult[T]"]] = PrivateAttr(default=None)

    @classmethod
    def from_links(
        cls,
        data: List[Any],
        links: Dict[str, str],
        *,
        total_count: Optional[int] = None,
    ) -> "PaginationResult":
        current_page = 1
        if "current" in links:
            current_page = extract_page_number(links["current"]) or 1
        total_pages = extract_page_number(links["last"]) if "last" in links else None
        return cls(
            data=data,
            current_url=links.get("current"),
            next_url=links.get("next"),
            prev_url=links.get("prev"),
            first_url=links.get("first"),
            last_url=links.get("last"),
            current_page=current_page,
            total_pages=total_pages,
            per_page=_first_per_page(links),
            total_count=total_count,
        )

    @classmethod
    def from_link_header(cls, data: List[Any], link_header: Optional[str]) -> "PaginationResult":
        """Build a result from page data and a raw ``Link`` header."""
        return cls.from_links(data, parse_link_header(link_header))

    def with_fetcher(self, fetcher: Callable[[str], "PaginationResult[T]"]) -> "PaginationResult[T]":
        self._fetcher = fetcher
        return self

    def has_next(self) -> bool:
        return self.next_url is not None

    def has_prev(self) -> bool:
        return self.prev_url is not None

    def is_first_page(self) -> bool:
        return self.current_page == 1

    def is_last_page(self) -> bool:
        if self.total_pages is None:
            return not self.has_next()
        return self.current_page >= self.total_pages

    @property
    def count(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        return not self.data

    def summary(self) -> str:
        """Human-readable position, e.g. ``Page 2 of 5 (10 items)``."""
        if self.total_pages is not None:
            return f"Page {self.current_page} of {self.total_pages} ({self.count} items)"
        return f"Page {self.current_page} ({self.count} items)"

    def navigation_urls(self) -> Dict[str, str]:
        urls = {
            "current": self.current_url,
            "next": self.next_url,
            "prev": self.prev_url,
            "first": self.first_url,
            "last": self.last_url,
        }
        return {rel: url for rel, url in urls.items() if url is not None}

    def to_dict(self) -> Dict[str, Any]:
        """Return page data and metadata as plain Python values."""
        return {
            "data": [
                item.model_dump() if isinstance(item, BaseModel) else item
                for item in self.data
            ],
            "pagination": {
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "per_page": self.per_page,
                "total_count": self.total_count,
                "has_next": self.has_next(),
                "has_prev": self.has_prev(),
                "is_first_page": self.is_first_page(),
                "is_last_page": self.is_last_page(),
                "count": self.count,
                "navigation_urls": self.navigation_urls(),
            },
        }

    def _follow(self, url: Optional[str]) -> Optional["PaginationResult[T]"]:
        if url is None:
            return None
        if self._fetcher is None:
            raise RuntimeError("This page was not created by a client and cannot load other pages")
        return self._fetcher(url)

    def get_next(self) -> Optional["PaginationResult[T]"]:
        return self._follow(self.next_url)

    def get_prev(self) -> Optional["PaginationResult[T]"]:
        return self._follow(self.prev_url)

    def get_first(self) -> Optional["PaginationResult[T]"]:
        return self._follow(self.first_url)

    def get_last(self) -> Optional["PaginationResult[T]"]:
        return self._follow(self.last_url)


# =============================================================================
# Cursor walker
# =============================================================================


class PaginatedResponse:
    """
    Wraps one list response and walks the pages that follow it.

    Every ``get_next()`` call issues exactly one request for the ``next``
    cursor. Errors from the transport propagate unchanged.
    """

    def __init__(self, response: httpx.Response, http: "HTTPClient"):
        self.response = response
        self.http = http
        self.link_header = response.headers.get("Link", "")
        self.links = parse_link_header(self.link_header)

    def __repr__(self) -> str:
        return f"PaginatedResponse(page={self.current_page}, links={sorted(self.links)})"

    def url(self, relation: str) -> Optional[str]:
        return self.links.get(relation)

    @property
    def request_url(self) -> Optional[str]:
        """URL this page was loaded from, if the response carries its request."""
        try:
            return str(self.response.request.url)
        except RuntimeError:
            return None

    @property
    def current_url(self) -> Optional[str]:
        return self.url("current")

    @property
    def next_url(self) -> Optional[str]:
        return self.url("next")

    @property
    def prev_url(self) -> Optional[str]:
        return self.url("prev")

    @property
    def first_url(self) -> Optional[str]:
        return self.url("first")

    @property
    def last_url(self) -> Optional[str]:
        return self.url("last")

    def has_next(self) -> bool:
        return self.next_url is not None

    def has_prev(self) -> bool:
        return self.prev_url is not None

    @property
    def current_page(self) -> int:
        if self.current_url:
            return extract_page_number(self.current_url) or 1
        return 1

    @property
    def total_pages(self) -> Optional[int]:
        if self.last_url:
            return extract_page_number(self.last_url)
        return None

    @property
    def per_page(self) -> Optional[int]:
        return _first_per_page(self.links)

    @property
    def total_count(self) -> Optional[int]:
        value = self.response.headers.get(TOTAL_COUNT_HEADER)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def json_data(self) -> List[Any]:
        """Decoded page items; non-list bodies yield an empty list."""
        if not self.response.content:
            return []
        data = self.response.json()
        return data if isinstance(data, list) else []

    def _fetch(self, url: Optional[str]) -> Optional["PaginatedResponse"]:
        if not url:
            return None
        return PaginatedResponse(self.http.get(url), self.http)

    def get_next(self) -> Optional["PaginatedResponse"]:
        return self._fetch(self.next_url)

    def get_prev(self) -> Optional["PaginatedResponse"]:
        return self._fetch(self.prev_url)

    def get_first(self) -> Optional["PaginatedResponse"]:
        return self._fetch(self.first_url)

    def get_last(self) -> Optional["PaginatedResponse"]:
        return self._fetch(self.last_url)

    def iter_pages(self) -> Iterator["PaginatedResponse"]:
        """
        Yield this page and every following page.

        Stops when there is no ``next`` link or when the server points back
        at a page that was already visited.
        """
        page: Optional[PaginatedResponse] = self
        visited = {url for url in (self.request_url, self.current_url) if url}
        while page is not None:
            yield page
            next_url = page.next_url
            if next_url is None:
                break
            if next_url in visited:
                logger.warning("Pagination loop detected at %s, stopping", next_url)
                break
            visited.add(next_url)
            page = page.get_next()

    def fetch_all_pages(self) -> List[Any]:
        """Concatenate the items of this page and all following pages."""
        items: List[Any] = []
        for page in self.iter_pages():
            items.extend(page.json_data())
        return items

    def to_pagination_result(self, data: Optional[List[Any]] = None) -> PaginationResult:
        """Wrap this page's items (or already hydrated ``data``) with metadata."""
        return PaginationResult.from_links(
            self.json_data() if data is None else data,
            self.links,
            total_count=self.total_count,
        )

    def pagination_info(self) -> Dict[str, Any]:
        return {
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "per_page": self.per_page,
            "total_count": self.total_count,
            "has_next": self.has_next(),
            "has_prev": self.has_prev(),
            "navigation_urls": dict(self.links),
        }
