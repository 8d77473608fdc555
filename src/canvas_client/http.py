"""
HTTP transport for the Canvas API.

This module provides a synchronous HTTP client built on httpx with:
- Bearer API key authentication
- URL building relative to ``{base_url}/api/{version}/``
- JSON and multipart request bodies
- Retry logic with exponential backoff
- Client-side rate limiting from Canvas throttle headers
- Optional TTL cache for successful GET responses
- Request/response logging
"""

import hashlib
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import httpx
from cachetools import TTLCache
from pydantic import BaseModel

from canvas_client import __version__
from canvas_client.exceptions import (
    CanvasClientError,
    NetworkError,
    RateLimitError,
    TimeoutError as ClientTimeoutError,
    exception_from_response,
)
from canvas_client.middleware import RateLimiter, RetryPolicy
from canvas_client.pagination import PaginatedResponse
from canvas_client.settings import CanvasSettings

logger = logging.getLogger(__name__)

MultipartFields = Sequence[Tuple[str, Any]]


def is_absolute_url(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def _param_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def prepare_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Clean query parameters for Canvas.

    ``None`` values are dropped, booleans become ``true``/``false`` and list
    values are sent as repeated ``key[]`` parameters.
    """
    if not params:
        return None
    prepared: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            if not key.endswith("[]"):
                key = f"{key}[]"
            value = [str(_param_value(v)) for v in value]
        else:
            value = _param_value(value)
        prepared[key] = value
    return prepared or None


def cache_key(api_key: Optional[str], url: str, params: Optional[Dict[str, Any]]) -> Tuple[Any, ...]:
    """
    Key for a cached GET response.

    The API key is reduced to a fingerprint so that two tokens never share
    entries and the token itself is never held in the key.
    """
    fingerprint = hashlib.sha256((api_key or "").encode()).hexdigest()[:16]
    query = tuple(
        sorted(
            (name, tuple(value) if isinstance(value, list) else value)
            for name, value in (params or {}).items()
        )
    )
    return (fingerprint, url, query)


class HTTPClient:
    """
    Synchronous HTTP client for Canvas API requests.

    This client handles:
    - Base URL management
    - Authentication header injection
    - Response parsing and error handling
    - Automatic retries for transient failures
    - Throttling before Canvas starts rejecting requests
    """

    def __init__(
        self,
        settings: CanvasSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the HTTP client.

        Args:
            settings: Client configuration, shared by reference
            transport: Optional httpx transport (used by tests)
            headers: Additional headers to include in all requests
            sleep: Function used to wait between retries
            clock: Monotonic clock used to expire cached responses
        """
        self.settings = settings.validate_complete()
        self.retry_policy = RetryPolicy.from_settings(settings)
        self.rate_limiter: Optional[RateLimiter] = (
            RateLimiter.from_settings(settings) if settings.rate_limit_enabled else None
        )
        self._transport = transport
        self._default_headers = headers or {}
        self._sleep = sleep
        self._client: Optional[httpx.Client] = None
        self.cache: Optional[TTLCache] = (
            TTLCache(maxsize=settings.cache_max_entries, ttl=settings.cache_ttl, timer=clock)
            if settings.cache_enabled
            else None
        )

    @property
    def base_url(self) -> str:
        return self.settings.api_root

    def _get_client(self) -> httpx.Client:
        """Get or create the underlying httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.settings.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def clear_cache(self) -> None:
        """Drop every cached GET response."""
        if self.cache is not None:
            self.cache.clear()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
        self._client = None

    def __enter__(self) -> "HTTPClient":
        self._get_client()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _build_headers(self, extra_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Build request headers with authentication."""
        headers = {
            "Accept": "application/json",
            "User-Agent": f"canvas-client/{__version__}",
            **self._default_headers,
            "Authorization": f"Bearer {self.settings.api_key}",
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _build_url(self, path: str) -> str:
        if is_absolute_url(path):
            return path
        return self.base_url + path.lstrip("/")

    def _throttle(self) -> None:
        """Wait for the rate limit bucket, then charge it."""
        if self.rate_limiter is None:
            return
        delay = self.rate_limiter.calculate_delay()
        if delay > 0:
            if delay > self.rate_limiter.max_wait:
                raise RateLimitError(
                    f"Rate limit wait time ({delay:.0f}s) exceeds maximum "
                    f"({self.rate_limiter.max_wait:.0f}s)",
                    retry_after=delay,
                )
            logger.info("Rate limit bucket low, waiting %.1fs", delay)
            self._sleep(delay)
        self.rate_limiter.consume()

    def _log_response(self, method: str, url: str, response: httpx.Response, started: float) -> None:
        if not self.settings.log_requests:
            return
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(
            "%s %s -> %s (%.0f ms)", method, url, response.status_code, elapsed_ms
        )

    def _retry_wait(self, attempt: int, reason: str, retry_after: Optional[float] = None) -> None:
        delay = self.retry_policy.get_delay(attempt, retry_after)
        logger.warning(
            "Retrying request (attempt %d/%d) in %.2fs: %s",
            attempt,
            self.retry_policy.max_retries,
            delay,
            reason,
        )
        self._sleep(delay)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Union[Dict[str, Any], List[Any], BaseModel]] = None,
        multipart: Optional[MultipartFields] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Make an HTTP request.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: Path relative to the API root, or an absolute URL
            params: Query parameters (ignored for absolute URLs)
            json_data: JSON body data (can be dict or Pydantic model)
            multipart: Ordered ``(name, value)`` pairs sent as multipart/form-data
            data: Form-encoded body
            headers: Additional headers

        Returns:
            httpx.Response object

        Raises:
            CanvasApiError: On HTTP errors
            NetworkError: On connection failures
            TimeoutError: On request timeout
        """
        client = self._get_client()
        url = self._build_url(path)
        request_headers = self._build_headers(headers)

        if json_data is not None and isinstance(json_data, BaseModel):
            json_data = json_data.model_dump(mode="json", exclude_none=True)

        # Cursor URLs already carry their query string
        query = None if is_absolute_url(path) else prepare_params(params)

        files = None
        if multipart:
            files = [(name, (None, str(value))) for name, value in multipart]

        key = None
        if self.cache is not None and method.upper() == "GET":
            key = cache_key(self.settings.api_key, url, query)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for GET %s", url)
                return cached

        attempt = 0
        while True:
            self._throttle()
            started = time.monotonic()
            if self.settings.log_requests:
                logger.debug("%s %s", method, url)
            try:
                response = client.request(
                    method=method,
                    url=url,
                    params=query,
                    json=json_data,
                    data=data,
                    files=files,
                    headers=request_headers,
                )
            except httpx.TimeoutException as e:
                if self.rate_limiter:
                    self.rate_limiter.refund()
                if self.retry_policy.should_retry_exception(e, attempt):
                    attempt += 1
                    self._retry_wait(attempt, f"timeout ({e})")
                    continue
                raise ClientTimeoutError(f"Request timed out: {e}") from e
            except httpx.TransportError as e:
                if self.rate_limiter:
                    self.rate_limiter.refund()
                if self.retry_policy.should_retry_exception(e, attempt):
                    attempt += 1
                    self._retry_wait(attempt, f"connection error ({e})")
                    continue
                raise NetworkError(f"Request failed: {e}") from e

            self._log_response(method, url, response, started)
            if self.rate_limiter:
                self.rate_limiter.update_from_response(response)

            if response.is_success:
                if key is not None:
                    self.cache[key] = response
                elif self.cache is not None and method.upper() != "GET":
                    # Any write invalidates every cached GET
                    self.cache.clear()
                return response

            if self.retry_policy.should_retry_response(response, attempt):
                attempt += 1
                retry_after = response.headers.get("Retry-After")
                try:
                    retry_after = float(retry_after) if retry_after else None
                except ValueError:
                    retry_after = None
                self._retry_wait(attempt, f"HTTP {response.status_code}", retry_after)
                continue

            error = exception_from_response(response)
            logger.debug("Request failed: %s", error)
            raise error

    def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a GET request."""
        return self.request("GET", path, params=params, headers=headers)

    def post(
        self,
        path: str,
        *,
        json_data: Optional[Union[Dict[str, Any], BaseModel]] = None,
        multipart: Optional[MultipartFields] = None,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a POST request."""
        return self.request(
            "POST",
            path,
            json_data=json_data,
            multipart=multipart,
            data=data,
            params=params,
            headers=headers,
        )

    def put(
        self,
        path: str,
        *,
        json_data: Optional[Union[Dict[str, Any], BaseModel]] = None,
        multipart: Optional[MultipartFields] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a PUT request."""
        return self.request(
            "PUT",
            path,
            json_data=json_data,
            multipart=multipart,
            params=params,
            headers=headers,
        )

    def patch(
        self,
        path: str,
        *,
        json_data: Optional[Union[Dict[str, Any], BaseModel]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a PATCH request."""
        return self.request(
            "PATCH", path, json_data=json_data, params=params, headers=headers
        )

    def delete(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a DELETE request."""
        return self.request("DELETE", path, params=params, headers=headers)

    # Convenience methods for decoded responses

    def get_json(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make a GET request and return JSON response."""
        return decode_json(self.get(path, params=params, headers=headers))

    def get_paginated(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> PaginatedResponse:
        """Make a GET request for a list endpoint and wrap it for paging."""
        params = dict(params or {})
        if not is_absolute_url(path) and params.get("per_page") is None:
            params["per_page"] = self.settings.per_page
        return PaginatedResponse(self.get(path, params=params), self)


def decode_json(response: httpx.Response) -> Any:
    """Decode a response body, treating an empty body as ``None``."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise CanvasClientError(
            "Invalid JSON in response body",
            status_code=response.status_code,
        ) from e
