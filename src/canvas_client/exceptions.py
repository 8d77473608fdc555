"""
Exception hierarchy for the Canvas client library.

Every failed remote call surfaces as a ``CanvasApiError`` (or one of its
status-specific subclasses), which keeps the HTTP status code and the decoded
response body. Transport, configuration and scoping problems have their own
branches under ``CanvasClientError``.
"""

from typing import Any, Dict, List, Optional

import httpx


class CanvasClientError(Exception):
    """
    Base exception for all Canvas client errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if applicable)
        error_code: Canvas error code or short machine-readable tag
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.insert(0, f"[{self.error_code}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code}, "
            f"error_code={self.error_code!r})"
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CanvasClientError):
    """The client configuration is incomplete or invalid."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        error_code: Optional[str] = "CONFIG",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)


class MissingApiKeyError(ConfigurationError):
    """No API key was configured."""

    def __init__(self, message: str = "API key is not set (CANVAS_API_KEY)"):
        super().__init__(message, error_code="CONFIG_API_KEY")


class MissingBaseUrlError(ConfigurationError):
    """No base URL was configured."""

    def __init__(self, message: str = "Base URL is not set (CANVAS_BASE_URL)"):
        super().__init__(message, error_code="CONFIG_BASE_URL")


class ContextError(CanvasClientError):
    """
    A scoped endpoint was used before its parent ids were set.

    For example, listing modules requires a course id. No HTTP request is
    made when this is raised.
    """

    def __init__(
        self,
        message: str = "Context is required",
        *,
        missing: Optional[List[str]] = None,
    ):
        details = {"missing": list(missing)} if missing else None
        super().__init__(message, error_code="CONTEXT", details=details)
        self.missing = list(missing or [])


class DTOError(CanvasClientError):
    """A DTO cannot be serialized to a request body."""


# =============================================================================
# API Errors
# =============================================================================


class CanvasApiError(CanvasClientError):
    """
    The remote API call failed.

    This is the single error type for remote failures. Subclasses only narrow
    it down by HTTP status, so ``except CanvasApiError`` catches all of them.

    Attributes:
        errors: Error entries decoded from the Canvas ``errors`` body field
        response_body: Raw response text
    """

    default_message = "Canvas API request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        errors: Optional[List[Any]] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(
            message or self.default_message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )
        self.errors = errors or []
        self.response_body = response_body


class BadRequestError(CanvasApiError):
    """The request was rejected as malformed (400)."""

    default_message = "Bad request"


class AuthenticationError(CanvasApiError):
    """The API key is missing, invalid or revoked (401)."""

    default_message = "Authentication required"


class AuthorizationError(CanvasApiError):
    """The API key is valid but lacks permission (403)."""

    default_message = "Access denied"


class NotFoundError(CanvasApiError):
    """The requested resource does not exist (404)."""

    default_message = "Resource not found"


class ConflictError(CanvasApiError):
    """The request conflicts with the current resource state (409)."""

    default_message = "Resource conflict"


class UnprocessableEntityError(CanvasApiError):
    """The request body failed server-side validation (422)."""

    default_message = "Unprocessable entity"


class RateLimitError(CanvasApiError):
    """
    Rate limit exceeded.

    Canvas reports throttling either as 429 or as 403 with a
    "Rate Limit Exceeded" body. The client also raises this locally when the
    rate limiter would have to wait longer than allowed.
    """

    default_message = "Rate limit exceeded"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        retry_after: Optional[float] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(CanvasApiError):
    """The server failed to handle the request (5xx)."""

    default_message = "Server error"


# =============================================================================
# Network Errors (Client-side)
# =============================================================================


class NetworkError(CanvasClientError):
    """
    Network-level error occurred.

    Raised on connection problems, DNS failures and similar transport errors.
    """

    def __init__(
        self,
        message: str = "Network error",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class TimeoutError(NetworkError):
    """Request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# =============================================================================
# Exception Mapping
# =============================================================================

STATUS_CODE_EXCEPTIONS = {
    400: BadRequestError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: UnprocessableEntityError,
    429: RateLimitError,
}

RATE_LIMIT_MARKER = "Rate Limit Exceeded"


def _error_message(payload: Any) -> Optional[str]:
    """Pull a readable message out of a Canvas error payload."""
    if not isinstance(payload, dict):
        return None
    for key in ("message", "error", "detail"):
        if isinstance(payload.get(key), str):
            return payload[key]
    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and first.get("message"):
            return str(first["message"])
        return str(first)
    if isinstance(errors, dict) and errors:
        field, problems = next(iter(errors.items()))
        if isinstance(problems, list) and problems:
            problem = problems[0]
            if isinstance(problem, dict):
                problem = problem.get("message", problem)
            return f"{field}: {problem}"
    return None


def _error_entries(payload: Any) -> List[Any]:
    if not isinstance(payload, dict):
        return []
    errors = payload.get("errors")
    if isinstance(errors, list):
        return errors
    if isinstance(errors, dict):
        return [errors]
    return []


def is_rate_limited(response: httpx.Response) -> bool:
    """Return True if a response signals Canvas throttling."""
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    remaining = response.headers.get("X-Rate-Limit-Remaining")
    if remaining is not None:
        try:
            if float(remaining) <= 0:
                return True
        except ValueError:
            pass
    return RATE_LIMIT_MARKER in response.text


def exception_from_response(response: httpx.Response) -> CanvasApiError:
    """
    Create an appropriate exception from an HTTP error response.

    Args:
        response: The failed httpx response

    Returns:
        CanvasApiError subclass matching the status code
    """
    status_code = response.status_code
    body = response.text
    try:
        payload = response.json()
    except ValueError:
        payload = None

    message = _error_message(payload) or body or f"HTTP {status_code}"
    errors = _error_entries(payload)
    error_code = payload.get("error_code") if isinstance(payload, dict) else None

    if is_rate_limited(response):
        retry_after = response.headers.get("Retry-After")
        try:
            retry_after = float(retry_after) if retry_after else None
        except ValueError:
            retry_after = None
        return RateLimitError(
            message,
            status_code=status_code,
            error_code=error_code,
            errors=errors,
            response_body=body,
            retry_after=retry_after,
        )

    if status_code >= 500:
        exception_class = ServerError
    else:
        exception_class = STATUS_CODE_EXCEPTIONS.get(status_code, CanvasApiError)
    return exception_class(
        message,
        status_code=status_code,
        error_code=error_code,
        errors=errors,
        response_body=body,
    )
