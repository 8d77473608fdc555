"""
Canvas Client Library.

A typed synchronous HTTP client for the Canvas LMS REST API.

Example usage:
    ```python
    from canvas_client import CanvasClient
    from canvas_client.models import CreateModuleDTO

    with CanvasClient(base_url="https://school.instructure.com", api_key="...") as client:
        # List every course (all pages)
        courses = client.courses.all()

        # Get one page with metadata
        page = client.courses.paginate(per_page=10)
        print(page.summary())

        # Relationship calls need their parent ids
        modules = client.course(42).modules
        module = modules.create(CreateModuleDTO(name="Week 1"))
    ```

Settings can also come from CANVAS_BASE_URL and CANVAS_API_KEY.
"""

__version__ = "0.1.0"

# Main client
from canvas_client.client import CanvasClient, CourseScope

# Configuration
from canvas_client.settings import CanvasSettings

# HTTP client components (for advanced usage)
from canvas_client.http import HTTPClient
from canvas_client.middleware import RateLimiter, RetryPolicy

# Pagination
from canvas_client.pagination import (
    PaginatedResponse,
    PaginationResult,
    parse_link_header,
)

# Base classes (for building custom resources)
from canvas_client.base import BaseEndpointClient, Resource, ResourceEndpoint
from canvas_client.dto import BaseDTO

# Exceptions
from canvas_client.exceptions import (
    # Base exception
    CanvasClientError,
    # Configuration and usage errors
    ConfigurationError,
    MissingApiKeyError,
    MissingBaseUrlError,
    ContextError,
    DTOError,
    # Remote failures
    CanvasApiError,
    BadRequestError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    UnprocessableEntityError,
    RateLimitError,
    ServerError,
    # Network errors
    NetworkError,
    TimeoutError,
    # Utilities
    exception_from_response,
)

__all__ = [
    "__version__",
    "CanvasClient",
    "CourseScope",
    "CanvasSettings",
    "HTTPClient",
    "RateLimiter",
    "RetryPolicy",
    "PaginatedResponse",
    "PaginationResult",
    "parse_link_header",
    "BaseEndpointClient",
    "Resource",
    "ResourceEndpoint",
    "BaseDTO",
    "CanvasClientError",
    "ConfigurationError",
    "MissingApiKeyError",
    "MissingBaseUrlError",
    "ContextError",
    "DTOError",
    "CanvasApiError",
    "BadRequestError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableEntityError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "TimeoutError",
    "exception_from_response",
]
