"""
Main Canvas API client.

This module provides the CanvasClient class, the primary entry point
for interacting with the Canvas LMS API. It owns the configuration and the
HTTP transport, and hands out endpoint clients.
"""

from typing import Any, Dict, Optional, Type, Union
import logging

import httpx
from pydantic import BaseModel

from canvas_client import endpoints
from canvas_client.base import ResourceEndpoint
from canvas_client.exceptions import CanvasClientError
from canvas_client.http import HTTPClient, decode_json
from canvas_client.settings import CanvasSettings

logger = logging.getLogger(__name__)


class CourseScope:
    """
    Endpoint clients bound to one course.

        course = client.course(42)
        course.modules.all()
        course.module_items(7).create({"type": "SubHeader", "title": "Intro"})
    """

    def __init__(self, http_client: HTTPClient, course_id: Union[int, str]):
        self._http = http_client
        self.course_id = course_id

    def __repr__(self) -> str:
        return f"CourseScope(course_id={self.course_id!r})"

    def details(self, **params: Any):
        """Load the course itself."""
        return endpoints.CoursesClient(self._http).find(self.course_id, **params)

    @property
    def modules(self) -> endpoints.ModulesClient:
        return endpoints.ModulesClient(self._http, course_id=self.course_id)

    @property
    def assignments(self) -> endpoints.AssignmentsClient:
        return endpoints.AssignmentsClient(self._http, course_id=self.course_id)

    @property
    def enrollments(self) -> endpoints.EnrollmentsClient:
        return endpoints.EnrollmentsClient(self._http, course_id=self.course_id)

    @property
    def rubrics(self) -> endpoints.RubricsClient:
        return endpoints.RubricsClient(
            self._http, context_type="course", context_id=self.course_id
        )

    def module_items(self, module_id: Union[int, str]) -> endpoints.ModuleItemsClient:
        return endpoints.ModuleItemsClient(
            self._http, course_id=self.course_id, module_id=module_id
        )

    def submissions(self, assignment_id: Union[int, str]) -> endpoints.SubmissionsClient:
        return endpoints.SubmissionsClient(
            self._http, course_id=self.course_id, assignment_id=assignment_id
        )


class CanvasClient:
    """
    Main client for the Canvas LMS API.

    This class provides:
    - Configuration from arguments or CANVAS_* environment variables
    - Lazy-loaded endpoint clients
    - Course scoping for relationship endpoints
    - Session lifecycle management

    Example usage:
        ```python
        with CanvasClient(base_url="https://school.instructure.com", api_key="...") as client:
            courses = client.courses.all()

            modules = client.course(courses[0].id).modules
            module = modules.create({"name": "Week 1"})

            module.name = "Week 1: Introduction"
            module.save()
        ```
    """

    def __init__(
        self,
        settings: Optional[CanvasSettings] = None,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
        **overrides: Any,
    ):
        """
        Initialize the Canvas client.

        Args:
            settings: Ready-made settings; other config arguments are ignored
            base_url: Canvas instance URL (falls back to CANVAS_BASE_URL)
            api_key: API access token (falls back to CANVAS_API_KEY)
            transport: Optional httpx transport, mainly for tests
            headers: Additional headers to include in all requests
            **overrides: Any other CanvasSettings field

        Raises:
            MissingBaseUrlError: If no base URL is configured
            MissingApiKeyError: If no API key is configured
        """
        if settings is None:
            settings = CanvasSettings.from_env(base_url=base_url, api_key=api_key, **overrides)
        self._settings = settings
        self._http = HTTPClient(settings, transport=transport, headers=headers)
        self._endpoint_clients: Dict[str, Any] = {}

    @property
    def settings(self) -> CanvasSettings:
        return self._settings

    @property
    def base_url(self) -> Optional[str]:
        """Get the base URL for the API."""
        return self._settings.base_url

    @property
    def http(self) -> HTTPClient:
        """Get the underlying HTTP client for custom requests."""
        return self._http

    # =========================================================================
    # Endpoint Clients
    # =========================================================================

    def endpoint(self, client_class: Type[ResourceEndpoint], **context: Any) -> ResourceEndpoint:
        """Create an endpoint client of ``client_class`` bound to ``context``."""
        return client_class(self._http, **context)

    def course(self, course_id: Union[int, str]) -> CourseScope:
        """Endpoint clients scoped to one course."""
        return CourseScope(self._http, course_id)

    def __getattr__(self, name: str) -> Any:
        """
        Dynamically access endpoint clients by name.

        ``client.courses`` returns a cached ``CoursesClient``. Endpoints that
        need a parent id (modules, assignments, ...) are returned unscoped;
        bind them with ``with_context`` or use ``client.course(id)``.

        Raises:
            AttributeError: If no client exists for the given name
        """
        if name.startswith("_"):
            raise AttributeError(name)

        cache = self.__dict__.setdefault("_endpoint_clients", {})
        if name in cache:
            return cache[name]

        # e.g. "module_items" -> "ModuleItemsClient"
        class_name = "".join(p.capitalize() for p in name.split("_")) + "Client"
        client_class = getattr(endpoints, class_name, None)
        if client_class is None:
            raise AttributeError(
                f"No endpoint client found for '{name}'. Expected class: {class_name}"
            )

        client = client_class(self._http)
        cache[name] = client
        return client

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()
        self._endpoint_clients.clear()
        logger.debug("Client closed")

    def __enter__(self) -> "CanvasClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Custom Requests
    # =========================================================================

    def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """
        Make a custom GET request.

        Args:
            path: Path relative to the API root
            params: Query parameters
            response_model: Pydantic model for response parsing

        Returns:
            Parsed response (model instance or decoded JSON)
        """
        data = self._http.get_json(path, params=params)
        if response_model:
            return response_model.model_validate(data)
        return data

    def post(
        self,
        path: str,
        *,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """Make a custom POST request."""
        data = decode_json(self._http.post(path, json_data=json_data, params=params))
        if response_model:
            return response_model.model_validate(data)
        return data

    def put(
        self,
        path: str,
        *,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """Make a custom PUT request."""
        data = decode_json(self._http.put(path, json_data=json_data, params=params))
        if response_model:
            return response_model.model_validate(data)
        return data

    def delete(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make a custom DELETE request."""
        return decode_json(self._http.delete(path, params=params))

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def health_check(self) -> bool:
        """
        Check if the API is reachable and the API key is accepted.

        Returns:
            True if ``users/self`` can be loaded, False otherwise
        """
        try:
            self._http.get("users/self")
            return True
        except CanvasClientError as e:
            logger.warning("Health check failed: %s", e)
            return False

    def __repr__(self) -> str:
        return f"CanvasClient(base_url={self.base_url!r})"
