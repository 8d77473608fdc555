"""
Base classes for Canvas resources and their endpoint clients.

``Resource`` is the typed mirror of one remote object. ``ResourceEndpoint``
holds the shared CRUD, URL building, pagination and hydration logic that
every resource type reuses; subclasses only declare their model, DTOs and
path template.
"""

import logging
from datetime import datetime
from string import Formatter
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    ClassVar,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
    get_args,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    PrivateAttr,
    ValidationError,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)
from pydantic.alias_generators import to_camel

from canvas_client.dto import BaseDTO
from canvas_client.exceptions import CanvasClientError, ContextError, DTOError, NotFoundError
from canvas_client.http import HTTPClient, decode_json
from canvas_client.pagination import PaginatedResponse, PaginationResult

if TYPE_CHECKING:
    from canvas_client.settings import CanvasSettings

logger = logging.getLogger(__name__)


def _lenient_datetime(value: Any, handler: ValidatorFunctionWrapHandler) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return handler(value)
    except ValidationError:
        logger.debug("Ignoring unparsable timestamp %r", value)
        return None


# Timestamp that hydrates to None instead of failing on empty or bad input
CanvasDatetime = Annotated[Optional[datetime], WrapValidator(_lenient_datetime)]


def _nested_model(annotation: Any) -> Optional[Type[BaseModel]]:
    """Model class inside an annotation such as ``Optional[List[Model]]``."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for arg in get_args(annotation):
        model = _nested_model(arg)
        if model is not None:
            return model
    return None


def fit_to_model(value: Any, model: Optional[Type[BaseModel]]) -> Any:
    """
    Drop keys that ``model`` does not declare, recursing into nested models.

    API responses carry read-only keys (ids, ``completed`` flags) that the
    request models reject, so response data is trimmed before validation.
    """
    if model is None:
        return value
    if isinstance(value, list):
        return [fit_to_model(item, model) for item in value]
    if not isinstance(value, dict):
        return value
    fields = model.model_fields
    return {
        key: fit_to_model(item, _nested_model(fields[key].annotation))
        for key, item in value.items()
        if key in fields
    }


# =============================================================================
# Resource model
# =============================================================================


class Resource(BaseModel):
    """
    Base model for Canvas API objects.

    Accepts snake_case (wire) and camelCase keys, keeps unknown keys, and
    remembers the endpoint it was loaded from so it can save or delete
    itself.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: Optional[int] = None

    _endpoint: Any = PrivateAttr(default=None)

    def bind(self, endpoint: "ResourceEndpoint") -> "Resource":
        """Attach the endpoint used by ``save``, ``delete`` and ``refresh``."""
        self._endpoint = endpoint
        return self

    @property
    def endpoint(self) -> "ResourceEndpoint":
        if self._endpoint is None:
            raise CanvasClientError(
                f"{self.__class__.__name__} is not bound to an endpoint; "
                "load it through a client or call bind()"
            )
        return self._endpoint

    def to_dict(self, by_alias: bool = False, exclude_none: bool = False) -> Dict[str, Any]:
        """Dump the resource, in camelCase when ``by_alias`` is set."""
        return self.model_dump(by_alias=by_alias, exclude_none=exclude_none)

    def update_from(self, other: "Resource") -> "Resource":
        """Copy field values from a freshly loaded instance."""
        for name, value in other:
            setattr(self, name, value)
        return self

    def save(self) -> "Resource":
        """Create the resource if it has no id, otherwise update it."""
        return self.endpoint.save(self)

    def delete(self) -> Any:
        """Delete the resource remotely and return the API payload."""
        return self.endpoint.delete(self.endpoint.resource_key(self))

    def refresh(self) -> "Resource":
        """Reload the resource from the API."""
        fresh = self.endpoint.find(self.endpoint.resource_key(self))
        return self.update_from(fresh)


TResource = TypeVar("TResource", bound=Resource)


# =============================================================================
# Endpoint clients
# =============================================================================


class BaseEndpointClient:
    """
    Base class for all endpoint clients.

    Provides common functionality for HTTP operations and path building.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        base_path: str,
    ):
        """
        Initialize the endpoint client.

        Args:
            http_client: The underlying HTTP client
            base_path: Base path for this endpoint (e.g., "courses")
        """
        self._http = http_client
        self._base_path = base_path.strip("/")

    @property
    def http(self) -> HTTPClient:
        return self._http

    @property
    def base_path(self) -> str:
        """Get the base path for this endpoint."""
        return self._base_path

    def _build_path(self, *parts: Union[str, int]) -> str:
        """Build a path from the base path and additional parts."""
        clean_parts = [str(p).strip("/") for p in parts if p is not None and p != ""]
        if clean_parts:
            return f"{self.base_path}/{'/'.join(clean_parts)}"
        return self.base_path


class ResourceEndpoint(BaseEndpointClient, Generic[TResource]):
    """
    Generic CRUD endpoint for one resource type.

    Subclasses declare:
        model: Resource model used to hydrate responses
        create_dto / update_dto: DTOs used to build request bodies
        path_template: Collection path with ``{placeholders}`` for the
            scoping context, e.g. ``"courses/{course_id}/modules"``

    Placeholders must be bound (via the constructor or ``with_context``)
    before any request is made; otherwise ``ContextError`` is raised.
    """

    model: ClassVar[Type[Resource]] = Resource
    create_dto: ClassVar[Optional[Type[BaseDTO]]] = None
    update_dto: ClassVar[Optional[Type[BaseDTO]]] = None
    path_template: ClassVar[str] = ""
    update_method: ClassVar[str] = "PUT"

    def __init__(self, http_client: HTTPClient, **context: Any):
        super().__init__(http_client, self.path_template)
        self.context: Dict[str, Any] = {
            key: value for key, value in context.items() if value is not None
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(context={self.context!r})"

    @property
    def settings(self) -> "CanvasSettings":
        return self._http.settings

    @property
    def resource_name(self) -> str:
        return self.model.__name__

    # =========================================================================
    # Context
    # =========================================================================

    @classmethod
    def context_fields(cls) -> List[str]:
        """Placeholder names in the path template."""
        return [name for _, name, _, _ in Formatter().parse(cls.path_template) if name]

    def missing_context(self) -> List[str]:
        return [name for name in self.context_fields() if self.context.get(name) is None]

    def require_context(self) -> Dict[str, Any]:
        """
        Return the bound context, raising if any placeholder is unset.

        Raises:
            ContextError: If a parent id required by the path is missing
        """
        missing = self.missing_context()
        if missing:
            raise ContextError(
                f"{self.resource_name} requires {', '.join(missing)} to be set; "
                f"use with_context({', '.join(f'{m}=...' for m in missing)})",
                missing=missing,
            )
        return self.context

    def with_context(self, **context: Any) -> "ResourceEndpoint[TResource]":
        """Return a new endpoint of the same type scoped to ``context``."""
        return type(self)(self._http, **{**self.context, **context})

    @property
    def base_path(self) -> str:
        context = self.require_context()
        return self.path_template.format(**context).strip("/")

    def create_path(self) -> str:
        """Path that new resources are POSTed to."""
        return self.base_path

    # =========================================================================
    # Hydration
    # =========================================================================

    def hydrate(self, data: Any) -> TResource:
        """Build a bound resource instance from decoded JSON."""
        if not isinstance(data, dict):
            raise CanvasClientError(
                f"Expected a JSON object for {self.resource_name}, got {type(data).__name__}"
            )
        resource = self.model.model_validate(data)
        resource.bind(self)
        return resource

    def hydrate_many(self, items: List[Any]) -> List[TResource]:
        return [self.hydrate(item) for item in items]

    def resource_key(self, resource: Resource) -> Any:
        """Identifier used in the URL of a single resource."""
        return resource.id

    def dto_data(self, resource: Resource, dto_class: Type[BaseDTO]) -> Dict[str, Any]:
        """
        Request fields for saving ``resource`` through ``dto_class``.

        Override to map resource fields whose request name differs.
        """
        return fit_to_model(resource.model_dump(exclude_none=True), dto_class)

    def _coerce_dto(
        self,
        dto_class: Optional[Type[BaseDTO]],
        data: Union[BaseDTO, Resource, Dict[str, Any]],
        operation: str,
    ) -> BaseDTO:
        if isinstance(data, BaseDTO):
            return data
        if dto_class is None:
            raise DTOError(f"{self.resource_name} does not support {operation}")
        if isinstance(data, Resource):
            data = self.dto_data(data, dto_class)
        return dto_class.model_validate(data)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def find(self, id: Union[int, str], **params: Any) -> TResource:
        """
        Get a single resource by ID.

        Args:
            id: Resource identifier
            **params: Extra query parameters (e.g. ``include``)

        Returns:
            The resource instance

        Raises:
            NotFoundError: If the resource doesn't exist
        """
        return self.hydrate(self._http.get_json(self._build_path(id), params=params))

    def exists(self, id: Union[int, str]) -> bool:
        """Check if a resource exists."""
        try:
            self._http.get(self._build_path(id))
            return True
        except NotFoundError:
            return False

    def _first_page(self, params: Dict[str, Any]) -> PaginatedResponse:
        return self._http.get_paginated(self.base_path, params=params)

    def get(self, **params: Any) -> List[TResource]:
        """
        Get the first page of resources.

        Args:
            **params: Query parameters (``per_page``, filters, ``include``)

        Returns:
            Resources on the first page only
        """
        return self.hydrate_many(self._first_page(params).json_data())

    def iterate(self, **params: Any) -> Iterator[TResource]:
        """Lazily yield resources from every page."""
        for page in self._first_page(params).iter_pages():
            for item in page.json_data():
                yield self.hydrate(item)

    def all(self, **params: Any) -> List[TResource]:
        """
        Get resources from every page.

        Follows ``next`` links until the last page and returns one flat list.
        """
        return list(self.iterate(**params))

    def _page_result(self, page: PaginatedResponse) -> PaginationResult:
        result = page.to_pagination_result(self.hydrate_many(page.json_data()))
        return result.with_fetcher(
            lambda url: self._page_result(self._http.get_paginated(url))
        )

    def paginate(
        self,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        **params: Any,
    ) -> PaginationResult:
        """
        Get one page of resources with navigation metadata.

        Args:
            page: Page number to load (first page when omitted)
            per_page: Page size (defaults to the configured ``per_page``)
            **params: Additional query parameters

        Returns:
            PaginationResult whose ``get_next()`` loads the following page
        """
        params.update({"page": page, "per_page": per_page})
        return self._page_result(
            self._first_page({k: v for k, v in params.items() if v is not None})
        )

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, data: Union[BaseDTO, Dict[str, Any]], **params: Any) -> TResource:
        """
        Create a new resource.

        Args:
            data: A DTO, or a dict validated through ``create_dto``

        Returns:
            The created resource

        Raises:
            pydantic.ValidationError: If the data fails DTO validation
            CanvasApiError: If the API rejects the request
        """
        dto = self._coerce_dto(self.create_dto, data, "create")
        response = self._http.post(self.create_path(), params=params, **dto.to_request())
        return self.hydrate(decode_json(response))

    def update(
        self,
        id: Union[int, str],
        data: Union[BaseDTO, Dict[str, Any]],
        **params: Any,
    ) -> TResource:
        """
        Update an existing resource.

        Args:
            id: Resource identifier
            data: A DTO, or a dict validated through ``update_dto``

        Returns:
            The updated resource
        """
        dto = self._coerce_dto(self.update_dto, data, "update")
        response = self._http.request(
            self.update_method, self._build_path(id), params=params, **dto.to_request()
        )
        return self.hydrate(decode_json(response))

    def delete(self, id: Union[int, str], **params: Any) -> Any:
        """
        Delete a resource.

        Returns:
            The decoded response body (Canvas usually echoes the object)
        """
        return decode_json(self._http.delete(self._build_path(id), params=params))

    def save(self, resource: TResource) -> TResource:
        """Create or update ``resource`` and refresh it from the response."""
        key = self.resource_key(resource)
        if key is None:
            saved = self.create(self._coerce_dto(self.create_dto, resource, "create"))
        else:
            saved = self.update(key, self._coerce_dto(self.update_dto, resource, "update"))
        resource.update_from(saved)
        resource.bind(self)
        return resource

    # =========================================================================
    # Alternative names for the read operations
    # =========================================================================

    def fetch_all(self, **params: Any) -> List[TResource]:
        return self.get(**params)

    def list(self, **params: Any) -> List[TResource]:
        return self.get(**params)

    def fetch_all_pages(self, **params: Any) -> List[TResource]:
        return self.all(**params)

    def get_all(self, **params: Any) -> List[TResource]:
        return self.all(**params)

    def fetch_page(self, page: Optional[int] = None, per_page: Optional[int] = None, **params: Any) -> PaginationResult:
        return self.paginate(page, per_page, **params)

    def get_paginated(self, page: Optional[int] = None, per_page: Optional[int] = None, **params: Any) -> PaginationResult:
        return self.paginate(page, per_page, **params)

    def one(self, id: Union[int, str], **params: Any) -> TResource:
        return self.find(id, **params)

    def get_one(self, id: Union[int, str], **params: Any) -> TResource:
        return self.find(id, **params)
