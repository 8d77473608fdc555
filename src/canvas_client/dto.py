"""
Data transfer objects for request bodies.

A DTO is a validated property bag. Required fields, allowed values and
cross-field rules are checked by pydantic when the DTO is built, so an
invalid request never reaches the network. The DTO then renders itself as
Canvas-style multipart fields (``module[name]``, ``assignment[submission_types][]``)
or as a JSON body wrapped in its property name.
"""

from typing import Any, ClassVar, Dict, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from canvas_client.exceptions import DTOError

BodyFormat = Literal["multipart", "json"]
MultipartFields = List[Tuple[str, str]]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_field(name: str, value: Any) -> MultipartFields:
    """
    Flatten a JSON-compatible value into bracketed form fields.

    Lists of scalars become repeated ``name[]`` fields, lists of objects become
    ``name[0][key]``, and dicts become ``name[key]``. ``None`` is skipped.
    """
    if value is None:
        return []
    if isinstance(value, dict):
        fields: MultipartFields = []
        for key, item in value.items():
            fields.extend(flatten_field(f"{name}[{key}]", item))
        return fields
    if isinstance(value, (list, tuple)):
        fields = []
        for index, item in enumerate(value):
            if isinstance(item, (dict, list, tuple)):
                fields.extend(flatten_field(f"{name}[{index}]", item))
            elif item is not None:
                fields.append((f"{name}[]", _scalar(item)))
        return fields
    return [(name, _scalar(value))]


class BaseDTO(BaseModel):
    """
    Base class for request DTOs.

    Subclasses set ``api_property_name`` to the key Canvas expects the fields
    to be nested under, and ``body_format`` to pick how the body is sent.
    Fields listed in ``top_level_fields`` are sent beside the wrapper under
    the mapped name instead of inside it. Fields may be given in snake_case
    or camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
    )

    api_property_name: ClassVar[str] = ""
    body_format: ClassVar[BodyFormat] = "multipart"
    top_level_fields: ClassVar[Dict[str, str]] = {}

    def to_dict(self) -> Dict[str, Any]:
        """Plain snake_case dict without unset (``None``) values."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_multipart(self) -> MultipartFields:
        """Render the DTO as ordered ``(name, value)`` multipart fields."""
        if not self.api_property_name:
            raise DTOError(
                f"{self.__class__.__name__} has no api_property_name and cannot be sent as multipart"
            )
        fields: MultipartFields = []
        for key, value in self.to_dict().items():
            name = self.top_level_fields.get(key) or f"{self.api_property_name}[{key}]"
            fields.extend(flatten_field(name, value))
        return fields

    def to_json(self) -> Dict[str, Any]:
        """Render the DTO as a JSON body nested under ``api_property_name``."""
        data = self.to_dict()
        lifted = {
            self.top_level_fields[key]: data.pop(key)
            for key in list(data)
            if key in self.top_level_fields
        }
        if not self.api_property_name:
            return {**data, **lifted}
        return {self.api_property_name: data, **lifted}

    def to_request(self) -> Dict[str, Any]:
        """Keyword arguments for ``HTTPClient.request`` carrying this body."""
        if self.body_format == "json":
            return {"json_data": self.to_json()}
        return {"multipart": self.to_multipart()}
