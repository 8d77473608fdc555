"""User resource and DTOs."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from canvas_client.base import CanvasDatetime, Resource
from canvas_client.dto import BaseDTO

DeclaredUserType = Literal[
    "administrative", "observer", "staff", "student", "student_other", "teacher"
]


class User(Resource):
    name: Optional[str] = None
    sortable_name: Optional[str] = None
    short_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    sis_user_id: Optional[str] = None
    integration_id: Optional[str] = None
    login_id: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    locale: Optional[str] = None
    time_zone: Optional[str] = None
    bio: Optional[str] = None
    enrollments: Optional[List[Dict[str, Any]]] = None
    created_at: CanvasDatetime = None
    last_login: CanvasDatetime = None


class PseudonymFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unique_id: str = Field(min_length=1)
    password: Optional[str] = None
    sis_user_id: Optional[str] = None
    integration_id: Optional[str] = None
    send_confirmation: Optional[bool] = None
    force_self_registration: Optional[bool] = None
    authentication_provider_id: Optional[str] = None
    declared_user_type: Optional[DeclaredUserType] = None


class CreateUserDTO(BaseDTO):
    """
    Body for creating a user under an account.

    Canvas expects ``user[...]`` and ``pseudonym[...]`` groups side by side,
    so ``pseudonym`` is lifted out of the ``user`` wrapper when serialized.
    """

    api_property_name = "user"
    top_level_fields = {"pseudonym": "pseudonym"}

    name: str = Field(min_length=1)
    short_name: Optional[str] = None
    sortable_name: Optional[str] = None
    time_zone: Optional[str] = None
    locale: Optional[str] = None
    terms_of_use: Optional[bool] = None
    skip_registration: Optional[bool] = None
    pseudonym: PseudonymFields

    @model_validator(mode="after")
    def check_password(self) -> "CreateUserDTO":
        if self.pseudonym.password is not None and len(self.pseudonym.password) < 8:
            raise ValueError("password must be at least 8 characters")
        return self


class UpdateUserDTO(BaseDTO):
    api_property_name = "user"

    name: Optional[str] = Field(default=None, min_length=1)
    short_name: Optional[str] = None
    sortable_name: Optional[str] = None
    time_zone: Optional[str] = None
    email: Optional[str] = None
    locale: Optional[str] = None
    bio: Optional[str] = None
    title: Optional[str] = None
