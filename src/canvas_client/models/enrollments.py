"""Enrollment resource and DTOs."""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import Field, model_validator

from canvas_client.base import CanvasDatetime, Resource
from canvas_client.dto import BaseDTO

EnrollmentType = Literal[
    "StudentEnrollment",
    "TeacherEnrollment",
    "TaEnrollment",
    "ObserverEnrollment",
    "DesignerEnrollment",
]
EnrollmentState = Literal["active", "invited", "inactive"]
EnrollmentEndTask = Literal["conclude", "delete", "deactivate", "inactivate"]


class Enrollment(Resource):
    course_id: Optional[int] = None
    course_section_id: Optional[int] = None
    user_id: Optional[int] = None
    type: Optional[str] = None
    role: Optional[str] = None
    role_id: Optional[int] = None
    enrollment_state: Optional[str] = None
    limit_privileges_to_course_section: Optional[bool] = None
    sis_user_id: Optional[str] = None
    html_url: Optional[str] = None
    grades: Optional[Dict[str, Any]] = None
    user: Optional[Dict[str, Any]] = None
    created_at: CanvasDatetime = None
    updated_at: CanvasDatetime = None
    start_at: CanvasDatetime = None
    end_at: CanvasDatetime = None
    last_activity_at: CanvasDatetime = None

    def is_active(self) -> bool:
        return self.enrollment_state == "active"


class CreateEnrollmentDTO(BaseDTO):
    api_property_name = "enrollment"

    user_id: str = Field(min_length=1)
    type: EnrollmentType
    enrollment_state: Optional[EnrollmentState] = "active"
    course_section_id: Optional[int] = None
    role_id: Optional[int] = None
    limit_privileges_to_course_section: Optional[bool] = None
    notify: Optional[bool] = None
    self_enrollment_code: Optional[str] = None
    self_enrolled: Optional[bool] = None
    associated_user_id: Optional[int] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_user_id(cls, data: Any) -> Any:
        # Canvas accepts numeric ids and "sis_user_id:..." style references
        if isinstance(data, dict):
            for key in ("user_id", "userId"):
                if isinstance(data.get(key), int):
                    data = {**data, key: str(data[key])}
        return data

    @model_validator(mode="after")
    def check_observer(self) -> "CreateEnrollmentDTO":
        if self.associated_user_id is not None and self.type != "ObserverEnrollment":
            raise ValueError("associated_user_id is only valid for ObserverEnrollment")
        if self.start_at and self.end_at and self.start_at > self.end_at:
            raise ValueError("start_at must be before end_at")
        return self


class UpdateEnrollmentDTO(BaseDTO):
    api_property_name = "enrollment"

    role_id: Optional[int] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    limit_privileges_to_course_section: Optional[bool] = None
