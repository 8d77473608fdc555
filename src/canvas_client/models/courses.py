"""Course resource and DTOs."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from canvas_client.base import CanvasDatetime, Resource
from canvas_client.dto import BaseDTO

CourseDefaultView = Literal["feed", "wiki", "modules", "syllabus", "assignments"]
CourseEvent = Literal["claim", "offer", "conclude", "delete", "undelete"]


class Course(Resource):
    name: Optional[str] = None
    course_code: Optional[str] = None
    workflow_state: Optional[str] = None
    account_id: Optional[int] = None
    root_account_id: Optional[int] = None
    enrollment_term_id: Optional[int] = None
    sis_course_id: Optional[str] = None
    uuid: Optional[str] = None
    default_view: Optional[str] = None
    syllabus_body: Optional[str] = None
    is_public: Optional[bool] = None
    time_zone: Optional[str] = None
    total_students: Optional[int] = None
    enrollments: Optional[List[Dict[str, Any]]] = None
    created_at: CanvasDatetime = None
    start_at: CanvasDatetime = None
    end_at: CanvasDatetime = None

    def is_published(self) -> bool:
        return self.workflow_state == "available"


class CreateCourseDTO(BaseDTO):
    api_property_name = "course"

    name: str = Field(min_length=1)
    course_code: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    license: Optional[str] = None
    is_public: Optional[bool] = None
    is_public_to_auth_users: Optional[bool] = None
    public_syllabus: Optional[bool] = None
    public_description: Optional[str] = None
    allow_student_wiki_edits: Optional[bool] = None
    open_enrollment: Optional[bool] = None
    self_enrollment: Optional[bool] = None
    restrict_enrollments_to_course_dates: Optional[bool] = None
    term_id: Optional[int] = None
    sis_course_id: Optional[str] = None
    integration_id: Optional[str] = None
    hide_final_grades: Optional[bool] = None
    apply_assignment_group_weights: Optional[bool] = None
    time_zone: Optional[str] = None
    default_view: Optional[CourseDefaultView] = None
    syllabus_body: Optional[str] = None
    grading_standard_id: Optional[int] = None
    course_format: Optional[Literal["on_campus", "online", "blended"]] = None


class UpdateCourseDTO(BaseDTO):
    api_property_name = "course"

    name: Optional[str] = Field(default=None, min_length=1)
    course_code: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    license: Optional[str] = None
    is_public: Optional[bool] = None
    public_description: Optional[str] = None
    term_id: Optional[int] = None
    sis_course_id: Optional[str] = None
    time_zone: Optional[str] = None
    default_view: Optional[CourseDefaultView] = None
    syllabus_body: Optional[str] = None
    grading_standard_id: Optional[int] = None
    course_format: Optional[Literal["on_campus", "online", "blended"]] = None
    event: Optional[CourseEvent] = None
