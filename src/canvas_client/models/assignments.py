"""Assignment resource and DTOs."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, model_validator

from canvas_client.base import CanvasDatetime, Resource
from canvas_client.dto import BaseDTO

GradingType = Literal[
    "pass_fail", "percent", "letter_grade", "gpa_scale", "points", "not_graded"
]
SubmissionType = Literal[
    "online_quiz",
    "none",
    "on_paper",
    "discussion_topic",
    "external_tool",
    "online_upload",
    "online_text_entry",
    "online_url",
    "media_recording",
    "student_annotation",
]


class Assignment(Resource):
    course_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    created_at: CanvasDatetime = None
    updated_at: CanvasDatetime = None
    due_at: CanvasDatetime = None
    lock_at: CanvasDatetime = None
    unlock_at: CanvasDatetime = None
    points_possible: Optional[float] = None
    grading_type: Optional[str] = None
    submission_types: Optional[List[str]] = None
    allowed_extensions: Optional[List[str]] = None
    allowed_attempts: Optional[int] = None
    assignment_group_id: Optional[int] = None
    position: Optional[int] = None
    published: Optional[bool] = None
    html_url: Optional[str] = None
    has_submitted_submissions: Optional[bool] = None
    rubric: Optional[List[Dict[str, Any]]] = None


class _AssignmentFields(BaseDTO):
    api_property_name = "assignment"

    description: Optional[str] = None
    due_at: Optional[datetime] = None
    lock_at: Optional[datetime] = None
    unlock_at: Optional[datetime] = None
    points_possible: Optional[float] = Field(default=None, ge=0)
    grading_type: Optional[GradingType] = None
    submission_types: Optional[List[SubmissionType]] = None
    allowed_extensions: Optional[List[str]] = None
    allowed_attempts: Optional[int] = None
    published: Optional[bool] = None
    assignment_group_id: Optional[int] = None
    position: Optional[int] = Field(default=None, ge=1)
    only_visible_to_overrides: Optional[bool] = None
    peer_reviews: Optional[bool] = None
    automatic_peer_reviews: Optional[bool] = None
    anonymous_grading: Optional[bool] = None
    moderated_grading: Optional[bool] = None
    grader_count: Optional[int] = None
    group_category_id: Optional[int] = None
    grade_group_students_individually: Optional[bool] = None
    external_tool_tag_attributes: Optional[Dict[str, Any]] = None
    integration_id: Optional[str] = None
    omit_from_final_grade: Optional[bool] = None
    hide_in_gradebook: Optional[bool] = None

    @model_validator(mode="after")
    def check_consistency(self):
        if self.unlock_at and self.lock_at and self.unlock_at > self.lock_at:
            raise ValueError("unlock_at must be before lock_at")
        if self.allowed_attempts is not None and self.allowed_attempts != -1 and self.allowed_attempts < 1:
            raise ValueError("allowed_attempts must be -1 (unlimited) or positive")
        if self.moderated_grading and not self.grader_count:
            raise ValueError("grader_count is required when moderated_grading is enabled")
        return self


class CreateAssignmentDTO(_AssignmentFields):
    name: str = Field(min_length=1)


class UpdateAssignmentDTO(_AssignmentFields):
    name: Optional[str] = Field(default=None, min_length=1)
