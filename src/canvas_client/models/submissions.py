"""Submission resource and DTOs."""

import ipaddress
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator

from canvas_client.base import CanvasDatetime, Resource
from canvas_client.dto import BaseDTO

SubmissionKind = Literal[
    "online_text_entry",
    "online_url",
    "online_upload",
    "media_recording",
    "basic_lti_launch",
    "student_annotation",
]
MAX_ATTACHED_FILES = 50


class Submission(Resource):
    assignment_id: Optional[int] = None
    user_id: Optional[int] = None
    attempt: Optional[int] = None
    body: Optional[str] = None
    url: Optional[str] = None
    grade: Optional[str] = None
    score: Optional[float] = None
    entered_grade: Optional[str] = None
    entered_score: Optional[float] = None
    submission_type: Optional[str] = None
    workflow_state: Optional[str] = None
    grade_matches_current_submission: Optional[bool] = None
    late: Optional[bool] = None
    missing: Optional[bool] = None
    excused: Optional[bool] = None
    points_deducted: Optional[float] = None
    extra_attempts: Optional[int] = None
    submitted_at: CanvasDatetime = None
    graded_at: CanvasDatetime = None
    posted_at: CanvasDatetime = None
    submission_comments: Optional[List[Dict[str, Any]]] = None
    attachments: Optional[List[Dict[str, Any]]] = None

    def is_graded(self) -> bool:
        return self.workflow_state == "graded"


def _is_internal_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_private or address.is_loopback or address.is_unspecified


class CreateSubmissionDTO(BaseDTO):
    api_property_name = "submission"

    submission_type: SubmissionKind
    body: Optional[str] = None
    url: Optional[str] = None
    file_ids: Optional[List[int]] = Field(default=None, max_length=MAX_ATTACHED_FILES)
    media_comment_id: Optional[str] = None
    media_comment_type: Optional[Literal["audio", "video"]] = None
    user_id: Optional[int] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError("Invalid URL format")
        if _is_internal_host(parsed.hostname):
            raise ValueError("Internal URLs are not allowed")
        if parsed.scheme != "https":
            raise ValueError("Only HTTPS URLs are allowed")
        return value

    @field_validator("file_ids")
    @classmethod
    def check_file_ids(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value and any(file_id <= 0 for file_id in value):
            raise ValueError("File IDs must be positive integers")
        return value

    @model_validator(mode="after")
    def check_type_requirements(self) -> "CreateSubmissionDTO":
        if self.submission_type == "online_text_entry" and not self.body:
            raise ValueError("body is required for online_text_entry submissions")
        if self.submission_type == "online_url" and not self.url:
            raise ValueError("url is required for online_url submissions")
        if self.submission_type == "online_upload" and not self.file_ids:
            raise ValueError("file_ids are required for online_upload submissions")
        if self.submission_type == "media_recording" and not self.media_comment_id:
            raise ValueError("media_comment_id is required for media_recording submissions")
        return self


class UpdateSubmissionDTO(BaseDTO):
    api_property_name = "submission"
    top_level_fields = {"comment": "comment", "rubric_assessment": "rubric_assessment"}

    posted_grade: Optional[str] = None
    excuse: Optional[bool] = None
    late_policy_status: Optional[Literal["late", "missing", "extended", "none"]] = None
    seconds_late_override: Optional[int] = Field(default=None, ge=0)
    extra_attempts: Optional[int] = Field(default=None, ge=0)
    points_deducted: Optional[float] = None

    comment: Optional[Dict[str, Any]] = None
    rubric_assessment: Optional[Dict[str, Dict[str, Any]]] = None

