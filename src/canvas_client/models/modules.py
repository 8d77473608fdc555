"""Module and module item resources and DTOs."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator

from canvas_client.base import CanvasDatetime, Resource
from canvas_client.dto import BaseDTO

ModuleItemType = Literal[
    "File",
    "Page",
    "Discussion",
    "Assignment",
    "Quiz",
    "SubHeader",
    "ExternalUrl",
    "ExternalTool",
]
CONTENT_ITEM_TYPES = ("File", "Discussion", "Assignment", "Quiz", "ExternalTool")
CompletionRequirementType = Literal[
    "must_view", "must_contribute", "must_submit", "must_mark_done", "min_score"
]


class Module(Resource):
    course_id: Optional[int] = None
    name: Optional[str] = None
    position: Optional[int] = None
    workflow_state: Optional[str] = None
    unlock_at: CanvasDatetime = None
    require_sequential_progress: Optional[bool] = None
    prerequisite_module_ids: Optional[List[int]] = None
    items_count: Optional[int] = None
    items_url: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    state: Optional[str] = None
    completed_at: CanvasDatetime = None
    publish_final_grade: Optional[bool] = None
    published: Optional[bool] = None


class ModuleItem(Resource):
    module_id: Optional[int] = None
    position: Optional[int] = None
    title: Optional[str] = None
    indent: Optional[int] = None
    type: Optional[str] = None
    content_id: Optional[int] = None
    html_url: Optional[str] = None
    url: Optional[str] = None
    page_url: Optional[str] = None
    external_url: Optional[str] = None
    new_tab: Optional[bool] = None
    completion_requirement: Optional[Dict[str, Any]] = None
    content_details: Optional[Dict[str, Any]] = None
    published: Optional[bool] = None


class CreateModuleDTO(BaseDTO):
    api_property_name = "module"

    name: str = Field(min_length=1)
    unlock_at: Optional[datetime] = None
    position: Optional[int] = Field(default=None, ge=1)
    require_sequential_progress: Optional[bool] = None
    prerequisite_module_ids: Optional[List[int]] = None
    publish_final_grade: Optional[bool] = None


class UpdateModuleDTO(BaseDTO):
    api_property_name = "module"

    name: Optional[str] = Field(default=None, min_length=1)
    unlock_at: Optional[datetime] = None
    position: Optional[int] = Field(default=None, ge=1)
    require_sequential_progress: Optional[bool] = None
    prerequisite_module_ids: Optional[List[int]] = None
    publish_final_grade: Optional[bool] = None
    published: Optional[bool] = None


class CompletionRequirement(BaseDTO):
    type: CompletionRequirementType
    min_score: Optional[float] = None

    @model_validator(mode="after")
    def check_min_score(self) -> "CompletionRequirement":
        if self.type == "min_score" and self.min_score is None:
            raise ValueError("min_score is required for a min_score completion requirement")
        return self


class _ModuleItemFields(BaseDTO):
    api_property_name = "module_item"

    title: Optional[str] = None
    position: Optional[int] = Field(default=None, ge=1)
    indent: Optional[int] = Field(default=None, ge=0)
    external_url: Optional[str] = None
    new_tab: Optional[bool] = None
    completion_requirement: Optional[CompletionRequirement] = None

    @field_validator("external_url")
    @classmethod
    def check_external_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid URL format for external_url")
        return value


class CreateModuleItemDTO(_ModuleItemFields):
    type: ModuleItemType
    content_id: Optional[int] = None
    page_url: Optional[str] = None
    iframe: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_type_requirements(self) -> "CreateModuleItemDTO":
        if self.type in CONTENT_ITEM_TYPES and self.content_id is None:
            raise ValueError(f"content_id is required for {self.type} items")
        if self.type == "Page" and not self.page_url:
            raise ValueError("page_url is required for Page items")
        if self.type in ("ExternalUrl", "ExternalTool") and not self.external_url:
            raise ValueError(f"external_url is required for {self.type} items")
        return self


class UpdateModuleItemDTO(_ModuleItemFields):
    module_id: Optional[int] = None
    published: Optional[bool] = None
