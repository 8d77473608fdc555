"""Rubric resource and DTOs."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from canvas_client.base import Resource
from canvas_client.dto import BaseDTO

RubricContextType = Literal["course", "account"]
AssociationType = Literal["Assignment", "Course", "Account"]
AssociationPurpose = Literal["grading", "bookmark"]


class Rubric(Resource):
    title: Optional[str] = None
    context_id: Optional[int] = None
    context_type: Optional[str] = None
    points_possible: Optional[float] = None
    reusable: Optional[bool] = None
    read_only: Optional[bool] = None
    free_form_criterion_comments: Optional[bool] = None
    hide_score_total: Optional[bool] = None
    data: Optional[List[Dict[str, Any]]] = None
    assessments: Optional[List[Dict[str, Any]]] = None
    associations: Optional[List[Dict[str, Any]]] = None


class RubricRating(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str
    points: float = Field(ge=0)
    long_description: Optional[str] = None


class RubricCriterion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str
    points: Optional[float] = Field(default=None, ge=0)
    long_description: Optional[str] = None
    criterion_use_range: Optional[bool] = None
    ratings: List[RubricRating] = Field(default_factory=list)


class RubricAssociation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    association_id: int
    association_type: AssociationType
    use_for_grading: Optional[bool] = None
    hide_score_total: Optional[bool] = None
    purpose: Optional[AssociationPurpose] = None


class _RubricFields(BaseDTO):
    api_property_name = "rubric"
    top_level_fields = {
        "association": "rubric_association",
        "rubric_association_id": "rubric_association_id",
    }

    free_form_criterion_comments: Optional[bool] = None
    hide_score_total: Optional[bool] = None
    criteria: Optional[List[RubricCriterion]] = None

    association: Optional[RubricAssociation] = None
    rubric_association_id: Optional[int] = None


class CreateRubricDTO(_RubricFields):
    title: str = Field(min_length=1)

    @model_validator(mode="after")
    def check_criteria(self) -> "CreateRubricDTO":
        for criterion in self.criteria or []:
            if criterion.points is not None and criterion.ratings:
                best = max(rating.points for rating in criterion.ratings)
                if best > criterion.points:
                    raise ValueError(
                        f"Rating worth {best} exceeds criterion '{criterion.description}' points"
                    )
        return self


class UpdateRubricDTO(_RubricFields):
    title: Optional[str] = Field(default=None, min_length=1)
