"""Resource models and request DTOs for the supported Canvas resources."""

from canvas_client.models.assignments import (
    Assignment,
    CreateAssignmentDTO,
    UpdateAssignmentDTO,
)
from canvas_client.models.courses import Course, CreateCourseDTO, UpdateCourseDTO
from canvas_client.models.enrollments import (
    CreateEnrollmentDTO,
    Enrollment,
    UpdateEnrollmentDTO,
)
from canvas_client.models.modules import (
    CompletionRequirement,
    CreateModuleDTO,
    CreateModuleItemDTO,
    Module,
    ModuleItem,
    UpdateModuleDTO,
    UpdateModuleItemDTO,
)
from canvas_client.models.rubrics import (
    CreateRubricDTO,
    Rubric,
    RubricAssociation,
    RubricCriterion,
    RubricRating,
    UpdateRubricDTO,
)
from canvas_client.models.submissions import (
    CreateSubmissionDTO,
    Submission,
    UpdateSubmissionDTO,
)
from canvas_client.models.users import (
    CreateUserDTO,
    PseudonymFields,
    UpdateUserDTO,
    User,
)

__all__ = [
    "Assignment",
    "CreateAssignmentDTO",
    "UpdateAssignmentDTO",
    "Course",
    "CreateCourseDTO",
    "UpdateCourseDTO",
    "Enrollment",
    "CreateEnrollmentDTO",
    "UpdateEnrollmentDTO",
    "Module",
    "ModuleItem",
    "CompletionRequirement",
    "CreateModuleDTO",
    "UpdateModuleDTO",
    "CreateModuleItemDTO",
    "UpdateModuleItemDTO",
    "Rubric",
    "RubricAssociation",
    "RubricCriterion",
    "RubricRating",
    "CreateRubricDTO",
    "UpdateRubricDTO",
    "Submission",
    "CreateSubmissionDTO",
    "UpdateSubmissionDTO",
    "User",
    "PseudonymFields",
    "CreateUserDTO",
    "UpdateUserDTO",
]
