"""Endpoint client for courses."""

from typing import Any, Dict, Union

from canvas_client.base import ResourceEndpoint
from canvas_client.endpoints.assignments import AssignmentsClient
from canvas_client.endpoints.enrollments import EnrollmentsClient
from canvas_client.endpoints.modules import ModulesClient
from canvas_client.endpoints.rubrics import RubricsClient
from canvas_client.http import decode_json
from canvas_client.models.courses import Course, CreateCourseDTO, UpdateCourseDTO


class CoursesClient(ResourceEndpoint[Course]):
    """
    Client for ``courses`` endpoints.

    Courses are listed for the current user and created under the
    configured account. The relationship helpers return endpoints scoped to
    one course.
    """

    model = Course
    create_dto = CreateCourseDTO
    update_dto = UpdateCourseDTO
    path_template = "courses"

    def create_path(self) -> str:
        account_id = self.context.get("account_id", self.settings.account_id)
        return f"accounts/{account_id}/courses"

    def delete(self, id: Union[int, str], event: str = "delete", **params: Any) -> Any:
        """Delete or conclude a course (``event`` is ``delete`` or ``conclude``)."""
        return super().delete(id, event=event, **params)

    def conclude(self, id: Union[int, str]) -> Dict[str, Any]:
        """Conclude a course, keeping its data."""
        return self.delete(id, event="conclude")

    def reset_content(self, id: Union[int, str]) -> Course:
        """Delete all content of a course and return the new blank course."""
        response = self._http.post(self._build_path(id, "reset_content"))
        return self.hydrate(decode_json(response))

    # =========================================================================
    # Relationships
    # =========================================================================

    def modules(self, course_id: Union[int, str]) -> ModulesClient:
        return ModulesClient(self._http, course_id=course_id)

    def assignments(self, course_id: Union[int, str]) -> AssignmentsClient:
        return AssignmentsClient(self._http, course_id=course_id)

    def enrollments(self, course_id: Union[int, str]) -> EnrollmentsClient:
        return EnrollmentsClient(self._http, course_id=course_id)

    def rubrics(self, course_id: Union[int, str]) -> RubricsClient:
        return RubricsClient(self._http, context_type="course", context_id=course_id)

