"""Endpoint clients for assignments and submissions."""

from typing import Any, Dict, List, Type, Union

from canvas_client.base import ResourceEndpoint
from canvas_client.dto import BaseDTO
from canvas_client.http import decode_json
from canvas_client.models.assignments import (
    Assignment,
    CreateAssignmentDTO,
    UpdateAssignmentDTO,
)
from canvas_client.models.submissions import (
    CreateSubmissionDTO,
    Submission,
    UpdateSubmissionDTO,
)


class AssignmentsClient(ResourceEndpoint[Assignment]):
    """Client for ``courses/{course_id}/assignments``."""

    model = Assignment
    create_dto = CreateAssignmentDTO
    update_dto = UpdateAssignmentDTO
    path_template = "courses/{course_id}/assignments"

    def submissions(self, assignment_id: Union[int, str]) -> "SubmissionsClient":
        """Submissions endpoint scoped to one assignment of this course."""
        return SubmissionsClient(
            self._http, **self.require_context(), assignment_id=assignment_id
        )

    def duplicate(self, id: Union[int, str]) -> Assignment:
        """Copy an assignment within its course."""
        response = self._http.post(self._build_path(id, "duplicate"))
        return self.hydrate(decode_json(response))


class SubmissionsClient(ResourceEndpoint[Submission]):
    """
    Client for ``courses/{course_id}/assignments/{assignment_id}/submissions``.

    Single submissions are addressed by user id, not submission id.
    """

    model = Submission
    create_dto = CreateSubmissionDTO
    update_dto = UpdateSubmissionDTO
    path_template = "courses/{course_id}/assignments/{assignment_id}/submissions"

    def resource_key(self, resource: Submission) -> Any:
        return resource.user_id

    def dto_data(self, resource: Submission, dto_class: Type[BaseDTO]) -> Dict[str, Any]:
        data = super().dto_data(resource, dto_class)
        if dto_class is UpdateSubmissionDTO:
            # Canvas reports ``grade``/``excused`` but accepts ``posted_grade``/``excuse``
            if resource.grade is not None:
                data.setdefault("posted_grade", resource.grade)
            if resource.excused is not None:
                data.setdefault("excuse", resource.excused)
        return data

    def save(self, resource: Submission) -> Submission:
        # Submissions always exist per user, so saving means grading
        saved = self.update(resource.user_id, self._coerce_dto(self.update_dto, resource, "update"))
        resource.update_from(saved)
        resource.bind(self)
        return resource

    def grade(self, user_id: Union[int, str], posted_grade: Union[str, float], **fields: Any) -> Submission:
        """Shortcut for ``update`` with a posted grade."""
        return self.update(user_id, UpdateSubmissionDTO(posted_grade=str(posted_grade), **fields))

    def comment(self, user_id: Union[int, str], text: str) -> Submission:
        """Add a text comment to a user's submission."""
        return self.update(user_id, UpdateSubmissionDTO(comment={"text_comment": text}))

    def mark_as_read(self, user_id: Union[int, str]) -> Any:
        return decode_json(self._http.put(self._build_path(user_id, "read")))

    def mark_as_unread(self, user_id: Union[int, str]) -> Any:
        return decode_json(self._http.delete(self._build_path(user_id, "read")))

    def summary(self) -> Dict[str, Any]:
        """Counts of graded, ungraded and unsubmitted submissions."""
        context = self.require_context()
        path = "courses/{course_id}/assignments/{assignment_id}/submission_summary".format(**context)
        return self._http.get_json(path)

    def for_users(self, user_ids: List[Union[int, str]], **params: Any) -> List[Submission]:
        """Submissions of several students across this course."""
        path = "courses/{course_id}/students/submissions".format(**self.require_context())
        params = {
            "student_ids": list(user_ids),
            "assignment_ids": [self.context["assignment_id"]],
            **params,
        }
        page = self._http.get_paginated(path, params=params)
        return self.hydrate_many(page.fetch_all_pages())
