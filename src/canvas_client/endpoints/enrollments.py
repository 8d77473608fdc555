"""Endpoint client for course enrollments."""

from typing import Any, Union

from canvas_client.base import ResourceEndpoint
from canvas_client.http import decode_json
from canvas_client.models.enrollments import (
    CreateEnrollmentDTO,
    Enrollment,
    EnrollmentEndTask,
    UpdateEnrollmentDTO,
)


class EnrollmentsClient(ResourceEndpoint[Enrollment]):
    """Client for ``courses/{course_id}/enrollments``."""

    model = Enrollment
    create_dto = CreateEnrollmentDTO
    update_dto = UpdateEnrollmentDTO
    path_template = "courses/{course_id}/enrollments"

    def find(self, id: Union[int, str], **params: Any) -> Enrollment:
        # Single enrollments live under the account, not the course
        self.require_context()
        account_id = self.context.get("account_id", self.settings.account_id)
        data = self._http.get_json(f"accounts/{account_id}/enrollments/{id}", params=params)
        return self.hydrate(data)

    def delete(
        self,
        id: Union[int, str],
        task: EnrollmentEndTask = "conclude",
        **params: Any,
    ) -> Enrollment:
        """
        End an enrollment.

        Args:
            id: Enrollment identifier
            task: ``conclude``, ``delete``, ``deactivate`` or ``inactivate``
        """
        if task not in ("conclude", "delete", "deactivate", "inactivate"):
            raise ValueError(f"Invalid enrollment task: {task}")
        response = self._http.delete(self._build_path(id), params={"task": task, **params})
        return self.hydrate(decode_json(response))

    def conclude(self, id: Union[int, str]) -> Enrollment:
        return self.delete(id, task="conclude")

    def deactivate(self, id: Union[int, str]) -> Enrollment:
        return self.delete(id, task="deactivate")

    def accept(self, id: Union[int, str]) -> bool:
        """Accept a pending course invitation."""
        data = decode_json(self._http.post(self._build_path(id, "accept")))
        return bool(data and data.get("success"))

    def reject(self, id: Union[int, str]) -> bool:
        """Reject a pending course invitation."""
        data = decode_json(self._http.post(self._build_path(id, "reject")))
        return bool(data and data.get("success"))

    def reactivate(self, id: Union[int, str]) -> Enrollment:
        """Re-activate an inactive enrollment."""
        return self.hydrate(decode_json(self._http.put(self._build_path(id, "reactivate"))))
