"""Endpoint client for rubrics."""

from typing import Any, Dict, List, Union

from canvas_client.base import ResourceEndpoint
from canvas_client.http import HTTPClient, decode_json
from canvas_client.models.rubrics import CreateRubricDTO, Rubric, UpdateRubricDTO


class RubricsClient(ResourceEndpoint[Rubric]):
    """
    Client for ``courses/{id}/rubrics`` and ``accounts/{id}/rubrics``.

    Defaults to the configured account; use ``for_course`` for course
    rubrics. Canvas answers create and update with
    ``{"rubric": {...}, "rubric_association": {...}}``, which is unwrapped.
    """

    model = Rubric
    create_dto = CreateRubricDTO
    update_dto = UpdateRubricDTO
    path_template = "{context_type}s/{context_id}/rubrics"

    def __init__(self, http_client: HTTPClient, **context: Any):
        context_type = context.setdefault("context_type", "account")
        if context_type not in ("account", "course"):
            raise ValueError(f"Invalid rubric context type: {context_type}")
        if context_type == "account" and context.get("context_id") is None:
            context["context_id"] = http_client.settings.account_id
        super().__init__(http_client, **context)

    def for_course(self, course_id: Union[int, str]) -> "RubricsClient":
        return RubricsClient(self._http, context_type="course", context_id=course_id)

    def for_account(self, account_id: Union[int, str]) -> "RubricsClient":
        return RubricsClient(self._http, context_type="account", context_id=account_id)

    def hydrate(self, data: Any) -> Rubric:
        if isinstance(data, dict) and isinstance(data.get("rubric"), dict):
            rubric = dict(data["rubric"])
            if "rubric_association" in data:
                rubric.setdefault("rubric_association", data["rubric_association"])
            data = rubric
        return super().hydrate(data)

    def used_locations(self, id: Union[int, str]) -> List[Dict[str, Any]]:
        """Courses and assignments where an account rubric is used."""
        return self._http.get_paginated(self._build_path(id, "used_locations")).fetch_all_pages()

    def delete(self, id: Union[int, str], **params: Any) -> Rubric:
        return self.hydrate(decode_json(self._http.delete(self._build_path(id), params=params)))
