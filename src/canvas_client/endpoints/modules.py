"""Endpoint clients for course modules and their items."""

from typing import Any, Union

from canvas_client.base import ResourceEndpoint
from canvas_client.http import decode_json
from canvas_client.models.modules import (
    CreateModuleDTO,
    CreateModuleItemDTO,
    Module,
    ModuleItem,
    UpdateModuleDTO,
    UpdateModuleItemDTO,
)


class ModulesClient(ResourceEndpoint[Module]):
    """
    Client for ``courses/{course_id}/modules``.

    Every call needs a course:

        client.modules.with_context(course_id=42).all()
        client.courses.modules(42).create({"name": "Week 1"})
    """

    model = Module
    create_dto = CreateModuleDTO
    update_dto = UpdateModuleDTO
    path_template = "courses/{course_id}/modules"

    def items(self, module_id: Union[int, str]) -> "ModuleItemsClient":
        """Items endpoint scoped to one module of this course."""
        return ModuleItemsClient(self._http, **self.require_context(), module_id=module_id)

    def relock(self, id: Union[int, str]) -> Module:
        """Reset module progressions for all students so prerequisites apply again."""
        response = self._http.put(self._build_path(id, "relock"))
        return self.hydrate(decode_json(response))


class ModuleItemsClient(ResourceEndpoint[ModuleItem]):
    """Client for ``courses/{course_id}/modules/{module_id}/items``."""

    model = ModuleItem
    create_dto = CreateModuleItemDTO
    update_dto = UpdateModuleItemDTO
    path_template = "courses/{course_id}/modules/{module_id}/items"

    def mark_done(self, id: Union[int, str]) -> Any:
        """Mark a ``must_mark_done`` item as done for the current user."""
        return decode_json(self._http.put(self._build_path(id, "done")))

    def mark_not_done(self, id: Union[int, str]) -> Any:
        """Undo ``mark_done``."""
        return decode_json(self._http.delete(self._build_path(id, "done")))

    def mark_read(self, id: Union[int, str]) -> Any:
        """Fulfil a ``must_view`` requirement without viewing the item."""
        return decode_json(self._http.post(self._build_path(id, "mark_read")))
