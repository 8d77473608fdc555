"""Endpoint client for users."""

from typing import Any, Dict, List, Union

from canvas_client.base import ResourceEndpoint
from canvas_client.endpoints.courses import CoursesClient
from canvas_client.models.courses import Course
from canvas_client.models.users import CreateUserDTO, UpdateUserDTO, User
from canvas_client.pagination import PaginatedResponse


class UsersClient(ResourceEndpoint[User]):
    """
    Client for ``users``.

    Users are created under the configured account; ``get``/``all`` list the
    account's users.
    """

    model = User
    create_dto = CreateUserDTO
    update_dto = UpdateUserDTO
    path_template = "users"

    def _account_path(self) -> str:
        account_id = self.context.get("account_id", self.settings.account_id)
        return f"accounts/{account_id}/users"

    def create_path(self) -> str:
        return self._account_path()

    def _first_page(self, params: Dict[str, Any]) -> PaginatedResponse:
        return self._http.get_paginated(self._account_path(), params=params)

    def me(self) -> User:
        """The user that owns the API key."""
        return self.find("self")

    def courses(self, user_id: Union[int, str] = "self", **params: Any) -> List[Course]:
        """Courses a user is enrolled in."""
        page = self._http.get_paginated(self._build_path(user_id, "courses"), params=params)
        return CoursesClient(self._http).hydrate_many(page.fetch_all_pages())
