"""Tests for the main CanvasClient class."""

from unittest.mock import patch

import httpx
import pytest
from pydantic import BaseModel

from canvas_client import CanvasClient, CourseScope
from canvas_client.endpoints import (
    CoursesClient,
    ModuleItemsClient,
    ModulesClient,
    RubricsClient,
    SubmissionsClient,
)
from canvas_client.exceptions import ContextError, MissingApiKeyError, NotFoundError

from conftest import API_ROOT, BASE_URL, json_response


class Profile(BaseModel):
    id: int
    name: str


@pytest.fixture
def client(settings):
    settings.max_retries = 0
    with CanvasClient(settings) as canvas:
        yield canvas


class TestCanvasClientInitialization:
    """Tests for CanvasClient initialization."""

    def test_explicit_arguments(self):
        client = CanvasClient(base_url=f"{BASE_URL}/", api_key="key", per_page=25)
        assert client.base_url == BASE_URL
        assert client.settings.per_page == 25
        assert client.http.base_url == f"{API_ROOT}/"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("CANVAS_BASE_URL", BASE_URL)
        monkeypatch.setenv("CANVAS_API_KEY", "env-key")
        client = CanvasClient()
        assert client.settings.api_key == "env-key"

    def test_missing_api_key(self):
        with pytest.raises(MissingApiKeyError):
            CanvasClient(base_url=BASE_URL)

    def test_two_clients_do_not_share_configuration(self):
        first = CanvasClient(base_url="https://a.test", api_key="a")
        second = CanvasClient(base_url="https://b.test", api_key="b")
        assert first.settings is not second.settings
        assert first.http.base_url == "https://a.test/api/v1/"
        assert second.http.base_url == "https://b.test/api/v1/"

    def test_repr(self, client):
        assert repr(client) == f"CanvasClient(base_url='{BASE_URL}')"


class TestEndpointAccess:
    """Tests for lazily created endpoint clients."""

    def test_named_endpoint(self, client):
        assert isinstance(client.courses, CoursesClient)
        assert client.courses is client.courses

    def test_snake_case_names(self, client):
        assert isinstance(client.module_items, ModuleItemsClient)

    def test_unknown_endpoint(self, client):
        with pytest.raises(AttributeError):
            client.quizzes

    def test_private_names(self, client):
        with pytest.raises(AttributeError):
            client._secret

    def test_unscoped_relationship_fails(self, client, respx_mock):
        with pytest.raises(ContextError):
            client.modules.get()
        assert len(respx_mock.calls) == 0

    def test_endpoint_factory(self, client):
        modules = client.endpoint(ModulesClient, course_id=42)
        assert modules.base_path == "courses/42/modules"


class TestCourseScope:
    """Tests for course scoped endpoint access."""

    def test_scoped_clients(self, client):
        course = client.course(42)
        assert isinstance(course, CourseScope)
        assert course.modules.base_path == "courses/42/modules"
        assert course.assignments.base_path == "courses/42/assignments"
        assert course.enrollments.base_path == "courses/42/enrollments"
        assert isinstance(course.rubrics, RubricsClient)
        assert course.rubrics.base_path == "courses/42/rubrics"
        assert isinstance(course.module_items(7), ModuleItemsClient)
        assert course.module_items(7).base_path == "courses/42/modules/7/items"
        assert isinstance(course.submissions(3), SubmissionsClient)

    def test_details(self, client, respx_mock, course_data):
        respx_mock.get(f"{API_ROOT}/courses/42").mock(return_value=json_response(course_data))
        assert client.course(42).details().name == "Intro to Testing"

    def test_list_modules(self, client, respx_mock, module_data):
        respx_mock.get(f"{API_ROOT}/courses/42/modules").mock(
            return_value=json_response([module_data])
        )
        modules = client.course(42).modules.all()
        assert [m.id for m in modules] == [7]


class TestCustomRequests:
    def test_get_with_response_model(self, client, respx_mock):
        respx_mock.get(f"{API_ROOT}/users/self/profile").mock(
            return_value=json_response({"id": 1, "name": "Ada", "bio": None})
        )

        profile = client.get("users/self/profile", response_model=Profile)

        assert profile == Profile(id=1, name="Ada")

    def test_post_returns_json(self, client, respx_mock):
        route = respx_mock.post(f"{API_ROOT}/courses/42/enrollments/5/accept").mock(
            return_value=json_response({"success": True})
        )
        assert client.post("courses/42/enrollments/5/accept") == {"success": True}
        assert route.call_count == 1

    def test_delete(self, client, respx_mock):
        respx_mock.delete(f"{API_ROOT}/courses/42/modules/7").mock(
            return_value=json_response({"id": 7})
        )
        assert client.delete("courses/42/modules/7") == {"id": 7}

    def test_errors_propagate(self, client, respx_mock):
        respx_mock.get(f"{API_ROOT}/courses/1").mock(return_value=httpx.Response(404))
        with pytest.raises(NotFoundError):
            client.get("courses/1")


class TestHealthCheck:
    def test_healthy(self, client, respx_mock):
        respx_mock.get(f"{API_ROOT}/users/self").mock(return_value=json_response({"id": 1}))
        assert client.health_check() is True

    def test_unhealthy(self, client, respx_mock):
        respx_mock.get(f"{API_ROOT}/users/self").mock(return_value=httpx.Response(401))
        assert client.health_check() is False


class TestLifecycle:
    def test_close(self, settings):
        client = CanvasClient(settings)
        assert client.courses is not None
        with patch.object(client.http, "close") as mock_close:
            client.close()
        mock_close.assert_called_once()
        assert client._endpoint_clients == {}

    def test_context_manager(self, settings):
        with patch("canvas_client.client.HTTPClient") as mock_http:
            with CanvasClient(settings) as client:
                assert client.http is mock_http.return_value
            mock_http.return_value.close.assert_called_once()
