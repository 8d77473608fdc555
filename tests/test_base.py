"""Tests for the resource base classes."""

import json
from typing import List, Optional

import httpx
import pytest
from pydantic import BaseModel, ConfigDict, ValidationError

from canvas_client.base import BaseEndpointClient, Resource, ResourceEndpoint, fit_to_model
from canvas_client.dto import BaseDTO
from canvas_client.exceptions import (
    CanvasClientError,
    ContextError,
    DTOError,
    NotFoundError,
    UnprocessableEntityError,
)
from canvas_client.pagination import PaginationResult

from conftest import API_ROOT, form_fields, json_response, link_header

PAGES_URL = f"{API_ROOT}/courses/42/pages"


class Page(Resource):
    title: Optional[str] = None
    body: Optional[str] = None
    published: Optional[bool] = None


class CreatePageDTO(BaseDTO):
    api_property_name = "wiki_page"

    title: str
    body: Optional[str] = None
    published: Optional[bool] = None


class UpdatePageDTO(BaseDTO):
    api_property_name = "wiki_page"
    body_format = "json"

    title: Optional[str] = None
    body: Optional[str] = None
    published: Optional[bool] = None


class PagesClient(ResourceEndpoint[Page]):
    model = Page
    create_dto = CreatePageDTO
    update_dto = UpdatePageDTO
    path_template = "courses/{course_id}/pages"


class ReadOnlyClient(ResourceEndpoint[Page]):
    model = Page
    path_template = "courses/{course_id}/pages"


@pytest.fixture
def pages(http):
    return PagesClient(http, course_id=42)


class TestBaseEndpointClient:
    """Tests for the BaseEndpointClient class."""

    def test_build_path(self, http):
        client = BaseEndpointClient(http, "/courses/")
        assert client.base_path == "courses"
        assert client._build_path() == "courses"
        assert client._build_path(1, "modules", None) == "courses/1/modules"


class TestContext:
    """Tests for path placeholders and scoping."""

    def test_context_fields(self):
        assert PagesClient.context_fields() == ["course_id"]

    def test_missing_context_raises_before_any_request(self, http, respx_mock):
        """Test that an unscoped relationship call never reaches the network."""
        client = PagesClient(http)

        with pytest.raises(ContextError) as exc_info:
            client.get()
        assert exc_info.value.missing == ["course_id"]
        assert len(respx_mock.calls) == 0

        with pytest.raises(ContextError):
            client.create({"title": "Syllabus"})
        assert len(respx_mock.calls) == 0

    def test_with_context(self, http):
        client = PagesClient(http)
        scoped = client.with_context(course_id=42)
        assert isinstance(scoped, PagesClient)
        assert scoped.base_path == "courses/42/pages"
        assert client.context == {}

    def test_none_values_are_not_context(self, http):
        assert PagesClient(http, course_id=None).missing_context() == ["course_id"]


class TestReadOperations:
    def test_find(self, pages, respx_mock):
        route = respx_mock.get(f"{PAGES_URL}/5").mock(
            return_value=json_response({"id": 5, "title": "Syllabus", "editing_roles": "teachers"})
        )

        page = pages.find(5, include=["body"])

        assert isinstance(page, Page)
        assert page.title == "Syllabus"
        assert page.model_extra == {"editing_roles": "teachers"}
        assert page.endpoint is pages
        assert route.calls.last.request.url.params.get_list("include[]") == ["body"]

    def test_find_missing(self, pages, respx_mock):
        respx_mock.get(f"{PAGES_URL}/5").mock(return_value=httpx.Response(404))

        with pytest.raises(NotFoundError):
            pages.find(5)

    def test_exists(self, pages, respx_mock):
        respx_mock.get(f"{PAGES_URL}/5").mock(return_value=json_response({"id": 5}))
        respx_mock.get(f"{PAGES_URL}/6").mock(return_value=httpx.Response(404))

        assert pages.exists(5)
        assert not pages.exists(6)

    def test_get_returns_first_page_only(self, pages, respx_mock):
        route = respx_mock.get(PAGES_URL).mock(
            return_value=json_response(
                [{"id": 1}, {"id": 2}],
                headers={"Link": link_header(PAGES_URL, current=1, next=2)},
            )
        )

        items = pages.get(per_page=2)

        assert [item.id for item in items] == [1, 2]
        assert route.call_count == 1

    def test_all_follows_pages(self, pages, respx_mock):
        route = respx_mock.get(PAGES_URL).mock(
            side_effect=[
                json_response([{"id": 1}, {"id": 2}],
                              headers={"Link": link_header(PAGES_URL, current=1, next=2)}),
                json_response([{"id": 3}], headers={"Link": link_header(PAGES_URL, current=2)}),
            ]
        )

        items = pages.all()

        assert [item.id for item in items] == [1, 2, 3]
        assert all(item.endpoint is pages for item in items)
        assert route.call_count == 2

    def test_iterate_is_lazy(self, pages, respx_mock):
        route = respx_mock.get(PAGES_URL).mock(
            side_effect=[
                json_response([{"id": 1}], headers={"Link": link_header(PAGES_URL, next=2)}),
                json_response([{"id": 2}]),
            ]
        )

        iterator = pages.iterate()
        assert next(iterator).id == 1
        assert route.call_count == 1
        assert next(iterator).id == 2
        assert route.call_count == 2

    def test_paginate(self, pages, respx_mock):
        route = respx_mock.get(PAGES_URL).mock(
            side_effect=[
                json_response(
                    [{"id": 3}, {"id": 4}],
                    headers={
                        "Link": link_header(PAGES_URL, current=2, next=3, prev=1, last=3),
                        "X-Total-Count": "5",
                    },
                ),
                json_response([{"id": 5}], headers={"Link": link_header(PAGES_URL, current=3, last=3)}),
            ]
        )

        result = pages.paginate(page=2, per_page=2)

        params = route.calls[0].request.url.params
        assert params["page"] == "2"
        assert params["per_page"] == "2"
        assert isinstance(result, PaginationResult)
        assert result.current_page == 2
        assert result.total_pages == 3
        assert result.total_count == 5
        assert [item.id for item in result.data] == [3, 4]

        following = result.get_next()
        assert [item.id for item in following.data] == [5]
        assert following.is_last_page()
        assert isinstance(following.data[0], Page)

    def test_aliases(self, pages, respx_mock):
        respx_mock.get(PAGES_URL).mock(return_value=json_response([{"id": 1}]))
        respx_mock.get(f"{PAGES_URL}/1").mock(return_value=json_response({"id": 1}))

        assert [p.id for p in pages.list()] == [1]
        assert [p.id for p in pages.fetch_all()] == [1]
        assert [p.id for p in pages.get_all()] == [1]
        assert [p.id for p in pages.fetch_all_pages()] == [1]
        assert pages.fetch_page().count == 1
        assert pages.get_paginated().count == 1
        assert pages.one(1).id == 1
        assert pages.get_one(1).id == 1

    def test_hydrate_rejects_non_objects(self, pages):
        with pytest.raises(CanvasClientError):
            pages.hydrate(["not", "an", "object"])


class TestWriteOperations:
    def test_create_sends_multipart(self, pages, respx_mock):
        route = respx_mock.post(PAGES_URL).mock(
            return_value=json_response({"id": 9, "title": "Syllabus", "published": False})
        )

        page = pages.create(CreatePageDTO(title="Syllabus", published=False))

        assert page.id == 9
        assert page.endpoint is pages
        assert form_fields(route.calls.last.request) == {
            "wiki_page[title]": ["Syllabus"],
            "wiki_page[published]": ["false"],
        }

    def test_create_validates_dicts(self, pages, respx_mock):
        """Test that an invalid body is rejected before any request."""
        with pytest.raises(ValidationError) as exc_info:
            pages.create({"body": "no title"})
        assert "title" in str(exc_info.value)
        assert len(respx_mock.calls) == 0

    def test_create_server_validation_error(self, pages, respx_mock):
        respx_mock.post(PAGES_URL).mock(
            return_value=json_response({"errors": {"title": [{"message": "too long"}]}}, 422)
        )

        with pytest.raises(UnprocessableEntityError) as exc_info:
            pages.create({"title": "x" * 300})
        assert exc_info.value.message == "title: too long"

    def test_update_sends_json(self, pages, respx_mock):
        route = respx_mock.put(f"{PAGES_URL}/9").mock(
            return_value=json_response({"id": 9, "title": "Course Syllabus"})
        )

        page = pages.update(9, {"title": "Course Syllabus"})

        assert page.title == "Course Syllabus"
        assert json.loads(route.calls.last.request.content) == {
            "wiki_page": {"title": "Course Syllabus"}
        }

    def test_unsupported_operation(self, http):
        with pytest.raises(DTOError):
            ReadOnlyClient(http, course_id=42).create({"title": "x"})

    def test_delete(self, pages, respx_mock):
        respx_mock.delete(f"{PAGES_URL}/9").mock(return_value=json_response({"id": 9}))
        assert pages.delete(9) == {"id": 9}


class TestResource:
    """Tests for the Resource active-record methods."""

    def test_unbound_resource(self):
        with pytest.raises(CanvasClientError):
            Page(title="Loose").save()

    def test_to_dict(self):
        page = Page(id=1, title="Syllabus")
        assert page.to_dict(exclude_none=True) == {"id": 1, "title": "Syllabus"}

    def test_save_new_resource_creates(self, pages, respx_mock):
        route = respx_mock.post(PAGES_URL).mock(
            return_value=json_response({"id": 11, "title": "New"})
        )

        page = Page(title="New").bind(pages)
        result = page.save()

        assert result is page
        assert page.id == 11
        assert form_fields(route.calls.last.request) == {"wiki_page[title]": ["New"]}

    def test_save_existing_resource_updates(self, pages, respx_mock):
        respx_mock.get(f"{PAGES_URL}/5").mock(
            return_value=json_response({"id": 5, "title": "Old", "body": "text"})
        )
        route = respx_mock.put(f"{PAGES_URL}/5").mock(
            return_value=json_response({"id": 5, "title": "Renamed", "body": "text"})
        )

        page = pages.find(5)
        page.title = "Renamed"
        page.save()

        assert page.title == "Renamed"
        assert json.loads(route.calls.last.request.content) == {
            "wiki_page": {"title": "Renamed", "body": "text"}
        }

    def test_refresh(self, pages, respx_mock):
        respx_mock.get(f"{PAGES_URL}/5").mock(
            side_effect=[
                json_response({"id": 5, "title": "Old"}),
                json_response({"id": 5, "title": "Fresh"}),
            ]
        )

        page = pages.find(5)
        page.refresh()

        assert page.title == "Fresh"

    def test_delete(self, pages, respx_mock):
        route = respx_mock.delete(f"{PAGES_URL}/5").mock(
            return_value=json_response({"id": 5, "workflow_state": "deleted"})
        )

        page = pages.hydrate({"id": 5})
        assert page.delete() == {"id": 5, "workflow_state": "deleted"}
        assert route.call_count == 1


class Rating(BaseModel):
    model_config = ConfigDict(extra="forbid")

    points: float


class CriterionDTO(BaseDTO):
    description: str
    ratings: List[Rating] = []


class TestFitToModel:
    """Tests for trimming response data down to a request model."""

    def test_drops_undeclared_keys(self):
        data = {"description": "Clarity", "id": "c1", "ratings": []}
        assert fit_to_model(data, CriterionDTO) == {"description": "Clarity", "ratings": []}

    def test_recurses_into_nested_lists(self):
        data = {"description": "Clarity", "ratings": [{"points": 5, "id": "r1"}]}

        fitted = fit_to_model(data, CriterionDTO)

        assert fitted["ratings"] == [{"points": 5}]
        assert CriterionDTO.model_validate(fitted).ratings[0].points == 5

    def test_without_model(self):
        assert fit_to_model({"a": 1}, None) == {"a": 1}
