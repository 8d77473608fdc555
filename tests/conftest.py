"""Pytest configuration and fixtures for canvas-client tests."""

from typing import Any, Dict, List, Optional

import httpx
import pytest
import respx

from canvas_client.http import HTTPClient
from canvas_client.settings import CanvasSettings

BASE_URL = "https://canvas.test"
API_ROOT = f"{BASE_URL}/api/v1"


# ============================================================================
# Response Helpers
# ============================================================================


def link_header(base: str, **relations: int) -> str:
    """Build a Canvas ``Link`` header, e.g. ``link_header(url, next=2, last=3)``."""
    return ",".join(
        f'<{base}?page={page}&per_page=2>; rel="{rel}"'
        for rel, page in relations.items()
    )


def json_response(
    data: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    return httpx.Response(status_code, json=data, headers=headers or {})


def form_fields(request: httpx.Request) -> Dict[str, List[str]]:
    """Decode the names and values of a multipart request."""
    boundary = request.headers["Content-Type"].split("boundary=")[1].encode()
    fields: Dict[str, List[str]] = {}
    for part in request.content.split(b"--" + boundary):
        if b'name="' not in part:
            continue
        headers, _, value = part.partition(b"\r\n\r\n")
        name = headers.split(b'name="')[1].split(b'"')[0].decode()
        fields.setdefault(name, []).append(value.rstrip(b"\r\n").decode())
    return fields


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep CANVAS_* variables of the developer machine out of the tests."""
    for name in ("CANVAS_BASE_URL", "CANVAS_API_KEY", "CANVAS_ACCOUNT_ID", "CANVAS_PROFILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    """Settings with throttling and backoff waits switched off."""
    return CanvasSettings(
        base_url=BASE_URL,
        api_key="test-key",
        rate_limit_enabled=False,
        retry_jitter=False,
        retry_delay=0,
        _env_file=None,
    )


@pytest.fixture
def sleeps():
    """Delays requested by the HTTP client instead of sleeping."""
    return []


@pytest.fixture
def http(settings, sleeps):
    client = HTTPClient(settings, sleep=sleeps.append)
    yield client
    client.close()


@pytest.fixture
def respx_mock():
    """Intercept all httpx traffic; unmatched requests fail the test."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def course_data():
    return {
        "id": 42,
        "name": "Intro to Testing",
        "course_code": "TEST-101",
        "workflow_state": "available",
        "account_id": 1,
        "created_at": "2024-01-10T08:00:00Z",
    }


@pytest.fixture
def module_data():
    return {
        "id": 7,
        "name": "Week 1",
        "position": 1,
        "unlock_at": None,
        "require_sequential_progress": False,
        "items_count": 3,
        "published": True,
    }
