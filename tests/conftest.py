"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import TIMESHEET_PAGE_SIZE
from core.kimai_client import KimaiClient

BASE_URL = "https://kimai.test/api"


def make_timesheet(entry_id: int, **overrides) -> dict:
    """Timesheet payload shaped like GET /timesheets (non-full mode)."""
    return {
        "id": entry_id,
        "project": 10,
        "user": 1,
        "activity": 1,
        "begin": "2025-02-03T09:00:00+0000",
        "end": "2025-02-03T10:30:00+0000",
        "duration": 5400,
        "description": f"Task {entry_id}",
        "billable": True,
        **overrides,
    }


class FakeKimai:
    """
    In-memory Kimai API served through httpx.MockTransport.

    Every request is recorded. Paths in `fail_paths` and timesheet pages in
    `fail_pages` answer with HTTP 500.
    """

    def __init__(self):
        self.customers: list[dict] = []
        self.projects: list[dict] = []
        self.users: dict[int, dict] = {}
        self.activities: dict[int, dict] = {}
        self.timesheets: dict[tuple[str, int], list[dict]] = {}
        self.fail_paths: set[str] = set()
        self.fail_pages: set[int] = set()
        self.requests: list[httpx.Request] = []

    def client(self) -> KimaiClient:
        return KimaiClient(BASE_URL, "test-token", transport=httpx.MockTransport(self.handle))

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/api") for r in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    def timesheet_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/timesheets")]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")

        if path in self.fail_paths:
            return httpx.Response(500)

        if path == "/customers":
            return httpx.Response(200, json=self.customers)
        if path == "/projects":
            return httpx.Response(200, json=self.projects)
        if path == "/timesheets":
            return self._timesheets_page(request.url.params)

        collection, _, raw_id = path.strip("/").partition("/")
        record = self._find(collection, int(raw_id)) if raw_id.isdigit() else None
        if record is None:
            return httpx.Response(404, json={"code": 404, "message": "Not found"})
        return httpx.Response(200, json=record)

    def _find(self, collection: str, record_id: int) -> dict | None:
        if collection in ("customers", "projects"):
            return next((r for r in getattr(self, collection) if r["id"] == record_id), None)
        if collection == "users":
            return self.users.get(record_id)
        if collection == "activities":
            return self.activities.get(record_id)
        return None

    def _timesheets_page(self, params) -> httpx.Response:
        page = int(params["page"])
        if page in self.fail_pages:
            return httpx.Response(500)

        kind = "customer" if "customer" in params else "project"
        entries = self.timesheets.get((kind, int(params[kind])), [])
        start = (page - 1) * TIMESHEET_PAGE_SIZE
        return httpx.Response(200, json=entries[start : start + TIMESHEET_PAGE_SIZE])


@pytest.fixture
def fake_kimai():
    """Kimai instance with two customers, two projects, one user and one activity."""
    kimai = FakeKimai()
    kimai.customers = [
        {"id": 1, "name": "Acme Corp"},
        {"id": 3, "name": "Gamma Inc"},
    ]
    kimai.projects = [
        {"id": 10, "name": "Website", "customer": 1},
        {"id": 11, "name": "Mobile App", "customer": 3},
    ]
    kimai.users = {1: {"id": 1, "username": "jdoe", "alias": "Jane Doe"}}
    kimai.activities = {1: {"id": 1, "name": "Development", "comment": "Feature work"}}
    return kimai


@pytest.fixture
def sample_timesheets():
    """Three timesheets on project 'Website'."""
    return [make_timesheet(i) for i in range(1, 4)]
