"""Test configuration and fixtures."""

import json
import logging
import os
from typing import Any, Dict, List, Optional

import httpx
import pytest

# Keep a developer's real credentials and .env out of the tests.
os.environ.pop("LINEAR_API_KEY", None)

from lnr.api.client import LinearClient  # noqa: E402
from lnr.config import get_settings  # noqa: E402

TEST_ENDPOINT = "https://linear.test/graphql"
TEST_API_KEY = "lin_api_test"


class FakeLinear:
    """Stand-in for the Linear GraphQL endpoint, served through httpx.MockTransport.

    Replies with ``{"data": data}`` unless responses were queued with
    ``queue()``, which are returned first, in order.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data or {}
        self.queued: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []

    def reply(self, data: Dict[str, Any]) -> None:
        self.data = data

    def queue(self, *responses: httpx.Response) -> None:
        self.queued.extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.queued:
            return self.queued.pop(0)
        return httpx.Response(200, json={"data": self.data})

    @property
    def payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def last_variables(self) -> Dict[str, Any]:
        return self.payloads[-1].get("variables", {})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def linear() -> FakeLinear:
    return FakeLinear()


@pytest.fixture
def make_client(linear):
    """Build a LinearClient wired to the fake endpoint. No backoff delay by default."""

    def _make(**kwargs) -> LinearClient:
        kwargs.setdefault("endpoint", TEST_ENDPOINT)
        kwargs.setdefault("retry_base_delay", 0.0)
        return LinearClient(TEST_API_KEY, transport=linear.transport(), **kwargs)

    return _make


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI installs its own root handler; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Raw API payloads
# ---------------------------------------------------------------------------

def team_payload(team_id: str = "team-1", key: str = "ENG", name: str = "Engineering"):
    return {"id": team_id, "name": name, "key": key}


def issue_payload(
    issue_id: str = "issue-1",
    identifier: str = "ENG-1",
    title: str = "Fix login",
    team: Optional[Dict[str, Any]] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    payload = {
        "id": issue_id,
        "identifier": identifier,
        "title": title,
        "description": None,
        "priority": 2,
        "estimate": None,
        "url": f"https://linear.app/acme/issue/{identifier}",
        "createdAt": "2024-03-01T10:00:00.000Z",
        "updatedAt": "2024-03-02T10:00:00.000Z",
        "dueDate": None,
        "state": None,
        "assignee": None,
        "team": team or team_payload(),
        "project": None,
        "labels": {"nodes": []},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_issue():
    return issue_payload


@pytest.fixture
def make_team():
    return team_payload
