"""Shared test fixtures."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

WEBHOOK_SECRET = "test-secret"


# Minimal stand-ins for the PyGitHub objects the client returns


@dataclass
class FakeLabel:
    name: str


@dataclass
class FakeProject:
    id: int
    name: str
    state: str = "open"


@dataclass
class FakeColumn:
    id: int
    name: str


@dataclass
class FakeCard:
    id: int
    content_url: str | None = None


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch):
    """Set required env vars for tests."""
    monkeypatch.setenv("RELEASE_BOT_GITHUB_TOKEN", "ghp_test_token")
    monkeypatch.setenv("RELEASE_BOT_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.delenv("RELEASE_BOT_DEBUG", raising=False)
    monkeypatch.delenv("RELEASE_BOT_PORT", raising=False)
    monkeypatch.delenv("RELEASE_BOT_LOG_LEVEL", raising=False)


@pytest.fixture
def github():
    """Mock GitHubClient with every API call stubbed out."""
    from releasebot.github.client import GitHubClient

    return AsyncMock(spec=GitHubClient)


@pytest.fixture
def make_client(github):
    """Factory for started test clients wired to the mock GitHub client.

    Settings are read from the environment at startup, so set env vars
    before calling it.
    """
    from releasebot.github.webhooks import get_github
    from releasebot.main import create_app

    with ExitStack() as stack:

        def _factory(settings=None) -> TestClient:
            app = create_app(settings)
            app.dependency_overrides[get_github] = lambda: github
            return stack.enter_context(TestClient(app))

        yield _factory


@pytest.fixture
def client(make_client):
    """Started FastAPI test client wired to the mock GitHub client."""
    return make_client()


def issues_payload(
    action: str,
    *,
    number: int = 42,
    label: str | None = None,
    pull_request: bool = False,
) -> dict:
    """Build an ``issues`` webhook payload."""
    issue = {
        "id": 1000 + number,
        "number": number,
        "url": f"https://api.github.com/repos/docker/release-tracking/issues/{number}",
        "html_url": f"https://github.com/docker/release-tracking/issues/{number}",
        "title": "Backport fix",
        "labels": [],
    }
    if pull_request:
        issue["pull_request"] = {
            "url": f"https://api.github.com/repos/docker/release-tracking/pulls/{number}",
        }
    payload = {
        "action": action,
        "issue": issue,
        "repository": {
            "name": "release-tracking",
            "full_name": "docker/release-tracking",
            "owner": {"login": "docker"},
        },
        "sender": {"login": "octocat"},
    }
    if label is not None:
        payload["label"] = {"name": label, "color": "ededed"}
    return payload


@pytest.fixture
def make_event():
    """Factory for parsed IssuesEvent objects."""
    from releasebot.models import IssuesEvent

    def _factory(action: str, **kwargs) -> IssuesEvent:
        return IssuesEvent.model_validate(issues_payload(action, **kwargs))

    return _factory


@pytest.fixture
def make_payload():
    """Factory for raw ``issues`` webhook payloads."""
    return issues_payload
