from __future__ import annotations

import importlib
import inspect
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from gitlab_mcp.client import GitLabClient
from gitlab_mcp.config import Settings

API_URL = "https://gitlab.example.com/api/v4"
API_PATH = "/api/v4"

Responder = Callable[[httpx.Request], Any]


def api_path(request: httpx.Request) -> str:
    """Encoded request path without the API root or query string."""
    raw = request.url.raw_path.decode().split("?", 1)[0]
    return raw[len(API_PATH) :] if raw.startswith(API_PATH) else raw


class FakeGitLab:
    """Scripted GitLab stand-in for ``httpx.MockTransport``.

    Queue responses with :meth:`add`; each request consumes the first queued
    response whose method and path match. Unmatched requests fail the test.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, Responder]] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
        text: str | None = None,
    ) -> None:
        def respond(_request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text, headers=headers)
            if json_body is None:
                return httpx.Response(status, headers=headers)
            return httpx.Response(status, json=json_body, headers=headers)

        self._routes.append((method, path, respond))

    def add_handler(self, method: str, path: str, handler: Responder) -> None:
        self._routes.append((method, path, handler))

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = api_path(request)
        for index, (method, route, respond) in enumerate(self._routes):
            if method == request.method and route == path:
                del self._routes[index]
                result = respond(request)
                if inspect.isawaitable(result):
                    result = await result
                return result
        raise AssertionError(f"unexpected request: {request.method} {path}")

    def calls(self) -> list[tuple[str, str]]:
        """``(method, path)`` for every request seen, paths relative to the API root."""
        return [(request.method, api_path(request)) for request in self.requests]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def settings() -> Settings:
    return Settings(token="glpat-test", api_url=API_URL, timeout=1.0)


@pytest.fixture
def gitlab() -> FakeGitLab:
    return FakeGitLab()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest_asyncio.fixture
async def client(
    settings: Settings, gitlab: FakeGitLab, sleeps: list[float]
) -> AsyncIterator[GitLabClient]:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    async with GitLabClient(
        settings, transport=httpx.MockTransport(gitlab), sleep=fake_sleep
    ) as gitlab_client:
        yield gitlab_client


@pytest.fixture
def server_client(monkeypatch: pytest.MonkeyPatch, client: GitLabClient) -> GitLabClient:
    """Bind ``client`` as the process-wide client used by ``gitlab_mcp.server``."""
    monkeypatch.setattr(importlib.import_module("gitlab_mcp.server"), "_client", client)
    return client


def user_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": 7,
        "username": "octo",
        "name": "Octo Cat",
        "avatar_url": None,
        "web_url": "https://gitlab.example.com/octo",
    }
    payload.update(overrides)
    return payload


def project_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": 42,
        "name": "demo",
        "path_with_namespace": "octo/demo",
        "visibility": "private",
        "owner": {**user_payload(), "state": "active"},
        "web_url": "https://gitlab.example.com/octo/demo",
        "description": None,
        "ssh_url_to_repo": "git@gitlab.example.com:octo/demo.git",
        "http_url_to_repo": "https://gitlab.example.com/octo/demo.git",
        "created_at": "2024-01-01T00:00:00Z",
        "last_activity_at": "2024-01-02T00:00:00Z",
        "default_branch": "main",
    }
    payload.update(overrides)
    return payload


def issue_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": 1001,
        "iid": 5,
        "project_id": 42,
        "title": "Broken build",
        "description": "CI fails on main",
        "state": "opened",
        "author": user_payload(),
        "assignees": [],
        "labels": [],
        "milestone": None,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
        "closed_at": None,
        "web_url": "https://gitlab.example.com/octo/demo/-/issues/5",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payloads() -> Any:
    """Factories for realistic GitLab payloads."""

    class _Payloads:
        user = staticmethod(user_payload)
        project = staticmethod(project_payload)
        issue = staticmethod(issue_payload)

    return _Payloads
