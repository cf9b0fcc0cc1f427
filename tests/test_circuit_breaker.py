import importlib
import json
import logging
from typing import Any

import pytest

from gitlab_mcp.client import GitLabClient
from gitlab_mcp.tool_handlers import enforce_response_limit, json_text

from conftest import FakeGitLab

server_module = importlib.import_module("gitlab_mcp.server")


def _content_size_bytes(content: list[Any]) -> int:
    return len(
        json.dumps(
            [{"type": item.type, "text": item.text} for item in content],
            ensure_ascii=True,
        )
    )


@pytest.mark.asyncio
async def test_response_under_limit_passes_through(
    server_client: GitLabClient, gitlab: FakeGitLab, payloads: Any, monkeypatch: Any
) -> None:
    monkeypatch.setattr(server_module, "_max_response_bytes", 10_000)
    gitlab.add("GET", "/projects/1/issues/5", payloads.issue())

    result = await server_module.call_tool("get_issue", {"project_id": "1", "issue_iid": 5})
    payload = json.loads(result[0].text)

    assert payload["iid"] == 5
    assert "circuit_breaker" not in payload


@pytest.mark.asyncio
async def test_oversized_response_replaced_with_circuit_breaker(
    server_client: GitLabClient, gitlab: FakeGitLab, payloads: Any, monkeypatch: Any
) -> None:
    monkeypatch.setattr(server_module, "_max_response_bytes", 1_000)
    gitlab.add("GET", "/projects/1/issues/5", payloads.issue(description="x" * 2_000))

    result = await server_module.call_tool("get_issue", {"project_id": "1", "issue_iid": 5})
    payload = json.loads(result[0].text)

    assert payload["status"] == "error"
    assert payload["message"] == "Response payload too large"
    assert payload["circuit_breaker"]["triggered"] is True
    assert payload["circuit_breaker"]["tool"] == "get_issue"
    assert payload["circuit_breaker"]["max_bytes"] == 1_000


@pytest.mark.asyncio
async def test_circuit_breaker_applies_to_list_results(
    server_client: GitLabClient, gitlab: FakeGitLab, payloads: Any, monkeypatch: Any
) -> None:
    monkeypatch.setattr(server_module, "_max_response_bytes", 1_000)
    gitlab.add("GET", "/projects/1/issues", [payloads.issue(iid=n) for n in range(1, 20)])

    result = await server_module.call_tool("get_issues", {"project_id": "1"})
    payload = json.loads(result[0].text)

    assert payload["circuit_breaker"]["tool"] == "get_issues"


def test_circuit_breaker_metadata_matches_original_payload_size() -> None:
    content = json_text({"items": ["y" * 500]})
    expected_bytes = _content_size_bytes(content)

    result = enforce_response_limit(
        content,
        "search_repositories",
        max_response_bytes=100,
        logger=logging.getLogger("test"),
    )
    payload = json.loads(result[0].text)

    assert payload["circuit_breaker"]["original_bytes"] == expected_bytes
    assert payload["circuit_breaker"]["max_bytes"] == 100


def test_tool_name_is_truncated_in_metadata() -> None:
    result = enforce_response_limit(
        json_text("z" * 500),
        "t" * 300,
        max_response_bytes=100,
        logger=logging.getLogger("test"),
    )
    payload = json.loads(result[0].text)

    assert len(payload["circuit_breaker"]["tool"]) == 200
