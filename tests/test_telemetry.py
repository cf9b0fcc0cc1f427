"""Tests for gitlab_mcp.telemetry module."""

import importlib
import uuid
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from gitlab_mcp.client import GitLabClient
from gitlab_mcp.telemetry import (
    _get_tracer,
    generate_request_id,
    set_span_attribute,
    trace_span,
)

from conftest import FakeGitLab


def _mock_tracer() -> tuple[MagicMock, MagicMock]:
    mock_span = MagicMock()
    mock_tracer = MagicMock()
    mock_context = mock_tracer.start_as_current_span.return_value
    mock_context.__enter__.return_value = mock_span
    mock_context.__exit__.return_value = None
    return mock_tracer, mock_span


class TestGenerateRequestId:
    def test_returns_valid_uuid4(self) -> None:
        rid = generate_request_id()
        parsed = uuid.UUID(rid, version=4)
        assert str(parsed) == rid

    def test_unique_per_call(self) -> None:
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100


class TestGetTracer:
    def test_returns_none_when_otel_missing(self) -> None:
        with patch("gitlab_mcp.telemetry._HAS_OTEL", False):
            assert _get_tracer() is None

    def test_returns_tracer_when_otel_available(self) -> None:
        mock_tracer = MagicMock()
        with (
            patch("gitlab_mcp.telemetry._HAS_OTEL", True),
            patch("gitlab_mcp.telemetry.trace") as mock_trace,
        ):
            mock_trace.get_tracer.return_value = mock_tracer
            assert _get_tracer() is mock_tracer
            mock_trace.get_tracer.assert_called_once_with("gitlab_mcp")

    def test_handles_non_import_error_during_import(self, monkeypatch: Any) -> None:
        telemetry = importlib.import_module("gitlab_mcp.telemetry")
        original_import_module = importlib.import_module

        with monkeypatch.context() as patch_context:

            def broken_import(name: str, package: str | None = None) -> Any:
                if name == "opentelemetry.trace":
                    raise AttributeError("broken opentelemetry install")
                return original_import_module(name, package)

            patch_context.setattr(importlib, "import_module", broken_import)
            reloaded = importlib.reload(telemetry)

        assert reloaded._HAS_OTEL is False
        assert reloaded._get_tracer() is None
        importlib.reload(telemetry)


class TestTraceSpan:
    def test_yields_none_when_no_otel(self) -> None:
        with patch("gitlab_mcp.telemetry._HAS_OTEL", False), trace_span("test") as span:
            assert span is None

    def test_creates_span_when_otel_available(self) -> None:
        mock_tracer, mock_span = _mock_tracer()

        with (
            patch("gitlab_mcp.telemetry._get_tracer", return_value=mock_tracer),
            trace_span("test", attributes={"key": "val"}) as span,
        ):
            assert span is mock_span
        mock_tracer.start_as_current_span.assert_called_once_with(
            "test", attributes={"key": "val"}
        )

    def test_trace_span_catches_otel_exception(self) -> None:
        mock_tracer = MagicMock()
        mock_tracer.start_as_current_span.side_effect = RuntimeError("otel broken")

        with (
            patch("gitlab_mcp.telemetry._get_tracer", return_value=mock_tracer),
            trace_span("test") as span,
        ):
            assert span is None

    def test_exceptions_pass_through_the_span(self) -> None:
        mock_tracer, _span = _mock_tracer()
        context = mock_tracer.start_as_current_span.return_value

        with (
            patch("gitlab_mcp.telemetry._get_tracer", return_value=mock_tracer),
            pytest.raises(KeyError),
            trace_span("test"),
        ):
            raise KeyError("boom")

        exc_type = context.__exit__.call_args.args[0]
        assert exc_type is KeyError


class TestSetSpanAttribute:
    def test_ignores_missing_span(self) -> None:
        set_span_attribute(None, "key", "val")

    def test_swallows_span_errors(self) -> None:
        span = MagicMock()
        span.set_attribute.side_effect = RuntimeError("closed")
        set_span_attribute(span, "key", "val")
        span.set_attribute.assert_called_once_with("key", "val")


@pytest.mark.asyncio
async def test_remote_calls_open_a_span_per_logical_request(
    client: GitLabClient, gitlab: FakeGitLab
) -> None:
    mock_tracer, mock_span = _mock_tracer()
    gitlab.add("GET", "/projects/1", status=503, text="unavailable")
    gitlab.add("GET", "/projects/1", {"id": 1})

    with patch("gitlab_mcp.telemetry._get_tracer", return_value=mock_tracer):
        await client.get_json("/projects/1")

    mock_tracer.start_as_current_span.assert_called_once()
    assert mock_tracer.start_as_current_span.call_args.args[0] == "gitlab/GET"
    mock_span.set_attribute.assert_any_call("gitlab_mcp.attempts", 2)
    mock_span.set_attribute.assert_any_call("http.status_code", 200)
