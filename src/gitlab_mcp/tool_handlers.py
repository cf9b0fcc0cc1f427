"""MCP protocol-layer tool dispatch for gitlab_mcp.server."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, TextContent

from gitlab_mcp.client import GitLabClient
from gitlab_mcp.errors import (
    ERROR_NAMES,
    ArgumentValidationError,
    GitLabApiError,
    ResponseValidationError,
)
from gitlab_mcp.telemetry import generate_request_id, set_span_attribute, trace_span
from gitlab_mcp.tools import ToolDef
from gitlab_mcp.validation import dump_response, parse_arguments


@dataclass(frozen=True)
class ToolHandlerDeps:
    """Everything dispatch needs, fixed for the process lifetime."""

    catalog: Mapping[str, ToolDef]
    client: GitLabClient


def json_text(payload: Any) -> list[TextContent]:
    """Serialize payload into the MCP text transport format."""
    return [TextContent(type="text", text=json.dumps(payload, indent=2, ensure_ascii=True))]


def error_payload(code: int, message: str, request_id: str, **details: Any) -> dict[str, Any]:
    """Build the uniform error envelope body."""
    payload: dict[str, Any] = {
        "status": "error",
        "code": code,
        "error": ERROR_NAMES[code],
        "message": message,
        "request_id": request_id,
    }
    payload.update(details)
    return payload


def enforce_response_limit(
    content: list[TextContent],
    tool_name: str,
    *,
    max_response_bytes: int,
    logger: logging.Logger,
) -> list[TextContent]:
    """Replace oversized MCP responses with a compact error payload."""
    serialized = json.dumps(
        [{"type": item.type, "text": item.text} for item in content],
        ensure_ascii=True,
    )
    total_bytes = len(serialized)
    if total_bytes <= max_response_bytes:
        return content

    logger.warning(
        "Response payload exceeded limit for %s: %d bytes (max %d)",
        tool_name,
        total_bytes,
        max_response_bytes,
    )
    return json_text(
        {
            "status": "error",
            "message": "Response payload too large",
            "circuit_breaker": {
                "triggered": True,
                "original_bytes": total_bytes,
                "max_bytes": max_response_bytes,
                "tool": tool_name[:200],
            },
        }
    )


def _failure_details(exc: Exception) -> dict[str, Any]:
    details: dict[str, Any] = {"kind": type(exc).__name__}
    if isinstance(exc, GitLabApiError):
        details["http_status"] = exc.status
    if isinstance(exc, ResponseValidationError):
        details["issues"] = exc.issues
    return details


async def handle_tool(
    name: str,
    arguments: dict[str, Any] | None,
    *,
    deps: ToolHandlerDeps,
    logger: logging.Logger,
) -> list[TextContent]:
    """Route one tool call and wrap the outcome in a success or error envelope.

    Shape problems (missing arguments, unknown tool, invalid arguments) are
    answered before any GitLab request is made. Failures raised while the
    handler runs are reported as internal errors with the original message.

    Args:
        name: MCP tool name, e.g. ``create_issue``.
        arguments: Raw argument payload, or None when the client sent none.
    """
    request_id = generate_request_id()
    with trace_span(
        f"handle_tool/{name}",
        attributes={"gitlab_mcp.tool": name, "gitlab_mcp.request_id": request_id},
    ) as span:

        def _fail(code: int, message: str, **details: Any) -> list[TextContent]:
            set_span_attribute(span, "gitlab_mcp.outcome", ERROR_NAMES[code])
            return json_text(error_payload(code, message, request_id, **details))

        if arguments is None:
            logger.warning("Tool %s called without arguments", name)
            return _fail(INVALID_PARAMS, "Arguments are required")

        tool = deps.catalog.get(name)
        if tool is None:
            logger.warning("Unknown tool requested: %s", name)
            return _fail(METHOD_NOT_FOUND, f"Unknown tool: {name}")

        try:
            args = parse_arguments(name, tool.arguments, arguments)
        except ArgumentValidationError as exc:
            logger.warning("Validation error for %s: %s", name, exc)
            return _fail(INVALID_PARAMS, str(exc), issues=exc.issues)

        try:
            raw = await tool.handler(deps.client, args)
            result = dump_response(tool.result, raw)
        except Exception as exc:
            logger.error(
                "Tool %s failed: %s", name, exc, extra={"request_id": request_id, "tool": name}
            )
            return _fail(INTERNAL_ERROR, str(exc), **_failure_details(exc))

        set_span_attribute(span, "gitlab_mcp.outcome", "success")
        logger.info("Tool %s completed", name, extra={"request_id": request_id, "tool": name})
        return json_text(result)
