"""MCP server exposing GitLab REST operations as tools over stdio."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolRequest, CallToolResult, ServerResult, TextContent, Tool

from gitlab_mcp import tool_handlers
from gitlab_mcp.client import GitLabClient
from gitlab_mcp.config import DEFAULT_MAX_RESPONSE_BYTES, Settings
from gitlab_mcp.errors import ConfigError
from gitlab_mcp.operations import default_catalog
from gitlab_mcp.tools import build_tools

server = Server("gitlab-mcp-server")

logger = logging.getLogger("gitlab_mcp")

CATALOG = default_catalog()

# Bound by run(); handlers see the same client for the whole process.
_client: GitLabClient | None = None
_max_response_bytes = DEFAULT_MAX_RESPONSE_BYTES


def _configure_logging() -> None:
    level = os.environ.get("GITLAB_MCP_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _enforce_response_limit(content: list[TextContent], tool_name: str) -> list[TextContent]:
    """Apply circuit-breaker behavior for oversized protocol responses."""
    return tool_handlers.enforce_response_limit(
        content,
        tool_name,
        max_response_bytes=_max_response_bytes,
        logger=logger,
    )


@server.list_tools()
async def list_tools() -> list[Tool]:
    """Describe every registered GitLab tool."""
    return build_tools(CATALOG)


def _build_tool_handler_deps() -> tool_handlers.ToolHandlerDeps:
    if _client is None:
        raise RuntimeError("GitLab client is not initialized; call run() first")
    return tool_handlers.ToolHandlerDeps(catalog=CATALOG, client=_client)


async def handle_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """Dispatch a tool invocation with validation and stable error payloads.

    Separated from ``call_tool`` so tests can invoke tool logic without the
    MCP decorator.
    """
    return await tool_handlers.handle_tool(
        name,
        arguments,
        deps=_build_tool_handler_deps(),
        logger=logger,
    )


async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """MCP tool handler -- delegates to ``handle_tool`` with response limit."""
    return _enforce_response_limit(await handle_tool(name, arguments), name)


async def _handle_call_tool_request(request: CallToolRequest) -> ServerResult:
    # Registered directly: the SDK decorator turns absent arguments into {}.
    params = request.params
    content = await call_tool(params.name, params.arguments)
    return ServerResult(CallToolResult(content=content, isError=False))


server.request_handlers[CallToolRequest] = _handle_call_tool_request


def _install_sigterm(task: asyncio.Task[Any], stopping: asyncio.Event) -> bool:
    loop = asyncio.get_running_loop()

    def _on_sigterm() -> None:
        logger.info("SIGTERM received; shutting down")
        stopping.set()
        task.cancel()

    try:
        loop.add_signal_handler(signal.SIGTERM, _on_sigterm)
    except (NotImplementedError, RuntimeError):
        # No loop signal support (Windows, non-main thread).
        return False
    return True


async def run(settings: Settings) -> None:
    """Serve MCP over stdio until the client disconnects or SIGTERM arrives."""
    global _client, _max_response_bytes

    task = asyncio.current_task()
    stopping = asyncio.Event()
    installed = task is not None and _install_sigterm(task, stopping)

    client = GitLabClient(settings)
    _client = client
    _max_response_bytes = settings.max_response_bytes
    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("GitLab MCP server running on stdio (%s)", settings.api_url)
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    except asyncio.CancelledError:
        if not stopping.is_set():
            raise
    finally:
        if installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)
        _client = None
        await client.aclose()


def main() -> None:
    """CLI entry point: load settings, then serve until shutdown."""
    _configure_logging()
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    from gitlab_mcp import __version__

    logger.info("Starting gitlab-mcp-server %s", __version__)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted; exiting")
    except Exception:
        logger.exception("Fatal error in server")
        sys.exit(1)


if __name__ == "__main__":
    main()
