"""Tool descriptors and MCP tool listings for the GitLab server.

Every operation is described once by a :class:`ToolDef` that pairs its input
model, its response contract and its handler coroutine. The MCP ``inputSchema``
is generated from the input model.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp.types import Tool
from pydantic import BaseModel

if TYPE_CHECKING:
    from gitlab_mcp.client import GitLabClient

HandlerFn = Callable[["GitLabClient", Any], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDef:
    """One invocable GitLab operation."""

    name: str
    description: str
    arguments: type[BaseModel]
    result: Any  # Model class or typing construct, e.g. list[GitLabIssue]
    handler: HandlerFn


# =============================================================================
# Catalog construction
# =============================================================================


def build_catalog(*groups: Iterable[ToolDef]) -> dict[str, ToolDef]:
    """Merge tool groups into a name-keyed catalog.

    Raises:
        ValueError: If two tools share a name.
    """
    catalog: dict[str, ToolDef] = {}
    for group in groups:
        for tool in group:
            if tool.name in catalog:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            catalog[tool.name] = tool
    return catalog


# =============================================================================
# Schema generation
# =============================================================================


def _strip_titles(node: Any) -> Any:
    """Drop pydantic's generated ``title`` keywords from a schema tree."""
    if isinstance(node, list):
        return [_strip_titles(item) for item in node]
    if not isinstance(node, dict):
        return node
    stripped: dict[str, Any] = {}
    for key, value in node.items():
        if key == "title" and isinstance(value, str):
            continue
        if key in ("properties", "$defs") and isinstance(value, dict):
            # Keys here are field or model names, not keywords.
            stripped[key] = {name: _strip_titles(sub) for name, sub in value.items()}
        else:
            stripped[key] = _strip_titles(value)
    return stripped


def _flatten_optional(prop: dict[str, Any]) -> dict[str, Any]:
    """Turn ``anyOf: [X, null]`` with a null default into plain ``X``."""
    if prop.get("default", ...) is None:
        prop = {key: value for key, value in prop.items() if key != "default"}
    any_of = prop.get("anyOf")
    if not any_of:
        return prop
    non_null = [option for option in any_of if option != {"type": "null"}]
    if len(non_null) == len(any_of):
        return prop
    flattened = {key: value for key, value in prop.items() if key != "anyOf"}
    if len(non_null) == 1:
        flattened.update(non_null[0])
    else:
        flattened["anyOf"] = non_null
    return flattened


def build_input_schema(tool: ToolDef) -> dict[str, Any]:
    """Convert a tool's argument model into an MCP ``inputSchema`` dict.

    Optional fields are advertised with their plain type; fields that accept
    ``null`` while required keep the null option.
    """
    raw = _strip_titles(tool.arguments.model_json_schema())
    required = list(raw.get("required", []))
    properties: dict[str, Any] = {}
    for name, prop in raw.get("properties", {}).items():
        properties[name] = prop if name in required else _flatten_optional(prop)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    if "$defs" in raw:
        schema["$defs"] = raw["$defs"]
    return schema


def build_tools(catalog: Mapping[str, ToolDef]) -> list[Tool]:
    """Build MCP ``Tool`` listings for every catalog entry, in catalog order."""
    return [
        Tool(
            name=tool.name,
            description=tool.description,
            inputSchema=build_input_schema(tool),
        )
        for tool in catalog.values()
    ]


__all__ = ["HandlerFn", "ToolDef", "build_catalog", "build_input_schema", "build_tools"]
