"""Tests for the tools module."""

from typing import Any

import pytest
from pydantic import BaseModel, Field

from gitlab_mcp.operations import default_catalog
from gitlab_mcp.schemas import (
    CreateIssueArguments,
    CreateNoteArguments,
    CreateRepositoryArguments,
    PushFilesArguments,
)
from gitlab_mcp.tools import ToolDef, build_catalog, build_input_schema, build_tools


async def _noop(_client: Any, _args: Any) -> None:
    return None


def _tool(name: str, arguments: type[BaseModel] = CreateRepositoryArguments) -> ToolDef:
    return ToolDef(
        name=name,
        description=f"{name} description",
        arguments=arguments,
        result=dict,
        handler=_noop,
    )


class TestBuildCatalog:
    """Tests for catalog merging."""

    def test_merges_groups_in_order(self):
        """Tools from every group are keyed by name, first group first."""
        catalog = build_catalog([_tool("a"), _tool("b")], [_tool("c")])
        assert list(catalog) == ["a", "b", "c"]

    def test_duplicate_names_rejected(self):
        """Two tools with the same name cannot be registered."""
        with pytest.raises(ValueError, match="Duplicate tool name: a"):
            build_catalog([_tool("a")], [_tool("a")])


class TestBuildInputSchema:
    """Tests for argument model to inputSchema conversion."""

    def test_required_and_optional_fields(self):
        """Required fields are listed; optional ones drop their null option."""
        schema = build_input_schema(_tool("create_repository"))

        assert schema["type"] == "object"
        assert schema["required"] == ["name"]
        assert schema["properties"]["name"] == {
            "type": "string",
            "description": "Repository name",
        }
        assert schema["properties"]["visibility"] == {
            "type": "string",
            "enum": ["private", "internal", "public"],
            "description": "Repository visibility level",
        }
        assert schema["properties"]["initialize_with_readme"]["type"] == "boolean"

    def test_field_named_title_survives(self):
        """A property called ``title`` is a field, not a schema keyword."""
        schema = build_input_schema(_tool("create_issue", CreateIssueArguments))

        assert "title" in schema["properties"]
        assert "title" not in schema["properties"]["title"]
        assert schema["required"] == ["project_id", "title"]
        assert schema["properties"]["labels"] == {
            "type": "array",
            "items": {"type": "string"},
            "description": "Array of label names",
        }

    def test_nested_models_are_referenced(self):
        """Nested argument models are emitted under ``$defs``."""
        schema = build_input_schema(_tool("push_files", PushFilesArguments))

        assert "PushFileEntry" in schema["$defs"]
        entry = schema["$defs"]["PushFileEntry"]
        assert entry["required"] == ["file_path", "content"]
        assert "title" not in entry

    def test_required_nullable_field_keeps_null(self):
        """A required field that accepts null keeps the null option."""
        schema = build_input_schema(_tool("create_note", CreateNoteArguments))

        body = schema["properties"]["body"]
        assert "body" in schema["required"]
        assert {"type": "null"} in body["anyOf"]

    def test_numeric_constraints_kept(self):
        class Paged(BaseModel):
            page: int | None = Field(None, ge=1, description="Page number")

        schema = build_input_schema(_tool("paged", Paged))

        assert schema["properties"]["page"] == {
            "type": "integer",
            "minimum": 1,
            "description": "Page number",
        }
        assert "required" not in schema


class TestBuildTools:
    """Tests for the MCP tool listing."""

    def test_catalog_lists_every_operation(self):
        """The default catalog exposes all GitLab operations once."""
        tools = build_tools(default_catalog())
        names = [tool.name for tool in tools]

        assert len(names) == 37
        assert len(set(names)) == 37
        assert {
            "create_or_update_file",
            "search_repositories",
            "get_issues",
            "add_labels_to_issue",
            "create_issue_link",
        } <= set(names)

    def test_every_tool_has_description_and_object_schema(self):
        for tool in build_tools(default_catalog()):
            assert tool.description
            assert tool.inputSchema["type"] == "object"
            assert isinstance(tool.inputSchema["properties"], dict)

    def test_issue_tools_require_project_and_iid(self):
        tools = {tool.name: tool for tool in build_tools(default_catalog())}

        for name in ("get_issue", "close_issue", "add_spent_time", "delete_issue_link"):
            required = tools[name].inputSchema["required"]
            assert required[:2] == ["project_id", "issue_iid"], name
