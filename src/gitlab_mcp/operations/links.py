"""Issue relationship tools."""

from __future__ import annotations

from typing import Any

from gitlab_mcp.client import GitLabClient
from gitlab_mcp.operations.issues import issue_path
from gitlab_mcp.schemas import (
    CreateIssueLinkArguments,
    DeleteIssueLinkArguments,
    DeleteResult,
    GitLabIssueLink,
)
from gitlab_mcp.tools import ToolDef


async def create_issue_link(client: GitLabClient, args: CreateIssueLinkArguments) -> Any:
    body: dict[str, Any] = {
        "target_project_id": args.target_project_id,
        "target_issue_iid": args.target_issue_iid,
    }
    if args.link_type:
        body["link_type"] = args.link_type
    return await client.post_json(issue_path(args.project_id, args.issue_iid, "links"), json=body)


async def delete_issue_link(client: GitLabClient, args: DeleteIssueLinkArguments) -> dict[str, str]:
    return await client.delete(
        issue_path(args.project_id, args.issue_iid, "links", str(args.link_id)), "Issue link"
    )


TOOLS = (
    ToolDef(
        name="create_issue_link",
        description="Create a link between two issues",
        arguments=CreateIssueLinkArguments,
        result=GitLabIssueLink,
        handler=create_issue_link,
    ),
    ToolDef(
        name="delete_issue_link",
        description="Remove a link between issues",
        arguments=DeleteIssueLinkArguments,
        result=DeleteResult,
        handler=delete_issue_link,
    ),
)
