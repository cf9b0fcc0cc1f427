"""Issue tools: creation, queries, updates, assignment and time tracking."""

from __future__ import annotations

from typing import Any

from gitlab_mcp.client import GitLabClient, project_path
from gitlab_mcp.schemas import (
    AssignIssueArguments,
    CreateIssueArguments,
    GetIssueArguments,
    GetIssuesArguments,
    GitLabIssue,
    GitLabTimeStats,
    IssueStateArguments,
    TimeStatsArguments,
    TimeTrackingArguments,
    UnassignIssueArguments,
    UpdateIssueArguments,
)
from gitlab_mcp.tools import ToolDef


def issue_path(project_id: str, issue_iid: int | str, *parts: str) -> str:
    return project_path(project_id, "issues", issue_iid, *parts)


def join_labels(labels: list[str]) -> str:
    """GitLab takes label sets as one comma-separated string."""
    return ",".join(labels)


async def update_issue_fields(
    client: GitLabClient, project_id: str, issue_iid: int | str, fields: dict[str, Any]
) -> Any:
    return await client.put_json(issue_path(project_id, issue_iid), json=fields)


async def create_issue(client: GitLabClient, args: CreateIssueArguments) -> Any:
    body = args.model_dump(exclude_none=True, exclude={"project_id"})
    if "labels" in body:
        body["labels"] = join_labels(body["labels"])
    return await client.post_json(project_path(args.project_id, "issues"), json=body)


async def get_issues(client: GitLabClient, args: GetIssuesArguments) -> Any:
    return await client.get_json(
        project_path(args.project_id, "issues"),
        params=args.model_dump(exclude_none=True, exclude={"project_id"}),
    )


async def get_issue(client: GitLabClient, args: GetIssueArguments) -> Any:
    params = {"with_time_stats": True} if args.with_time_stats else None
    return await client.get_json(issue_path(args.project_id, args.issue_iid), params=params)


async def update_issue(client: GitLabClient, args: UpdateIssueArguments) -> Any:
    fields = args.model_dump(exclude_none=True, exclude={"project_id", "issue_iid"})
    if "labels" in fields:
        fields["labels"] = join_labels(fields["labels"])
    return await update_issue_fields(client, args.project_id, args.issue_iid, fields)


async def close_issue(client: GitLabClient, args: IssueStateArguments) -> Any:
    return await update_issue_fields(
        client, args.project_id, args.issue_iid, {"state_event": "close"}
    )


async def reopen_issue(client: GitLabClient, args: IssueStateArguments) -> Any:
    return await update_issue_fields(
        client, args.project_id, args.issue_iid, {"state_event": "reopen"}
    )


async def assign_issue(client: GitLabClient, args: AssignIssueArguments) -> Any:
    return await update_issue_fields(
        client, args.project_id, args.issue_iid, {"assignee_ids": args.assignee_ids}
    )


async def unassign_issue(client: GitLabClient, args: UnassignIssueArguments) -> Any:
    return await update_issue_fields(client, args.project_id, args.issue_iid, {"assignee_ids": []})


async def get_issue_time_stats(client: GitLabClient, args: TimeStatsArguments) -> Any:
    return await client.get_json(issue_path(args.project_id, args.issue_iid, "time_stats"))


async def set_time_estimate(client: GitLabClient, args: TimeTrackingArguments) -> Any:
    return await client.post_json(
        issue_path(args.project_id, args.issue_iid, "time_estimate"),
        params={"duration": args.duration},
    )


async def reset_time_estimate(client: GitLabClient, args: TimeStatsArguments) -> Any:
    return await client.post_json(
        issue_path(args.project_id, args.issue_iid, "reset_time_estimate")
    )


async def add_spent_time(client: GitLabClient, args: TimeTrackingArguments) -> Any:
    return await client.post_json(
        issue_path(args.project_id, args.issue_iid, "add_spent_time"),
        params={"duration": args.duration},
    )


async def reset_spent_time(client: GitLabClient, args: TimeStatsArguments) -> Any:
    return await client.post_json(issue_path(args.project_id, args.issue_iid, "reset_spent_time"))


TOOLS = (
    ToolDef(
        name="create_issue",
        description="Create a new issue in a GitLab project",
        arguments=CreateIssueArguments,
        result=GitLabIssue,
        handler=create_issue,
    ),
    ToolDef(
        name="get_issues",
        description="Get issues from a GitLab project with various filters",
        arguments=GetIssuesArguments,
        result=list[GitLabIssue],
        handler=get_issues,
    ),
    ToolDef(
        name="get_issue",
        description="Get a single issue from a GitLab project",
        arguments=GetIssueArguments,
        result=GitLabIssue,
        handler=get_issue,
    ),
    ToolDef(
        name="update_issue",
        description="Update various issue attributes including state, labels, assignees, etc.",
        arguments=UpdateIssueArguments,
        result=GitLabIssue,
        handler=update_issue,
    ),
    ToolDef(
        name="close_issue",
        description="Close an issue",
        arguments=IssueStateArguments,
        result=GitLabIssue,
        handler=close_issue,
    ),
    ToolDef(
        name="reopen_issue",
        description="Reopen a closed issue",
        arguments=IssueStateArguments,
        result=GitLabIssue,
        handler=reopen_issue,
    ),
    ToolDef(
        name="assign_issue",
        description="Assign users to an issue",
        arguments=AssignIssueArguments,
        result=GitLabIssue,
        handler=assign_issue,
    ),
    ToolDef(
        name="unassign_issue",
        description="Remove all assignees from an issue",
        arguments=UnassignIssueArguments,
        result=GitLabIssue,
        handler=unassign_issue,
    ),
    ToolDef(
        name="get_issue_time_stats",
        description="Get time tracking statistics for an issue",
        arguments=TimeStatsArguments,
        result=GitLabTimeStats,
        handler=get_issue_time_stats,
    ),
    ToolDef(
        name="set_time_estimate",
        description="Set time estimate for an issue",
        arguments=TimeTrackingArguments,
        result=GitLabTimeStats,
        handler=set_time_estimate,
    ),
    ToolDef(
        name="reset_time_estimate",
        description="Reset time estimate for an issue",
        arguments=TimeStatsArguments,
        result=GitLabTimeStats,
        handler=reset_time_estimate,
    ),
    ToolDef(
        name="add_spent_time",
        description="Add spent time to an issue",
        arguments=TimeTrackingArguments,
        result=GitLabTimeStats,
        handler=add_spent_time,
    ),
    ToolDef(
        name="reset_spent_time",
        description="Reset spent time for an issue",
        arguments=TimeStatsArguments,
        result=GitLabTimeStats,
        handler=reset_spent_time,
    ),
)
