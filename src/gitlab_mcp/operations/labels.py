"""Project label tools and read-modify-write label edits on issues."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from gitlab_mcp.client import GitLabClient, project_path
from gitlab_mcp.operations.issues import issue_path, join_labels, update_issue_fields
from gitlab_mcp.schemas import (
    CreateProjectLabelArguments,
    DeleteProjectLabelArguments,
    DeleteResult,
    GetProjectLabelsArguments,
    GitLabIssue,
    GitLabProjectLabel,
    ManageIssueLabelsArguments,
    UpdateProjectLabelArguments,
)
from gitlab_mcp.tools import ToolDef
from gitlab_mcp.validation import parse_response


def merge_labels(current: Iterable[str], added: Iterable[str]) -> list[str]:
    """Union of two label lists, first occurrence wins."""
    return list(dict.fromkeys([*current, *added]))


def subtract_labels(current: Iterable[str], removed: Iterable[str]) -> list[str]:
    drop = set(removed)
    return [label for label in dict.fromkeys(current) if label not in drop]


def _label_path(project_id: str, label_id: int | str) -> str:
    return project_path(project_id, "labels", label_id)


async def get_project_labels(client: GitLabClient, args: GetProjectLabelsArguments) -> Any:
    return await client.get_json(project_path(args.project_id, "labels"))


async def create_project_label(client: GitLabClient, args: CreateProjectLabelArguments) -> Any:
    return await client.post_json(
        project_path(args.project_id, "labels"),
        json=args.model_dump(exclude_none=True, exclude={"project_id"}),
    )


async def update_project_label(client: GitLabClient, args: UpdateProjectLabelArguments) -> Any:
    return await client.put_json(
        _label_path(args.project_id, args.label_id),
        json=args.model_dump(exclude_none=True, exclude={"project_id", "label_id"}),
    )


async def delete_project_label(
    client: GitLabClient, args: DeleteProjectLabelArguments
) -> dict[str, str]:
    return await client.delete(_label_path(args.project_id, args.label_id), "Label")


async def _rewrite_issue_labels(
    client: GitLabClient,
    args: ManageIssueLabelsArguments,
    compute: Callable[[list[str], list[str]], list[str]],
) -> Any:
    issue = parse_response(
        GitLabIssue, await client.get_json(issue_path(args.project_id, args.issue_iid))
    )
    labels = compute(issue.label_names(), args.labels)
    return await update_issue_fields(
        client, args.project_id, args.issue_iid, {"labels": join_labels(labels)}
    )


async def add_labels_to_issue(client: GitLabClient, args: ManageIssueLabelsArguments) -> Any:
    return await _rewrite_issue_labels(client, args, merge_labels)


async def remove_labels_from_issue(client: GitLabClient, args: ManageIssueLabelsArguments) -> Any:
    return await _rewrite_issue_labels(client, args, subtract_labels)


TOOLS = (
    ToolDef(
        name="get_project_labels",
        description="Retrieve all labels for a project",
        arguments=GetProjectLabelsArguments,
        result=list[GitLabProjectLabel],
        handler=get_project_labels,
    ),
    ToolDef(
        name="create_project_label",
        description="Create a new label for a project",
        arguments=CreateProjectLabelArguments,
        result=GitLabProjectLabel,
        handler=create_project_label,
    ),
    ToolDef(
        name="update_project_label",
        description="Update an existing label",
        arguments=UpdateProjectLabelArguments,
        result=GitLabProjectLabel,
        handler=update_project_label,
    ),
    ToolDef(
        name="delete_project_label",
        description="Delete a label from a project",
        arguments=DeleteProjectLabelArguments,
        result=DeleteResult,
        handler=delete_project_label,
    ),
    ToolDef(
        name="add_labels_to_issue",
        description="Add specific labels to an issue",
        arguments=ManageIssueLabelsArguments,
        result=GitLabIssue,
        handler=add_labels_to_issue,
    ),
    ToolDef(
        name="remove_labels_from_issue",
        description="Remove specific labels from an issue",
        arguments=ManageIssueLabelsArguments,
        result=GitLabIssue,
        handler=remove_labels_from_issue,
    ),
)
