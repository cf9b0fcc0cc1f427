"""Project-level tools: search, create, fork, update, delete."""

from __future__ import annotations

from typing import Any

from gitlab_mcp.client import GitLabClient, decode_json, project_path
from gitlab_mcp.schemas import (
    CreateRepositoryArguments,
    DeleteProjectArguments,
    DeleteResult,
    ForkRepositoryArguments,
    GitLabFork,
    GitLabRepository,
    GitLabSearchResponse,
    SearchRepositoriesArguments,
    UpdateProjectArguments,
)
from gitlab_mcp.tools import ToolDef


def _total_count(raw: str | None) -> int:
    try:
        return int(raw or 0)
    except ValueError:
        return 0


async def search_repositories(
    client: GitLabClient, args: SearchRepositoriesArguments
) -> dict[str, Any]:
    response = await client.request(
        "GET",
        "/projects",
        params={
            "search": args.search,
            "page": args.page or 1,
            "per_page": args.per_page or 20,
        },
    )
    return {
        "count": _total_count(response.headers.get("X-Total")),
        "items": decode_json(response),
    }


async def create_repository(client: GitLabClient, args: CreateRepositoryArguments) -> Any:
    return await client.post_json("/projects", json=args.model_dump(exclude_none=True))


async def fork_repository(client: GitLabClient, args: ForkRepositoryArguments) -> Any:
    return await client.post_json(
        project_path(args.project_id, "fork"),
        params={"namespace": args.namespace},
    )


async def delete_project(client: GitLabClient, args: DeleteProjectArguments) -> dict[str, str]:
    return await client.delete(project_path(args.project_id), "Project")


async def update_project(client: GitLabClient, args: UpdateProjectArguments) -> Any:
    return await client.put_json(
        project_path(args.project_id),
        json=args.model_dump(exclude_none=True, exclude={"project_id"}),
    )


TOOLS = (
    ToolDef(
        name="search_repositories",
        description="Search for GitLab projects",
        arguments=SearchRepositoriesArguments,
        result=GitLabSearchResponse,
        handler=search_repositories,
    ),
    ToolDef(
        name="create_repository",
        description="Create a new GitLab project",
        arguments=CreateRepositoryArguments,
        result=GitLabRepository,
        handler=create_repository,
    ),
    ToolDef(
        name="fork_repository",
        description="Fork a GitLab project to your account or specified namespace",
        arguments=ForkRepositoryArguments,
        result=GitLabFork,
        handler=fork_repository,
    ),
    ToolDef(
        name="delete_project",
        description="Delete a GitLab project",
        arguments=DeleteProjectArguments,
        result=DeleteResult,
        handler=delete_project,
    ),
    ToolDef(
        name="update_project",
        description="Update a GitLab project's settings including visibility",
        arguments=UpdateProjectArguments,
        result=GitLabRepository,
        handler=update_project,
    ),
)
