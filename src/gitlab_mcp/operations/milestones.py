"""Project milestone tools."""

from __future__ import annotations

from typing import Any

from gitlab_mcp.client import GitLabClient, project_path
from gitlab_mcp.schemas import (
    CreateProjectMilestoneArguments,
    GetProjectMilestonesArguments,
    GitLabProjectMilestone,
)
from gitlab_mcp.tools import ToolDef


async def get_project_milestones(client: GitLabClient, args: GetProjectMilestonesArguments) -> Any:
    return await client.get_json(
        project_path(args.project_id, "milestones"), params={"state": args.state}
    )


async def create_project_milestone(
    client: GitLabClient, args: CreateProjectMilestoneArguments
) -> Any:
    return await client.post_json(
        project_path(args.project_id, "milestones"),
        json=args.model_dump(exclude_none=True, exclude={"project_id"}),
    )


TOOLS = (
    ToolDef(
        name="get_project_milestones",
        description="Retrieve all milestones for a project",
        arguments=GetProjectMilestonesArguments,
        result=list[GitLabProjectMilestone],
        handler=get_project_milestones,
    ),
    ToolDef(
        name="create_project_milestone",
        description="Create a new milestone for a project",
        arguments=CreateProjectMilestoneArguments,
        result=GitLabProjectMilestone,
        handler=create_project_milestone,
    ),
)
