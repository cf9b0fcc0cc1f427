"""Repository content tools: files, commits, branches and merge requests."""

from __future__ import annotations

import base64
import logging
from typing import Any

from gitlab_mcp.client import (
    GitLabClient,
    decode_json,
    encode_file_path,
    project_path,
    warn_if_problem_path,
)
from gitlab_mcp.errors import GitLabApiError, GitLabMcpError, InvalidPathError
from gitlab_mcp.schemas import (
    CreateBranchArguments,
    CreateMergeRequestArguments,
    CreateOrUpdateFileArguments,
    GetFileContentsArguments,
    GitLabBranch,
    GitLabCommit,
    GitLabContent,
    GitLabCreateUpdateFileResponse,
    GitLabFileContent,
    GitLabMergeRequest,
    GitLabRepository,
    PushFilesArguments,
)
from gitlab_mcp.tools import ToolDef
from gitlab_mcp.validation import parse_response

logger = logging.getLogger("gitlab_mcp.operations")


def _file_url(project_id: str, file_path: str) -> str:
    return project_path(project_id, "repository", "files", encode_file_path(file_path))


def is_malformed_path_error(exc: GitLabApiError) -> bool:
    """True when a failed read points at the path itself rather than a missing file."""
    message = str(exc)
    return exc.status == 400 or "file_path" in message or "Bad Request" in message


async def get_file_contents(client: GitLabClient, args: GetFileContentsArguments) -> Any:
    warn_if_problem_path(args.file_path)
    data = parse_response(
        GitLabContent,
        await client.get_json(_file_url(args.project_id, args.file_path), params={"ref": args.ref}),
    )
    if isinstance(data, GitLabFileContent) and data.content and data.encoding == "base64":
        decoded = base64.b64decode(data.content).decode("utf-8", errors="replace")
        data = data.model_copy(update={"content": decoded, "encoding": "text"})
    return data


async def file_exists(client: GitLabClient, project_id: str, file_path: str, ref: str) -> bool:
    """Probe for ``file_path`` on ``ref``.

    Raises:
        InvalidPathError: If GitLab rejects the path as malformed.
        GitLabApiError: For any other failed read besides 404.
    """
    try:
        await client.get_json(_file_url(project_id, file_path), params={"ref": ref})
    except GitLabApiError as exc:
        if exc.status == 404:
            return False
        if is_malformed_path_error(exc):
            raise InvalidPathError(file_path) from exc
        raise
    return True


async def create_or_update_file(client: GitLabClient, args: CreateOrUpdateFileArguments) -> Any:
    warn_if_problem_path(args.file_path)
    exists = await file_exists(client, args.project_id, args.file_path, args.branch)
    method = "PUT" if exists else "POST"
    logger.debug("Writing %s with %s (exists=%s)", args.file_path, method, exists)
    body: dict[str, Any] = {
        "branch": args.branch,
        "content": args.content,
        "commit_message": args.commit_message,
    }
    if args.previous_path:
        body["previous_path"] = args.previous_path
    response = await client.request(method, _file_url(args.project_id, args.file_path), json=body)
    return decode_json(response)


async def push_files(client: GitLabClient, args: PushFilesArguments) -> Any:
    return await client.post_json(
        project_path(args.project_id, "repository", "commits"),
        json={
            "branch": args.branch,
            "commit_message": args.commit_message,
            "actions": [
                {"action": "create", "file_path": entry.file_path, "content": entry.content}
                for entry in args.files
            ],
        },
    )


async def default_branch(client: GitLabClient, project_id: str) -> str:
    project = parse_response(GitLabRepository, await client.get_json(project_path(project_id)))
    if not project.default_branch:
        raise GitLabMcpError(f"Project {project_id} has no default branch; pass ref explicitly")
    return project.default_branch


async def create_branch(client: GitLabClient, args: CreateBranchArguments) -> Any:
    ref = args.ref or await default_branch(client, args.project_id)
    return await client.post_json(
        project_path(args.project_id, "repository", "branches"),
        json={"branch": args.branch, "ref": ref},
    )


async def create_merge_request(client: GitLabClient, args: CreateMergeRequestArguments) -> Any:
    return await client.post_json(
        project_path(args.project_id, "merge_requests"),
        json=args.model_dump(exclude_none=True, exclude={"project_id"}),
    )


TOOLS = (
    ToolDef(
        name="create_or_update_file",
        description="Create or update a single file in a GitLab project",
        arguments=CreateOrUpdateFileArguments,
        result=GitLabCreateUpdateFileResponse,
        handler=create_or_update_file,
    ),
    ToolDef(
        name="get_file_contents",
        description="Get the contents of a file or directory from a GitLab project",
        arguments=GetFileContentsArguments,
        result=GitLabContent,
        handler=get_file_contents,
    ),
    ToolDef(
        name="push_files",
        description="Push multiple files to a GitLab project in a single commit",
        arguments=PushFilesArguments,
        result=GitLabCommit,
        handler=push_files,
    ),
    ToolDef(
        name="create_branch",
        description="Create a new branch in a GitLab project",
        arguments=CreateBranchArguments,
        result=GitLabBranch,
        handler=create_branch,
    ),
    ToolDef(
        name="create_merge_request",
        description="Create a new merge request in a GitLab project",
        arguments=CreateMergeRequestArguments,
        result=GitLabMergeRequest,
        handler=create_merge_request,
    ),
)
