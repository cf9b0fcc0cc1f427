"""Issue note (comment) tools."""

from __future__ import annotations

import json
from typing import Any

from gitlab_mcp.client import GitLabClient
from gitlab_mcp.operations.issues import issue_path
from gitlab_mcp.schemas import (
    CreateNoteArguments,
    DeleteNoteArguments,
    DeleteResult,
    GetNotesArguments,
    GitLabNote,
    NoteBody,
    UpdateNoteArguments,
)
from gitlab_mcp.tools import ToolDef


def note_text(body: NoteBody) -> str:
    """Render a note body; objects are sent as their JSON text."""
    if body is None:
        return ""
    if isinstance(body, str):
        return body
    return json.dumps(body)


async def get_notes(client: GitLabClient, args: GetNotesArguments) -> Any:
    return await client.get_json(
        issue_path(args.project_id, args.issue_iid, "notes"),
        params=args.model_dump(exclude_none=True, exclude={"project_id", "issue_iid"}),
    )


async def create_note(client: GitLabClient, args: CreateNoteArguments) -> Any:
    return await client.post_json(
        issue_path(args.project_id, args.issue_iid, "notes"),
        json={"body": note_text(args.body)},
    )


async def update_note(client: GitLabClient, args: UpdateNoteArguments) -> Any:
    return await client.put_json(
        issue_path(args.project_id, args.issue_iid, "notes", str(args.note_id)),
        json={"body": note_text(args.body)},
    )


async def delete_note(client: GitLabClient, args: DeleteNoteArguments) -> dict[str, str]:
    return await client.delete(
        issue_path(args.project_id, args.issue_iid, "notes", str(args.note_id)), "Note"
    )


TOOLS = (
    ToolDef(
        name="get_notes",
        description="Get notes (comments) for an issue",
        arguments=GetNotesArguments,
        result=list[GitLabNote],
        handler=get_notes,
    ),
    ToolDef(
        name="create_note",
        description=(
            "Create a new note (comment) on an issue - supports both string and JSON object bodies"
        ),
        arguments=CreateNoteArguments,
        result=GitLabNote,
        handler=create_note,
    ),
    ToolDef(
        name="update_note",
        description=(
            "Update an existing note (comment) on an issue - "
            "supports both string and JSON object bodies"
        ),
        arguments=UpdateNoteArguments,
        result=GitLabNote,
        handler=update_note,
    ),
    ToolDef(
        name="delete_note",
        description="Delete a note (comment) from an issue",
        arguments=DeleteNoteArguments,
        result=DeleteResult,
        handler=delete_note,
    ),
)
