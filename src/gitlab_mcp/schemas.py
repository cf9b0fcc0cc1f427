"""Pydantic contracts for GitLab payloads and tool arguments.

Response models drop fields they do not declare. Argument models are strict:
values are never coerced across types except where a field declares a union
(for example an issue IID given as ``5`` or ``"5"``).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

# =============================================================================
# GitLab response models
# =============================================================================


class GitLabModel(BaseModel):
    """Base for payloads returned by the GitLab REST API."""

    model_config = ConfigDict(extra="ignore")


class GitLabOwner(GitLabModel):
    username: str
    id: int
    avatar_url: str | None = None
    web_url: str
    name: str
    state: str


class GitLabRepository(GitLabModel):
    id: int
    name: str
    path_with_namespace: str
    visibility: str
    owner: GitLabOwner | None = None
    web_url: str
    description: str | None
    fork: bool | None = None
    ssh_url_to_repo: str
    http_url_to_repo: str
    created_at: str
    last_activity_at: str
    default_branch: str | None = None


class GitLabForkParentOwner(GitLabModel):
    username: str
    id: int
    avatar_url: str | None = None


class GitLabForkParent(GitLabModel):
    name: str
    path_with_namespace: str
    owner: GitLabForkParentOwner | None = None
    web_url: str


class GitLabFork(GitLabRepository):
    forked_from_project: GitLabForkParent


class GitLabSearchResponse(GitLabModel):
    count: int
    items: list[GitLabRepository]


class GitLabFileContent(GitLabModel):
    file_name: str
    file_path: str
    size: int
    encoding: str
    content: str
    content_sha256: str
    ref: str
    blob_id: str
    last_commit_id: str


class GitLabDirectoryEntry(GitLabModel):
    name: str
    path: str
    type: str
    mode: str
    id: str
    web_url: str | None = None


GitLabContent = Union[GitLabFileContent, list[GitLabDirectoryEntry]]


class GitLabCreateUpdateFileResponse(GitLabModel):
    file_path: str
    branch: str
    commit_id: str | None = None
    content: GitLabFileContent | None = None


class GitLabCommit(GitLabModel):
    id: str
    short_id: str
    title: str
    author_name: str
    author_email: str
    authored_date: str
    committer_name: str
    committer_email: str
    committed_date: str
    web_url: str
    parent_ids: list[str]


class GitLabBranchCommit(GitLabModel):
    id: str
    web_url: str


class GitLabBranch(GitLabModel):
    name: str
    commit: GitLabBranchCommit


class GitLabUser(GitLabModel):
    username: str
    id: int
    name: str
    avatar_url: str | None = None
    web_url: str


class GitLabLabelDetail(GitLabModel):
    id: int
    name: str
    color: str
    description: str | None = None


class GitLabMilestoneRef(GitLabModel):
    id: int
    iid: int
    title: str
    description: str | None = None
    state: str
    web_url: str


class GitLabTimeStats(GitLabModel):
    time_estimate: int | None = None
    total_time_spent: int | None = None
    human_time_estimate: str | None = None
    human_total_time_spent: str | None = None


class GitLabTaskCompletionStatus(GitLabModel):
    count: int | None = None
    completed_count: int | None = None


class GitLabIssue(GitLabModel):
    id: int
    iid: int
    project_id: int
    title: str
    description: str | None
    state: str
    author: GitLabUser
    assignees: list[GitLabUser]
    labels: list[Union[str, GitLabLabelDetail]]
    milestone: GitLabMilestoneRef | None
    created_at: str
    updated_at: str
    closed_at: str | None
    web_url: str
    time_stats: GitLabTimeStats | None = None
    task_completion_status: GitLabTaskCompletionStatus | None = None

    def label_names(self) -> list[str]:
        """Label names regardless of whether details were requested."""
        return [label if isinstance(label, str) else label.name for label in self.labels]


class GitLabDiffRefs(GitLabModel):
    base_sha: str
    head_sha: str
    start_sha: str


class GitLabMergeRequest(GitLabModel):
    id: int
    iid: int
    project_id: int
    title: str
    description: str | None
    state: str
    merged: bool | None = None
    author: GitLabUser
    assignees: list[GitLabUser]
    source_branch: str
    target_branch: str
    diff_refs: GitLabDiffRefs | None = None
    web_url: str
    created_at: str
    updated_at: str
    merged_at: str | None = None
    closed_at: str | None = None
    merge_commit_sha: str | None = None


class GitLabSystemNoteMetadata(GitLabModel):
    action: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class GitLabNote(GitLabModel):
    id: int
    author: GitLabUser
    body: str | None
    created_at: str
    updated_at: str
    system: bool | None = None
    noteable_id: int | None = None
    noteable_type: str | None = None
    noteable_iid: int | None = None
    position: dict[str, Any] | None = None
    resolvable: bool | None = None
    resolved: bool | None = None
    resolved_by: GitLabUser | None = None
    system_note_metadata: GitLabSystemNoteMetadata | None = None


class GitLabProjectLabel(GitLabModel):
    id: int
    name: str
    color: str
    text_color: str | None = None
    description: str | None = None
    open_issues_count: int | None = None
    closed_issues_count: int | None = None
    open_merge_requests_count: int | None = None
    subscribed: bool | None = None
    priority: int | None = None
    is_project_label: bool | None = None


class GitLabProjectMilestone(GitLabModel):
    id: int
    iid: int
    project_id: int | None = None
    title: str
    description: str | None = None
    state: str
    created_at: str | None = None
    updated_at: str | None = None
    due_date: str | None = None
    start_date: str | None = None
    expired: bool | None = None
    web_url: str | None = None


class GitLabLinkedIssue(GitLabModel):
    id: int
    iid: int
    project_id: int
    title: str
    state: str
    web_url: str | None = None


class GitLabIssueLink(GitLabModel):
    source_issue: GitLabLinkedIssue
    target_issue: GitLabLinkedIssue
    link_type: str | None = None


class DeleteResult(GitLabModel):
    message: str


# =============================================================================
# Tool argument models
# =============================================================================

Visibility = Literal["private", "internal", "public"]

NumericString = Annotated[str, StringConstraints(pattern=r"^\d+$")]
NumericId = Union[int, NumericString]


class ToolArguments(BaseModel):
    """Base for tool inputs; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", strict=True)


class ProjectArguments(ToolArguments):
    project_id: str = Field(description="Project ID or URL-encoded path")


class IssueArguments(ProjectArguments):
    issue_iid: NumericId = Field(description="The internal ID of the project issue")


class DeleteProjectArguments(ProjectArguments):
    pass


class UpdateProjectArguments(ProjectArguments):
    name: str | None = Field(None, description="New project name")
    description: str | None = Field(None, description="New project description")
    visibility: Visibility | None = Field(None, description="Change project visibility")
    default_branch: str | None = Field(None, description="Change default branch")
    topics: list[str] | None = Field(None, description="Change project topics")


class SearchRepositoriesArguments(ToolArguments):
    search: str = Field(description="Search query")
    page: int | None = Field(None, ge=1, description="Page number for pagination (default: 1)")
    per_page: int | None = Field(
        None, ge=1, le=100, description="Number of results per page (default: 20)"
    )


class CreateRepositoryArguments(ToolArguments):
    name: str = Field(description="Repository name")
    description: str | None = Field(None, description="Repository description")
    visibility: Visibility | None = Field(None, description="Repository visibility level")
    initialize_with_readme: bool | None = Field(None, description="Initialize with README.md")
    namespace_id: Union[str, int, None] = Field(
        None, description="Namespace ID to create project in (group or user)"
    )


class ForkRepositoryArguments(ProjectArguments):
    namespace: str | None = Field(None, description="Namespace to fork to (full path)")


class CreateBranchArguments(ProjectArguments):
    branch: str = Field(description="Name for the new branch")
    ref: str | None = Field(None, description="Source branch/commit for new branch")


class GetFileContentsArguments(ProjectArguments):
    file_path: str = Field(description="Path to the file or directory")
    ref: str | None = Field(None, description="Branch/tag/commit to get contents from")


class CreateOrUpdateFileArguments(ProjectArguments):
    file_path: str = Field(description="Path where to create/update the file")
    content: str = Field(description="Content of the file")
    commit_message: str = Field(description="Commit message")
    branch: str = Field(description="Branch to create/update the file in")
    previous_path: str | None = Field(None, description="Path of the file to move/rename")


class PushFileEntry(ToolArguments):
    file_path: str = Field(description="Path where to create the file")
    content: str = Field(description="Content of the file")


class PushFilesArguments(ProjectArguments):
    branch: str = Field(description="Branch to push to")
    files: list[PushFileEntry] = Field(description="Array of files to push")
    commit_message: str = Field(description="Commit message")


class CreateIssueArguments(ProjectArguments):
    title: str = Field(description="Issue title")
    description: str | None = Field(None, description="Issue description")
    assignee_ids: list[int] | None = Field(None, description="Array of user IDs to assign")
    labels: list[str] | None = Field(None, description="Array of label names")
    milestone_id: int | None = Field(None, description="Milestone ID to assign")


class CreateMergeRequestArguments(ProjectArguments):
    title: str = Field(description="Merge request title")
    description: str | None = Field(None, description="Merge request description")
    source_branch: str = Field(description="Branch containing changes")
    target_branch: str = Field(description="Branch to merge into")
    draft: bool | None = Field(None, description="Create as draft merge request")
    allow_collaboration: bool | None = Field(
        None, description="Allow commits from upstream members"
    )


class GetIssuesArguments(ProjectArguments):
    state: Literal["opened", "closed", "all"] | None = Field(
        None, description="Return all issues or just those that are opened or closed"
    )
    with_labels_details: bool | None = Field(None, description="Return detailed labels data")
    milestone: str | None = Field(None, description="Return issues for a specific milestone")
    scope: Literal["created_by_me", "assigned_to_me", "all"] | None = Field(
        None, description="Return issues for the given scope"
    )
    author_id: int | None = Field(None, description="Return issues created by the given user id")
    assignee_id: int | None = Field(
        None, description="Return issues assigned to the given user id"
    )
    my_reaction_emoji: str | None = Field(
        None, description="Return issues reacted by the authenticated user by the given emoji"
    )
    order_by: Literal["created_at", "updated_at", "priority"] | None = Field(
        None, description="Return issues ordered by created_at, updated_at, or priority fields"
    )
    sort: Literal["asc", "desc"] | None = Field(
        None, description="Return issues sorted in ascending or descending order"
    )
    search: str | None = Field(
        None, description="Search issues against their title and description"
    )
    created_after: str | None = Field(
        None, description="Return issues created after the given time"
    )
    created_before: str | None = Field(
        None, description="Return issues created before the given time"
    )
    updated_after: str | None = Field(
        None, description="Return issues updated after the given time"
    )
    updated_before: str | None = Field(
        None, description="Return issues updated before the given time"
    )
    confidential: bool | None = Field(None, description="Filter confidential or public issues")
    with_time_stats: bool | None = Field(None, description="Include time tracking stats")
    page: int | None = Field(None, ge=1, description="Page number")
    per_page: int | None = Field(None, ge=1, le=100, description="Number of items per page")


class GetIssueArguments(IssueArguments):
    with_time_stats: bool | None = Field(None, description="Include time tracking stats")


class TimeStatsArguments(IssueArguments):
    pass


class TimeTrackingArguments(IssueArguments):
    duration: str = Field(
        min_length=1, description="The duration in human-readable format (e.g., '3h 30m')"
    )


class UpdateIssueArguments(IssueArguments):
    title: str | None = Field(None, description="New issue title")
    description: str | None = Field(None, description="New issue description")
    state_event: Literal["close", "reopen"] | None = Field(
        None, description="Close or reopen the issue"
    )
    labels: list[str] | None = Field(
        None, description="Replace the issue's labels with this list"
    )
    assignee_ids: list[int] | None = Field(None, description="Replace the issue's assignees")
    milestone_id: int | None = Field(None, description="Milestone ID to assign")
    due_date: str | None = Field(None, description="Due date in YYYY-MM-DD format")


class IssueStateArguments(IssueArguments):
    pass


class GetNotesArguments(IssueArguments):
    sort: Literal["asc", "desc"] | None = Field(
        None, description="Return notes sorted in ascending or descending order"
    )
    order_by: Literal["created_at", "updated_at"] | None = Field(
        None, description="Return notes ordered by created_at or updated_at fields"
    )
    page: int | None = Field(None, ge=1, description="Page number")
    per_page: int | None = Field(None, ge=1, le=100, description="Number of items per page")


NoteBody = Union[str, dict[str, Any], None]


class CreateNoteArguments(IssueArguments):
    body: NoteBody = Field(
        description="The content of the note - can be a string or a JSON object"
    )


class UpdateNoteArguments(IssueArguments):
    note_id: NumericId = Field(description="The ID of the note")
    body: NoteBody = Field(
        description="The content of the note - can be a string or a JSON object"
    )


class DeleteNoteArguments(IssueArguments):
    note_id: NumericId = Field(description="The ID of the note")


class GetProjectLabelsArguments(ProjectArguments):
    pass


class CreateProjectLabelArguments(ProjectArguments):
    name: str = Field(min_length=1, description="Label name")
    color: str = Field(
        description="Label color in hex format (e.g. '#FF0000') or a CSS color name"
    )
    description: str | None = Field(None, description="Label description")


class UpdateProjectLabelArguments(ProjectArguments):
    label_id: NumericId = Field(description="The ID of the label")
    new_name: str | None = Field(None, description="New label name")
    color: str | None = Field(None, description="New label color")
    description: str | None = Field(None, description="New label description")


class DeleteProjectLabelArguments(ProjectArguments):
    label_id: NumericId = Field(description="The ID of the label")


class ManageIssueLabelsArguments(IssueArguments):
    labels: list[str] = Field(min_length=1, description="Label names to add or remove")


class GetProjectMilestonesArguments(ProjectArguments):
    state: Literal["active", "closed"] | None = Field(
        None, description="Return only active or closed milestones"
    )


class CreateProjectMilestoneArguments(ProjectArguments):
    title: str = Field(min_length=1, description="Milestone title")
    description: str | None = Field(None, description="Milestone description")
    due_date: str | None = Field(None, description="Due date in YYYY-MM-DD format")
    start_date: str | None = Field(None, description="Start date in YYYY-MM-DD format")


class AssignIssueArguments(IssueArguments):
    assignee_ids: list[int] = Field(description="User IDs to assign to the issue")


class UnassignIssueArguments(IssueArguments):
    pass


class CreateIssueLinkArguments(IssueArguments):
    target_project_id: str = Field(description="ID or URL-encoded path of the target project")
    target_issue_iid: NumericId = Field(description="Internal ID of the target issue")
    link_type: Literal["relates_to", "blocks", "is_blocked_by"] | None = Field(
        None, description="Type of relationship (defaults to relates_to)"
    )


class DeleteIssueLinkArguments(IssueArguments):
    link_id: NumericId = Field(description="The ID of the issue link")
