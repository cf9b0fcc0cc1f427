"""Exception taxonomy shared by the client, the handlers and the dispatcher."""

from __future__ import annotations

from typing import Any

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

# Appended to 400 responses that complain about a file path.
FILE_PATH_HINT = (
    ". Make sure the file path is correct and properly formatted. "
    "Remember that paths are case-sensitive."
)


class GitLabMcpError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(GitLabMcpError, ValueError):
    """Startup configuration is missing or malformed."""


class GitLabApiError(GitLabMcpError):
    """GitLab answered with a non-2xx status."""

    def __init__(
        self,
        status: int,
        reason: str,
        remote_message: str | None = None,
        body: Any = None,
    ) -> None:
        self.status = status
        self.reason = reason
        self.remote_message = remote_message
        self.body = body
        super().__init__(self._format())

    def _format(self) -> str:
        message = f"GitLab API error ({self.status}): {self.reason}"
        if self.remote_message:
            message += f" - {self.remote_message}"
            if self.status == 400 and "file_path" in self.remote_message:
                message += FILE_PATH_HINT
        return message


class RateLimitExceeded(GitLabApiError):
    """GitLab kept answering 429 until the attempt ceiling was reached."""

    def __init__(self, attempts: int, reason: str = "Too Many Requests", body: Any = None) -> None:
        self.attempts = attempts
        super().__init__(
            429, reason, f"rate limit retries exhausted after {attempts} attempts", body
        )


class GitLabTimeoutError(GitLabMcpError):
    """No response arrived within the request ceiling."""

    def __init__(self, method: str, path: str, timeout: float) -> None:
        self.method = method
        self.path = path
        self.timeout = timeout
        super().__init__(f"GitLab request timed out after {timeout:g}s: {method} {path}")


class GitLabTransportError(GitLabMcpError):
    """The connection to GitLab failed before a response was received."""


def format_issues(issues: list[dict[str, str]]) -> str:
    """Join field issues as ``path: message`` pairs."""
    return ", ".join(f"{item['path']}: {item['message']}" for item in issues)


class ArgumentValidationError(GitLabMcpError):
    """Tool arguments did not match the operation's input contract."""

    def __init__(self, tool: str, issues: list[dict[str, str]]) -> None:
        self.tool = tool
        self.issues = issues
        super().__init__(f"Invalid arguments: {format_issues(issues)}")


class ResponseValidationError(GitLabMcpError):
    """A GitLab payload did not match the expected response shape."""

    def __init__(self, model_name: str, issues: list[dict[str, str]]) -> None:
        self.model_name = model_name
        self.issues = issues
        super().__init__(f"Unexpected GitLab response for {model_name}: {format_issues(issues)}")


class InvalidPathError(GitLabMcpError):
    """A file path was rejected by GitLab as malformed."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(
            f"Invalid file path format for '{file_path}'. "
            "Make sure the path is correct and properly formatted."
        )


ERROR_NAMES = {
    METHOD_NOT_FOUND: "method_not_found",
    INVALID_PARAMS: "invalid_params",
    INTERNAL_ERROR: "internal_error",
}


__all__ = [
    "ArgumentValidationError",
    "ConfigError",
    "ERROR_NAMES",
    "FILE_PATH_HINT",
    "GitLabApiError",
    "GitLabMcpError",
    "GitLabTimeoutError",
    "GitLabTransportError",
    "InvalidPathError",
    "RateLimitExceeded",
    "ResponseValidationError",
    "format_issues",
]
