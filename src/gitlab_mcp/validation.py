"""Contract checks for tool arguments and GitLab payloads."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from gitlab_mcp.errors import ArgumentValidationError, ResponseValidationError

_M = TypeVar("_M", bound=BaseModel)


def collect_issues(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten every pydantic error into ``{"path", "message"}`` entries."""
    issues: list[dict[str, str]] = []
    for error in exc.errors(include_url=False):
        path = ".".join(str(part) for part in error["loc"]) or "(root)"
        issues.append({"path": path, "message": error["msg"]})
    return issues


def parse_arguments(tool: str, model: type[_M], arguments: dict[str, Any]) -> _M:
    """Validate raw tool arguments against ``model``.

    Raises:
        ArgumentValidationError: Listing every offending field.
    """
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        raise ArgumentValidationError(tool, collect_issues(exc)) from None


@lru_cache(maxsize=None)
def _adapter(contract: Any) -> TypeAdapter[Any]:
    return TypeAdapter(contract)


def _contract_name(contract: Any) -> str:
    return getattr(contract, "__name__", None) or str(contract)


def parse_response(contract: Any, payload: Any) -> Any:
    """Validate a decoded GitLab payload and return the typed value.

    ``contract`` may be a model class or any typing construct pydantic accepts,
    such as ``list[GitLabIssue]``.

    Raises:
        ResponseValidationError: If the payload does not fit the contract.
    """
    try:
        return _adapter(contract).validate_python(payload)
    except ValidationError as exc:
        raise ResponseValidationError(_contract_name(contract), collect_issues(exc)) from None


def dump_response(contract: Any, payload: Any) -> Any:
    """Validate ``payload`` and return its JSON-compatible form."""
    adapter = _adapter(contract)
    return adapter.dump_python(parse_response(contract, payload), mode="json")
