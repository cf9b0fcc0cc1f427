"""Async GitLab REST client with bounded timeouts, retries and error normalization."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from gitlab_mcp.config import Settings
from gitlab_mcp.errors import (
    GitLabApiError,
    GitLabMcpError,
    GitLabTimeoutError,
    GitLabTransportError,
    RateLimitExceeded,
    ResponseValidationError,
)
from gitlab_mcp.telemetry import set_span_attribute, trace_span

logger = logging.getLogger("gitlab_mcp.client")

DEFAULT_RETRY_AFTER = 60.0
BACKOFF_BASE_SECONDS = 1.0
# Only these verbs are retried on 5xx, timeouts and connection failures.
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})
_PROBLEM_PATH_CHARS = ("#", "?", "[", "]")

SleepFn = Callable[[float], Awaitable[None]]
QueryValue = str | int | float | bool | None


def encode_segment(value: str | int) -> str:
    """Percent-encode ``value`` as a single path segment, slashes included."""
    return quote(str(value), safe="")


def encode_project_id(project_id: str | int) -> str:
    """Encode a numeric id or ``group/project`` path for use in a URL path."""
    return encode_segment(project_id)


def encode_file_path(file_path: str) -> str:
    """Percent-encode each segment of a repository path, keeping ``/`` literal."""
    return quote(file_path, safe="/")


def project_path(project_id: str | int, *parts: str | int) -> str:
    """Build ``/projects/<encoded id>/<parts...>``."""
    path = f"/projects/{encode_project_id(project_id)}"
    for part in parts:
        path += f"/{part}"
    return path


def warn_if_problem_path(file_path: str) -> None:
    if any(char in file_path for char in _PROBLEM_PATH_CHARS):
        logger.warning(
            "File path '%s' contains special characters that may cause issues with "
            "the GitLab API. Consider renaming the file.",
            file_path,
        )


def parse_retry_after(value: str | None) -> float:
    """Seconds to wait from a ``Retry-After`` header; unusable values fall back to 60."""
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_RETRY_AFTER
    return seconds


def _clean_params(params: Mapping[str, QueryValue] | None) -> dict[str, str] | None:
    if not params:
        return None
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)
    return cleaned or None


def _body_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def api_error_from_response(response: httpx.Response) -> GitLabApiError:
    """Normalize a non-2xx response into a :class:`GitLabApiError`."""
    text = response.text
    remote_message: str | None = None
    body: Any = text or None
    try:
        body = json.loads(text)
    except ValueError:
        remote_message = text or None
    else:
        if isinstance(body, dict):
            detail = body.get("message") or body.get("error")
            if detail is not None and not isinstance(detail, str):
                detail = json.dumps(detail, ensure_ascii=True)
            remote_message = detail or None
    return GitLabApiError(response.status_code, response.reason_phrase, remote_message, body)


def decode_json(response: httpx.Response) -> Any:
    """Decode a successful response body; empty bodies decode to ``None``.

    Raises:
        ResponseValidationError: If a non-empty body is not JSON.
    """
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        raise ResponseValidationError(
            "JSON", [{"path": "(root)", "message": "response body is not valid JSON"}]
        ) from None


class GitLabClient:
    """Executes GitLab REST calls for the tool handlers.

    Each call is raced against ``settings.timeout`` and retried according to
    the rules below. Retry counters live on the stack of a single call.

    - 429: sleep for ``Retry-After`` (default 60s) and retry, any verb.
    - 5xx, timeouts, connection failures: linear backoff for GET/HEAD only.
    - other non-2xx: raised immediately.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=settings.api_url,
            headers={
                "Authorization": f"Bearer {settings.token}",
                "Accept": "application/json",
            },
            timeout=None,
            transport=transport,
        )

    async def __aenter__(self) -> GitLabClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, QueryValue] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one logical request and return the successful response.

        Raises:
            GitLabApiError: Non-2xx response (``RateLimitExceeded`` for 429).
            GitLabTimeoutError: No response within the timeout on the last attempt.
            GitLabTransportError: Connection failure on the last attempt.
        """
        method = method.upper()
        query = _clean_params(params)
        headers = None if method == "GET" else {"Content-Type": "application/json"}
        max_attempts = self.settings.max_attempts
        retry_transient = method in IDEMPOTENT_METHODS

        with trace_span(
            f"gitlab/{method}",
            attributes={"http.method": method, "gitlab_mcp.path": path},
        ) as span:
            attempt = 0
            while True:
                attempt += 1
                logger.debug("GitLab %s %s (attempt %d/%d)", method, path, attempt, max_attempts)
                failure: GitLabMcpError
                try:
                    response = await asyncio.wait_for(
                        self._http.request(method, path, params=query, json=json, headers=headers),
                        timeout=self.settings.timeout,
                    )
                except asyncio.TimeoutError:
                    failure = GitLabTimeoutError(method, path, self.settings.timeout)
                except httpx.TransportError as exc:
                    failure = GitLabTransportError(f"GitLab request failed: {method} {path}: {exc}")
                else:
                    set_span_attribute(span, "gitlab_mcp.attempts", attempt)
                    set_span_attribute(span, "http.status_code", response.status_code)
                    if response.is_success:
                        return response
                    if response.status_code == 429:
                        if attempt >= max_attempts:
                            raise RateLimitExceeded(
                                attempt, response.reason_phrase, _body_or_text(response)
                            )
                        delay = parse_retry_after(response.headers.get("Retry-After"))
                        logger.warning(
                            "GitLab rate limit on %s %s; retrying in %.1fs (attempt %d/%d)",
                            method,
                            path,
                            delay,
                            attempt,
                            max_attempts,
                        )
                        await self._sleep(delay)
                        continue
                    failure = api_error_from_response(response)
                    if response.status_code < 500:
                        raise failure

                if not retry_transient or attempt >= max_attempts:
                    raise failure
                delay = attempt * BACKOFF_BASE_SECONDS
                logger.warning(
                    "Retrying %s %s in %.1fs after failure: %s", method, path, delay, failure
                )
                await self._sleep(delay)

    async def get_json(self, path: str, *, params: Mapping[str, QueryValue] | None = None) -> Any:
        return decode_json(await self.request("GET", path, params=params))

    async def post_json(
        self,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, QueryValue] | None = None,
    ) -> Any:
        return decode_json(await self.request("POST", path, json=json, params=params))

    async def put_json(self, path: str, *, json: Any = None) -> Any:
        return decode_json(await self.request("PUT", path, json=json))

    async def delete(self, path: str, resource: str) -> dict[str, str]:
        """Delete ``path`` and describe the outcome as ``{"message": ...}``."""
        response = await self.request("DELETE", path)
        default = f"{resource} deleted successfully"
        if response.status_code == 204 or not response.content:
            return {"message": default}
        try:
            payload = response.json()
        except ValueError:
            return {"message": default}
        if isinstance(payload, dict) and "message" in payload:
            return {"message": str(payload["message"])}
        return {"message": f"{resource} deleted"}



__all__ = [
    "GitLabClient",
    "api_error_from_response",
    "decode_json",
    "encode_file_path",
    "encode_segment",
    "encode_project_id",
    "parse_retry_after",
    "project_path",
]
