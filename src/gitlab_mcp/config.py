"""Process-wide settings, read once from the environment at startup."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from gitlab_mcp.errors import ConfigError

DEFAULT_API_URL = "https://gitlab.com/api/v4"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MAX_RESPONSE_BYTES = 5_000_000
TOKEN_ENV = "GITLAB_PERSONAL_ACCESS_TOKEN"

_N = TypeVar("_N", int, float)


@dataclass(frozen=True)
class Settings:
    """Immutable GitLab connection settings."""

    token: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES

    def __post_init__(self) -> None:
        if not self.token or not self.token.strip():
            raise ConfigError(f"{TOKEN_ENV} environment variable is not set")
        if self.timeout <= 0:
            raise ConfigError("GITLAB_MCP_TIMEOUT must be greater than 0")
        if self.max_attempts < 1:
            raise ConfigError("GITLAB_MCP_MAX_ATTEMPTS must be at least 1")
        if self.max_response_bytes < 1_000 or self.max_response_bytes > 50_000_000:
            raise ConfigError("GITLAB_MCP_MAX_RESPONSE_BYTES must be between 1000 and 50000000")
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ConfigError: If the token is missing or a numeric value is invalid.
        """
        env = os.environ if environ is None else environ
        return cls(
            token=(env.get(TOKEN_ENV) or "").strip(),
            api_url=(env.get("GITLAB_API_URL") or "").strip() or DEFAULT_API_URL,
            timeout=_number(env, "GITLAB_MCP_TIMEOUT", DEFAULT_TIMEOUT, float),
            max_attempts=_number(env, "GITLAB_MCP_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, int),
            max_response_bytes=_number(
                env, "GITLAB_MCP_MAX_RESPONSE_BYTES", DEFAULT_MAX_RESPONSE_BYTES, int
            ),
        )


def _number(env: Mapping[str, str], key: str, default: _N, cast: Callable[[str], _N]) -> _N:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


__all__ = ["Settings", "DEFAULT_API_URL", "TOKEN_ENV"]
