"""MCP server exposing the GitLab REST API as tools."""

from __future__ import annotations

__version__ = "1.3.0"

from .server import main, run, server

__all__ = ["__version__", "main", "run", "server"]
