"""GitLab tool handlers grouped by resource."""

from gitlab_mcp.tools import ToolDef, build_catalog

from . import issues, labels, links, milestones, notes, projects, repository


def default_catalog() -> dict[str, ToolDef]:
    """Every tool this server exposes, keyed by name."""
    return build_catalog(
        repository.TOOLS,
        projects.TOOLS,
        issues.TOOLS,
        notes.TOOLS,
        labels.TOOLS,
        milestones.TOOLS,
        links.TOOLS,
    )


__all__ = ["default_catalog"]
