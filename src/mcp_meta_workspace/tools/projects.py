# File: src/mcp_meta_workspace/tools/projects.py
from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ..settings import Settings
from .common import open_workspace, run_tool


def list_projects(tag: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    ws = open_workspace(settings)
    projects = ws.projects(tag)
    return {
        "workspace": str(ws.root),
        "count": len(projects),
        "tag_filter": tag,
        "projects": [p.model_dump() for p in projects],
    }


def get_project_path(project: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    ws = open_workspace(settings)
    path = ws.project_path(project)
    return {"project": project, "path": str(path), "exists": path.exists()}


def get_config(settings: Optional[Settings] = None) -> Dict[str, Any]:
    ws = open_workspace(settings)
    return {"config_path": str(ws.config_path), "content": ws.read_config()}


def register_project_tools(mcp: FastMCP) -> None:
    @mcp.tool(name="meta.projects.list", title="List Workspace Projects")
    async def meta_projects_list(tag: Optional[str] = None) -> Dict[str, Any]:
        """List the projects declared in the workspace manifest, optionally by tag."""
        return await run_tool("meta.projects.list", list_projects, tag=tag)

    @mcp.tool(name="meta.project.path", title="Resolve Project Path")
    async def meta_project_path(project: str) -> Dict[str, Any]:
        """Absolute path of one project and whether it exists on disk."""
        return await run_tool("meta.project.path", get_project_path, project=project)

    @mcp.tool(name="meta.config.get", title="Read Workspace Manifest")
    async def meta_config_get() -> Dict[str, Any]:
        """Raw contents of the workspace manifest."""
        return await run_tool("meta.config.get", get_config)
