# File: src/mcp_meta_workspace/tools/graph.py
from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ..settings import Settings
from .common import open_workspace, run_tool


def analyze_impact(project: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return open_workspace(settings).analyze_impact(project).model_dump()


def execution_order(
    tag: Optional[str] = None,
    allow_cycles: bool = False,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    ws = open_workspace(settings)
    strict = False if allow_cycles else None
    return ws.execution_order(tag, strict=strict).model_dump()


def register_graph_tools(mcp: FastMCP) -> None:
    @mcp.tool(name="meta.graph.impact", title="Analyze Change Impact")
    async def meta_graph_impact(project: str) -> Dict[str, Any]:
        """Direct and transitive dependents of a project."""
        return await run_tool("meta.graph.impact", analyze_impact, project=project)

    @mcp.tool(name="meta.graph.execution_order", title="Dependency Execution Order")
    async def meta_graph_execution_order(tag: Optional[str] = None, allow_cycles: bool = False) -> Dict[str, Any]:
        """
        Topological order, dependencies first. A dependency cycle is an
        error unless allow_cycles is set, in which case the projects caught
        in or behind the cycle are left out and listed in skipped_cycles.
        """
        return await run_tool(
            "meta.graph.execution_order", execution_order, tag=tag, allow_cycles=allow_cycles
        )
