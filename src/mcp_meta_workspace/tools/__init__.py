# File: src/mcp_meta_workspace/tools/__init__.py
from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from .batch import register_batch_tools
from .graph import register_graph_tools
from .projects import register_project_tools
from .repos import register_repo_tools
from .snapshots import register_snapshot_tools


def register(mcp: FastMCP) -> None:
    register_project_tools(mcp)
    register_repo_tools(mcp)
    register_graph_tools(mcp)
    register_snapshot_tools(mcp)
    register_batch_tools(mcp)
