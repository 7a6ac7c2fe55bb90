# File: src/mcp_meta_workspace/tools/snapshots.py
from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ..settings import Settings
from .common import open_workspace, run_tool


def snapshot_create(
    name: str,
    description: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    ws = open_workspace(settings)
    return ws.snapshots.create(name, ws.projects(), description=description).model_dump()


def snapshot_list(settings: Optional[Settings] = None) -> Dict[str, Any]:
    snapshots = open_workspace(settings).snapshots.list()
    return {
        "snapshots": [s.model_dump(mode="json") for s in snapshots],
        "count": len(snapshots),
    }


def snapshot_restore(name: str, force: bool = False, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return open_workspace(settings).snapshots.restore(name, force=force).model_dump()


def register_snapshot_tools(mcp: FastMCP) -> None:
    @mcp.tool(name="meta.snapshot.create", title="Create Workspace Snapshot")
    async def meta_snapshot_create(name: str, description: Optional[str] = None) -> Dict[str, Any]:
        """Record branch, HEAD commit and dirty flag of every working copy."""
        return await run_tool("meta.snapshot.create", snapshot_create, name=name, description=description)

    @mcp.tool(name="meta.snapshot.list", title="List Workspace Snapshots")
    async def meta_snapshot_list() -> Dict[str, Any]:
        return await run_tool("meta.snapshot.list", snapshot_list)

    @mcp.tool(name="meta.snapshot.restore", title="Restore Workspace Snapshot")
    async def meta_snapshot_restore(name: str, force: bool = False) -> Dict[str, Any]:
        """
        Checkout and hard-reset every recorded project. Dirty projects are
        refused unless force is set, in which case they are stashed first.
        Not atomic: projects are restored independently.
        """
        return await run_tool("meta.snapshot.restore", snapshot_restore, name=name, force=force)
