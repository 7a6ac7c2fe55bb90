# File: src/mcp_meta_workspace/tools/batch.py
from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ..settings import Settings
from .common import open_workspace, run_tool


def batch_execute(
    command: str,
    tag: Optional[str] = None,
    atomic: bool = False,
    require_snapshot: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    result = open_workspace(settings).batch_execute(
        command, tag=tag, atomic=atomic, require_snapshot=require_snapshot
    )
    return result.model_dump()


def register_batch_tools(mcp: FastMCP) -> None:
    @mcp.tool(name="meta.batch.execute", title="Batch Execute Across Projects")
    async def meta_batch_execute(
        command: str,
        tag: Optional[str] = None,
        atomic: bool = False,
        require_snapshot: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Run a shell command in every (tag-filtered) project, one at a time.
        atomic=true snapshots first, stops at the first failure and restores
        the snapshot; require_snapshot refuses to start an atomic run
        without that safety snapshot.
        """
        return await run_tool(
            "meta.batch.execute",
            batch_execute,
            command=command,
            tag=tag,
            atomic=atomic,
            require_snapshot=require_snapshot,
        )
