# File: src/mcp_meta_workspace/tools/common.py
from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Callable, Dict, Optional

from mcp.server.fastmcp.exceptions import ToolError

from ..engine.workspace import Workspace
from ..errors import MCPError
from ..logging import get_logger
from ..settings import Settings

log = get_logger("mcp.meta.tools")


def open_workspace(settings: Optional[Settings] = None) -> Workspace:
    return Workspace.open(settings or Settings())


async def run_tool(tool: str, fn: Callable[..., Dict[str, Any]], **kwargs: Any) -> Dict[str, Any]:
    """
    Run a blocking tool body on a worker thread with request/response logs.
    Engine errors become ToolError carrying the structured error payload.
    """
    t0 = time.time()
    log.info("tool.request", tool=tool, args={k: v for k, v in kwargs.items() if v is not None})
    try:
        out = await asyncio.to_thread(fn, **kwargs)
    except MCPError as e:
        log.warning("tool.error", tool=tool, error=e.message, code=e.code,
                    took_ms=int((time.time() - t0) * 1000))
        raise ToolError(json.dumps(e.to_error_payload(), ensure_ascii=False)) from e
    log.info("tool.response", tool=tool, took_ms=int((time.time() - t0) * 1000))
    return out
