# File: src/mcp_meta_workspace/transports/app.py
from __future__ import annotations

import contextlib
import os

import uvicorn
from starlette.applications import Starlette
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Mount, Route

from ..engine.workspace import Workspace
from ..errors import ConfigError
from ..logging import get_logger
from ..server import mcp
from ..settings import Settings

logger = get_logger("mcp.meta.app")

# FastMCP serves streamable HTTP at its default "/mcp" inside this app
mcp_app = mcp.streamable_http_app()


async def health(_request):
    body = {
        "status": "ok",
        "name": "mcp-meta-workspace",
        "transport": "streamable-http",
        "endpoint": "/mcp",
    }
    try:
        ws = Workspace.open(Settings())
        body["workspace"] = {"root": str(ws.root), "projects": len(ws.projects())}
    except ConfigError as e:
        body["status"] = "degraded"
        body["workspace"] = {"error": e.message}
    return JSONResponse(body, status_code=200)


async def root(_request):
    return PlainTextResponse("mcp-meta-workspace\ntransport: streamable-http at /mcp")


# Lifespan: start/stop the MCP session manager so POST /mcp works
@contextlib.asynccontextmanager
async def lifespan(_app: Starlette):
    async with contextlib.AsyncExitStack() as stack:
        await stack.enter_async_context(mcp.session_manager.run())
        logger.info("app.started")
        yield


# explicit routes first: the "/" mount matches every path
routes = [
    Route("/health", endpoint=health, methods=["GET"]),
    Route("/", endpoint=root, methods=["GET"]),
    Mount("/", app=mcp_app),
]

app = Starlette(routes=routes, lifespan=lifespan)

# Optional local run: `python -m mcp_meta_workspace.transports.app`
if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("MCP_HOST", "0.0.0.0"), port=int(os.getenv("MCP_PORT", "8000")), log_level="info")
