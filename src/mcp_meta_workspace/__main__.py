# File: src/mcp_meta_workspace/__main__.py
from __future__ import annotations

import os
import sys

from .logging import configure_logging, get_logger
from .settings import Settings


def main() -> None:
    """
    Run the meta workspace MCP server using the official SDK runner.

    Examples:
      # stdio mode (default; what editors and MCP Inspector spawn)
      MCP_TRANSPORT=stdio python -m mcp_meta_workspace

      # streamable HTTP at 0.0.0.0:8000 mounted at /mcp
      MCP_TRANSPORT=streamable-http MCP_PORT=8000 python -m mcp_meta_workspace

      # point at a workspace other than the current directory
      META_WORKSPACE_ROOT=~/src/platform python -m mcp_meta_workspace
    """
    if any(a in ("-h", "--help") for a in sys.argv[1:]):
        sys.stderr.write("mcp-meta-workspace: MCP server for multi-repository workspaces.\n")
        sys.stderr.flush()
        return

    settings = Settings()
    configure_logging(settings.LOG_LEVEL, service_name="mcp-meta-workspace", structured=settings.LOG_STRUCTURED)
    log = get_logger("mcp.meta.main")

    # import after logging is configured so registration logs are rendered
    from .server import mcp

    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower()

    # Configure runner settings BEFORE run()
    host = os.getenv("MCP_HOST", "0.0.0.0")
    port = int(os.getenv("MCP_PORT", "8000"))
    mcp.settings.host = host
    mcp.settings.port = port

    if transport == "streamable-http":
        mcp.settings.streamable_http_path = os.getenv("MCP_MOUNT_PATH", "/mcp")
    elif transport == "sse":
        mcp.settings.sse_path = os.getenv("MCP_SSE_PATH", "/sse")

    # Optional stateless JSON mode for simple curl testing
    if os.getenv("MCP_STATELESS_JSON", "").lower() in {"1", "true", "yes"}:
        mcp.settings.stateless_http = True
        mcp.settings.json_response = True

    log.info("server.start", transport=transport, host=host, port=port, **settings.describe())
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
