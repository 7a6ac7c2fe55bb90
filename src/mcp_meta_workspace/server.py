# File: src/mcp_meta_workspace/server.py
from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from .tools import register as register_tools

# Single FastMCP instance; __main__.py runs it via the official SDK runner
mcp = FastMCP("meta-workspace")

# Register tools once at import time
register_tools(mcp)
