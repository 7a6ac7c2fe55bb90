"""MCP server exposing multi-repository workspace operations."""

__version__ = "0.1.0"
