"""Expose a command tree as MCP tools served over stdio."""

__version__ = "0.1.0"