"""Manage MCP server entries in Claude Desktop and VS Code configuration files."""