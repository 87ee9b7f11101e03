"""The ``claude`` command group: enable, disable and list Claude Desktop MCP servers."""

from __future__ import annotations

import os

from ophis.cfgmgr.claude_config import ClaudeConfigManager, ClaudeServer
from ophis.cfgmgr.utils import (
    ConfigError,
    current_executable,
    derive_server_name,
    get_executable_server_name,
    validate_executable,
)
from ophis.command import Command
from ophis.tools.controller import MCP_COMMAND_NAME, START_COMMAND_NAME


def _format_list(items: list[str]) -> str:
    return "[" + " ".join(items) + "]"


def _format_map(mapping: dict[str, str]) -> str:
    return "map[" + " ".join(f"{key}:{value}" for key, value in sorted(mapping.items())) + "]"


def enable_server(config_path: str = "", log_level: str = "", server_name: str = "") -> bool:
    """Register the running program with Claude Desktop.

    Returns ``True`` if the entry was added, ``False`` if it already existed.
    """
    executable_path = validate_executable(current_executable())
    manager = ClaudeConfigManager(config_path)

    name = server_name or derive_server_name(executable_path)
    if not name:
        raise ConfigError(
            "MCP server name cannot be empty: unable to derive name from executable path "
            f"'{executable_path}'"
        )

    try:
        exists = manager.has_server(name)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to check if MCP server '{name}' exists in Claude configuration: {exc}"
        ) from exc
    if exists:
        print(f"MCP server '{name}' is already enabled")
        return False

    args = [MCP_COMMAND_NAME, START_COMMAND_NAME]
    if log_level:
        args += ["--log-level", log_level]
    server = ClaudeServer(executable_path, args)

    try:
        manager.backup_config()
    except ConfigError as exc:
        print(f"Warning: failed to create backup: {exc}")

    try:
        manager.add_server(name, server)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to add MCP server '{name}' to Claude configuration: {exc}"
        ) from exc

    print(f"Successfully enabled MCP server '{name}'")
    print(f"Executable: {executable_path}")
    print(f"Args: {_format_list(server.args)}")
    print("\nTo use this server, restart Claude Desktop.")
    return True


def disable_server(config_path: str = "", server_name: str = "") -> bool:
    """Remove a server entry from Claude Desktop.

    Returns ``True`` if the entry was removed, ``False`` if it was not there.
    """
    manager = ClaudeConfigManager(config_path)
    name = get_executable_server_name(server_name)

    try:
        exists = manager.has_server(name)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to check if MCP server '{name}' exists in Claude configuration: {exc}"
        ) from exc
    if not exists:
        print(f"MCP server '{name}' is not currently enabled")
        return False

    try:
        manager.backup_config()
    except ConfigError as exc:
        print(f"Warning: failed to create backup: {exc}")

    try:
        manager.remove_server(name)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to remove MCP server '{name}' from Claude configuration: {exc}"
        ) from exc

    print(f"Successfully disabled MCP server '{name}'")
    print("\nTo apply changes, restart Claude Desktop.")
    return True


def list_servers(config_path: str = "") -> None:
    """Print the servers configured for Claude Desktop."""
    manager = ClaudeConfigManager(config_path)
    try:
        config = manager.load_config()
    except ConfigError as exc:
        raise ConfigError(f"failed to load Claude configuration: {exc}") from exc

    print(f"Claude MCP Configuration File: {manager.config_path}\n")

    if not config.mcp_servers:
        print("No MCP servers are currently configured.")
        print("\nTo enable this application as an MCP server, run:")
        print("  <your-app> mcp enable")
        return

    print(f"Configured MCP servers ({len(config.mcp_servers)}):\n")
    for name, server in sorted(config.mcp_servers.items()):
        print(f"  📦 {name}")
        print(f"     Command: {server.command}")
        if server.args:
            print(f"     Args: {_format_list(server.args)}")
        if server.env:
            print(f"     Environment: {_format_map(server.env)}")
        if not os.path.exists(server.command):
            print("     ⚠️  Warning: Executable not found")
        print()

    print("💡 Remember to restart Claude Desktop after making changes to the configuration.")


def _enable_command() -> Command:
    cmd = Command(
        "enable",
        short="Enable the MCP server",
        long="Enable the MCP server by adding it to Claude's MCP config file",
        run=lambda c, _args: enable_server(
            c.get_flag("config-path"), c.get_flag("log-level"), c.get_flag("server-name")
        ),
    )
    cmd.add_flag("log-level", usage="Log level (debug, info, warn, error)")
    cmd.add_flag("config-path", usage="Path to Claude config file")
    cmd.add_flag(
        "server-name", usage="Name for the MCP server (default: derived from executable name)"
    )
    return cmd


def _disable_command() -> Command:
    cmd = Command(
        "disable",
        short="Disable the MCP server",
        long="Disable the MCP server by removing it from Claude's MCP config file",
        run=lambda c, _args: disable_server(c.get_flag("config-path"), c.get_flag("server-name")),
    )
    cmd.add_flag("config-path", usage="Path to Claude config file")
    cmd.add_flag(
        "server-name",
        usage="Name of the MCP server to remove (default: derived from executable name)",
    )
    return cmd


def _list_command() -> Command:
    cmd = Command(
        "list",
        short="List configured MCP servers",
        long="List all MCP servers currently configured in Claude's MCP config file",
        run=lambda c, _args: list_servers(c.get_flag("config-path")),
    )
    cmd.add_flag("config-path", usage="Path to Claude config file")
    return cmd


def command() -> Command:
    """The ``claude`` command with its ``enable``, ``disable`` and ``list`` subcommands."""
    cmd = Command(
        "claude",
        short="Manage Claude MCP server configuration",
        long="Manage MCP servers for Claude by configuring .claude_desktop_config.json",
    )
    cmd.add_command(_enable_command(), _disable_command(), _list_command())
    return cmd