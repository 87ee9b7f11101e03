"""The ``vscode`` command group: enable, disable and list VSCode MCP servers."""

from __future__ import annotations

from ophis.cfgmgr.utils import (
    ConfigError,
    current_executable,
    derive_server_name,
    get_executable_server_name,
    validate_executable,
)
from ophis.cfgmgr.vscode_config import ConfigType, VSCodeConfigManager, VSCodeServer
from ophis.command import Command
from ophis.tools.controller import MCP_COMMAND_NAME, START_COMMAND_NAME


def _format_list(items: list[str]) -> str:
    return "[" + " ".join(items) + "]"


def resolve_config_type(workspace: bool = False, config_type: str = "") -> ConfigType:
    """Pick the configuration type from the ``--workspace`` and ``--config-type`` flags."""
    if workspace or config_type == "workspace":
        return ConfigType.WORKSPACE
    if config_type in ("", "user"):
        return ConfigType.USER
    raise ConfigError(f"invalid config type '{config_type}': must be 'workspace' or 'user'")


def enable_server(
    config_path: str = "",
    log_level: str = "",
    server_name: str = "",
    workspace: bool = False,
    config_type: str = "",
) -> bool:
    """Register the running program with VSCode.

    Returns ``True`` if the entry was added, ``False`` if it already existed.
    """
    executable_path = validate_executable(current_executable())
    kind = resolve_config_type(workspace, config_type)
    manager = VSCodeConfigManager(config_path, kind)

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
            f"failed to check if MCP server '{name}' exists in VSCode configuration: {exc}"
        ) from exc
    if exists:
        print(f"MCP server '{name}' is already enabled in VSCode")
        return False

    args = [MCP_COMMAND_NAME, START_COMMAND_NAME]
    if log_level:
        args += ["--log-level", log_level]
    server = VSCodeServer(type="stdio", command=executable_path, args=args)

    try:
        manager.backup_config()
    except ConfigError as exc:
        print(f"Warning: failed to create backup: {exc}")

    try:
        manager.add_server(name, server)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to add MCP server '{name}' to VSCode configuration: {exc}"
        ) from exc

    print(f"Successfully enabled MCP server '{name}' in VSCode ({kind.value} configuration)")
    print(f"Executable: {executable_path}")
    print(f"Args: {_format_list(server.args)}")
    print(f"Configuration file: {manager.config_path}")
    print("\nTo use this server:")
    print("1. Open GitHub Copilot Chat")
    print("2. Use agent mode to access MCP tools")
    return True


def disable_server(
    config_path: str = "",
    server_name: str = "",
    workspace: bool = False,
    config_type: str = "",
) -> bool:
    """Remove a server entry from VSCode.

    Returns ``True`` if the entry was removed, ``False`` if it was not there.
    """
    kind = resolve_config_type(workspace, config_type)
    manager = VSCodeConfigManager(config_path, kind)
    name = get_executable_server_name(server_name)

    try:
        exists = manager.has_server(name)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to check if MCP server '{name}' exists in VSCode configuration: {exc}"
        ) from exc
    if not exists:
        print(f"MCP server '{name}' is not currently enabled in VSCode")
        return False

    try:
        manager.backup_config()
    except ConfigError as exc:
        print(f"Warning: failed to create backup: {exc}")

    try:
        manager.remove_server(name)
    except ConfigError as exc:
        raise ConfigError(
            f"failed to remove MCP server '{name}' from VSCode configuration: {exc}"
        ) from exc

    print(f"Successfully disabled MCP server '{name}' from VSCode ({kind.value} configuration)")
    print(f"Configuration file: {manager.config_path}")
    print("\nTo apply changes, restart VSCode or reload the window.")
    return True


def list_servers(config_path: str = "", workspace: bool = False, config_type: str = "") -> None:
    """Print the servers configured for VSCode."""
    kind = resolve_config_type(workspace, config_type)
    manager = VSCodeConfigManager(config_path, kind)
    try:
        config = manager.load_config()
    except ConfigError as exc:
        raise ConfigError(f"failed to load VSCode configuration: {exc}") from exc

    print(f"VSCode MCP Servers ({kind.value} configuration):")
    print(f"Configuration file: {manager.config_path}\n")

    if not config.servers:
        print("No MCP servers configured.")
        return

    for name, server in sorted(config.servers.items()):
        print(f"Server: {name}")
        print(f"  Type: {server.type}")
        if server.command:
            print(f"  Command: {server.command}")
        if server.url:
            print(f"  URL: {server.url}")
        if server.args:
            print(f"  Args: {_format_list(server.args)}")
        if server.env:
            print("  Environment:")
            for key, value in sorted(server.env.items()):
                print(f"    {key}: {value}")
        if server.headers:
            print("  Headers:")
            for key, value in sorted(server.headers.items()):
                print(f"    {key}: {value}")
        print()


def _add_type_flags(cmd: Command, verb: str) -> None:
    cmd.add_flag(
        "workspace",
        type="bool",
        usage=f"{verb} workspace settings (.vscode/mcp.json) instead of user settings",
    )
    cmd.add_flag("config-type", usage="Configuration type: 'workspace' or 'user' (default: user)")


def _enable_command() -> Command:
    cmd = Command(
        "enable",
        short="Enable the MCP server in VSCode",
        long=(
            "Enable the MCP server by adding it to VSCode's MCP configuration file "
            "(.vscode/mcp.json or user mcp.json)"
        ),
        run=lambda c, _args: enable_server(
            c.get_flag("config-path"),
            c.get_flag("log-level"),
            c.get_flag("server-name"),
            c.get_flag("workspace"),
            c.get_flag("config-type"),
        ),
    )
    cmd.add_flag("log-level", usage="Log level (debug, info, warn, error)")
    cmd.add_flag("config-path", usage="Path to VSCode config file")
    cmd.add_flag(
        "server-name", usage="Name for the MCP server (default: derived from executable name)"
    )
    _add_type_flags(cmd, "Add to")
    return cmd


def _disable_command() -> Command:
    cmd = Command(
        "disable",
        short="Disable the MCP server in VSCode",
        long=(
            "Disable the MCP server by removing it from VSCode's MCP configuration file "
            "(.vscode/mcp.json or user mcp.json)"
        ),
        run=lambda c, _args: disable_server(
            c.get_flag("config-path"),
            c.get_flag("server-name"),
            c.get_flag("workspace"),
            c.get_flag("config-type"),
        ),
    )
    cmd.add_flag("config-path", usage="Path to VSCode config file")
    cmd.add_flag(
        "server-name",
        usage="Name of the MCP server to remove (default: derived from executable name)",
    )
    _add_type_flags(cmd, "Remove from")
    return cmd


def _list_command() -> Command:
    cmd = Command(
        "list",
        short="List MCP servers in VSCode",
        long=(
            "List all configured MCP servers in VSCode's configuration file "
            "(.vscode/mcp.json or user mcp.json)"
        ),
        run=lambda c, _args: list_servers(
            c.get_flag("config-path"), c.get_flag("workspace"), c.get_flag("config-type")
        ),
    )
    cmd.add_flag("config-path", usage="Path to VSCode config file")
    _add_type_flags(cmd, "List from")
    return cmd


def command() -> Command:
    """The ``vscode`` command with its ``enable``, ``disable`` and ``list`` subcommands."""
    cmd = Command(
        "vscode",
        short="Manage VSCode MCP server configuration",
        long=(
            "Manage MCP servers in Visual Studio Code by configuring .vscode/mcp.json "
            "or user mcp.json"
        ),
    )
    cmd.add_command(_enable_command(), _disable_command(), _list_command())
    return cmd