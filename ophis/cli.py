"""The ``mcp`` command group that turns a command tree into an MCP server."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from ophis.bridge import BridgeConfig, Manager
from ophis.cfgmgr import claude_cli, vscode_cli
from ophis.command import Command, CommandError
from ophis.tools.controller import MCP_COMMAND_NAME, START_COMMAND_NAME
from ophis.tools.generator import Generator

TOOLS_FILE_NAME = "mcp-tools.json"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Config:
    """User options for the MCP commands.

    ``generator`` controls how commands become tools; when ``None`` the default
    generator drops hidden, ``mcp``, ``help`` and ``completion`` commands.
    ``log_level`` is the level for the server's logging, which always goes to
    stderr. ``server_options`` are callables applied to the MCP server.
    """

    generator: Optional[Generator] = None
    log_level: Optional[int] = None
    server_options: list = field(default_factory=list)

    def bridge_config(self, cmd: Command) -> BridgeConfig:
        """Bridge settings for ``cmd``, a direct subcommand of the ``mcp`` command."""
        root = cmd.parent.parent if cmd.parent is not None else None
        return BridgeConfig(
            root_cmd=root,
            generator=self.generator,
            log_level=self.log_level,
            server_options=list(self.server_options),
        )


def parse_log_level(level: str) -> int:
    """Map debug, info, warn or error (any case) to a logging level; info otherwise."""
    return _LEVELS.get(level.lower(), logging.INFO)


def export_tools(config: Optional[Config], cmd: Command, path: str = TOOLS_FILE_NAME) -> int:
    """Write the tools of ``cmd``'s command tree to ``path`` as JSON; return their count."""
    config = config if config is not None else Config()
    controllers = config.bridge_config(cmd).tools()
    payload = [controller.tool.to_dict() for controller in controllers]
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
    except OSError as exc:
        raise CommandError(f"failed to create or open {path} file: {exc}") from exc
    cmd.echo(f"Successfully exported {len(controllers)} tools to {path}\n")
    return len(controllers)


def _start_command(config: Optional[Config]) -> Command:
    def run(cmd: Command, _args: list) -> None:
        cfg = config if config is not None else Config()
        level = cmd.get_flag("log-level")
        if level:
            cfg.log_level = parse_log_level(level)
        try:
            manager = Manager(cfg.bridge_config(cmd))
        except ValueError as exc:
            raise ValueError(f"failed to create MCP server bridge: {exc}") from exc
        manager.start_server()

    cmd = Command(
        START_COMMAND_NAME,
        short="Start MCP (Model Context Protocol) server",
        long=(
            "Start an MCP server that exposes this application's commands to MCP clients.\n\n"
            "The MCP server will expose all available commands as tools that can be called\n"
            "by AI assistants and other MCP-compatible clients."
        ),
        run=run,
    )
    cmd.add_flag("log-level", usage="Log level (debug, info, warn, error)")
    return cmd


def _tools_command(config: Optional[Config]) -> Command:
    return Command(
        "tools",
        short="Export available MCP tools to JSON file",
        long=f"Export all available MCP tools to {TOOLS_FILE_NAME} for inspection and debugging.",
        run=lambda cmd, _args: export_tools(config, cmd),
    )


def command(config: Optional[Config] = None) -> Command:
    """The ``mcp`` command, to be added to an application's root command."""
    cmd = Command(MCP_COMMAND_NAME)
    cmd.add_command(
        _start_command(config),
        _tools_command(config),
        claude_cli.command(),
        vscode_cli.command(),
    )
    return cmd