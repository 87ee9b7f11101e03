"""Serving a command tree's tools over MCP."""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional

from ophis.command import Command
from ophis.mcp import CallToolRequest, CallToolResult, MCPServer, serve_stdio
from ophis.tools.controller import Controller
from ophis.tools.generator import Generator, from_root_cmd

log = logging.getLogger(__name__)

ServerOption = Callable[[MCPServer], None]


class _StderrHandler(logging.StreamHandler):
    """Log handler installed by the bridge; always writes to the current stderr."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)


@dataclass
class BridgeConfig:
    """How a command tree is exposed as MCP tools and how the server behaves.

    ``generator`` defaults to one that drops hidden, ``mcp``, ``help`` and
    ``completion`` commands. ``server_options`` are applied to the server
    once it is created.
    """

    root_cmd: Optional[Command]
    generator: Optional[Generator] = None
    log_level: Optional[int] = None
    server_options: list = field(default_factory=list)

    def tools(self) -> list[Controller]:
        if self.generator is not None:
            return self.generator.from_root_cmd(self.root_cmd)
        return from_root_cmd(self.root_cmd)

    def setup_logging(self) -> None:
        """Send all logging to stderr, leaving stdout to the protocol."""
        root = logging.getLogger()
        for handler in [h for h in root.handlers if isinstance(h, _StderrHandler)]:
            root.removeHandler(handler)
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
        root.setLevel(self.log_level if self.log_level is not None else logging.INFO)


class Manager:
    """Owns the MCP server built from a bridge configuration."""

    def __init__(self, config: Optional[BridgeConfig]) -> None:
        if config is None:
            raise ValueError(
                "configuration cannot be None: must provide a BridgeConfig with a root command"
            )
        if config.root_cmd is None:
            raise ValueError(
                "root command cannot be None: BridgeConfig.root_cmd is required to register tools"
            )
        config.setup_logging()

        name = config.root_cmd.name()
        version = config.root_cmd.version
        log.info("creating MCP server: app_name=%s app_version=%s", name, version)
        self.server = MCPServer(name, version)
        for option in config.server_options:
            option(self.server)

        for controller in config.tools():
            self._register_tool(controller)

    def _register_tool(self, controller: Controller) -> None:
        log.debug("registering MCP tool: %s", controller.tool.name)

        def handler(request: CallToolRequest) -> CallToolResult:
            log.info(
                "MCP tool request received: tool=%s arguments=%s",
                controller.tool.name,
                request.arguments,
            )
            error: Optional[BaseException] = None
            try:
                data = controller.execute(request)
            except subprocess.CalledProcessError as exc:
                data, error = exc.output or b"", exc
            except OSError as exc:
                data, error = b"", exc
            return controller.handle(request, data, error)

        self.server.add_tool(controller.tool, handler)

    def start_server(self) -> None:
        """Serve over stdin and stdout until input ends."""
        serve_stdio(self.server)