"""Converting a command tree into tool controllers."""

from __future__ import annotations

import logging
from typing import Optional

from ophis.command import Command
from ophis.mcp import Tool
from ophis.tools.controller import MCP_COMMAND_NAME, Controller
from ophis.tools.filters import exclude, hidden
from ophis.tools.schema import description_from_command, input_schema

log = logging.getLogger(__name__)


class Generator:
    """Builds controllers from commands, applying filters and a handler.

    By default hidden commands and the ``mcp``, ``help`` and ``completion``
    commands are left out, and output is returned as plain text.
    """

    def __init__(self, *args) -> None:
        self.filters = [hidden(), exclude([MCP_COMMAND_NAME, "help", "completion"])]
        self.handler = None
        for option in args:
            option(self)

    def from_root_cmd(self, cmd: Optional[Command]) -> list[Controller]:
        tools = self._from_cmd(cmd, "")
        log.info("tool generation completed: %d tools", len(tools))
        return tools

    def _from_cmd(self, cmd: Optional[Command], parent_path: str) -> list[Controller]:
        if cmd is None:
            return []
        tool_name = f"{parent_path}_{cmd.name()}" if parent_path else cmd.name()
        tools: list[Controller] = []
        for sub in cmd.commands():
            if all(f(sub) for f in self.filters):
                tools.extend(self._from_cmd(sub, tool_name))
        if not cmd.is_runnable():
            return tools
        tool = Tool(tool_name, description_from_command(cmd), input_schema(cmd))
        tools.append(Controller(tool, self.handler))
        return tools


def from_root_cmd(cmd: Optional[Command]) -> list[Controller]:
    return Generator().from_root_cmd(cmd)