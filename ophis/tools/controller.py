"""Executing tools by running the program itself with rebuilt arguments."""

from __future__ import annotations

import logging
import math
import os
import shlex
import subprocess
import sys
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ophis.mcp import CallToolRequest, CallToolResult, Tool
from ophis.tools.handler import Handler, default_handler

log = logging.getLogger(__name__)

MCP_COMMAND_NAME = "mcp"
START_COMMAND_NAME = "start"
POSITIONAL_ARGS_PARAM = "args"
FLAGS_PARAM = "flags"


def _current_executable() -> list[str]:
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        return [sys.executable]
    path = os.path.abspath(argv0)
    if os.access(path, os.X_OK) and not path.endswith(".py"):
        return [path]
    return [sys.executable, path]


@dataclass
class Controller:
    """A tool together with how its output is handled."""

    tool: Tool
    handler: Optional[Handler] = None
    executable: Optional[Sequence[str]] = None

    def handle(
        self, request: CallToolRequest, data: Optional[bytes], error: Optional[BaseException]
    ) -> CallToolResult:
        return (self.handler or default_handler)(request, data, error)

    def execute(self, request: CallToolRequest) -> bytes:
        """Run the program and return combined output.

        Raises ``subprocess.CalledProcessError`` (with ``output``) on a non-zero exit.
        """
        command = [*(self.executable or _current_executable()), *self.build_command_args(request)]
        log.debug("executing command: tool=%s args=%s", self.tool.name, command)
        completed = subprocess.run(
            command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=True
        )
        return completed.stdout

    def build_command_args(self, request: CallToolRequest) -> list[str]:
        message = request.get_arguments()
        args = self.tool.name.split("_")[1:]
        flags = message.get(FLAGS_PARAM)
        if isinstance(flags, dict):
            args.extend(build_flag_args(flags))
        positional = message.get(POSITIONAL_ARGS_PARAM)
        if isinstance(positional, str) and positional:
            args.extend(parse_argument_string(positional))
        return args


def build_flag_args(flag_map: dict) -> list[str]:
    args: list[str] = []
    for name, value in flag_map.items():
        if not name or value is None:
            continue
        if isinstance(value, list):
            for item in value:
                args.extend(parse_flag_arg_value(name, item))
            continue
        args.extend(parse_flag_arg_value(name, value))
    return args


def _format_value(value: Any) -> str:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + " ".join(_format_value(v) for v in value) + "]"
    return str(value)


def parse_flag_arg_value(name: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, bool):
        return [f"--{name}"] if value else []
    return [f"--{name}", _format_value(value)]


def parse_argument_string(args_str: str) -> list[str]:
    """Split like a POSIX shell; fall back to whitespace splitting on bad quoting."""
    args_str = args_str.strip()
    if not args_str:
        return []
    try:
        return shlex.split(args_str, posix=True)
    except ValueError as exc:
        log.error("failed to parse argument string %r: %s", args_str, exc)
        return args_str.split()