"""Minimal Model Context Protocol server types and a JSON-RPC stdio loop."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TextIO

log = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


@dataclass
class Tool:
    """A tool as advertised to MCP clients."""

    name: str
    description: str = ""
    input_schema: dict = field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class CallToolRequest:
    """A request to call a tool."""

    name: str
    arguments: Any = None
    method: str = "tools/call"

    def get_arguments(self) -> dict:
        return self.arguments if isinstance(self.arguments, dict) else {}


@dataclass
class CallToolResult:
    """The result of a tool call."""

    content: list = field(default_factory=list)
    is_error: bool = False

    def to_dict(self) -> dict:
        result: dict = {"content": list(self.content)}
        if self.is_error:
            result["isError"] = True
        return result


def text_result(text: str) -> CallToolResult:
    return CallToolResult([{"type": "text", "text": text}])


def error_result(text: str) -> CallToolResult:
    return CallToolResult([{"type": "text", "text": text}], is_error=True)


ToolHandler = Callable[[CallToolRequest], CallToolResult]


class _RPCError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _error(msg_id: Any, code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}


class MCPServer:
    """Holds registered tools and answers MCP JSON-RPC messages."""

    def __init__(self, name: str, version: str = "") -> None:
        self.name = name
        self.version = version
        self._tools: dict[str, tuple[Tool, ToolHandler]] = {}

    @property
    def tools(self) -> list[Tool]:
        return [tool for tool, _ in self._tools.values()]

    def add_tool(self, tool: Tool, handler: ToolHandler) -> None:
        self._tools[tool.name] = (tool, handler)

    def handle_message(self, message: Any) -> Optional[dict]:
        """Answer one decoded message; notifications yield ``None``."""
        if not isinstance(message, dict):
            return _error(None, INVALID_REQUEST, "invalid request")
        notification = "id" not in message
        msg_id = message.get("id")
        method = message.get("method")
        if not isinstance(method, str):
            return None if notification else _error(msg_id, INVALID_REQUEST, "invalid request")
        params = message.get("params") or {}
        try:
            result = self._dispatch(method, params)
        except _RPCError as exc:
            return None if notification else _error(msg_id, exc.code, exc.message)
        except Exception as exc:  # recover from handler failures
            log.exception("panic recovered in %s", method)
            return None if notification else _error(msg_id, INTERNAL_ERROR, str(exc))
        if notification:
            return None
        return {"jsonrpc": "2.0", "id": msg_id, "result": result}

    def _dispatch(self, method: str, params: dict) -> dict:
        if method == "initialize":
            return {
                "protocolVersion": params.get("protocolVersion") or PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": self.name, "version": self.version},
            }
        if method == "ping" or method.startswith("notifications/"):
            return {}
        if method == "tools/list":
            return {"tools": [tool.to_dict() for tool in self.tools]}
        if method == "tools/call":
            name = params.get("name")
            entry = self._tools.get(name) if isinstance(name, str) else None
            if entry is None:
                raise _RPCError(INVALID_PARAMS, f"tool '{name}' not found")
            _, handler = entry
            return handler(CallToolRequest(name, params.get("arguments"))).to_dict()
        raise _RPCError(METHOD_NOT_FOUND, f"method not found: {method}")

    def serve(self, stdin: TextIO, stdout: TextIO) -> None:
        """Read newline-delimited JSON-RPC messages until end of input."""
        for line in stdin:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                response: Optional[dict] = _error(None, PARSE_ERROR, "parse error")
            else:
                response = self.handle_message(message)
            if response is not None:
                stdout.write(json.dumps(response) + "\n")
                stdout.flush()


def serve_stdio(server: MCPServer) -> None:
    server.serve(sys.stdin, sys.stdout)