"""Turning command output into tool results."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ophis.mcp import CallToolRequest, CallToolResult, error_result, text_result

log = logging.getLogger(__name__)

Handler = Callable[[CallToolRequest, bytes, Optional[BaseException]], CallToolResult]


def default_handler(
    request: CallToolRequest, data: Optional[bytes], error: Optional[BaseException]
) -> CallToolResult:
    """Return output as text, or an error result when the command failed."""
    if isinstance(data, (bytes, bytearray)):
        output = bytes(data).decode("utf-8", errors="replace")
    else:
        output = data or ""
    if error is not None:
        log.error("command execution failed: tool=%s error=%s", request.name, error)
        message = f"command execution failed: {error}"
        if output:
            message += f"\nOutput: {output}"
        return error_result(message)
    return text_result(output)


def with_handler(handler: Handler):
    """Generator option setting a custom output handler."""

    def option(generator) -> None:
        generator.handler = handler

    return option