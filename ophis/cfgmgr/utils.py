"""Helpers shared by the client configuration commands."""

from __future__ import annotations

import os
import stat
import sys


class ConfigError(Exception):
    """Raised when a client configuration cannot be read, written or derived."""


def current_executable() -> str:
    """Absolute path of the running program."""
    argv0 = sys.argv[0] if sys.argv else ""
    if argv0:
        return os.path.abspath(argv0)
    if sys.executable:
        return sys.executable
    raise ConfigError("failed to get executable path: the running program cannot be determined")


def validate_executable(executable_path: str) -> str:
    """Resolve symlinks and check that the result is an executable file."""
    try:
        resolved = os.path.realpath(executable_path, strict=True)
    except OSError as exc:
        raise ConfigError(
            f"failed to resolve executable symlinks at '{executable_path}': {exc}"
        ) from exc
    try:
        info = os.stat(resolved)
    except FileNotFoundError as exc:
        raise ConfigError(
            f"executable not found at path '{resolved}': ensure the binary is built and accessible"
        ) from exc
    except OSError as exc:
        raise ConfigError(f"failed to access executable at '{resolved}': {exc}") from exc
    if stat.S_IMODE(info.st_mode) & 0o111 == 0:
        raise ConfigError(f"file at '{resolved}' is not executable: check file permissions")
    return resolved


def _base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/" + os.sep)
    if not stripped:
        return os.sep
    return os.path.basename(stripped)


def derive_server_name(executable_path: str) -> str:
    """The file name of ``executable_path`` without its last extension."""
    name = _base(executable_path)
    dot = name.rfind(".")
    return name[:dot] if dot >= 0 else name


def get_executable_server_name(server_name: str) -> str:
    """``server_name`` if given, otherwise a name derived from the running program."""
    if server_name:
        return server_name
    executable_path = current_executable()
    derived = derive_server_name(executable_path)
    if not derived:
        raise ConfigError(
            "MCP server name cannot be empty: unable to derive name from executable path "
            f"'{executable_path}'"
        )
    return derived