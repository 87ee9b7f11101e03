"""Reading and writing the Claude Desktop MCP server configuration file."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from ophis.cfgmgr.utils import ConfigError

CONFIG_FILE_NAME = "claude_desktop_config.json"


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string")
    return value


def _strings(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"field '{key}' must be a list of strings")
    return list(value)


def _mapping(data: dict, key: str) -> dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        raise ValueError(f"field '{key}' must be an object of strings")
    return dict(value)


def _object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


@dataclass
class ClaudeServer:
    """One MCP server entry."""

    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result: dict = {"command": self.command}
        if self.args:
            result["args"] = list(self.args)
        if self.env:
            result["env"] = dict(sorted(self.env.items()))
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "ClaudeServer":
        data = _object(data, "server entry")
        return cls(_text(data, "command"), _strings(data, "args"), _mapping(data, "env"))


@dataclass
class ClaudeConfig:
    """The Claude Desktop configuration, as far as MCP servers go."""

    mcp_servers: dict[str, ClaudeServer] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "mcpServers": {name: s.to_dict() for name, s in sorted(self.mcp_servers.items())}
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ClaudeConfig":
        data = _object(data, "configuration")
        servers = data.get("mcpServers") or {}
        servers = _object(servers, "mcpServers")
        return cls({name: ClaudeServer.from_dict(s) for name, s in servers.items()})


def _user_home() -> Optional[str]:
    home = os.environ.get("USERPROFILE" if sys.platform == "win32" else "HOME")
    return home or None


def default_config_path() -> str:
    """Where Claude Desktop keeps its configuration on this platform."""
    if sys.platform == "darwin":
        home = _user_home()
        if home is None:
            return os.path.join(
                "/Users", os.environ.get("USER", ""), "Library", "Application Support",
                "Claude", CONFIG_FILE_NAME,
            )
        return os.path.join(home, "Library", "Application Support", "Claude", CONFIG_FILE_NAME)
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA", "")
        if not app_data:
            profile = os.environ.get("USERPROFILE", "")
            if profile:
                app_data = os.path.join(profile, "AppData", "Roaming")
            else:
                app_data = "C:\\Users\\Default\\AppData\\Roaming"
        return os.path.join(app_data, "Claude", CONFIG_FILE_NAME)
    home = _user_home()
    if home is None:
        return os.path.join(
            "/home", os.environ.get("USER", ""), ".config", "Claude", CONFIG_FILE_NAME
        )
    config_dir = os.environ.get("XDG_CONFIG_HOME") or os.path.join(home, ".config")
    return os.path.join(config_dir, "Claude", CONFIG_FILE_NAME)


class ClaudeConfigManager:
    """Loads, edits and saves one Claude configuration file."""

    def __init__(self, config_path: str = "") -> None:
        self.config_path = config_path or default_config_path()

    def load_config(self) -> ClaudeConfig:
        """Read the file; a missing file is an empty configuration."""
        try:
            with open(self.config_path, "rb") as fh:
                raw = fh.read()
        except FileNotFoundError:
            return ClaudeConfig()
        except OSError as exc:
            raise ConfigError(
                f"failed to read Claude configuration file at '{self.config_path}': {exc}"
            ) from exc
        try:
            return ClaudeConfig.from_dict(json.loads(raw))
        except ValueError as exc:
            raise ConfigError(
                f"failed to parse Claude configuration file at '{self.config_path}': "
                f"invalid JSON format: {exc}"
            ) from exc

    def save_config(self, config: ClaudeConfig) -> None:
        directory = os.path.dirname(self.config_path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise ConfigError(
                f"failed to create Claude configuration directory at '{directory}': {exc}"
            ) from exc
        text = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
        try:
            with open(self.config_path, "w", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            raise ConfigError(
                f"failed to write Claude configuration file at '{self.config_path}': {exc}"
            ) from exc

    def add_server(self, name: str, server: ClaudeServer) -> None:
        """Add or replace a server entry."""
        config = self.load_config()
        config.mcp_servers[name] = server
        self.save_config(config)

    def remove_server(self, name: str) -> None:
        config = self.load_config()
        config.mcp_servers.pop(name, None)
        self.save_config(config)

    def has_server(self, name: str) -> bool:
        return name in self.load_config().mcp_servers

    def backup_config(self) -> None:
        """Copy the file to ``<path>.backup`` if it exists."""
        if not os.path.exists(self.config_path):
            return
        backup_path = self.config_path + ".backup"
        try:
            with open(self.config_path, "rb") as fh:
                data = fh.read()
        except OSError as exc:
            raise ConfigError(
                f"failed to read Claude configuration file for backup at '{self.config_path}': "
                f"{exc}"
            ) from exc
        try:
            with open(backup_path, "wb") as fh:
                fh.write(data)
        except OSError as exc:
            raise ConfigError(
                f"failed to write backup configuration file at '{backup_path}': {exc}"
            ) from exc