"""Reading and writing VSCode MCP configuration files (workspace or user)."""

from __future__ import annotations

import enum
import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from ophis.cfgmgr.utils import ConfigError

CONFIG_FILE_NAME = "mcp.json"


class ConfigType(enum.Enum):
    """Which VSCode configuration file is meant."""

    WORKSPACE = "workspace"
    USER = "user"


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
class Input:
    """An input variable that VSCode prompts for."""

    type: str
    id: str
    description: str = ""
    password: bool = False

    def to_dict(self) -> dict:
        result: dict = {"type": self.type, "id": self.id, "description": self.description}
        if self.password:
            result["password"] = True
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "Input":
        data = _object(data, "input")
        secret_flag = data.get("password")
        if secret_flag is not None and not isinstance(secret_flag, bool):
            raise ValueError("field 'password' must be a boolean")
        return cls(
            _text(data, "type"), _text(data, "id"), _text(data, "description"), bool(secret_flag)
        )


@dataclass
class VSCodeServer:
    """One MCP server entry for VSCode."""

    type: str = ""
    command: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.type:
            result["type"] = self.type
        result["command"] = self.command
        if self.args:
            result["args"] = list(self.args)
        if self.env:
            result["env"] = dict(sorted(self.env.items()))
        if self.url:
            result["url"] = self.url
        if self.headers:
            result["headers"] = dict(sorted(self.headers.items()))
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "VSCodeServer":
        data = _object(data, "server entry")
        return cls(
            type=_text(data, "type"),
            command=_text(data, "command"),
            args=_strings(data, "args"),
            env=_mapping(data, "env"),
            url=_text(data, "url"),
            headers=_mapping(data, "headers"),
        )


@dataclass
class VSCodeConfig:
    """The contents of a VSCode ``mcp.json`` file."""

    inputs: list[Input] = field(default_factory=list)
    servers: dict[str, VSCodeServer] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.inputs:
            result["inputs"] = [i.to_dict() for i in self.inputs]
        result["servers"] = {name: s.to_dict() for name, s in sorted(self.servers.items())}
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "VSCodeConfig":
        data = _object(data, "configuration")
        inputs = data.get("inputs") or []
        if not isinstance(inputs, list):
            raise ValueError("field 'inputs' must be a list")
        servers = _object(data.get("servers") or {}, "servers")
        return cls(
            [Input.from_dict(i) for i in inputs],
            {name: VSCodeServer.from_dict(s) for name, s in servers.items()},
        )


def _user_home() -> Optional[str]:
    home = os.environ.get("USERPROFILE" if sys.platform == "win32" else "HOME")
    return home or None


def default_workspace_config_path() -> str:
    """``.vscode/mcp.json`` under the working directory."""
    try:
        working_dir = os.getcwd()
    except OSError:
        return os.path.join(".vscode", CONFIG_FILE_NAME)
    return os.path.join(working_dir, ".vscode", CONFIG_FILE_NAME)


def default_user_config_path() -> str:
    """The user-level VSCode ``mcp.json`` on this platform."""
    home = _user_home()
    if sys.platform == "darwin":
        base = home or os.path.join("/Users", os.environ.get("USER", ""))
        return os.path.join(base, "Library", "Application Support", "Code", "User", CONFIG_FILE_NAME)
    if sys.platform == "win32":
        base = home or os.environ.get("USERPROFILE", "")
        return os.path.join(base, "AppData", "Roaming", "Code", "User", CONFIG_FILE_NAME)
    base = home or os.path.join("/home", os.environ.get("USER", ""))
    return os.path.join(base, ".config", "Code", "User", CONFIG_FILE_NAME)


class VSCodeConfigManager:
    """Loads, edits and saves one VSCode MCP configuration file."""

    def __init__(self, config_path: str = "", config_type: ConfigType = ConfigType.USER) -> None:
        if not config_path:
            if config_type is ConfigType.WORKSPACE:
                config_path = default_workspace_config_path()
            else:
                config_path = default_user_config_path()
        self.config_path = config_path
        self.config_type = config_type

    def load_config(self) -> VSCodeConfig:
        """Read the file; a missing file is an empty configuration."""
        try:
            with open(self.config_path, "rb") as fh:
                raw = fh.read()
        except FileNotFoundError:
            return VSCodeConfig()
        except OSError as exc:
            raise ConfigError(
                f"failed to read VSCode configuration file at '{self.config_path}': {exc}"
            ) from exc
        try:
            return VSCodeConfig.from_dict(json.loads(raw))
        except ValueError as exc:
            raise ConfigError(
                f"failed to parse VSCode MCP configuration file at '{self.config_path}': "
                f"invalid JSON format: {exc}"
            ) from exc

    def save_config(self, config: VSCodeConfig) -> None:
        directory = os.path.dirname(self.config_path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise ConfigError(
                f"failed to create VSCode configuration directory at '{directory}': {exc}"
            ) from exc
        text = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
        try:
            with open(self.config_path, "w", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            raise ConfigError(
                f"failed to write VSCode configuration file at '{self.config_path}': {exc}"
            ) from exc

    def add_server(self, name: str, server: VSCodeServer) -> None:
        """Add or replace a server entry."""
        config = self.load_config()
        config.servers[name] = server
        self.save_config(config)

    def remove_server(self, name: str) -> None:
        config = self.load_config()
        config.servers.pop(name, None)
        self.save_config(config)

    def has_server(self, name: str) -> bool:
        return name in self.load_config().servers

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
                f"failed to read VSCode configuration file for backup at '{self.config_path}': "
                f"{exc}"
            ) from exc
        try:
            with open(backup_path, "wb") as fh:
                fh.write(data)
        except OSError as exc:
            raise ConfigError(
                f"failed to write backup configuration file at '{backup_path}': {exc}"
            ) from exc