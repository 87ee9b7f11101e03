import io
import json
import logging
import sys

import pytest

from ophis.cli import Config, command, export_tools, parse_log_level
from ophis.command import Command
from ophis.tools.generator import Generator


@pytest.mark.parametrize(
    "level, expected",
    [
        ("debug", logging.DEBUG),
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("WARN", logging.WARNING),
        ("error", logging.ERROR),
        ("ERROR", logging.ERROR),
        ("unknown", logging.INFO),
        ("", logging.INFO),
    ],
)
def test_parse_log_level(level, expected):
    assert parse_log_level(level) == expected


def _app(config=None):
    root = Command("cli", short="CLI")
    get = Command("get", short="Get resources", run=lambda c, a: None)
    hidden = Command("secretcmd", short="Hidden", hidden=True, run=lambda c, a: None)
    root.add_command(get, hidden, command(config))
    return root


def _sub(cmd, name):
    return next(c for c in cmd.commands() if c.name() == name)


def test_command_has_subcommands():
    mcp = command(None)
    assert mcp.name() == "mcp"
    assert [c.name() for c in mcp.commands()] == ["claude", "start", "tools", "vscode"]


def test_start_has_log_level_flag():
    start = _sub(command(None), "start")
    assert [f.name for f in start.local_flags()] == ["log-level"]


def test_bridge_config_uses_root_of_tree():
    generator = Generator()
    cfg = Config(generator=generator, log_level=logging.WARNING)
    root = _app(cfg)
    start = _sub(_sub(root, "mcp"), "start")
    bridge = cfg.bridge_config(start)
    assert bridge.root_cmd is root
    assert bridge.generator is generator
    assert bridge.log_level == logging.WARNING


def test_bridge_config_without_tree_has_no_root():
    start = _sub(command(None), "start")
    assert Config().bridge_config(start).root_cmd is None


def test_export_tools_writes_json(tmp_path, capsys):
    root = _app()
    tools_cmd = _sub(_sub(root, "mcp"), "tools")
    out = tmp_path / "out.json"
    count = export_tools(None, tools_cmd, str(out))
    assert count == 1
    data = json.loads(out.read_text())
    assert [tool["name"] for tool in data] == ["cli_get"]
    assert "inputSchema" in data[0]
    assert f"Successfully exported 1 tools to {out}" in capsys.readouterr().out


def test_tools_command_writes_default_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    _app().execute(["mcp", "tools"])
    data = json.loads((tmp_path / "mcp-tools.json").read_text())
    assert [tool["name"] for tool in data] == ["cli_get"]
    assert "Successfully exported 1 tools to mcp-tools.json" in capsys.readouterr().out


def test_start_without_root_fails():
    mcp = command(None)
    with pytest.raises(ValueError, match="failed to create MCP server bridge"):
        mcp.execute(["start"])


def test_start_serves_tools(monkeypatch, capsys):
    cfg = Config()
    root = _app(cfg)
    request = {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
    monkeypatch.setattr(sys, "stdin", io.StringIO(json.dumps(request) + "\n"))
    root.execute(["mcp", "start", "--log-level", "debug"])
    assert cfg.log_level == logging.DEBUG
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    response = json.loads(lines[-1])
    assert response["id"] == 1
    assert [tool["name"] for tool in response["result"]["tools"]] == ["cli_get"]