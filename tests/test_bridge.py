import logging
import sys

import pytest

from ophis.bridge import BridgeConfig, Manager
from ophis.command import Command
from ophis.mcp import Tool, text_result
from ophis.tools.controller import Controller
from ophis.tools.filters import allow, with_filters
from ophis.tools.generator import Generator


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _tree():
    root = Command(use="test", short="Test CLI")
    root.add_command(Command(use="sub", short="Subcommand", run=lambda c, a: None))
    return root


def test_tools_with_custom_generator():
    config = BridgeConfig(_tree(), generator=Generator(with_filters(allow(["sub"]))))
    tools = config.tools()
    assert len(tools) == 1
    assert tools[0].tool.name == "test_sub"


def test_tools_with_default_generator():
    tools = BridgeConfig(_tree()).tools()
    assert len(tools) == 1
    assert tools[0].tool.name == "test_sub"


def test_none_config_rejected():
    with pytest.raises(ValueError, match="configuration cannot be None"):
        Manager(None)


def test_none_root_command_rejected():
    with pytest.raises(ValueError, match="root command cannot be None"):
        Manager(BridgeConfig(None))


def test_valid_config_with_defaults():
    manager = Manager(BridgeConfig(Command(use="test")))
    assert manager.server.name == "test"
    assert manager.server.tools == []


def test_config_with_all_options():
    manager = Manager(
        BridgeConfig(Command(use="test"), generator=Generator(), log_level=logging.DEBUG)
    )
    assert manager.server.name == "test"
    assert logging.getLogger().level == logging.DEBUG


def test_default_log_level_is_info():
    manager = Manager(BridgeConfig(Command(use="test")))
    assert manager.server.name == "test"
    assert logging.getLogger().level == logging.INFO


def test_server_carries_version_and_tools():
    root = _tree()
    root.version = "1.2.3"
    manager = Manager(BridgeConfig(root))
    assert manager.server.version == "1.2.3"
    assert [t.name for t in manager.server.tools] == ["test_sub"]


def test_server_options_are_applied():
    def option(server):
        server.add_tool(Tool("extra"), lambda request: text_result("x"))

    manager = Manager(BridgeConfig(_tree(), server_options=[option]))
    assert sorted(t.name for t in manager.server.tools) == ["extra", "test_sub"]


def _call(manager, name, arguments):
    return manager.server.handle_message(
        {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        }
    )


def test_registered_tool_runs_command():
    manager = Manager(BridgeConfig(Command(use="root")))
    script = "import sys; print(' '.join(sys.argv[1:]))"
    manager._register_tool(
        Controller(Tool("root_echo"), executable=[sys.executable, "-c", script])
    )
    response = _call(manager, "root_echo", {"flags": {"verbose": True}, "args": "a b"})
    result = response["result"]
    assert "isError" not in result
    assert result["content"][0]["text"].strip() == "echo --verbose a b"


def test_registered_tool_reports_failure():
    manager = Manager(BridgeConfig(Command(use="root")))
    script = "import sys; print('boom'); sys.exit(3)"
    manager._register_tool(Controller(Tool("root_fail"), executable=[sys.executable, "-c", script]))
    result = _call(manager, "root_fail", {"flags": {}, "args": ""})["result"]
    assert result["isError"] is True
    text = result["content"][0]["text"]
    assert text.startswith("command execution failed:")
    assert "Output: boom" in text