import subprocess
import sys

import pytest

from ophis.mcp import CallToolRequest, Tool, text_result
from ophis.tools.controller import (
    Controller,
    build_flag_args,
    parse_argument_string,
    parse_flag_arg_value,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("foo bar baz", ["foo", "bar", "baz"]),
        ('foo "bar baz" qux', ["foo", "bar baz", "qux"]),
        ("foo 'bar baz' qux", ["foo", "bar baz", "qux"]),
        (r"foo bar\ baz", ["foo", "bar baz"]),
        ("", []),
        ("   ", []),
        ("cmd --flag=\"value with spaces\" 'another value'",
         ["cmd", "--flag=value with spaces", "another value"]),
    ],
)
def test_parse_argument_string(text, expected):
    assert parse_argument_string(text) == expected


def test_parse_argument_string_falls_back_on_bad_quotes():
    assert parse_argument_string('foo "bar') == ["foo", '"bar']


@pytest.mark.parametrize(
    "flags, expected",
    [
        ({"verbose": True}, ["--verbose"]),
        ({"verbose": False}, []),
        ({"output": "json"}, ["--output", "json"]),
        ({"count": 42}, ["--count", "42"]),
        ({}, []),
        ({"flag": None}, []),
        ({"flag": ["value1", "value2"], "flag2": "json"},
         ["--flag", "value1", "--flag", "value2", "--flag2", "json"]),
        ({"flag": [True, False, True], "flag2": True}, ["--flag", "--flag", "--flag2"]),
    ],
)
def test_build_flag_args(flags, expected):
    assert build_flag_args(flags) == expected


def test_build_flag_args_multiple():
    result = build_flag_args({"verbose": True, "output": "json", "quiet": False})
    assert sorted(result) == sorted(["--verbose", "--output", "json"])


def test_parse_flag_arg_value_whole_float():
    assert parse_flag_arg_value("count", 42.0) == ["--count", "42"]


def test_build_command_args_strips_root():
    ctrl = Controller(Tool("cli_get_pods"))
    request = CallToolRequest(
        "cli_get_pods", {"flags": {"namespace": "kube"}, "args": "a 'b c'"}
    )
    assert ctrl.build_command_args(request) == ["get", "pods", "--namespace", "kube", "a", "b c"]


def _echo_controller():
    script = "import sys; print(' '.join(sys.argv[1:]))"
    return Controller(Tool("root_echo"), executable=[sys.executable, "-c", script])


def test_execute_runs_executable_with_args():
    out = _echo_controller().execute(CallToolRequest("root_echo", {"args": "hi there"}))
    assert out.decode().strip() == "echo hi there"


def test_execute_failure_raises_with_output():
    script = "import sys; print('oops'); sys.exit(3)"
    ctrl = Controller(Tool("root_fail"), executable=[sys.executable, "-c", script])
    with pytest.raises(subprocess.CalledProcessError) as info:
        ctrl.execute(CallToolRequest("root_fail"))
    assert info.value.returncode == 3
    assert b"oops" in info.value.output


def test_handle_uses_custom_handler():
    ctrl = Controller(Tool("t"), handler=lambda req, data, err: text_result("custom"))
    result = ctrl.handle(CallToolRequest("t"), b"x", None)
    assert result.content[0]["text"] == "custom"


def test_handle_defaults_to_text():
    result = Controller(Tool("t")).handle(CallToolRequest("t"), b"raw", None)
    assert result.content[0]["text"] == "raw"