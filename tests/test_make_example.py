import subprocess
from unittest.mock import patch

from ophis.make_example import (
    build_args,
    create_make_commands,
    create_make_target_command,
    main,
)


def _sub(cmd, name):
    return next(c for c in cmd.commands() if c.name() == name)


def _completed(returncode=0, stdout=b"ok\n"):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


def test_command_tree():
    root = create_make_commands()
    assert root.name() == "make"
    assert [c.name() for c in root.commands()] == ["lint", "mcp", "test"]
    assert _sub(root, "test").short == "Run tests"


def test_persistent_flags_are_inherited():
    root = create_make_commands()
    names = [f.name for f in _sub(root, "lint").inherited_flags()]
    assert names == ["directory", "file"]


def test_build_args_without_flags_keeps_input():
    root = create_make_commands()
    test_cmd = _sub(root, "test")
    original = ["x"]
    assert build_args(test_cmd, original) == ["x"]
    assert original == ["x"]


def test_runs_make_with_flags(capsys):
    root = create_make_commands()
    with patch("ophis.make_example.subprocess.run", return_value=_completed()) as run:
        root.execute(["test", "extra", "-f", "Makefile.alt", "--directory", "sub"])
    assert run.call_args.args[0] == ["make", "test", "extra", "-f", "Makefile.alt", "-C", "sub"]
    assert capsys.readouterr().out == "ok\n"


def test_main_success_returns_zero():
    with patch("ophis.make_example.subprocess.run", return_value=_completed()):
        assert main(["lint"]) == 0


def test_main_failure_returns_one(capsys):
    failing = _completed(returncode=2, stdout=b"boom\n")
    with patch("ophis.make_example.subprocess.run", return_value=failing):
        assert main(["lint"]) == 1
    captured = capsys.readouterr()
    assert "boom" in captured.out
    assert captured.err.startswith("Error:")


def test_main_unknown_flag_returns_one():
    assert main(["test", "--nope"]) == 1