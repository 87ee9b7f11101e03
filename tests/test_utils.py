import os
import sys

import pytest

from ophis.cfgmgr.utils import (
    ConfigError,
    current_executable,
    derive_server_name,
    get_executable_server_name,
    validate_executable,
)


def _make_file(path, mode):
    path.write_text("#!/bin/sh\n")
    os.chmod(path, mode)
    return path


def test_validate_executable_returns_resolved_path(tmp_path):
    exe = _make_file(tmp_path / "tool", 0o755)
    assert validate_executable(str(exe)) == os.path.realpath(str(exe))


def test_validate_executable_follows_symlinks(tmp_path):
    exe = _make_file(tmp_path / "tool", 0o755)
    link = tmp_path / "link"
    link.symlink_to(exe)
    assert validate_executable(str(link)) == os.path.realpath(str(exe))


def test_validate_executable_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="failed to resolve executable symlinks"):
        validate_executable(str(tmp_path / "missing"))


def test_validate_executable_not_executable(tmp_path):
    plain = _make_file(tmp_path / "plain", 0o644)
    with pytest.raises(ConfigError, match="is not executable"):
        validate_executable(str(plain))


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/usr/local/bin/mytool.exe", "mytool"),
        ("/usr/bin/tool", "tool"),
        ("tool.tar.gz", "tool.tar"),
        ("/opt/app/", "app"),
    ],
)
def test_derive_server_name(path, expected):
    assert derive_server_name(path) == expected


def test_derive_server_name_of_dotfile_is_empty():
    assert derive_server_name("/home/user/.hidden") == ""


def test_explicit_server_name_wins():
    assert get_executable_server_name("given-name") == "given-name"


def test_server_name_derived_from_program(monkeypatch, tmp_path):
    program = tmp_path / "app.bin"
    monkeypatch.setattr(sys, "argv", [str(program)])
    assert current_executable() == str(program)
    assert get_executable_server_name("") == "app"


def test_empty_derived_name_rejected(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "argv", [str(tmp_path / ".app")])
    with pytest.raises(ConfigError, match="cannot be empty"):
        get_executable_server_name("")