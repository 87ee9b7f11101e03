"""An example application exposing make targets as commands and MCP tools."""

from __future__ import annotations

import subprocess
import sys
from typing import Optional

from ophis.cli import command
from ophis.command import Command


def build_args(cmd: Command, args: list) -> list:
    """``args`` followed by make options taken from the ``--file`` and ``--directory`` flags."""
    result = list(args)
    file = cmd.get_flag("file")
    if file:
        result += ["-f", file]
    directory = cmd.get_flag("directory")
    if directory:
        result += ["-C", directory]
    return result


def create_make_target_command(target: str, short: str, long: str) -> Command:
    """A command that runs ``make <target>`` and prints its combined output."""

    def run(cmd: Command, args: list) -> None:
        exec_args = ["make", target, *build_args(cmd, args)]
        completed = subprocess.run(exec_args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        output = completed.stdout or b""
        cmd.echo(output.decode("utf-8", errors="replace"))
        if completed.returncode != 0:
            raise subprocess.CalledProcessError(completed.returncode, exec_args, output=output)

    return Command(target, short=short, long=long, run=run)


def create_make_commands() -> Command:
    """The ``make`` root command with its targets and the ``mcp`` command group."""
    root = Command("make", short="Run make commands", long="Execute make targets and build commands")
    root.add_flag("file", usage="Use FILE as a makefile", shorthand="f", persistent=True)
    root.add_flag(
        "directory",
        usage="Change to directory before doing anything",
        shorthand="C",
        persistent=True,
    )
    test_cmd = create_make_target_command(
        "test", "Run tests", "Run the test suite using 'make test'"
    )
    lint_cmd = create_make_target_command(
        "lint", "Run linter", "Run the linter using 'make lint'"
    )
    root.add_command(command(None), test_cmd, lint_cmd)
    return root


def main(argv: Optional[list] = None) -> int:
    try:
        create_make_commands().execute(argv)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())