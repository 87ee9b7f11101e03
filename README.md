# ophis

ophis turns a command tree into an MCP (Model Context Protocol) server, so AI
assistants and other MCP clients can call your command-line tools.

Every runnable command becomes an MCP tool. A tool is named after its command
path joined with underscores (`cli get pods` becomes `cli_get_pods`). It takes
two parameters:

- `flags`: an object whose properties are the command's visible flags, local
  and inherited, typed from the flag type (boolean, integer, number, string,
  or an array of strings or integers);
- `args`: a string of positional arguments, split with shell quoting rules
  (falling back to plain whitespace splitting when the quoting is broken).

When a tool is called, the running program is started again with the matching
subcommand, flags and arguments (`sys.argv[0]` directly when it is an
executable file other than a `.py` script, otherwise through the current
Python interpreter). Its combined stdout and stderr is returned as text, or as
an error result if the command exited with a non-zero status.

## Installation

```
pip install ophis
```

Install the `test` extra to run the test suite. The package has no runtime
dependencies beyond the standard library.

## Adding MCP support to your application

Build your commands with `ophis.command.Command`, then attach the `mcp`
command from `ophis.cli.command`:

```python
import sys

from ophis.cli import command as mcp_command
from ophis.command import Command


def greet(cmd, args):
    name = cmd.get_flag("name")
    cmd.echo(f"hello, {name}\n")


root = Command(use="greeter", short="A friendly CLI")
hello = Command(use="hello", short="Say hello", run=greet)
hello.add_flag("name", "string", "world", "Who to greet")

root.add_command(hello, mcp_command(None))

if __name__ == "__main__":
    root.execute(sys.argv[1:])
```

`Command.add_flag` takes a name, a type (`string`, `bool`, the `int` and
`uint` sizes, `float32`, `float64`, `stringSlice`, `stringArray`,
`intSlice`), a default, a usage text, a one-letter `shorthand`, `hidden`, and
`persistent` (inherited by subcommands). `Command.execute` parses the command
line, finds the subcommand and calls its `run(cmd, args)`; bad flags or
unknown subcommands raise `ophis.command.CommandError`.

Your program then has these subcommands:

- `mcp start`: start the MCP server on stdin/stdout (`--log-level` takes
  debug, info, warn or error, in any case; anything else means info);
- `mcp tools`: write the generated tool definitions to `mcp-tools.json` in the
  current directory;
- `mcp claude enable | disable | list`: manage the entry for this program in
  Claude Desktop's `claude_desktop_config.json`;
- `mcp vscode enable | disable | list`: manage the entry in VS Code's
  `mcp.json`, for the user (default) or the workspace (`.vscode/mcp.json`,
  chosen with `--workspace` or `--config-type workspace`).

The enable commands accept `--server-name`, `--config-path` and
`--log-level`; disable accepts `--server-name` and `--config-path`; list
accepts `--config-path`. Without a server name, one is derived from the
program's file name without its extension. Enabling requires the program path
to be an executable file; the entry runs it as `<program> mcp start`. The
configuration file is copied to `<file>.backup` before it is changed. Restart
the client afterwards to load the new configuration.

The same operations are available as functions in `ophis.cfgmgr.claude_cli`
and `ophis.cfgmgr.vscode_cli` (`enable_server`, `disable_server`,
`list_servers`), and the configuration files can be edited directly with
`ophis.cfgmgr.claude_config.ClaudeConfigManager` and
`ophis.cfgmgr.vscode_config.VSCodeConfigManager`. Failures raise
`ophis.cfgmgr.utils.ConfigError`.

When the server starts, logging is sent to stderr, because stdout carries the
protocol.

## Configuration

`ophis.cli.Config` holds the options passed to `command(config)`:

- `generator`: an `ophis.tools.generator.Generator` deciding which commands
  become tools;
- `log_level`: a `logging` level for the server (overridden by
  `--log-level`);
- `server_options`: callables applied to the `ophis.mcp.MCPServer` once it is
  created.

## Choosing which commands are exposed

By default, hidden commands and commands named `mcp`, `help` or `completion`
are left out. Pass a `Generator` in the `Config` to change that:

```python
from ophis.cli import Config, command as mcp_command
from ophis.tools.filters import add_filter, allow, exclude, with_filters
from ophis.tools.generator import Generator

generator = Generator(
    with_filters(allow(["get", "list"])),
    add_filter(exclude(["delete"])),
)
root.add_command(mcp_command(Config(generator=generator)))
```

- `allow(names)` keeps commands whose full command path contains one of the
  names as a substring.
- `exclude(names)` drops commands with one of the given names.
- `hidden()` drops hidden commands.
- `with_filters(...)` replaces the filter list, and `add_filter(f)` adds to it.
  Options apply in order.

A filter is any callable that takes a `Command` and returns `True` to keep it.
A command that is filtered out is skipped together with its subcommands.

## Custom output handling

`ophis.tools.handler.with_handler(handler)` sets the function that turns a
command's output into the tool result. The function is called as
`handler(request, data, error)` and returns a `CallToolResult`. Use
`ophis.mcp.text_result` and `ophis.mcp.error_result` to build one. The default
is `ophis.tools.handler.default_handler`.

## Example

The package ships an example that wraps `make` targets (`test` and `lint`)
with persistent `--file`/`-f` and `--directory`/`-C` flags:

```
ophis-make-example mcp tools
```

This writes the tool definitions the example would serve to `mcp-tools.json`.

## What it does not do

The MCP server answers `initialize`, `ping`, `tools/list`, `tools/call` and
notifications only, over newline-delimited JSON on stdin/stdout. It offers no
resources, prompts or other transports such as HTTP. The command parser has
no built-in `help` command, `--help` flag or shell completion; a command
without a `run` function prints a short usage text instead.