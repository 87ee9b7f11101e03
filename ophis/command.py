"""A small command tree with flags, in the style of nested CLI subcommands."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, TextIO

_INT_TYPES = frozenset(
    {"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64"}
)
_FLOAT_TYPES = frozenset({"float32", "float64"})
_SLICE_TYPES = frozenset({"stringSlice", "stringArray", "intSlice"})


class CommandError(Exception):
    """Raised for invalid command definitions or command lines."""


def _zero(flag_type: str) -> Any:
    if flag_type == "bool":
        return False
    if flag_type in _INT_TYPES:
        return 0
    if flag_type in _FLOAT_TYPES:
        return 0.0
    if flag_type in _SLICE_TYPES:
        return []
    return ""


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in ("1", "t", "true"):
        return True
    if lowered in ("0", "f", "false"):
        return False
    raise ValueError(f"invalid boolean {raw!r}")


@dataclass
class Flag:
    """A named command-line option with a typed value."""

    name: str
    type: str = "string"
    default: Any = None
    usage: str = ""
    shorthand: str = ""
    hidden: bool = False
    persistent: bool = False
    value: Any = None
    changed: bool = False

    def __post_init__(self) -> None:
        if self.default is None:
            self.default = _zero(self.type)
        self.reset()

    def reset(self) -> None:
        self.value = list(self.default) if isinstance(self.default, list) else self.default
        self.changed = False

    def set(self, raw: str) -> None:
        """Parse ``raw`` according to the flag type and store it."""
        try:
            if self.type == "bool":
                parsed: Any = _parse_bool(raw)
            elif self.type in _INT_TYPES:
                parsed = int(raw)
            elif self.type in _FLOAT_TYPES:
                parsed = float(raw)
            elif self.type == "stringSlice":
                parsed = raw.split(",")
            elif self.type == "stringArray":
                parsed = [raw]
            elif self.type == "intSlice":
                parsed = [int(item) for item in raw.split(",")]
            else:
                parsed = raw
        except ValueError as exc:
            raise CommandError(f'invalid argument "{raw}" for "--{self.name}" flag: {exc}') from exc
        if self.type in _SLICE_TYPES:
            self.value = (self.value if self.changed else []) + parsed
        else:
            self.value = parsed
        self.changed = True


RunFunc = Callable[["Command", list], Any]


class Command:
    """A node of a command tree; runnable when it has a ``run`` function."""

    def __init__(
        self,
        use: str = "",
        short: str = "",
        long: str = "",
        example: str = "",
        hidden: bool = False,
        run: Optional[RunFunc] = None,
        version: str = "",
    ) -> None:
        self.use = use
        self.short = short
        self.long = long
        self.example = example
        self.hidden = hidden
        self.run = run
        self.version = version
        self.parent: Optional[Command] = None
        self.out: Optional[TextIO] = None
        self._children: list[Command] = []
        self._flags: dict[str, Flag] = {}

    def __repr__(self) -> str:
        return f"Command({self.use!r})"

    def name(self) -> str:
        words = self.use.split()
        return words[0] if words else ""

    def add_command(self, *args: "Command") -> None:
        for child in args:
            if child is self:
                raise CommandError("command can't be a child of itself")
            child.parent = self
            self._children.append(child)

    def commands(self) -> list["Command"]:
        return sorted(self._children, key=lambda c: c.name())

    def command_path(self) -> str:
        if self.parent is not None:
            return f"{self.parent.command_path()} {self.name()}"
        return self.name()

    def root(self) -> "Command":
        cmd = self
        while cmd.parent is not None:
            cmd = cmd.parent
        return cmd

    def is_runnable(self) -> bool:
        return self.run is not None

    def add_flag(
        self,
        name: str,
        type: str = "string",
        default: Any = None,
        usage: str = "",
        shorthand: str = "",
        hidden: bool = False,
        persistent: bool = False,
    ) -> Flag:
        if name in self._flags:
            raise CommandError(f"flag redefined: {name}")
        flag = Flag(name, type, default, usage, shorthand, hidden, persistent)
        self._flags[name] = flag
        return flag

    def local_flags(self) -> list[Flag]:
        return sorted(self._flags.values(), key=lambda f: f.name)

    def inherited_flags(self) -> list[Flag]:
        found: dict[str, Flag] = {}
        ancestor = self.parent
        while ancestor is not None:
            for flag in ancestor._flags.values():
                if flag.persistent and flag.name not in self._flags and flag.name not in found:
                    found[flag.name] = flag
            ancestor = ancestor.parent
        return sorted(found.values(), key=lambda f: f.name)

    def _lookup(self, name: str) -> Optional[Flag]:
        if name in self._flags:
            return self._flags[name]
        return next((f for f in self.inherited_flags() if f.name == name), None)

    def _lookup_short(self, short: str) -> Optional[Flag]:
        return next(
            (f for f in [*self.local_flags(), *self.inherited_flags()] if f.shorthand == short),
            None,
        )

    def get_flag(self, name: str) -> Any:
        flag = self._lookup(name)
        if flag is None:
            raise CommandError(f"flag accessed but not defined: {name}")
        return flag.value

    def echo(self, text: str) -> None:
        (self.out or sys.stdout).write(text)

    def _walk(self) -> Iterator["Command"]:
        yield self
        for child in self._children:
            yield from child._walk()

    def _child(self, name: str) -> Optional["Command"]:
        return next((c for c in self._children if c.name() == name), None)

    def _usage(self) -> str:
        lines = [self.long or self.short, "", f"Usage:\n  {self.command_path()} [command]"]
        if self._children:
            lines.append("\nAvailable Commands:")
            lines.extend(f"  {c.name():<12} {c.short}" for c in self.commands() if not c.hidden)
        return "\n".join(lines).lstrip("\n") + "\n"

    def execute(self, argv: Optional[list] = None) -> Any:
        """Parse ``argv``, find the target subcommand and run it."""
        tokens = iter(list(sys.argv[1:] if argv is None else argv))
        for cmd in self._walk():
            for flag in cmd._flags.values():
                flag.reset()
        target = self
        positional: list[str] = []
        for token in tokens:
            if token == "--":
                positional.extend(tokens)
                break
            if token.startswith("--"):
                name, has_value, raw = token[2:].partition("=")
                flag = target._lookup(name)
                label = f"--{name}"
            elif token.startswith("-") and len(token) > 1:
                name, has_value, raw = token[1:].partition("=")
                flag = target._lookup_short(name)
                label = f"-{name}"
            else:
                child = None if positional else target._child(token)
                if child is not None:
                    target = child
                else:
                    positional.append(token)
                continue
            if flag is None:
                raise CommandError(f"unknown flag: {label}")
            if not has_value:
                if flag.type == "bool":
                    raw = "true"
                else:
                    next_token = next(tokens, None)
                    if next_token is None:
                        raise CommandError(f"flag needs an argument: {label}")
                    raw = next_token
            flag.set(raw)
        if not target.is_runnable():
            if positional:
                raise CommandError(
                    f'unknown command "{positional[0]}" for "{target.command_path()}"'
                )
            target.echo(target._usage())
            return None
        return target.run(target, positional)