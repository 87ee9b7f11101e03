"""JSON schema and description building for command tools."""

from __future__ import annotations

import logging

from ophis.command import Command, Flag
from ophis.tools.controller import FLAGS_PARAM, POSITIONAL_ARGS_PARAM

log = logging.getLogger(__name__)

_INT_TYPES = {"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64"}


def description_from_command(cmd: Command) -> str:
    desc = cmd.long or cmd.short
    if cmd.example:
        desc += "\nExamples:\n" + cmd.example
    return desc


def args_description(cmd: Command) -> str:
    desc = "Positional arguments"
    if cmd.use:
        desc += "\nUsage: " + cmd.use
    return desc


def flag_schema(flag: Flag) -> dict:
    """Schema of one flag's value, with its description."""
    if flag.type in ("stringSlice", "stringArray"):
        schema: dict = {"type": "array", "items": {"type": "string"}}
    elif flag.type == "intSlice":
        schema = {"type": "array", "items": {"type": "integer"}}
    elif flag.type == "bool":
        schema = {"type": "boolean"}
    elif flag.type in _INT_TYPES:
        schema = {"type": "integer"}
    elif flag.type in ("float32", "float64"):
        schema = {"type": "number"}
    else:
        schema = {"type": "string"}
    schema["description"] = flag.usage or f"Flag: {flag.name}"
    return schema


def flag_map(cmd: Command) -> dict:
    """Schemas of visible local flags, then inherited ones not already present."""
    result = {f.name: flag_schema(f) for f in cmd.local_flags() if not f.hidden}
    for flag in cmd.inherited_flags():
        if not flag.hidden and flag.name not in result:
            result[flag.name] = flag_schema(flag)
    log.debug("collected %d flags for command %s", len(result), cmd.name())
    return result


def input_schema(cmd: Command) -> dict:
    return {
        "type": "object",
        "properties": {
            FLAGS_PARAM: {
                "type": "object",
                "description": "Flag options",
                "properties": flag_map(cmd),
            },
            POSITIONAL_ARGS_PARAM: {"type": "string", "description": args_description(cmd)},
        },
        "required": [FLAGS_PARAM, POSITIONAL_ARGS_PARAM],
    }