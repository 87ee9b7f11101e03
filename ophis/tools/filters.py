"""Filters that choose which commands become tools, and generator options for them."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

log = logging.getLogger(__name__)

Filter = Callable[..., bool]


def exclude(names: Iterable[str]) -> Filter:
    """Reject commands whose name is in ``names``."""
    names = list(names)

    def _filter(cmd) -> bool:
        excluded = cmd.name() in names
        if excluded:
            log.debug("excluding command by name: %s", cmd.name())
        return not excluded

    return _filter


def allow(names: Iterable[str]) -> Filter:
    """Accept only commands whose path contains one of ``names``."""
    names = list(names)

    def _filter(cmd) -> bool:
        path = cmd.command_path()
        if any(name in path for name in names):
            return True
        log.debug("filtering out command not in allow list: %s", path)
        return False

    return _filter


def hidden() -> Filter:
    """Reject hidden commands."""

    def _filter(cmd) -> bool:
        if cmd.hidden:
            log.debug("excluding hidden command: %s", cmd.name())
        return not cmd.hidden

    return _filter


def with_filters(*args: Filter):
    """Generator option replacing all filters."""

    def option(generator) -> None:
        generator.filters = list(args)

    return option


def add_filter(filter: Filter):
    """Generator option appending one filter."""

    def option(generator) -> None:
        generator.filters.append(filter)

    return option