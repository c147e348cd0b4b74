# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for command line and editor output."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import cache

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass(slots=True, frozen=True)
class ConsolePreset:
    """Presentation flags a console is built for."""

    color: bool
    emoji: bool
    tty: bool

    @property
    def styled(self) -> bool:
        return self.color and self.tty


class ConsoleManager:
    """Hand out one Rich :class:`Console` per :class:`ConsolePreset`.

    Consoles write to whatever ``sys.stdout`` is at print time, so a cached
    console follows stdout redirection.
    """

    def __init__(self) -> None:
        self._consoles: dict[ConsolePreset, Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console for ``color`` and ``emoji``.

        Args:
            color: ``True`` when ANSI colour output is wanted; ignored off a TTY.
            emoji: ``True`` when Rich should render emoji codes.

        Returns:
            Console: Cached console for the preset.
        """

        preset = ConsolePreset(color=color, emoji=emoji, tty=detect_tty())
        console = self._consoles.get(preset)
        if console is None:
            console = Console(
                color_system="auto" if preset.styled else None,
                force_terminal=preset.tty,
                no_color=not preset.styled,
                emoji=preset.emoji,
                highlight=False,
            )
            self._consoles[preset] = console
        return console


@cache
def get_console_manager() -> ConsoleManager:
    """Return the process-wide :class:`ConsoleManager`."""

    return ConsoleManager()


def output_console(*, emoji: bool = True) -> Console:
    """Return the shared console for user-facing output on stdout."""

    return get_console_manager().get(color=detect_tty(), emoji=emoji)


__all__ = ["ConsoleManager", "ConsolePreset", "detect_tty", "get_console_manager", "output_console"]
