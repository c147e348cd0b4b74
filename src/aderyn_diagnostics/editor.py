# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-process model of the host editor the plugin publishes into.

The model mirrors the pieces of a buffer-based editor the integration relies
on: open buffers with a cursor, a diagnostic store partitioned by namespace,
user notifications, floating previews, buffer-local key mappings and a
selection prompt. Hosts bridge their own APIs onto :class:`Editor`;
:class:`ConsoleEditor` renders everything to a terminal.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Final

from rich.console import Console
from rich.prompt import Prompt

from .console import output_console
from .logging import fail, info, warn
from .models import Diagnostic
from .rendering import render_detail_panel

FILETYPES_BY_SUFFIX: Final[dict[str, str]] = {".sol": "solidity"}


class LogLevel(IntEnum):
    """Notification levels understood by :meth:`Editor.notify`."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


def detect_filetype(path: str | os.PathLike[str]) -> str | None:
    """Return the filetype for ``path`` based on its suffix."""

    return FILETYPES_BY_SUFFIX.get(Path(path).suffix.lower())


def _normalise(path: str | os.PathLike[str]) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


@dataclass(slots=True)
class Buffer:
    """Open document. ``cursor`` is a 1-based row and 0-based column."""

    bufnr: int
    path: str
    filetype: str | None = None
    valid: bool = True
    cursor: tuple[int, int] = (1, 0)


@dataclass(slots=True, frozen=True)
class KeyMapping:
    """Buffer-local normal mode mapping."""

    bufnr: int
    lhs: str
    callback: Callable[[], None]
    desc: str


@dataclass(slots=True, frozen=True)
class Notification:
    """Message surfaced to the user."""

    message: str
    level: LogLevel


@dataclass(slots=True, frozen=True)
class FloatingPreview:
    """Floating window content opened by :meth:`Editor.open_floating_preview`."""

    lines: tuple[str, ...]
    syntax: str
    options: Any


@dataclass
class Editor:
    """Buffers, namespaced diagnostics and user interaction primitives."""

    buffers: dict[int, Buffer] = field(default_factory=dict)
    current: int | None = None
    notifications: list[Notification] = field(default_factory=list)
    previews: list[FloatingPreview] = field(default_factory=list)
    keymaps: dict[tuple[int, str], KeyMapping] = field(default_factory=dict)
    chooser: Callable[[Sequence[str], str], str | None] | None = None
    _namespaces: dict[str, int] = field(default_factory=dict)
    _diagnostics: dict[int, dict[int, list[Diagnostic]]] = field(default_factory=dict)
    _next_bufnr: int = 1

    # Buffers

    def open(self, path: str | os.PathLike[str], *, filetype: str | None = None) -> Buffer:
        """Open ``path`` (or return its existing buffer) and make it current."""

        existing = self.find_buffer(path)
        if existing is not None:
            self.current = existing.bufnr
            return existing
        buffer = Buffer(
            bufnr=self._next_bufnr,
            path=_normalise(path),
            filetype=filetype or detect_filetype(path),
        )
        self._next_bufnr += 1
        self.buffers[buffer.bufnr] = buffer
        self.current = buffer.bufnr
        return buffer

    def close(self, bufnr: int) -> None:
        """Wipe buffer ``bufnr`` together with its diagnostics."""

        buffer = self.buffers.pop(bufnr, None)
        if buffer is None:
            return
        buffer.valid = False
        for per_buffer in self._diagnostics.values():
            per_buffer.pop(bufnr, None)
        self.keymaps = {key: mapping for key, mapping in self.keymaps.items() if key[0] != bufnr}
        if self.current == bufnr:
            self.current = next(iter(self.buffers), None)

    def list_buffers(self) -> list[Buffer]:
        """Return open buffers in creation order."""

        return list(self.buffers.values())

    def is_valid(self, bufnr: int) -> bool:
        buffer = self.buffers.get(bufnr)
        return buffer is not None and buffer.valid

    def find_buffer(self, path: str | os.PathLike[str]) -> Buffer | None:
        """Return the open buffer for ``path``, if any."""

        target = _normalise(path)
        for buffer in self.buffers.values():
            if buffer.path == target:
                return buffer
        return None

    @property
    def current_buffer(self) -> Buffer | None:
        return self.buffers.get(self.current) if self.current is not None else None

    def set_cursor(self, row: int, col: int = 0) -> None:
        """Move the cursor of the current buffer to 1-based ``row``."""

        buffer = self.current_buffer
        if buffer is None:
            raise LookupError("no buffer is open")
        buffer.cursor = (row, col)

    # Diagnostics

    def create_namespace(self, name: str) -> int:
        """Return the id of namespace ``name``, creating it on first use."""

        if name not in self._namespaces:
            self._namespaces[name] = len(self._namespaces) + 1
        return self._namespaces[name]

    def set_diagnostics(self, namespace: int, bufnr: int, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace the diagnostics of ``bufnr`` in ``namespace``."""

        if not self.is_valid(bufnr):
            raise LookupError(f"invalid buffer {bufnr}")
        self._diagnostics.setdefault(namespace, {})[bufnr] = list(diagnostics)

    def reset_diagnostics(self, namespace: int, bufnr: int) -> None:
        """Drop every diagnostic of ``bufnr`` in ``namespace``."""

        self._diagnostics.get(namespace, {}).pop(bufnr, None)

    def get_diagnostics(
        self,
        bufnr: int,
        *,
        namespace: int | None = None,
        lnum: int | None = None,
    ) -> list[Diagnostic]:
        """Return diagnostics for ``bufnr``, optionally limited to one namespace and line."""

        namespaces = [namespace] if namespace is not None else list(self._diagnostics)
        collected: list[Diagnostic] = []
        for ns in namespaces:
            for diagnostic in self._diagnostics.get(ns, {}).get(bufnr, []):
                if lnum is None or diagnostic.covers(lnum):
                    collected.append(diagnostic)
        return collected

    # User interaction

    def notify(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        """Surface ``message`` to the user."""

        self.notifications.append(Notification(message=message, level=level))

    def open_floating_preview(self, lines: Sequence[str], syntax: str, options: Any) -> FloatingPreview:
        """Open a floating window showing ``lines``."""

        preview = FloatingPreview(lines=tuple(lines), syntax=syntax, options=options)
        self.previews.append(preview)
        return preview

    def set_keymap(self, bufnr: int, lhs: str, callback: Callable[[], None], *, desc: str) -> None:
        """Install a buffer-local mapping, replacing any mapping on the same keys."""

        self.keymaps[(bufnr, lhs)] = KeyMapping(bufnr=bufnr, lhs=lhs, callback=callback, desc=desc)

    def feed_keys(self, lhs: str) -> None:
        """Trigger the mapping bound to ``lhs`` in the current buffer."""

        if self.current is None or (self.current, lhs) not in self.keymaps:
            raise LookupError(f"no mapping for {lhs}")
        self.keymaps[(self.current, lhs)].callback()

    def select(
        self,
        items: Sequence[str],
        *,
        prompt: str,
        format_item: Callable[[str], str],
        on_choice: Callable[[str | None], None],
    ) -> None:
        """Ask the user to pick one of ``items``; ``on_choice`` receives ``None`` when cancelled."""

        labels = [format_item(item) for item in items]
        choice = self.chooser(labels, prompt) if self.chooser is not None else None
        if choice is None:
            on_choice(None)
            return
        for item, label in zip(items, labels, strict=True):
            if choice in {item, label}:
                on_choice(item)
                return
        on_choice(None)


def prompt_chooser(labels: Sequence[str], prompt: str) -> str | None:
    """Selection prompt backed by :class:`rich.prompt.Prompt`."""

    return Prompt.ask(prompt, choices=list(labels))


@dataclass
class ConsoleEditor(Editor):
    """Editor whose user interaction is rendered on a Rich console."""

    chooser: Callable[[Sequence[str], str], str | None] | None = prompt_chooser
    console: Console = field(default_factory=output_console)
    use_emoji: bool = True
    min_level: LogLevel = LogLevel.INFO

    def notify(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        super().notify(message, level)
        if level < self.min_level:
            return
        if level >= LogLevel.ERROR:
            fail(message, use_emoji=self.use_emoji, console=self.console)
        elif level == LogLevel.WARN:
            warn(message, use_emoji=self.use_emoji, console=self.console)
        else:
            info(message, use_emoji=self.use_emoji, console=self.console)

    def open_floating_preview(self, lines: Sequence[str], syntax: str, options: Any) -> FloatingPreview:
        preview = super().open_floating_preview(lines, syntax, options)
        render_detail_panel(preview, console=self.console)
        return preview


__all__ = [
    "Buffer",
    "ConsoleEditor",
    "Editor",
    "FloatingPreview",
    "KeyMapping",
    "LogLevel",
    "Notification",
    "detect_filetype",
    "prompt_chooser",
]
