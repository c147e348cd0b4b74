# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Publish diagnostics into the editor and build the issue detail view."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from .editor import Editor, FloatingPreview, LogLevel
from .models import Diagnostic

LOGGER = logging.getLogger(__name__)

NAMESPACE: Final[str] = "aderyn-nvim"
DETAIL_WIDTH: Final[int] = 80
DETAIL_MAX_HEIGHT: Final[int] = 20
NOTHING_FOUND_MESSAGE: Final[str] = "No Aderyn diagnostic found under cursor"


@dataclass(slots=True, frozen=True)
class DetailPanelOptions:
    """Window options for the issue detail preview."""

    height: int
    width: int = DETAIL_WIDTH
    border: str = "rounded"
    focus: bool = True
    focusable: bool = True
    focus_id: str = "aderyn_details"
    close_events: tuple[str, ...] = ("BufHidden", "BufLeave")

    @classmethod
    def for_lines(cls, lines: Sequence[str]) -> DetailPanelOptions:
        """Size the panel for ``lines`` plus its border, capped at ``DETAIL_MAX_HEIGHT``."""

        return cls(height=min(len(lines) + 2, DETAIL_MAX_HEIGHT))


def publish(editor: Editor, namespace: int, diagnostics_by_file: Mapping[str, Sequence[Diagnostic]]) -> int:
    """Replace this namespace's diagnostics in every open buffer.

    Buffers without entries in ``diagnostics_by_file`` are cleared. Entries
    for files that are not open are dropped.

    Returns:
        int: Number of diagnostics published.
    """

    published = 0
    pending = dict(diagnostics_by_file)
    for buffer in editor.list_buffers():
        if not editor.is_valid(buffer.bufnr):
            continue
        diagnostics = pending.pop(buffer.path, [])
        editor.set_diagnostics(namespace, buffer.bufnr, diagnostics)
        published += len(diagnostics)
    for path in pending:
        LOGGER.debug("no open buffer for %s; dropping its diagnostics", path)
    return published


def clear(editor: Editor, namespace: int) -> None:
    """Reset ``namespace`` in every valid buffer."""

    for buffer in editor.list_buffers():
        if editor.is_valid(buffer.bufnr):
            editor.reset_diagnostics(namespace, buffer.bufnr)


def find_diagnostic_at(editor: Editor, namespace: int, line: int) -> Diagnostic | None:
    """Return the first diagnostic with details covering zero-based ``line`` in the current buffer."""

    buffer = editor.current_buffer
    if buffer is None:
        return None
    for diagnostic in editor.get_diagnostics(buffer.bufnr, namespace=namespace, lnum=line):
        if diagnostic.user_data is not None:
            return diagnostic
    return None


def build_detail_lines(diagnostic: Diagnostic) -> list[str]:
    """Return the markdown lines describing ``diagnostic``."""

    meta = diagnostic.user_data
    if meta is None:
        return [diagnostic.message]
    lines = [
        f"**{meta.issue_title or 'Unknown Issue'}**",
        "",
        f"**Detector:** {meta.detector_name or 'N/A'}",
        f"**Severity:** {meta.issue_severity or 'N/A'}",
        "",
        "**Description:**",
        meta.issue_description or "No description available",
    ]
    if meta.hint:
        lines.extend(["", "**Hint:**", meta.hint])
    if meta.src_char is not None:
        lines.extend(["", f"**Source Location:** {meta.src_char}"])
    return lines


def show_issue_details(editor: Editor, namespace: int) -> FloatingPreview | None:
    """Open the detail panel for the diagnostic under the cursor."""

    buffer = editor.current_buffer
    diagnostic = None
    if buffer is not None:
        diagnostic = find_diagnostic_at(editor, namespace, buffer.cursor[0] - 1)
    if diagnostic is None:
        editor.notify(NOTHING_FOUND_MESSAGE, LogLevel.WARN)
        return None
    lines = build_detail_lines(diagnostic)
    return editor.open_floating_preview(lines, "markdown", DetailPanelOptions.for_lines(lines))


__all__ = [
    "DETAIL_MAX_HEIGHT",
    "NAMESPACE",
    "NOTHING_FOUND_MESSAGE",
    "DetailPanelOptions",
    "build_detail_lines",
    "clear",
    "find_diagnostic_at",
    "publish",
    "show_issue_details",
]
