# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console renderers for published diagnostics and issue details."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Final

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Diagnostic
from .severity import DiagnosticSeverity

if TYPE_CHECKING:
    from .editor import FloatingPreview

_SEVERITY_STYLES: Final[dict[DiagnosticSeverity, str]] = {
    DiagnosticSeverity.ERROR: "bold red",
    DiagnosticSeverity.WARN: "yellow",
    DiagnosticSeverity.INFO: "cyan",
    DiagnosticSeverity.HINT: "dim",
}
_BORDER_BOXES: Final[dict[str, box.Box]] = {
    "rounded": box.ROUNDED,
    "single": box.SQUARE,
    "double": box.DOUBLE,
    "none": box.SIMPLE,
}


def render_detail_panel(preview: FloatingPreview, *, console: Console) -> None:
    """Print ``preview`` as a bordered markdown panel."""

    options = preview.options
    width = getattr(options, "width", None)
    height = getattr(options, "height", None)
    border = _BORDER_BOXES.get(getattr(options, "border", "rounded"), box.ROUNDED)
    body = Markdown("\n".join(preview.lines)) if preview.syntax == "markdown" else Text("\n".join(preview.lines))
    console.print(Panel(body, box=border, width=width, height=height, title="Aderyn"))


def render_diagnostics(
    diagnostics_by_file: Mapping[str, Sequence[Diagnostic]],
    *,
    console: Console,
) -> None:
    """Print one table row per diagnostic, grouped by file."""

    if not any(diagnostics_by_file.values()):
        console.print(Text("No Aderyn diagnostics.", style="green"))
        return
    for path in sorted(diagnostics_by_file):
        diagnostics = diagnostics_by_file[path]
        if not diagnostics:
            continue
        table = Table(title=path, box=box.SIMPLE_HEAVY, title_justify="left", show_lines=False)
        table.add_column("Line", justify="right", no_wrap=True)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Detector", no_wrap=True)
        table.add_column("Message")
        for diagnostic in sorted(diagnostics, key=lambda item: (item.lnum, item.severity)):
            detector = diagnostic.user_data.detector_name if diagnostic.user_data else None
            table.add_row(
                str(diagnostic.lnum + 1),
                Text(diagnostic.severity.name, style=_SEVERITY_STYLES[diagnostic.severity]),
                Text(detector or "-"),
                Text(diagnostic.message.splitlines()[0]),
            )
        console.print(table)


__all__ = ["render_detail_panel", "render_diagnostics"]
