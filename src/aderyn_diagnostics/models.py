# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the aderyn_diagnostics package."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict

from .severity import DiagnosticSeverity

DIAGNOSTIC_SOURCE: Final[str] = "aderyn"
# ``end_col`` value meaning "until the end of the line".
END_OF_LINE: Final[int] = -1


class DiagnosticMeta(BaseModel):
    """Issue details retained for the detail view."""

    model_config = ConfigDict(frozen=True)

    detector_name: str | None = None
    issue_title: str | None = None
    issue_description: str | None = None
    issue_severity: str | None = None
    src_char: str | int | None = None
    hint: str | None = None


class Diagnostic(BaseModel):
    """Editor diagnostic produced from one report instance.

    Line numbers are zero-based; columns are zero-based with ``END_OF_LINE``
    marking a span that runs to the end of the line.
    """

    model_config = ConfigDict(frozen=True)

    lnum: int
    end_lnum: int
    col: int = 0
    end_col: int = END_OF_LINE
    severity: DiagnosticSeverity
    message: str
    source: str = DIAGNOSTIC_SOURCE
    user_data: DiagnosticMeta | None = None

    def covers(self, line: int) -> bool:
        """Return ``True`` when zero-based ``line`` falls within the diagnostic span."""

        return self.lnum <= line <= self.end_lnum


DiagnosticsByFile = dict[str, list[Diagnostic]]


__all__ = [
    "DIAGNOSTIC_SOURCE",
    "END_OF_LINE",
    "Diagnostic",
    "DiagnosticMeta",
    "DiagnosticsByFile",
]
