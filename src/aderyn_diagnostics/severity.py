# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class DiagnosticSeverity(IntEnum):
    """Editor severity levels; smaller values are more severe."""

    ERROR = 1
    WARN = 2
    INFO = 3
    HINT = 4


_SEVERITY_ALIASES: Final[dict[str, DiagnosticSeverity]] = {
    "error": DiagnosticSeverity.ERROR,
    "warn": DiagnosticSeverity.WARN,
    "warning": DiagnosticSeverity.WARN,
    "info": DiagnosticSeverity.INFO,
    "information": DiagnosticSeverity.INFO,
    "hint": DiagnosticSeverity.HINT,
}

SEVERITY_CHOICES: Final[tuple[str, ...]] = tuple(member.name for member in DiagnosticSeverity)


def parse_severity(value: object) -> DiagnosticSeverity:
    """Return the :class:`DiagnosticSeverity` described by ``value``.

    Args:
        value: Enum member, integer level, or case-insensitive severity name.

    Returns:
        DiagnosticSeverity: Matching severity level.

    Raises:
        ValueError: If ``value`` does not name one of the supported levels.
    """

    if isinstance(value, DiagnosticSeverity):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid severity level {value!r}")
    if isinstance(value, int):
        try:
            return DiagnosticSeverity(value)
        except ValueError as exc:
            raise ValueError(f"invalid severity level {value!r}") from exc
    if isinstance(value, str):
        key = value.strip().lower()
        if key.isdigit():
            return parse_severity(int(key))
        if key in _SEVERITY_ALIASES:
            return _SEVERITY_ALIASES[key]
    raise ValueError(f"invalid severity level {value!r}")


def is_within_threshold(severity: DiagnosticSeverity, minimum: DiagnosticSeverity) -> bool:
    """Return ``True`` when ``severity`` is at least as severe as ``minimum``."""

    return int(severity) <= int(minimum)


def format_choice(severity: DiagnosticSeverity) -> str:
    """Render ``severity`` for selection prompts, e.g. ``WARN (2)``."""

    return f"{severity.name} ({int(severity)})"


__all__ = [
    "SEVERITY_CHOICES",
    "DiagnosticSeverity",
    "format_choice",
    "is_within_threshold",
    "parse_severity",
]
