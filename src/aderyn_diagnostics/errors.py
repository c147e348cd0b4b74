# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the analysis pipeline."""

from __future__ import annotations


class AderynError(RuntimeError):
    """Base class for errors raised by the Aderyn integration."""


class AnalyzerNotFoundError(AderynError):
    """Raised when the analyzer executable cannot be resolved on ``PATH``."""

    def __init__(self, executable: str) -> None:
        """Initialise the error with the executable that could not be found.

        Args:
            executable: Command name that was looked up.
        """

        super().__init__(f"{executable} executable not found in PATH")
        self.executable = executable


class ConfigError(AderynError):
    """Raised when configuration input is invalid."""


class ReportReadError(AderynError):
    """Raised when the JSON report file is missing or unreadable."""


class ReportFormatError(AderynError):
    """Raised when the JSON report content does not decode into a report."""


__all__ = [
    "AderynError",
    "AnalyzerNotFoundError",
    "ConfigError",
    "ReportFormatError",
    "ReportReadError",
]
