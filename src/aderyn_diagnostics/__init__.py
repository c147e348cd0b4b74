# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Surface Aderyn static-analysis findings as editor diagnostics."""

from __future__ import annotations

from .config import AderynConfig, ConfigError, ConfigStore, load_config_file
from .editor import ConsoleEditor, Editor, LogLevel
from .errors import AderynError, AnalyzerNotFoundError, ReportFormatError, ReportReadError
from .invocation import AnalysisInvoker, InvocationResult, resolve_working_directory
from .mapper import map_report, process_report
from .models import Diagnostic, DiagnosticMeta
from .plugin import AderynPlugin
from .report import AnalysisReport, read_report
from .scheduler import MainThreadScheduler
from .severity import DiagnosticSeverity

__all__ = [
    "AderynConfig",
    "AderynError",
    "AderynPlugin",
    "AnalysisInvoker",
    "AnalysisReport",
    "AnalyzerNotFoundError",
    "ConfigError",
    "ConfigStore",
    "ConsoleEditor",
    "Diagnostic",
    "DiagnosticMeta",
    "DiagnosticSeverity",
    "Editor",
    "InvocationResult",
    "LogLevel",
    "MainThreadScheduler",
    "ReportFormatError",
    "ReportReadError",
    "load_config_file",
    "map_report",
    "process_report",
    "read_report",
    "resolve_working_directory",
]
