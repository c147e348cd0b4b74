# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate decoded reports into editor diagnostics."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Final

from .config import AderynConfig
from .models import Diagnostic, DiagnosticMeta, DiagnosticsByFile
from .report import AnalysisReport, Issue, IssueInstance, read_report, text_or_none
from .severity import is_within_threshold

LOGGER = logging.getLogger(__name__)

REPORT_DIR_PREFIX: Final[str] = "aderyn-report-"


def compose_message(issue: Issue, instance: IssueInstance) -> str:
    """Return the one-line summary shown inline, plus the hint when present."""

    message = (
        f"{text_or_none(issue.title) or 'Unknown Issue'}: {text_or_none(issue.description) or ''} "
        f"[{text_or_none(issue.detector_name) or 'unknown'}]"
    )
    if instance.hint_text:
        message += f"\nHint: {instance.hint_text}"
    return message


def resolve_instance_path(contract_path: str, cwd: Path) -> str:
    """Return ``contract_path`` as an absolute path, resolving it against ``cwd``."""

    if os.path.isabs(contract_path):
        return contract_path
    return os.path.normpath(os.path.abspath(cwd / contract_path))


def map_report(report: AnalysisReport, config: AderynConfig, cwd: Path) -> DiagnosticsByFile:
    """Build diagnostics grouped by absolute file path.

    Args:
        report: Decoded analyzer report.
        config: Configuration snapshot for the run.
        cwd: Working directory the analyzer ran in.

    Returns:
        DiagnosticsByFile: Diagnostics keyed by absolute path, in report order.
    """

    diagnostics: DiagnosticsByFile = {}
    for label, issues in report.categories():
        severity = config.severity_for(label)
        if not is_within_threshold(severity, config.minimum_severity):
            LOGGER.debug("skipping %s issues: %s is below %s", label, severity.name, config.minimum_severity.name)
            continue
        for issue in issues:
            for instance in issue.instances:
                if not instance.is_valid():
                    continue
                line = int(instance.line_no) - 1
                file_path = resolve_instance_path(str(instance.contract_path), cwd)
                diagnostics.setdefault(file_path, []).append(
                    Diagnostic(
                        lnum=line,
                        end_lnum=line,
                        severity=severity,
                        message=compose_message(issue, instance),
                        user_data=DiagnosticMeta(
                            detector_name=text_or_none(issue.detector_name),
                            issue_title=text_or_none(issue.title),
                            issue_description=text_or_none(issue.description),
                            issue_severity=label,
                            src_char=instance.location,
                            hint=instance.hint_text,
                        ),
                    )
                )
    return diagnostics


def discard_report(path: Path) -> None:
    """Remove the single-use report file and its private directory."""

    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.debug("unable to remove report %s: %s", path, exc)
    parent = path.parent
    if parent.name.startswith(REPORT_DIR_PREFIX):
        shutil.rmtree(parent, ignore_errors=True)


def process_report(path: Path, config: AderynConfig, cwd: Path) -> DiagnosticsByFile:
    """Read, decode and map the report at ``path``, then delete it.

    Raises:
        ReportReadError: If the report file is missing or unreadable.
        ReportFormatError: If the report content is malformed.
    """

    try:
        report = read_report(path)
    finally:
        discard_report(path)
    return map_report(report, config, cwd)


__all__ = [
    "REPORT_DIR_PREFIX",
    "compose_message",
    "discard_report",
    "map_report",
    "process_report",
    "resolve_instance_path",
]
