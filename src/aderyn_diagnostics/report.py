# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Schema of the JSON report written by ``aderyn --output``."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ReportFormatError, ReportReadError

LOGGER = logging.getLogger(__name__)

HIGH_CATEGORY: Final[str] = "high"
LOW_CATEGORY: Final[str] = "low"


def text_or_none(value: object) -> str | None:
    """Return ``value`` when it is a non-empty string, otherwise ``None``."""

    return value if isinstance(value, str) and value else None


class IssueInstance(BaseModel):
    """One occurrence of an issue at a file and line.

    Fields are untyped so one malformed instance cannot fail the whole report;
    :meth:`is_valid` decides whether the instance is usable.
    """

    model_config = ConfigDict(extra="ignore")

    contract_path: Any = None
    line_no: Any = None
    hint: Any = None
    src_char: Any = None

    def is_valid(self) -> bool:
        """Return ``True`` when the instance has a path and a finite numeric line."""

        if text_or_none(self.contract_path) is None:
            return False
        if isinstance(self.line_no, bool) or not isinstance(self.line_no, (int, float)):
            return False
        return math.isfinite(self.line_no)

    @property
    def hint_text(self) -> str | None:
        return text_or_none(self.hint)

    @property
    def location(self) -> str | int | None:
        """Return ``src_char`` when it is a string or an integer."""

        if isinstance(self.src_char, bool):
            return None
        return self.src_char if isinstance(self.src_char, (str, int)) else None


class Issue(BaseModel):
    """A detector finding with all of its instances."""

    model_config = ConfigDict(extra="ignore")

    title: Any = None
    description: Any = None
    detector_name: Any = None
    instances: list[IssueInstance] = Field(default_factory=list)


class IssueCategory(BaseModel):
    """Issues grouped under one report severity label."""

    model_config = ConfigDict(extra="ignore")

    issues: list[Issue] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    """Decoded Aderyn report."""

    model_config = ConfigDict(extra="ignore")

    high_issues: IssueCategory | None = None
    low_issues: IssueCategory | None = None

    def categories(self) -> Iterator[tuple[str, list[Issue]]]:
        """Yield ``(label, issues)`` for the high then the low category."""

        yield HIGH_CATEGORY, self.high_issues.issues if self.high_issues else []
        yield LOW_CATEGORY, self.low_issues.issues if self.low_issues else []


def decode_report(content: str) -> AnalysisReport:
    """Decode report ``content``.

    Raises:
        ReportFormatError: If the content is not a JSON object matching the report schema.
    """

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ReportFormatError(f"report is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ReportFormatError("report must be a JSON object")
    try:
        return AnalysisReport.model_validate(payload)
    except ValidationError as exc:
        raise ReportFormatError(f"report does not match the expected schema: {exc}") from exc


def read_report(path: Path) -> AnalysisReport:
    """Read and decode the report stored at ``path``.

    Args:
        path: Location passed to ``aderyn --output``.

    Returns:
        AnalysisReport: Decoded report.

    Raises:
        ReportReadError: If the file is missing or unreadable.
        ReportFormatError: If the file content is not a well-formed report.
    """

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ReportReadError(f"unable to read report {path}: {exc}") from exc
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ReportFormatError(f"report {path} is not valid UTF-8: {exc}") from exc
    report = decode_report(content)
    LOGGER.debug("Parsed Aderyn output: %s", report.model_dump_json())
    return report


__all__ = [
    "HIGH_CATEGORY",
    "LOW_CATEGORY",
    "AnalysisReport",
    "Issue",
    "IssueCategory",
    "IssueInstance",
    "decode_report",
    "read_report",
    "text_or_none",
]
