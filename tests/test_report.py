# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for decoding analyzer reports."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from aderyn_diagnostics.errors import ReportFormatError, ReportReadError
from aderyn_diagnostics.report import IssueInstance, decode_report, read_report


def test_decode_report_reads_both_categories() -> None:
    report = decode_report(
        json.dumps(
            {
                "files_summary": {"total_source_units": 2},
                "high_issues": {
                    "issues": [
                        {
                            "title": "Reentrancy",
                            "description": "desc",
                            "detector_name": "reentrancy",
                            "instances": [
                                {"contract_path": "src/A.sol", "line_no": 10, "src_char": "120:14", "hint": "h"}
                            ],
                        }
                    ]
                },
                "low_issues": {"issues": [{"title": "Pragma", "instances": []}]},
            }
        )
    )

    categories = dict(report.categories())
    assert list(categories) == ["high", "low"]
    instance = categories["high"][0].instances[0]
    assert instance.contract_path == "src/A.sol"
    assert instance.src_char == "120:14"
    assert categories["low"][0].title == "Pragma"


def test_missing_categories_are_empty() -> None:
    report = decode_report("{}")

    assert list(report.categories()) == [("high", []), ("low", [])]


@pytest.mark.parametrize(
    "content",
    [
        "",
        "not json",
        "[1, 2, 3]",
        '{"high_issues": {"issues": {"title": "x"}}}',
        '{"high_issues": {"issues": [{"instances": "nope"}]}}',
    ],
)
def test_decode_report_fails_closed_on_bad_structure(content: str) -> None:
    with pytest.raises(ReportFormatError):
        decode_report(content)


def test_read_report_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ReportReadError):
        read_report(tmp_path / "missing.json")


def test_read_report_rejects_non_utf8_bytes(tmp_path: Path) -> None:
    report_path = tmp_path / "report.json"
    report_path.write_bytes(b'{"high_issues": {"issues": [{"title": "\xff"}]}}')

    with pytest.raises(ReportFormatError):
        read_report(report_path)


def test_decode_report_accepts_non_finite_line_numbers() -> None:
    report = decode_report('{"low_issues": {"issues": [{"instances": [{"contract_path": "A.sol", "line_no": NaN}]}]}}')

    assert report.low_issues is not None
    (issue,) = report.low_issues.issues
    assert not issue.instances[0].is_valid()


@pytest.mark.parametrize(
    ("payload", "valid"),
    [
        ({"contract_path": "src/A.sol", "line_no": 3}, True),
        ({"contract_path": "src/A.sol", "line_no": 3.0}, True),
        ({"contract_path": "src/A.sol"}, False),
        ({"contract_path": "src/A.sol", "line_no": "3"}, False),
        ({"contract_path": "src/A.sol", "line_no": True}, False),
        ({"contract_path": "", "line_no": 3}, False),
        ({"line_no": 3}, False),
        ({"contract_path": 42, "line_no": 3}, False),
        ({"contract_path": "src/A.sol", "line_no": float("nan")}, False),
        ({"contract_path": "src/A.sol", "line_no": float("inf")}, False),
    ],
)
def test_instance_validity(payload: dict[str, object], valid: bool) -> None:
    assert IssueInstance.model_validate(payload).is_valid() is valid
