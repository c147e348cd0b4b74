# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the command line interface."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from aderyn_diagnostics.cli import app, iter_sources

if TYPE_CHECKING:
    from conftest import FakeAderyn


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def patched_aderyn(monkeypatch: pytest.MonkeyPatch, fake_aderyn: FakeAderyn) -> FakeAderyn:
    monkeypatch.setattr("aderyn_diagnostics.invocation.find_executable", fake_aderyn.which)
    monkeypatch.setattr("aderyn_diagnostics.invocation.run_command", fake_aderyn.run)
    return fake_aderyn


def test_config_prints_effective_settings(runner: CliRunner, project: Path) -> None:
    result = runner.invoke(app, ["config", str(project), "--executable", "aderyn-nightly", "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "Current Aderyn Configuration:" in result.output
    assert "executable: aderyn-nightly" in result.output
    assert "minimum_severity: HINT (4)" in result.output


def test_config_reads_pyproject_table(runner: CliRunner, project: Path) -> None:
    (project / "pyproject.toml").write_text(
        '[tool.aderyn-diagnostics]\nminimum_severity = "warn"\n',
        encoding="utf-8",
    )

    result = runner.invoke(app, ["config", str(project), "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "minimum_severity: WARN (2)" in result.output


def test_run_prints_diagnostics_table(runner: CliRunner, project: Path, patched_aderyn: FakeAderyn) -> None:
    result = runner.invoke(app, ["run", str(project), "--no-emoji", "--extra-arg=--no-snippets"])

    assert result.exit_code == 0, result.output
    assert "reentrancy" in result.output
    assert "Published 1 Aderyn diagnostic(s)" in result.output
    (args, options) = patched_aderyn.calls[0]
    assert args[0] == "aderyn"
    assert "--no-snippets" in args
    assert args[-1] == str(project)
    assert options is not None
    assert options.cwd == project


def test_run_with_clean_report_prints_placeholder(
    runner: CliRunner, project: Path, patched_aderyn: FakeAderyn
) -> None:
    patched_aderyn.report = {"low_issues": {"issues": []}}

    result = runner.invoke(app, ["run", str(project), "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "No Aderyn diagnostics." in result.output


def test_run_rejects_unknown_severity(runner: CliRunner, project: Path, patched_aderyn: FakeAderyn) -> None:
    result = runner.invoke(app, ["run", str(project), "--min-severity", "critical", "--no-emoji"])

    assert result.exit_code == 2
    assert patched_aderyn.calls == []


def test_run_without_analyzer_fails(runner: CliRunner, project: Path, patched_aderyn: FakeAderyn) -> None:
    patched_aderyn.installed = False

    result = runner.invoke(app, ["run", str(project), "--no-emoji"])

    assert result.exit_code == 1
    assert "aderyn executable not found in PATH" in result.output


def test_run_with_unparseable_report_fails(runner: CliRunner, project: Path, patched_aderyn: FakeAderyn) -> None:
    patched_aderyn.report = "[]"

    result = runner.invoke(app, ["run", str(project), "--no-emoji"])

    assert result.exit_code == 1
    assert "Failed to parse Aderyn JSON output" in result.output


def test_details_shows_issue_at_line(runner: CliRunner, project: Path, patched_aderyn: FakeAderyn) -> None:
    source = project / "src" / "A.sol"

    result = runner.invoke(app, ["details", str(source), "10", "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "Reentrancy" in result.output
    assert "reentrancy" in result.output


def test_details_without_issue_exits_nonzero(runner: CliRunner, project: Path, patched_aderyn: FakeAderyn) -> None:
    source = project / "src" / "B.sol"

    result = runner.invoke(app, ["details", str(source), "1", "--no-emoji"])

    assert result.exit_code == 1
    assert "No Aderyn diagnostic found under cursor" in result.output


def test_iter_sources_skips_dependency_folders(project: Path) -> None:
    vendored = project / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "Dep.sol").write_text("contract Dep {}\n", encoding="utf-8")

    assert [path.name for path in iter_sources(project)] == ["A.sol", "B.sol"]
